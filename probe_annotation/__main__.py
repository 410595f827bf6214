import sys

from probe_annotation.cli import main

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
