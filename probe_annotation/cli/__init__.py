"""Command line interface for probe_annotation.

Every package next to this file is a subcommand. It exposes
``COMMAND_DESCRIPTION`` and ``command(subparser)``, which declares its
arguments and returns the handler for the parsed namespace.
"""

import logging
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser
from gettext import gettext as _
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import probe_annotation.utils.i18n  # noqa: F401
from probe_annotation.utils.misc import load_module

logger = logging.getLogger(__name__)

CLI_DIR = Path(__file__).parent
VERSION_FILE = CLI_DIR.parent / "VERSION"


def read_version() -> str:
    return VERSION_FILE.read_text().strip()


def iter_subcommands() -> Iterator[Tuple[str, object]]:
    """Yield ``(name, module)`` for each subcommand package, by name."""
    for init_file in sorted(CLI_DIR.glob("*/__init__.py")):
        name = init_file.parent.name
        if name.startswith("_"):
            continue
        yield name, load_module(init_file, module_name=f"probe_annotation.cli.{name}")


def common_flags(parser):
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        action="store_true",
        help=_("Give more details about what is happening"),
    )
    parser.add_argument(
        "-V",
        "--version",
        dest="is_show_version",
        action="store_true",
        help=_("Print version and exit"),
    )


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="probe_annotation", formatter_class=ArgumentDefaultsHelpFormatter
    )
    common_flags(parser)
    subparsers = parser.add_subparsers(title=_("commands"))
    for name, module in iter_subcommands():
        subparser = subparsers.add_parser(name, help=module.COMMAND_DESCRIPTION)
        common_flags(subparser)
        subparser.set_defaults(fn=module.command(subparser))
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of ``probe_annotation`` and ``python -m probe_annotation``.

    Returns the process exit code.
    """
    logging.basicConfig()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.root.setLevel(logging.DEBUG)

    version = read_version()
    if args.is_show_version:
        print(version)
        return 0
    logger.debug(_("Starting probe_annotation v{version}").format(version=version))

    handler = getattr(args, "fn", None)
    if handler is None:
        parser.print_help()
        return 2
    handler(args)
    return 0
