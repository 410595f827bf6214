# flake8: noqa E501

from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Probe an image point and render the annotated image")


def command(subparser):
    subparser.add_argument("image", type=Path)
    subparser.add_argument("x", type=float)
    subparser.add_argument("y", type=float)
    subparser.add_argument(
        "-o",
        "--output",
        dest="output",
        type=Path,
        help=_("Where to save the rendered image"),
    )
    subparser.add_argument(
        "-c", "--case", dest="case", type=str, help=_("Case identifier sent to the prediction service")
    )
    subparser.add_argument("-e", "--endpoint", dest="endpoint", type=str)
    subparser.add_argument("-s", "--scale", dest="scale", type=float, default=1.0)
    subparser.add_argument(
        "--grayscale", action="store_true", help=_("Load the image as stored grayscale values")
    )
    subparser.add_argument(
        "--no-risk", dest="no_risk", action="store_true", help=_("Do not contact the prediction service")
    )

    def handle(args):
        from .probe import handle as probe_handle

        probe_handle(args)

    return handle
