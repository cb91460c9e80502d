# flake8: noqa E501

from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Interactively inspect and edit OCR regions over an image")

HELP_TEXT = _(
    "mouse: drag to pan, click to select, wheel to zoom | "
    "d draw, m multi-select, t edit text, k mark, x delete, r restyle, "
    "+/- zoom, f fit, Esc cancel, s save, q quit"
)


def command(subparser):
    subparser.add_argument("image", type=Path)
    subparser.add_argument("annotations", type=Path, nargs="?")
    subparser.add_argument(
        "-o", "--output", dest="output", type=Path, help=_("Where `s` saves, next to the image if omitted")
    )

    def handle(args):
        from ocr_overlay.cli.view.viewer import run

        run(args)

    return handle
