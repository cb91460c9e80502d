# flake8: noqa E501

from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Convert OCR results (current or legacy schema) to the current schema")


def command(subparser):
    subparser.add_argument("input", type=Path)
    subparser.add_argument(
        "-o", "--output", dest="output", type=Path, help=_("Output file, stdout if omitted")
    )
    subparser.add_argument(
        "-i",
        "--image",
        dest="image",
        type=Path,
        help=_("Image whose pixel size calibrates the page coordinates"),
    )

    def handle(args):
        from ocr_overlay.cli.common import open_session, write_export

        session, _image = open_session(image_path=args.image, json_path=args.input)
        if session.source == "demo":
            raise SystemExit(
                _("{path} is not a recognized OCR results file").format(path=args.input)
            )
        write_export(session, args.output)

    return handle
