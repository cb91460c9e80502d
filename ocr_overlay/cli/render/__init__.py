# flake8: noqa E501

from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Paint the OCR regions over an image")


def command(subparser):
    subparser.add_argument("image", type=Path)
    subparser.add_argument("annotations", type=Path, nargs="?")
    subparser.add_argument("-o", "--output", dest="output", type=Path, required=True)
    subparser.add_argument(
        "-W", "--width", dest="width", type=int, help=_("Canvas width, image width if omitted")
    )
    subparser.add_argument(
        "-H", "--height", dest="height", type=int, help=_("Canvas height, image height if omitted")
    )

    def handle(args):
        import cv2

        from ocr_overlay.cli.common import image_size, open_session
        from ocr_overlay.interfaces import GUIAnnotationAdapter

        session, image = open_session(image_path=args.image, json_path=args.annotations)
        width, height = image_size(image)
        container = (args.width or width, args.height or height)
        session.fit_to_container(*container)

        canvas = GUIAnnotationAdapter(session).get_visualization(image, container)
        if not cv2.imwrite(str(args.output), canvas):
            raise SystemExit(_("Could not write {path}").format(path=args.output))

    return handle
