"""OpenCV window loop for the `view` subcommand."""

import logging
from gettext import gettext as _
from pathlib import Path

import cv2

from ocr_overlay.cli.common import open_session, write_export
from ocr_overlay.interfaces import GUIAnnotationAdapter

logger = logging.getLogger(__name__)

WINDOW_NAME = "ocr_overlay"
FRAME_DELAY_MS = 20


def prompt_text(session):
    region = session.selected_region
    if region is None:
        logger.info(_("Select a region before editing its text"))
        return
    text = input(_("Text for {label} [{text}]: ").format(label=region.label, text=region.text))
    if text:
        session.edit_text(text)


def run(args):
    from ocr_overlay.cli.view import HELP_TEXT

    session, image = open_session(image_path=args.image, json_path=args.annotations)
    output = args.output or Path(args.image).with_suffix(".json")
    viewport_cfg = session.config.viewport
    container = (viewport_cfg.container_width, viewport_cfg.container_height)

    dirty = True

    def mark_dirty():
        nonlocal dirty
        dirty = True

    adapter = GUIAnnotationAdapter(session, update_image_callback=mark_dirty)
    session.fit_to_container(*container)

    print(HELP_TEXT)
    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_AUTOSIZE)
    cv2.setMouseCallback(WINDOW_NAME, adapter.handle_mouse)
    try:
        while True:
            if dirty:
                cv2.imshow(WINDOW_NAME, adapter.get_visualization(image, container))
                dirty = False
            key = cv2.waitKey(FRAME_DELAY_MS)
            if key < 0:
                continue
            key &= 0xFF
            if key == ord("q"):
                break
            if key == ord("s"):
                write_export(session, output)
            elif key == ord("t"):
                prompt_text(session)
            else:
                adapter.handle_key(key)
    finally:
        cv2.destroyWindow(WINDOW_NAME)
