"""Helpers shared by the CLI subcommands."""

import logging
from gettext import gettext as _
from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np

from ocr_overlay.core.annotation import AnnotationSession
from ocr_overlay.core.annotation.schema import companion_json_path

logger = logging.getLogger(__name__)


def read_image(path: Path) -> np.ndarray:
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise SystemExit(_("Could not read image {path}").format(path=path))
    return image


def image_size(image: np.ndarray) -> Tuple[int, int]:
    height, width = image.shape[:2]
    return width, height


def open_session(
    image_path: Optional[Path] = None,
    json_path: Optional[Path] = None,
) -> Tuple[AnnotationSession, Optional[np.ndarray]]:
    """
    Build a session from an image and/or an annotation file.

    When only the image is given, a JSON file with the same base name next
    to it is used if one exists.
    """
    session = AnnotationSession()
    image = None
    size = None
    if image_path is not None:
        image = read_image(image_path)
        size = image_size(image)
        if json_path is None:
            json_path = companion_json_path(image_path)
            if json_path is not None:
                logger.info(
                    _("Using annotations from {path}").format(path=json_path)
                )

    if json_path is not None:
        session.load_json(Path(json_path).read_text(encoding="utf-8"), image_size=size)
    elif size is not None:
        session.set_image_size(*size)
    return session, image


def write_export(session: AnnotationSession, output: Optional[Path]):
    text = session.export_json()
    if output is None:
        print(text)
    else:
        Path(output).write_text(text + "\n", encoding="utf-8")
        logger.info(_("Wrote {path}").format(path=output))
