"""
Test fixtures for ocr_overlay tests.

Provides reusable sessions and annotation documents.
"""

import pytest

from ocr_overlay.utils.config import load_config


@pytest.fixture
def config():
    """Default configuration, isolated from the real environment."""
    return load_config(env={})


@pytest.fixture
def session(config):
    """A fresh session showing the demo regions."""
    from ocr_overlay.core.annotation import AnnotationSession

    return AnnotationSession(config)


@pytest.fixture
def square_document():
    """Current-schema document with one 10x10 quad at the origin."""
    return {
        "image_width": 100,
        "image_height": 100,
        "ocr_results": [
            {
                "text": "square",
                "confidence": 0.9,
                "vertices": [[0, 0], [10, 0], [10, 10], [0, 10]],
            }
        ],
    }


@pytest.fixture
def ocr_results():
    """Result items shared by the current and legacy document fixtures."""
    return [
        {
            "text": "Invoice",
            "confidence": 0.98,
            "vertices": [[120, 40], [480, 40], [480, 90], [120, 90]],
        },
        {
            "text": "Total: 42.00",
            "confidence": 0.87,
            "vertices": [[100.5, 700.25], [400, 705], [398, 760], [99, 755.5]],
        },
    ]


@pytest.fixture
def current_document(ocr_results):
    return {"image_width": 1000, "image_height": 1400, "ocr_results": ocr_results}


@pytest.fixture
def legacy_pages_document(ocr_results):
    return [{"page_width": 1000, "page_heigth": 1400, "results": ocr_results}]
