"""
Default configuration for the overlay editor.

Everything here is presentation or environment tuning. Interaction
thresholds (minimum region size, click-vs-drag distance, zoom bounds)
are constants of the core modules.
"""

import copy
import os
from typing import Mapping, Optional

from easydict import EasyDict as edict

from .env import load_cfg_from_env

DEFAULT_CONFIG = edict(
    {
        # Empty list means "derive from the colormap below"
        "palette": [],
        "palette_colormap": "tab10",
        "palette_size": 10,
        "style": {
            "fill_alpha": 0.4,
            "stroke_alpha": 0.8,
            "stroke_width": 2,
            "selected_fill_alpha": 0.6,
            "selected_stroke_color": "#ffff00",
            "selected_stroke_width": 3,
            "multi_selected_stroke_color": "#00ffff",
            "multi_selected_stroke_width": 3,
            "label_alpha": 0.8,
            "pending_color": "#0080ff",
            "too_small_color": "#ff0000",
        },
        "viewport": {
            "container_width": 1280,
            "container_height": 800,
        },
    }
)


def load_config(env: Optional[Mapping[str, str]] = None) -> edict:
    """Return a fresh copy of the defaults with environment overrides applied."""
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if env is None:
        env = os.environ
    return load_cfg_from_env(cfg, dict(env))
