# pipeline/utils.py
import logging
from pathlib import Path

import cv2
import numpy as np

from .models import ChannelLayout, Frame

def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

# ──────────────────────────────────────────────
# Display-sink helpers
# ──────────────────────────────────────────────

def to_display_rgba(frame: Frame) -> np.ndarray:
    """Adapt a packed frame for an RGBA surface (opaque alpha)."""
    codes = {
        ChannelLayout.PACKED_GRAY1: cv2.COLOR_GRAY2RGBA,
        ChannelLayout.PACKED_COLOR3: cv2.COLOR_BGR2RGBA,
        ChannelLayout.PACKED_COLOR4_ALPHA: cv2.COLOR_BGRA2RGBA,
    }
    code = codes.get(frame.layout)
    if code is None:
        raise ValueError(f"cannot display {frame.layout.name} directly")
    return cv2.cvtColor(frame.data, code)

def write_frame(path: Path, frame: Frame) -> None:
    if not cv2.imwrite(str(path), frame.data):
        raise OSError(f"could not write {path}")
