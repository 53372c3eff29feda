# pipeline/rotation.py
from __future__ import annotations

import cv2

from .models import ChannelLayout, Frame, FrameFormatError

_ROTATE_CODES = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def normalize_rotation(frame: Frame, degrees: int) -> Frame:
    """Bake a clockwise rotation into the pixels. 0 returns the input object."""
    if degrees == 0:
        return frame
    if frame.layout is ChannelLayout.PLANAR_YUV420:
        raise FrameFormatError("rotate after color conversion, not on planar YUV")

    code = _ROTATE_CODES.get(degrees)
    if code is None:
        raise FrameFormatError(f"rotation must be one of 0/90/180/270, got {degrees}")

    rotated = cv2.rotate(frame.data, code)
    h, w = rotated.shape[:2]
    return Frame(data=rotated, width=w, height=h, layout=frame.layout)
