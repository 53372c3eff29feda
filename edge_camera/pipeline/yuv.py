# pipeline/yuv.py
from __future__ import annotations

import cv2
import numpy as np

from .models import ChannelLayout, ChromaOrder, Frame, FrameFormatError, StageMismatchError


def planar_to_nv21(buffer: np.ndarray, width: int, height: int, chroma_order: ChromaOrder) -> np.ndarray:
    """
    Interleave a planar YUV420 buffer (Y, then two quarter-size chroma planes)
    into an NV21 matrix of shape (H*3/2, W): Y rows followed by VUVU... rows.
    """
    y_size = width * height
    c_size = y_size // 4

    first = buffer[y_size:y_size + c_size]
    second = buffer[y_size + c_size:y_size + 2 * c_size]
    if chroma_order is ChromaOrder.VU:
        v, u = first, second
    else:
        u, v = first, second

    nv21 = np.empty(y_size + 2 * c_size, dtype=np.uint8)
    nv21[:y_size] = buffer[:y_size]
    nv21[y_size::2] = v
    nv21[y_size + 1::2] = u
    return nv21.reshape(height * 3 // 2, width)


def yuv420_to_bgr(frame: Frame, chroma_order: ChromaOrder = ChromaOrder.VU) -> Frame:
    """
    Planar YUV420 -> packed BGR, BT.601 limited range (OpenCV's NV21 path).

    Raises FrameFormatError when the frame is not planar, has odd dimensions,
    or its buffer length differs from W*H*1.5. The input buffer is never written.
    """
    if frame.layout is not ChannelLayout.PLANAR_YUV420:
        raise FrameFormatError(f"expected planar YUV420, got {frame.layout.name}")

    w, h = frame.width, frame.height
    if w <= 0 or h <= 0 or w % 2 or h % 2:
        raise FrameFormatError(f"planar YUV420 needs even, positive dimensions, got {w}x{h}")

    buf = frame.data.reshape(-1)
    if buf.size != frame.expected_size():
        raise FrameFormatError(
            f"planar buffer has {buf.size} bytes, expected {frame.expected_size()} for {w}x{h}"
        )

    nv21 = planar_to_nv21(buf, w, h, chroma_order)
    bgr = cv2.cvtColor(nv21, cv2.COLOR_YUV2BGR_NV21)

    if bgr.shape != (h, w, 3):
        raise StageMismatchError(f"converter produced {bgr.shape}, expected {(h, w, 3)}")
    return Frame(data=bgr, width=w, height=h, layout=ChannelLayout.PACKED_COLOR3)
