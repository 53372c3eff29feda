# pipeline/edges.py
from __future__ import annotations

import cv2
import numpy as np

from .models import CannyThresholds, ChannelLayout, Frame, FrameFormatError, StageMismatchError

_TO_GRAY = {
    ChannelLayout.PACKED_COLOR3: cv2.COLOR_BGR2GRAY,
    ChannelLayout.PACKED_COLOR4_ALPHA: cv2.COLOR_BGRA2GRAY,
}

_FROM_GRAY = {
    ChannelLayout.PACKED_COLOR3: cv2.COLOR_GRAY2BGR,
    ChannelLayout.PACKED_COLOR4_ALPHA: cv2.COLOR_GRAY2BGRA,  # alpha = 255
}


def to_gray(frame: Frame) -> np.ndarray:
    """Luma-weighted reduction (0.299R + 0.587G + 0.114B); alpha is dropped."""
    if frame.layout is ChannelLayout.PACKED_GRAY1:
        return frame.data
    code = _TO_GRAY.get(frame.layout)
    if code is None:
        raise FrameFormatError(f"edge detection needs a packed frame, got {frame.layout.name}")
    return cv2.cvtColor(frame.data, code)


def canny_edges(gray: np.ndarray, thresholds: CannyThresholds, blur_ksize: int = 5) -> np.ndarray:
    """
    Binary edge map (255 = edge) of a single-channel image.

    Gaussian smoothing -> Sobel gradients -> non-maximum suppression ->
    double threshold with 8-connected hysteresis.
    """
    if blur_ksize:
        if blur_ksize % 2 == 0:
            raise ValueError(f"blur kernel must be odd, got {blur_ksize}")
        gray = cv2.GaussianBlur(gray, (blur_ksize, blur_ksize), 0)
    return cv2.Canny(gray, thresholds.low, thresholds.high)


def expand_channels(edges: np.ndarray, layout: ChannelLayout) -> np.ndarray:
    """Replicate the edge map back into the channel count of `layout`."""
    if layout is ChannelLayout.PACKED_GRAY1:
        return edges
    return cv2.cvtColor(edges, _FROM_GRAY[layout])


def detect_edges(frame: Frame, thresholds: CannyThresholds, blur_ksize: int = 5) -> Frame:
    """White edges on black, returned in the same layout and size as `frame`."""
    gray = to_gray(frame)
    edges = canny_edges(gray, thresholds, blur_ksize)
    out = expand_channels(edges, frame.layout)

    if out.shape != frame.data.shape:
        raise StageMismatchError(f"detector output {out.shape} != input {frame.data.shape}")
    return Frame(data=out, width=frame.width, height=frame.height, layout=frame.layout)


def count_edge_pixels(frame: Frame) -> int:
    data = frame.data
    if data.ndim == 3:
        data = data[:, :, 0]
    return int(np.count_nonzero(data))
