"""
Synthetic frame builders shared by the tests.
"""

import numpy as np

from edge_camera.pipeline.models import Frame


def planar_buffer(width, height, y=128, first=128, second=128):
    """Flat planar YUV420 buffer: Y plane then two quarter-size chroma planes."""
    y_size = width * height
    c_size = y_size // 4
    buf = np.empty(y_size + 2 * c_size, dtype=np.uint8)
    buf[:y_size] = y
    buf[y_size:y_size + c_size] = first
    buf[y_size + c_size:] = second
    return buf


def step_edge_frame(width=64, height=48, channels=3):
    """Black left half, white right half."""
    img = np.zeros((height, width, channels), dtype=np.uint8)
    img[:, width // 2:] = 255
    return Frame.from_image(img)
