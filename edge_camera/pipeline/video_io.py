# pipeline/video_io.py
from __future__ import annotations

import logging
import cv2
import numpy as np
from pathlib import Path
from typing import Iterator

from .models import Frame, FramePacket

log = logging.getLogger(__name__)


def iter_frames(
    source: Path | int,
    stride: int = 1,
    max_frames: int | None = None,
    rotation: int = 0,
) -> Iterator[FramePacket]:
    """Packed BGR frames from a video file or a camera index."""
    cap = cv2.VideoCapture(source if isinstance(source, int) else str(source))
    if not cap.isOpened():
        raise RuntimeError(f"Could not open video: {source}")

    fps = cap.get(cv2.CAP_PROP_FPS) or 25.0

    idx = -1
    yielded = 0
    try:
        while True:
            ok, image = cap.read()
            if not ok:
                break
            idx += 1

            if idx % stride != 0:
                continue

            t = idx / fps
            yield FramePacket(index=idx, timestamp_s=t, frame=Frame.from_image(image), rotation=rotation)

            yielded += 1
            if max_frames is not None and yielded >= max_frames:
                break
    finally:
        cap.release()


def iter_yuv_frames(
    path: Path,
    width: int,
    height: int,
    fps: float = 30.0,
    rotation: int = 0,
    max_frames: int | None = None,
) -> Iterator[FramePacket]:
    """
    Planar YUV420 frames from a raw file (Y plane then two chroma planes per frame).

    A truncated last frame is still yielded so the converter can reject it.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"YUV frame size must be positive, got {width}x{height}")

    frame_size = width * height * 3 // 2
    total = Path(path).stat().st_size
    if total == 0:
        raise RuntimeError(f"Empty YUV file: {path}")
    if total % frame_size:
        log.warning(f"{path}: {total % frame_size} trailing bytes do not fill a frame")

    idx = 0
    with open(path, "rb") as f:
        while max_frames is None or idx < max_frames:
            buf = np.fromfile(f, dtype=np.uint8, count=frame_size)
            if buf.size == 0:
                break
            yield FramePacket(
                index=idx,
                timestamp_s=idx / fps,
                frame=Frame.planar(buf, width, height),
                rotation=rotation,
            )
            idx += 1
