# config.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from edge_camera.pipeline.models import CannyThresholds, ChromaOrder


@dataclass(frozen=True)
class AppConfig:
    # IO
    source: Path | int = 0  # video file or camera index
    output_dir: Path | None = None
    show: bool = False

    # Raw planar input: (width, height), None for packed video sources
    yuv_size: tuple[int, int] | None = None
    chroma_order: str = "vu"  # "vu" (YV12 / NV21 copy order) or "uv" (I420)
    rotation: int = 0  # degrees clockwise, one of 0/90/180/270

    # Frame sampling
    frame_stride: int = 1
    max_frames: int | None = None

    # Edge detection
    canny_low: float = 80.0
    canny_high: float = 150.0
    blur_ksize: int = 5  # 0 disables the Gaussian pre-blur

    # Throttle
    throttle: bool = True
    min_frame_interval_ms: float = 33.0  # ~30 fps

    # Logging
    logging_level: str = "INFO"

    def thresholds(self) -> CannyThresholds:
        return CannyThresholds(low=self.canny_low, high=self.canny_high)

    def chroma(self) -> ChromaOrder:
        return ChromaOrder(self.chroma_order.lower())
