# pipeline/models.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import numpy as np


class FrameFormatError(ValueError):
    """Malformed frame input. Fatal for that frame only."""


class StageMismatchError(AssertionError):
    """Internal invariant: a stage produced the wrong dimensions."""


class ChannelLayout(Enum):
    PLANAR_YUV420 = "planar_yuv420"
    PACKED_COLOR3 = "packed_color3"  # BGR
    PACKED_GRAY1 = "packed_gray1"
    PACKED_COLOR4_ALPHA = "packed_color4_alpha"  # BGRA

    @property
    def channels(self) -> int:
        return {
            ChannelLayout.PLANAR_YUV420: 1,
            ChannelLayout.PACKED_COLOR3: 3,
            ChannelLayout.PACKED_GRAY1: 1,
            ChannelLayout.PACKED_COLOR4_ALPHA: 4,
        }[self]


class ChromaOrder(Enum):
    VU = "vu"  # V plane first (YV12)
    UV = "uv"  # U plane first (I420)


@dataclass(frozen=True)
class Frame:
    data: np.ndarray
    width: int
    height: int
    layout: ChannelLayout

    @classmethod
    def from_image(cls, image: np.ndarray) -> "Frame":
        """Wrap a packed HxW, HxWx3 or HxWx4 uint8 array."""
        if image.dtype != np.uint8:
            raise FrameFormatError(f"packed frames must be uint8, got {image.dtype}")
        if image.ndim == 2:
            layout = ChannelLayout.PACKED_GRAY1
        elif image.ndim == 3 and image.shape[2] == 3:
            layout = ChannelLayout.PACKED_COLOR3
        elif image.ndim == 3 and image.shape[2] == 4:
            layout = ChannelLayout.PACKED_COLOR4_ALPHA
        else:
            raise FrameFormatError(f"unsupported packed image shape {image.shape}")
        h, w = image.shape[:2]
        return cls(data=image, width=w, height=h, layout=layout)

    @classmethod
    def planar(cls, buffer: np.ndarray, width: int, height: int) -> "Frame":
        return cls(data=np.asarray(buffer, dtype=np.uint8).reshape(-1), width=width,
                   height=height, layout=ChannelLayout.PLANAR_YUV420)

    def expected_size(self) -> int:
        if self.layout is ChannelLayout.PLANAR_YUV420:
            return self.width * self.height * 3 // 2
        return self.width * self.height * self.layout.channels

    @property
    def size(self) -> tuple[int, int]:
        """(width, height)"""
        return (self.width, self.height)


@dataclass(frozen=True)
class FramePacket:
    index: int
    timestamp_s: float
    frame: Frame
    rotation: int = 0  # degrees clockwise still to be applied


@dataclass(frozen=True)
class CannyThresholds:
    """Hysteresis pair for edge linking; fixed per deployment."""
    low: float = 80.0
    high: float = 150.0

    def __post_init__(self) -> None:
        if not (0 < self.low < self.high):
            raise ValueError(f"invalid Canny thresholds: low={self.low} high={self.high}")
