"""
Unit tests for the Canny edge detector stage.
"""

import cv2
import numpy as np
import pytest

from edge_camera.pipeline.edges import (
    canny_edges,
    count_edge_pixels,
    detect_edges,
    expand_channels,
    to_gray,
)
from edge_camera.pipeline.models import (
    CannyThresholds,
    ChannelLayout,
    Frame,
    FrameFormatError,
)
from edge_camera.pipeline.yuv import yuv420_to_bgr

from helpers import planar_buffer, step_edge_frame


def _textured(size=96, seed=7):
    rng = np.random.default_rng(seed)
    img = rng.integers(0, 256, (size, size), dtype=np.uint8)
    return cv2.GaussianBlur(img, (7, 7), 0)


class TestDetectEdges:
    """Edge detection scenarios."""

    def setup_method(self):
        self.thresholds = CannyThresholds()

    def test_default_thresholds(self):
        assert (self.thresholds.low, self.thresholds.high) == (80.0, 150.0)

    def test_flat_field_has_no_edges(self):
        bgr = yuv420_to_bgr(Frame.planar(planar_buffer(64, 48), 64, 48))
        out = detect_edges(bgr, self.thresholds)

        assert out.layout is ChannelLayout.PACKED_COLOR3
        assert out.data.shape == (48, 64, 3)
        assert count_edge_pixels(out) == 0

    def test_vertical_step_gives_thin_line(self):
        frame = step_edge_frame(64, 48)
        out = detect_edges(frame, self.thresholds)

        edges = out.data[:, :, 0]
        cols = set(np.nonzero(edges)[1].tolist())
        assert cols, "step edge not detected"
        assert cols <= {30, 31, 32, 33}

        rows_with_edge = np.count_nonzero(edges.any(axis=1))
        assert rows_with_edge >= 48 // 2
        assert np.count_nonzero(edges, axis=1).max() <= 2

    def test_output_is_binary_and_channels_match(self):
        out = detect_edges(step_edge_frame(), self.thresholds)
        assert set(np.unique(out.data).tolist()) <= {0, 255}
        assert np.array_equal(out.data[:, :, 0], out.data[:, :, 1])
        assert np.array_equal(out.data[:, :, 0], out.data[:, :, 2])

    def test_alpha_frame_keeps_layout_and_is_opaque(self):
        frame = step_edge_frame(channels=4)
        frame.data[:, :, 3] = 17
        out = detect_edges(frame, self.thresholds)

        assert out.layout is ChannelLayout.PACKED_COLOR4_ALPHA
        assert out.data.shape == (48, 64, 4)
        assert np.all(out.data[:, :, 3] == 255)
        assert count_edge_pixels(out) > 0

    def test_gray_frame_passes_through(self):
        gray = np.zeros((32, 32), dtype=np.uint8)
        gray[:, 16:] = 255
        out = detect_edges(Frame.from_image(gray), self.thresholds)
        assert out.layout is ChannelLayout.PACKED_GRAY1
        assert out.data.shape == (32, 32)

    def test_planar_frame_rejected(self):
        with pytest.raises(FrameFormatError):
            detect_edges(Frame.planar(planar_buffer(8, 8), 8, 8), self.thresholds)

    def test_input_not_mutated(self):
        frame = step_edge_frame()
        before = frame.data.copy()
        detect_edges(frame, self.thresholds)
        assert np.array_equal(frame.data, before)

    def test_even_blur_kernel_rejected(self):
        with pytest.raises(ValueError):
            canny_edges(np.zeros((8, 8), dtype=np.uint8), self.thresholds, blur_ksize=4)


class TestChannelExpansion:
    """Expansion and reduction of binary edge maps."""

    @pytest.mark.parametrize("layout", [ChannelLayout.PACKED_COLOR3, ChannelLayout.PACKED_COLOR4_ALPHA])
    def test_expand_then_reduce_is_exact(self, layout):
        rng = np.random.default_rng(3)
        binary = (rng.integers(0, 2, (40, 50)) * 255).astype(np.uint8)

        expanded = expand_channels(binary, layout)
        assert expanded.shape == (40, 50, layout.channels)

        back = to_gray(Frame.from_image(expanded))
        assert np.array_equal(back, binary)


class TestThresholdMonotonicity:
    """Edge counts respond monotonically to the threshold pair."""

    def setup_method(self):
        self.gray = _textured()

    def _count(self, low, high):
        return int(np.count_nonzero(canny_edges(self.gray, CannyThresholds(low, high), blur_ksize=0)))

    def test_raising_high_never_adds_edges(self):
        counts = [self._count(40, high) for high in (60, 100, 150, 250, 400)]
        assert all(a >= b for a, b in zip(counts, counts[1:]))

    def test_lowering_low_never_removes_edges(self):
        counts = [self._count(low, 150) for low in (140, 100, 60, 20, 5)]
        assert all(a <= b for a, b in zip(counts, counts[1:]))


class TestCannyThresholds:

    @pytest.mark.parametrize("low,high", [(150, 80), (80, 80), (0, 10), (-5, 10)])
    def test_invalid_pairs(self, low, high):
        with pytest.raises(ValueError):
            CannyThresholds(low, high)
