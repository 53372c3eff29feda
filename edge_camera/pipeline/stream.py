# pipeline/stream.py
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from edge_camera.config import AppConfig
from .edges import detect_edges
from .models import CannyThresholds, ChannelLayout, FrameFormatError, FramePacket, StageMismatchError
from .rotation import normalize_rotation
from .throttle import ThrottleState, throttle
from .yuv import yuv420_to_bgr

log = logging.getLogger(__name__)

FrameSink = Callable[[FramePacket], None]


def process_packet(
    packet: FramePacket,
    cfg: AppConfig,
    thresholds: Optional[CannyThresholds] = None,
) -> Optional[FramePacket]:
    """
    Source -> [converter] -> rotation -> detector for one frame.

    Returns None when the frame is malformed (it is dropped). Stage mismatches
    propagate as StageMismatchError.
    """
    thresholds = thresholds or cfg.thresholds()
    frame = packet.frame
    try:
        if frame.layout is ChannelLayout.PLANAR_YUV420:
            frame = yuv420_to_bgr(frame, cfg.chroma())
        frame = normalize_rotation(frame, packet.rotation)
        edges = detect_edges(frame, thresholds, cfg.blur_ksize)
    except FrameFormatError as e:
        log.warning(f"frame {packet.index}: dropped ({e})")
        return None

    return FramePacket(index=packet.index, timestamp_s=packet.timestamp_s, frame=edges)


@dataclass
class StreamStats:
    submitted: int = 0
    processed: int = 0
    superseded: int = 0  # replaced in the mailbox before the worker took them
    throttled: int = 0
    malformed: int = 0
    failed: int = 0


class EdgeStream:
    """
    Single-worker edge detection stream.

    The driver owning the frame source calls start(), then submit() once per
    frame, then stop(). Only the newest submitted frame is kept; anything not
    yet picked up by the worker is replaced. Results go to `sink`
    fire-and-forget on the worker thread; the sink does its own hand-off to a
    display thread if it needs one.
    """

    def __init__(
        self,
        cfg: AppConfig,
        sink: FrameSink,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cfg = cfg
        self.sink = sink
        self.clock = clock
        self.thresholds = cfg.thresholds()
        self.stats = StreamStats()

        self._throttle_state = ThrottleState()
        self._cond = threading.Condition()
        self._pending: Optional[FramePacket] = None
        self._running = False
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._cond:
            if self._running:
                raise RuntimeError("EdgeStream already started")
            if self._thread is not None and self._thread.is_alive():
                raise RuntimeError("previous EdgeStream worker is still running")
            self._running = True
            self._throttle_state = ThrottleState()
        self._thread = threading.Thread(target=self._run, name="edge-stream", daemon=True)
        self._thread.start()
        log.info(f"EdgeStream started (thresholds={self.thresholds.low}/{self.thresholds.high}, throttle={self.cfg.throttle})")

    def stop(self, drain: bool = False, timeout: Optional[float] = None) -> None:
        """
        Stop the worker. The frame in flight always completes; a pending frame
        is processed first when `drain` is set and discarded otherwise.
        """
        with self._cond:
            if not self._running:
                return
            self._running = False
            if self._pending is not None and not drain:
                self._pending = None
                self.stats.superseded += 1
            self._cond.notify_all()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                log.warning("EdgeStream worker still finishing a frame after stop timeout")
            else:
                self._thread = None
        log.info(f"EdgeStream stopped: {self.stats}")

    def submit(self, packet: FramePacket) -> None:
        with self._cond:
            if not self._running:
                raise RuntimeError("EdgeStream is not running")
            self.stats.submitted += 1
            if self._pending is not None:
                self.stats.superseded += 1
            self._pending = packet
            self._cond.notify()

    def handle(self, packet: FramePacket) -> Optional[FramePacket]:
        """
        Throttle, process and sink one frame on the calling thread.

        This is the worker's body; call it directly only when no worker thread
        is running.
        """
        if self.cfg.throttle:
            ok, self._throttle_state = throttle(
                self._throttle_state, self.clock() * 1000.0, self.cfg.min_frame_interval_ms
            )
            if not ok:
                self.stats.throttled += 1
                return None

        try:
            result = process_packet(packet, self.cfg, self.thresholds)
        except StageMismatchError:
            self.stats.failed += 1
            log.exception(f"frame {packet.index}: pipeline invariant violated")
            return None
        except Exception:
            self.stats.failed += 1
            log.exception(f"frame {packet.index}: processing failed")
            return None

        if result is None:
            self.stats.malformed += 1
            return None

        self.stats.processed += 1
        log.debug(f"frame {packet.index}: processed {result.frame.width}x{result.frame.height}")

        try:
            self.sink(result)
        except Exception:
            log.exception(f"frame {packet.index}: sink failed")
        return result

    def _take(self) -> Optional[FramePacket]:
        with self._cond:
            while self._running and self._pending is None:
                self._cond.wait()
            packet, self._pending = self._pending, None
            return packet

    def _run(self) -> None:
        while True:
            packet = self._take()
            if packet is None:
                break
            self.handle(packet)

    def __enter__(self) -> "EdgeStream":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
