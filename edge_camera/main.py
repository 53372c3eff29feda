# main.py
from __future__ import annotations

import argparse
import queue
from pathlib import Path
from typing import Iterator

import cv2

from edge_camera.config import AppConfig
from edge_camera.pipeline.models import FramePacket
from edge_camera.pipeline.stream import EdgeStream
from edge_camera.pipeline.utils import setup_logging, write_frame
from edge_camera.pipeline.video_io import iter_frames, iter_yuv_frames


WINDOW = "edges"


def open_source(cfg: AppConfig) -> Iterator[FramePacket]:
    if cfg.yuv_size is not None:
        w, h = cfg.yuv_size
        return iter_yuv_frames(Path(cfg.source), w, h, rotation=cfg.rotation, max_frames=cfg.max_frames)
    return iter_frames(cfg.source, stride=cfg.frame_stride, max_frames=cfg.max_frames, rotation=cfg.rotation)


def run(cfg: AppConfig) -> None:
    setup_logging(cfg.logging_level)

    if cfg.output_dir is not None:
        cfg.output_dir.mkdir(parents=True, exist_ok=True)

    # display must stay on the main thread; the worker only drops frames here
    shown: queue.Queue[FramePacket] = queue.Queue(maxsize=1)

    def sink(packet: FramePacket) -> None:
        if cfg.output_dir is not None:
            write_frame(cfg.output_dir / f"edges_{packet.index:06d}.png", packet.frame)
        if cfg.show:
            try:
                shown.get_nowait()
            except queue.Empty:
                pass
            shown.put_nowait(packet)

    stream = EdgeStream(cfg, sink)
    n = 0
    stream.start()
    try:
        for packet in open_source(cfg):
            stream.submit(packet)
            n += 1

            if n % 50 == 0:
                print(f"[frame {packet.index}] submitted={n} processed={stream.stats.processed}")

            if cfg.show:
                try:
                    cv2.imshow(WINDOW, shown.get_nowait().frame.data)
                except queue.Empty:
                    pass
                if cv2.waitKey(1) & 0xFF == ord("q"):
                    break
    finally:
        stream.stop(drain=True)

    if cfg.show:
        cv2.destroyAllWindows()

    s = stream.stats
    print(f"Frames submitted: {s.submitted}")
    print(f"Processed: {s.processed}  superseded: {s.superseded}  throttled: {s.throttled}")
    if s.malformed or s.failed:
        print(f"Dropped malformed: {s.malformed}  failed: {s.failed}")


def _parse_size(text: str) -> tuple[int, int]:
    try:
        w, h = (int(v) for v in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WxH, got {text!r}")
    if w <= 0 or h <= 0 or w % 2 or h % 2:
        raise argparse.ArgumentTypeError(f"YUV420 size must be positive and even, got {text!r}")
    return w, h


def parse_args(argv: list[str] | None = None) -> AppConfig:
    p = argparse.ArgumentParser(description="Canny edge detection over a video, camera or raw YUV420 stream.")
    p.add_argument("--source", default="0", help="Video file, camera index or raw YUV420 file")
    p.add_argument("--yuv", type=_parse_size, default=None, metavar="WxH",
                   help="Treat --source as raw planar YUV420 of this size")
    p.add_argument("--chroma-order", choices=["vu", "uv"], default="vu",
                   help="Chroma plane order of raw YUV input")
    p.add_argument("--rotation", type=int, choices=[0, 90, 180, 270], default=0)
    p.add_argument("--out", default=None, help="Write edge frames as PNG into this directory")
    p.add_argument("--show", action="store_true", help="Display edge frames in a window")
    p.add_argument("--stride", type=int, default=1, help="Process every Nth frame")
    p.add_argument("--max-frames", type=int, default=0, help="0 means no limit")
    p.add_argument("--no-throttle", action="store_true", help="Disable the 33 ms frame throttle")
    p.add_argument("--log-level", default="INFO")
    args = p.parse_args(argv)

    source: Path | int = int(args.source) if args.source.isdigit() else Path(args.source)

    cfg = AppConfig(
        source=source,
        output_dir=(Path(args.out) if args.out else None),
        show=args.show,
        yuv_size=args.yuv,
        chroma_order=args.chroma_order,
        rotation=args.rotation,
        frame_stride=max(1, args.stride),
        max_frames=(None if args.max_frames == 0 else args.max_frames),
        throttle=not args.no_throttle,
        logging_level=args.log_level,
    )
    return cfg


def main() -> None:
    run(parse_args())


if __name__ == "__main__":
    main()
