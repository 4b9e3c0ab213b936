#!/usr/bin/env python3
"""
Particle Field CLI Tool
=======================

Renders a generative particle network: drifting points that fade in and out,
joined by lines whenever they come close to each other. Each point can sound a
MIDI note while it lives (pitch from its x position, loudness from y).

Output is sized for social media: 1080x1350 (4:5) at 60fps, exported at 2x.

Usage:
    python -m particlefield --output field.mp4 --duration 30
    python -m particlefield --live --midi-port "IAC"
    python -m particlefield -h (for help)
"""

import argparse
import logging
import sys

import cv2
from moviepy import VideoClip

from particlefield.constants import (
    DEFAULT_DURATION,
    DEFAULT_FPS,
    DEFAULT_RESOLUTION,
    EXPORT_PIXEL_RATIO,
)
from particlefield.field import VARIANTS
from particlefield.midi import open_output
from particlefield.sketch_renderer import SketchRenderer

logger = logging.getLogger(__name__)

WINDOW_NAME = "particlefield"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Render a generative particle network, optionally playing it over MIDI."
    )
    parser.add_argument(
        "--output", "-o", default="particlefield.mp4", help="Path to output video file"
    )
    parser.add_argument(
        "--duration", type=float, default=DEFAULT_DURATION, help="Length of the export in seconds"
    )
    parser.add_argument("--width", type=int, default=DEFAULT_RESOLUTION[0], help="Canvas width")
    parser.add_argument("--height", type=int, default=DEFAULT_RESOLUTION[1], help="Canvas height")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second")
    parser.add_argument(
        "--pixel-ratio",
        type=int,
        default=EXPORT_PIXEL_RATIO,
        help="Export resolution multiplier",
    )
    parser.add_argument(
        "--variant", choices=sorted(VARIANTS), default="midi", help="Behaviour preset"
    )
    parser.add_argument("--seed", type=int, help="Random seed for a reproducible run")
    parser.add_argument("--midi-port", help="Use the first MIDI output whose name contains this")
    parser.add_argument("--no-midi", action="store_true", help="Do not send MIDI notes")
    parser.add_argument(
        "--live", action="store_true", help="Show a preview window instead of exporting"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    for name in ("duration", "width", "height", "fps", "pixel_ratio"):
        if getattr(args, name) <= 0:
            parser.error(f"--{name.replace('_', '-')} must be positive")

    return args


def run_live(renderer):
    """Show frames in an OpenCV window until `q` or Esc is pressed."""
    delay = max(1, int(1000 / renderer.fps))
    logger.info("[+] Live preview running, press q to quit")
    for frame in renderer.frames():
        cv2.imshow(WINDOW_NAME, frame)
        key = cv2.waitKey(delay) & 0xFF
        if key in (ord("q"), 27):
            break
    cv2.destroyAllWindows()


def export(renderer, output, duration):
    video_clip = VideoClip(renderer.make_frame, duration=duration)

    logger.info("[+] Rendering video... (This may take a while)")
    video_clip.write_videofile(
        output,
        fps=renderer.fps,
        codec="libx264",
        threads=4,
        preset="medium",
        logger="bar",
    )
    logger.info(f"[+] Done! Saved to {output}")


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    settings = VARIANTS[args.variant]

    # Look for a MIDI device once; the animation runs without one
    sink = None
    if settings.midi and not args.no_midi:
        sink = open_output(args.midi_port)

    logger.info(
        f"[+] Preparing render: {args.width}x{args.height} @ {args.fps}fps "
        f"(x{args.pixel_ratio}), variant '{args.variant}'"
    )
    renderer = SketchRenderer(
        args.width,
        args.height,
        fps=args.fps,
        pixel_ratio=args.pixel_ratio,
        settings=settings,
        sink=sink,
        seed=args.seed,
    )

    try:
        if args.live:
            run_live(renderer)
        else:
            logger.info(f"[+] Duration: {args.duration:.2f} seconds")
            export(renderer, args.output, args.duration)
    except KeyboardInterrupt:
        logger.info("[i] Interrupted")
    finally:
        renderer.close()
        if sink is not None:
            sink.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
