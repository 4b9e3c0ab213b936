import logging

import numpy as np

from particlefield.canvas import Canvas
from particlefield.constants import DEFAULT_FPS, EXPORT_PIXEL_RATIO, TRAIL_COLOR
from particlefield.field import FieldSettings, ParticleField

logger = logging.getLogger(__name__)


class SketchRenderer:
    """
    Drives the particle field frame by frame and paints it with OpenCV.
    The canvas is never cleared, only faded, which leaves motion trails.
    """

    def __init__(self, width, height, fps=DEFAULT_FPS, pixel_ratio=EXPORT_PIXEL_RATIO,
                 settings=None, sink=None, seed=None):
        self.w = width
        self.h = height
        self.fps = fps
        self.sink = sink
        self.canvas = Canvas(width, height, pixel_ratio)
        self.field = ParticleField(
            settings or FieldSettings(), fps=fps, rng=np.random.default_rng(seed)
        )
        self.field.populate((width, height))
        self.frame_count = 0
        self.last_frame = None  # (t, rgb frame)

    @property
    def bounds(self):
        return self.w, self.h

    def render(self, t):
        """Fade the previous frame, then advance and draw the field at time `t`."""
        self.canvas.fill_rect(0, 0, self.w, self.h, TRAIL_COLOR)
        stats = self.field.step(1 / self.fps, self.bounds, t, canvas=self.canvas, sink=self.sink)
        self.frame_count += 1
        if self.frame_count % (self.fps * 10) == 0:
            logger.info(f"[i] {t:.1f}s: {stats.alive} particles, {stats.edges} connections")
        return self.canvas.frame

    def make_frame(self, t):
        """
        The callback function for MoviePy.
        Generates a single RGB video frame at time t.
        MoviePy calls this once at t=0 to size the clip and again when writing;
        a repeated t returns the frame already rendered.
        """
        if self.last_frame is not None and self.last_frame[0] == t:
            return self.last_frame[1]

        self.render(t)
        rgb = self.canvas.to_rgb()
        self.last_frame = (t, rgb)
        return rgb

    def frames(self):
        """Endless stream of BGR frames at the configured frame rate, for live preview."""
        while True:
            yield self.render(self.frame_count / self.fps)

    def close(self):
        released = self.field.release_all(self.sink)
        if released:
            logger.info(f"[+] Released {released} sounding notes")
