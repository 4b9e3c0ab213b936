import cv2
import numpy as np

from particlefield.constants import BACKGROUND_COLOR, EXPORT_PIXEL_RATIO

# Fixed-point bits for sub-pixel drawing (cv2 `shift` argument)
SHIFT = 4
_SCALE = 1 << SHIFT


def _bgr(rgba):
    r, g, b = rgba[:3]
    return (int(b), int(g), int(r))


class Canvas:
    """
    RGBA drawing surface on top of an OpenCV frame.
    Coordinates are logical; the frame is `pixel_ratio` times larger.
    The frame is stored in BGR order, as OpenCV expects.
    """

    def __init__(self, width, height, pixel_ratio=EXPORT_PIXEL_RATIO, background=BACKGROUND_COLOR):
        self.width = width
        self.height = height
        self.pixel_ratio = pixel_ratio
        self.frame = np.full(
            (int(height * pixel_ratio), int(width * pixel_ratio), 3),
            _bgr(background),
            dtype=np.uint8,
        )

    @property
    def size(self):
        """Frame size in pixels as (width, height)."""
        return self.frame.shape[1], self.frame.shape[0]

    def _fixed(self, value, offset=0):
        return int(round((value * self.pixel_ratio - offset) * _SCALE))

    def _blend(self, x0, y0, x1, y1, alpha, draw):
        """
        Run `draw(layer, ox, oy)` on a copy of the pixel region [x0,x1) x [y0,y1)
        and mix it back with the given opacity.
        """
        fw, fh = self.size
        x0, y0 = max(0, int(np.floor(x0))), max(0, int(np.floor(y0)))
        x1, y1 = min(fw, int(np.ceil(x1))), min(fh, int(np.ceil(y1)))
        if x0 >= x1 or y0 >= y1 or alpha <= 0:
            return

        roi = self.frame[y0:y1, x0:x1]
        layer = roi.copy()
        draw(layer, x0, y0)
        if alpha >= 1:
            self.frame[y0:y1, x0:x1] = layer
        else:
            self.frame[y0:y1, x0:x1] = cv2.addWeighted(layer, alpha, roi, 1 - alpha, 0)

    def fill_rect(self, x, y, w, h, rgba):
        alpha = rgba[3] if len(rgba) > 3 else 1.0
        r = self.pixel_ratio
        color = _bgr(rgba)

        def draw(layer, ox, oy):
            layer[:] = color

        self._blend(x * r, y * r, (x + w) * r, (y + h) * r, alpha, draw)

    def stroke_line(self, p1, p2, rgba, width=1.0):
        alpha = rgba[3] if len(rgba) > 3 else 1.0
        r = self.pixel_ratio
        thickness = max(1, int(round(width * r)))
        pad = thickness + 2
        color = _bgr(rgba)

        def draw(layer, ox, oy):
            start = (self._fixed(p1[0], ox), self._fixed(p1[1], oy))
            end = (self._fixed(p2[0], ox), self._fixed(p2[1], oy))
            cv2.line(layer, start, end, color, thickness, cv2.LINE_AA, SHIFT)

        self._blend(
            min(p1[0], p2[0]) * r - pad,
            min(p1[1], p2[1]) * r - pad,
            max(p1[0], p2[0]) * r + pad,
            max(p1[1], p2[1]) * r + pad,
            alpha,
            draw,
        )

    def fill_circle(self, center, radius, rgba):
        alpha = rgba[3] if len(rgba) > 3 else 1.0
        r = self.pixel_ratio
        cx, cy = center
        extent = radius * r + 2
        color = _bgr(rgba)

        def draw(layer, ox, oy):
            c = (self._fixed(cx, ox), self._fixed(cy, oy))
            cv2.circle(layer, c, self._fixed(radius), color, -1, cv2.LINE_AA, SHIFT)

        self._blend(cx * r - extent, cy * r - extent, cx * r + extent, cy * r + extent, alpha, draw)

    def to_rgb(self):
        return cv2.cvtColor(self.frame, cv2.COLOR_BGR2RGB)
