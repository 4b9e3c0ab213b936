import numpy as np
import pytest

from particlefield.canvas import Canvas


@pytest.fixture()
def black():
    return Canvas(40, 30, pixel_ratio=2, background=(0, 0, 0))


def test_frame_is_scaled_by_pixel_ratio(black):
    assert black.frame.shape == (60, 80, 3)
    assert black.size == (80, 60)
    assert black.frame.dtype == np.uint8


def test_background_colour_is_stored_as_bgr():
    canvas = Canvas(4, 4, pixel_ratio=1, background=(10, 20, 30))
    assert tuple(canvas.frame[0, 0]) == (30, 20, 10)
    assert tuple(canvas.to_rgb()[0, 0]) == (10, 20, 30)


def test_opaque_fill_rect(black):
    black.fill_rect(0, 0, 40, 30, (255, 0, 0, 1.0))
    assert (black.to_rgb() == (255, 0, 0)).all()


def test_translucent_fill_rect_blends(black):
    black.fill_rect(0, 0, 40, 30, (200, 100, 50, 0.5))
    assert tuple(black.to_rgb()[10, 10]) == (100, 50, 25)


def test_repeated_fades_converge_to_colour():
    canvas = Canvas(10, 10, pixel_ratio=1, background=(255, 255, 255))
    for _ in range(60):
        canvas.fill_rect(0, 0, 10, 10, (10, 2, 2, 0.2))
    r, g, b = canvas.to_rgb()[5, 5]
    assert abs(int(r) - 10) <= 3
    assert abs(int(g) - 2) <= 3


def test_partial_rect_only_touches_its_area(black):
    black.fill_rect(0, 0, 10, 10, (255, 255, 255, 1.0))
    assert black.frame[:20, :20].min() == 255
    assert black.frame[25:, 25:].max() == 0


def test_fill_circle(black):
    black.fill_circle((20, 15), 3, (255, 255, 255, 1.0))
    assert tuple(black.frame[30, 40]) == (255, 255, 255)
    assert black.frame[0, 0].max() == 0


def test_transparent_shapes_draw_nothing(black):
    black.fill_circle((20, 15), 3, (255, 255, 255, 0.0))
    black.stroke_line((0, 0), (40, 30), (255, 255, 255, 0.0), 1.5)
    assert black.frame.max() == 0


def test_stroke_line_is_translucent(black):
    black.stroke_line((5, 15), (35, 15), (255, 255, 255, 0.5), 1.5)
    row = black.frame[30, 20:60, 0]
    assert row.max() > 0
    assert row.max() <= 130
    assert black.frame[0, :, :].max() == 0


def test_shapes_off_canvas_are_clipped(black):
    black.fill_circle((-50, -50), 3, (255, 255, 255, 1.0))
    black.stroke_line((-10, 5), (10, 5), (255, 255, 255, 1.0), 1.0)
    assert black.frame[10, 5].max() > 0
