import pytest

from posereview.core.mapping import CoordinateMapper


def test_scales_axes_independently():
    mapper = CoordinateMapper(1920, 1080, 640, 360)
    assert mapper.scale == pytest.approx((1 / 3, 1 / 3))
    assert mapper.to_display(960, 600) == pytest.approx((320, 200))


def test_stretched_display_keeps_distortion():
    mapper = CoordinateMapper(1000, 1000, 500, 250)
    assert mapper.to_display(100, 100) == pytest.approx((50, 25))


def test_round_trip():
    mapper = CoordinateMapper(1280, 720, 853, 480)
    x, y = mapper.to_native(*mapper.to_display(417.5, 233.25))
    assert (x, y) == pytest.approx((417.5, 233.25))


@pytest.mark.parametrize("sizes", [
    (0, 0, 640, 360),
    (1920, 1080, 0, 0),
    (1920, 0, 640, 360),
])
def test_degenerate_sizes_pass_through(sizes):
    mapper = CoordinateMapper(*sizes)
    assert not mapper.is_ready
    assert mapper.scale == (1.0, 1.0)
    assert mapper.to_display(12.5, 7) == (12.5, 7)
    assert mapper.to_native(12.5, 7) == (12.5, 7)


def test_resize_takes_effect_immediately():
    mapper = CoordinateMapper(1920, 1080, 640, 360)
    mapper.set_display_size(1280, 720)
    assert mapper.to_display(960, 540) == pytest.approx((640, 360))
    mapper.set_native_size(3840, 2160)
    assert mapper.to_display(960, 540) == pytest.approx((320, 180))
