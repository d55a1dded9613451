import numpy as np
import pytest

from posereview.core.surface import (
    DESTINATION_OUT, SOURCE_OVER, OverlaySurface, composite_over, parse_color,
)


def test_parse_color():
    assert parse_color('#FFA500') == (255, 165, 0, 1.0)
    assert parse_color((1, 2, 3)) == (1, 2, 3, 1.0)
    assert parse_color((1, 2, 3, 0.5)) == (1, 2, 3, 0.5)
    with pytest.raises(ValueError):
        parse_color('#FFF')


def test_fill_and_cut_hole():
    surface = OverlaySurface(100, 80)
    surface.fill_rect(0, 0, 100, 80, (0, 0, 0, 0.7))
    surface.set_composite_operation(DESTINATION_OUT)
    surface.fill_rect(20, 20, 30, 30, (0, 0, 0, 1.0))
    surface.set_composite_operation(SOURCE_OVER)

    assert surface.alpha_at(5, 5) == pytest.approx(0.7, abs=0.01)
    assert surface.alpha_at(30, 30) == 0
    assert surface.alpha_at(55, 30) == pytest.approx(0.7, abs=0.01)


def test_source_over_blends_alpha():
    surface = OverlaySurface(10, 10)
    surface.fill_rect(0, 0, 10, 10, (255, 255, 255, 0.8))
    assert surface.rgba_at(5, 5) == (255, 255, 255, 204)

    surface.fill_rect(0, 0, 10, 10, (0, 0, 0, 0.5))
    r, g, b, a = surface.rgba_at(5, 5)
    assert a in (229, 230)  # 0.5 + 0.8 * 0.5
    assert r == g == b
    assert 80 < r < 120


def test_filled_circle_center_is_opaque_color():
    surface = OverlaySurface(100, 100)
    surface.circle((50, 50), 6, '#0000FF')
    assert surface.rgba_at(50, 50) == (0, 0, 255, 255)
    assert surface.alpha_at(60, 60) == 0


def test_line_is_antialiased_and_bounded():
    surface = OverlaySurface(100, 100)
    surface.line((10, 50), (90, 50), (255, 255, 255, 0.8), 2)
    assert surface.alpha_at(50, 50) > 0.3
    assert surface.alpha_at(50, 20) == 0


def test_clear_resets_pixels_log_and_mode():
    surface = OverlaySurface(20, 20)
    surface.fill_rect(0, 0, 20, 20, '#FF0000')
    surface.set_composite_operation(DESTINATION_OUT)
    surface.clear()
    assert not surface.pixels.any()
    assert surface.operations == []
    assert surface.composite_operation == SOURCE_OVER


def test_operations_log_records_mode():
    surface = OverlaySurface(20, 20)
    surface.fill_rect(0, 0, 5, 5, '#FF0000')
    surface.set_composite_operation(DESTINATION_OUT)
    surface.fill_rect(1, 1, 2, 2, '#000000')
    assert [(op[0], op[3]) for op in surface.operations] == [
        ('fill_rect', SOURCE_OVER), ('fill_rect', DESTINATION_OUT),
    ]


def test_unknown_composite_operation():
    with pytest.raises(ValueError):
        OverlaySurface(5, 5).set_composite_operation('xor')


def test_resize_discards_content():
    surface = OverlaySurface(10, 10)
    surface.fill_rect(0, 0, 10, 10, '#FF0000')
    surface.resize(20, 5)
    assert surface.pixels.shape == (5, 20, 4)
    assert not surface.pixels.any()


def test_offscreen_rect_is_clipped():
    surface = OverlaySurface(10, 10)
    surface.fill_rect(-50, -50, 40, 40, '#FF0000')
    assert not surface.pixels.any()


def test_composite_onto_scales_to_frame():
    surface = OverlaySurface(10, 10)
    surface.fill_rect(0, 0, 5, 10, '#FF0000')
    frame = np.zeros((20, 20, 3), dtype=np.uint8)
    out = surface.composite_onto(frame)
    assert out.shape == (20, 20, 3)
    assert tuple(out[10, 2]) == (0, 0, 255)   # BGR red
    assert tuple(out[10, 17]) == (0, 0, 0)


def test_composite_over_half_alpha():
    frame = np.full((1, 1, 3), 200, dtype=np.uint8)
    overlay = np.array([[[0, 0, 0, 128]]], dtype=np.uint8)
    assert composite_over(frame, overlay)[0, 0, 0] == 100


def test_upscale_keeps_edge_colors():
    surface = OverlaySurface(64, 36)
    surface.fill_rect(10, 10, 20, 10, '#FFFFFF')
    frame = np.full((108, 192, 3), 255, dtype=np.uint8)
    assert surface.composite_onto(frame).min() == 255


def test_scaled_edges_are_not_darkened():
    surface = OverlaySurface(20, 20)
    surface.circle((10, 10), 5, '#FF0000')
    scaled = surface.scaled(60, 60)
    visible = scaled[scaled[..., 3] > 0]
    assert len(visible)
    assert (visible[:, 2] == 255).all()
    assert (visible[:, :2] == 0).all()
