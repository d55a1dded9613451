import pytest

from posereview.core.config import PauseSchedule, ReviewConfig


def test_defaults():
    config = ReviewConfig()
    assert config.confidence_threshold == 0.3
    assert config.hit_radius_px == 15
    assert config.dim_padding_px == 50
    assert config.pause_settle_ms == 200
    assert config.detection_interval_ms == pytest.approx(1000 / 30)


def test_schedule_is_sorted():
    schedule = PauseSchedule([10, 6])
    assert schedule.points == (6.0, 10.0)
    assert len(schedule) == 2


def test_match_within_tolerance():
    schedule = PauseSchedule([6, 10], tolerance=0.1)
    assert schedule.match(6.05) == 0
    assert schedule.match(9.95) == 1
    assert schedule.match(6.15) is None
    assert schedule.match(5.0) is None


def test_overlapping_entries_rejected():
    with pytest.raises(ValueError):
        PauseSchedule([3.0, 3.15], tolerance=0.1)


def test_config_builds_schedule():
    config = ReviewConfig(pause_points=(7.0, 3.0), pause_tolerance_sec=0.2)
    schedule = config.pause_schedule()
    assert list(schedule) == [3.0, 7.0]
    assert schedule.tolerance == 0.2
