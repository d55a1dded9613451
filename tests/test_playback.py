import pytest
from helpers import ManualDefer, Recorder

from posereview.core.config import ReviewConfig
from posereview.core.errors import ResumePlaybackError
from posereview.core.playback import PlaybackController, PlaybackState


class FakeMedia:
    def __init__(self):
        self.pauses = 0
        self.plays = 0
        self.refuse = False

    def pause(self):
        self.pauses += 1

    def play(self):
        if self.refuse:
            raise ResumePlaybackError("autoplay blocked")
        self.plays += 1


@pytest.fixture
def media():
    return FakeMedia()


@pytest.fixture
def defer():
    return ManualDefer()


@pytest.fixture
def controller(media, defer):
    return PlaybackController(media.pause, media.play,
                              ReviewConfig(pause_points=(6.0, 10.0)), defer)


def _playing(controller):
    controller.on_metadata_ready(640, 360)
    controller.on_played()
    return controller


def test_initial_transitions(controller):
    states = Recorder(controller.state_changed)
    assert controller.state == PlaybackState.LOADING
    controller.on_metadata_ready(640, 360)
    assert controller.state == PlaybackState.READY
    controller.on_played()
    assert controller.is_playing
    assert [c[0] for c in states.calls] == [PlaybackState.READY, PlaybackState.PLAYING]


def test_auto_pause_fires_one_detection(controller, media, defer):
    _playing(controller)
    due = Recorder(controller.detection_due)

    controller.on_time_update(6.05)
    assert controller.is_paused
    assert media.pauses == 1
    assert due.count == 0
    assert [delay for delay, _ in defer.calls] == [200]

    defer.run()
    assert due.count == 1

    # Further updates inside the same window do nothing
    controller.on_time_update(6.08)
    controller.on_paused()
    defer.run()
    assert due.count == 1
    assert media.pauses == 1


def test_no_pause_outside_window(controller, media, defer):
    _playing(controller)
    controller.on_time_update(5.0)
    controller.on_time_update(6.15)
    assert controller.is_playing
    assert media.pauses == 0
    assert defer.calls == []


def test_only_pauses_while_playing(controller, media):
    controller.on_metadata_ready()
    controller.on_time_update(6.0)
    assert controller.state == PlaybackState.READY
    assert media.pauses == 0


def test_each_point_fires_once_per_pass(controller, media, defer):
    _playing(controller)
    controller.on_time_update(6.05)
    defer.run()
    controller.resume()
    controller.on_time_update(6.09)
    assert controller.is_playing

    controller.on_time_update(9.92)
    assert controller.is_paused
    assert media.pauses == 2


def test_seeking_back_re_arms(controller, media, defer):
    _playing(controller)
    controller.on_time_update(6.05)
    controller.resume()
    controller.on_time_update(3.0)
    controller.on_time_update(5.95)
    assert controller.is_paused
    assert media.pauses == 2


def test_resume_before_settle_skips_detection(controller, defer):
    _playing(controller)
    due = Recorder(controller.detection_due)
    controller.on_time_update(6.0)
    controller.resume()
    defer.run()
    assert due.count == 0


def test_teardown_cancels_settle(controller, defer):
    _playing(controller)
    due = Recorder(controller.detection_due)
    controller.on_time_update(6.0)
    controller.teardown()
    defer.run()
    assert due.count == 0
    assert not controller.is_active


def test_manual_pause_detects_immediately(controller, media):
    _playing(controller)
    due = Recorder(controller.detection_due)
    controller.pause()
    assert controller.is_paused
    assert media.pauses == 1
    assert due.count == 1


def test_external_pause_event_detects(controller):
    _playing(controller)
    due = Recorder(controller.detection_due)
    controller.on_paused()
    assert controller.is_paused
    assert due.count == 1


def test_resume_clears_selection(controller, media):
    _playing(controller)
    controller.pause()
    cleared = Recorder(controller.selection_cleared)
    assert controller.resume()
    assert controller.is_playing
    assert media.plays == 1
    # The media's own "played" event is absorbed
    controller.on_played()
    assert cleared.count == 1


def test_resume_failure_reports_and_stays_paused(controller, media):
    _playing(controller)
    controller.pause()
    media.refuse = True
    errors = Recorder(controller.error_raised)
    assert not controller.resume()
    assert controller.is_paused
    assert errors.calls == [("Failed to play video: autoplay blocked",)]


def test_load_error_is_terminal(controller, media, defer):
    errors = Recorder(controller.error_raised)
    controller.on_load_error("unsupported codec")
    assert controller.state == PlaybackState.ERROR
    assert controller.error_message == "unsupported codec"
    assert errors.count == 1

    controller.on_metadata_ready()
    controller.on_played()
    controller.pause()
    assert not controller.resume()
    controller.on_load_error("again")
    assert controller.state == PlaybackState.ERROR
    assert errors.count == 1
    assert media.plays == 0
