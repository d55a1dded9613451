"""Fakes and builders shared by the tests"""
from posereview.core.pose import Keypoint, Pose


def make_pose(points, default_score=0.9, pose_score=0.9):
    """points: {name: (x, y)} or {name: (x, y, score)}"""
    keypoints = []
    for name, value in points.items():
        if len(value) == 3:
            x, y, score = value
        else:
            (x, y), score = value, default_score
        keypoints.append(Keypoint(name, float(x), float(y), float(score)))
    return Pose(keypoints=keypoints, score=pose_score)


class Emitter:
    """Minimal signal stand-in"""

    def __init__(self):
        self._slots = []

    def connect(self, slot):
        self._slots.append(slot)

    def emit(self, *args):
        for slot in list(self._slots):
            slot(*args)


class FakeTicker:
    def __init__(self):
        self.timeout = Emitter()
        self.active = False
        self.interval = None

    def start(self, interval):
        self.active = True
        self.interval = interval

    def stop(self):
        self.active = False

    def tick(self):
        if self.active:
            self.timeout.emit()


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance_ms(self, ms):
        self.now += ms / 1000.0


class ManualDefer:
    """Collects deferred callbacks until run() is called"""

    def __init__(self):
        self.calls = []

    def __call__(self, delay_ms, callback):
        self.calls.append((delay_ms, callback))

    def run(self):
        calls, self.calls = self.calls, []
        for _, callback in calls:
            callback()


class RecordingDispatch:
    """Holds detection requests until the test resolves them"""

    def __init__(self):
        self.requests = []

    def __call__(self, frame, on_result, on_error):
        self.requests.append((frame, on_result, on_error))

    @property
    def count(self):
        return len(self.requests)

    def resolve(self, poses, index=-1):
        self.requests[index][1](poses)

    def fail(self, message, index=-1):
        self.requests[index][2](message)


class Recorder:
    """Collects signal emissions"""

    def __init__(self, signal=None):
        self.calls = []
        if signal is not None:
            signal.connect(self.record)

    def record(self, *args):
        self.calls.append(args)

    __call__ = record

    @property
    def count(self):
        return len(self.calls)
