import sys
import tempfile
from os.path import dirname, abspath, join

import pytest
import numpy as np
import cv2

sys.path.append( dirname(dirname(dirname(abspath(__file__)))))

import darkroom.source as source
from darkroom.errors import LoadFailure, NotFound, WriteFailure
from darkroom.frame import FrameSequence

class FakeCapture:
    def __init__(self, n, opened=True):
        self.n = n
        self.opened = opened

    def isOpened(self):
        return self.opened

    def set(self, prop, value):
        return True

    def read(self):
        if self.n == 0:
            return (False, None)
        self.n -= 1
        return (True, np.zeros((8, 8, 3), np.uint8))

    def release(self):
        pass

def ticking_clock(step=0.1):
    t = [0.0]
    def clock():
        t[0] += step
        return t[0]
    return clock


def test_source_options():
    s = source.SourceOptions(limit=3, show=False)
    assert s.limit == 3
    assert not s.show
    assert [s.atlimit() for _ in range(3)] == [False, False, True]
    with pytest.raises(AttributeError):
        source.SourceOptions(mime_type='video/mp4')

def test_estimate_fps():
    assert source.estimate_fps(30, 2.0) == 15.0
    assert source.estimate_fps(30, 0) == 0.0

def test_capture_sequence():
    o = source.SourceOptions(show=False)
    (seq, fps) = source.capture_sequence(0, o, lambda cam: FakeCapture(5), clock=ticking_clock())
    assert len(seq) == 5
    assert seq[0].history == [['camera', 0]]
    # read once at the first frame and once at the end
    assert fps == pytest.approx(5 / 0.1)

def test_capture_limit():
    o = source.SourceOptions(show=False, limit=3)
    (seq, fps) = source.capture_sequence(0, o, lambda cam: FakeCapture(10), clock=ticking_clock())
    assert len(seq) == 3

def test_camera_failures():
    o = source.SourceOptions(show=False)
    with pytest.raises(LoadFailure):
        source.capture_sequence(1, o, lambda cam: FakeCapture(5, opened=False))
    (seq, fps) = source.capture_sequence(0, o, lambda cam: FakeCapture(0))
    assert len(seq) == 0
    assert fps == 0.0

def test_resolve():
    with tempfile.TemporaryDirectory() as td:
        path = join(td, "a.png")
        open(path, "wb").close()
        assert source.resolve("a.png", td) == path
        assert source.resolve("ignored", path, absolute=True) == path
        with pytest.raises(NotFound):
            source.resolve("b.png", td)
        with pytest.raises(NotFound):
            source.resolve("a.png", "s3://bucket/")

def test_write_video_failures():
    with tempfile.TemporaryDirectory() as td:
        with pytest.raises(WriteFailure):
            source.write_video(join(td, "a.mp4"), FrameSequence(), 10)
        with pytest.raises(NotFound):
            source.read_video(join(td, "a.mp4"))

class BrokenCapture(FakeCapture):
    def read(self):
        raise cv2.error("device lost")

def raise_cv2_error(*args):
    raise cv2.error("no display")

def test_opencv_errors_are_load_failures(monkeypatch):
    o = source.SourceOptions(show=False)
    with pytest.raises(LoadFailure):
        source.capture_sequence(0, o, lambda cam: BrokenCapture(5))
    with pytest.raises(LoadFailure):
        source.capture_sequence(0, o, raise_cv2_error)

    monkeypatch.setattr(cv2, "imshow", raise_cv2_error)
    monkeypatch.setattr(cv2, "destroyAllWindows", raise_cv2_error)
    with pytest.raises(LoadFailure):
        source.capture_sequence(0, source.SourceOptions(show=True), lambda cam: FakeCapture(5))
