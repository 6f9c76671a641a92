"""
Tests for images and videos
"""

import io
import sys
import tempfile
from os.path import abspath, dirname, join, exists

import pytest
import numpy as np
import cv2

sys.path.append( dirname(dirname(dirname(abspath(__file__)))))

from darkroom.asset import ImageAsset, VideoAsset
from darkroom.config import DEFAULTS
from darkroom.errors import LoadFailure, NotFound
from darkroom.params import EffectSpec, AdjustmentSpec
from darkroom.source import SourceOptions


class FakeCapture:
    """Stands in for cv2.VideoCapture on a camera"""
    def __init__(self, frames):
        self.frames = list(frames)
        self.released = False

    def isOpened(self):
        return True

    def set(self, prop, value):
        return True

    def read(self):
        if not self.frames:
            return (False, None)
        return (True, self.frames.pop(0))

    def release(self):
        self.released = True


@pytest.fixture
def workdir():
    with tempfile.TemporaryDirectory() as td:
        img = np.zeros((64, 96, 3), np.uint8)
        img[:, :48] = (200, 120, 40)
        img[:, 48:] = (30, 60, 220)
        cv2.imwrite(join(td, "cat.png"), img)
        cv2.imwrite(join(td, "gray.png"), np.full((64, 96), 100, np.uint8))
        config = dict(DEFAULTS,
                      images_dir = td,
                      effects_dir = join(td, "fx"),
                      adjustments_dir = join(td, "adj"),
                      edited_dir = join(td, "edited"),
                      videos_dir = join(td, "videos"),
                      workers = 2)
        yield (td, config)

def camera(n=6, value=220):
    return lambda cam: FakeCapture([np.full((32, 48, 3), value, np.uint8) for _ in range(n)])


def test_kinds(workdir):
    (td, config) = workdir
    assert ImageAsset(config=config).kind == 'image'
    assert ImageAsset(effect=EffectSpec(), config=config).kind == 'effect'
    assert ImageAsset(adjustment=AdjustmentSpec(), config=config).kind == 'adjustment'
    assert ImageAsset(effect=EffectSpec(), adjustment=AdjustmentSpec(), config=config).kind == 'edited'
    v = VideoAsset(config=config)
    assert v.kind == 'video'
    assert v.has_effect and v.has_adjustment
    assert v.name.startswith("video") and v.name.endswith(".mp4")
    assert VideoAsset(config=config).name != v.name

def test_image_apply_and_reset(workdir):
    (td, config) = workdir
    a = ImageAsset("cat.png", effect=EffectSpec(blur_radius=5), config=config, out=io.StringIO())
    assert a.apply_all() == ["~ NOTHING LOADED"]
    a.load()
    assert a.loaded
    assert a.source == join(td, "cat.png")
    assert a.apply_all() == []
    assert a.applied
    assert a.frame.edited
    assert a.applied_ops() == {'blur'}
    assert "Has effects applied" in a.info()
    assert not np.array_equal(a.frame.img, a.original)

    a.reset()
    assert not a.applied
    assert np.array_equal(a.frame.img, a.original)
    assert "Doesn't have effects applied" in a.info()

def test_image_noop(workdir):
    (td, config) = workdir
    a = ImageAsset("cat.png", adjustment=AdjustmentSpec(brightness=500, contrast=1, hue=0), config=config)
    a.load()
    assert a.apply_all() == []
    assert not a.applied
    assert np.array_equal(a.frame.img, a.original)
    plain = ImageAsset("cat.png", config=config)
    plain.load()
    assert plain.apply_all() == ["~ NOTHING TO APPLY"]

def test_capabilities(workdir):
    (td, config) = workdir
    a = ImageAsset("cat.png", effect=EffectSpec(), config=config)
    a.update_effect(to_grayscale=True)
    assert a.effect.to_grayscale
    with pytest.raises(ValueError):
        a.set_adjustment(AdjustmentSpec(hue=10))
    with pytest.raises(ValueError):
        a.update_adjustment(hue=10)

def test_grayscale_then_hue(workdir):
    (td, config) = workdir
    a = ImageAsset("gray.png", adjustment=AdjustmentSpec(hue=40, brightness=10), config=config)
    a.load()
    notices = a.apply_all()
    assert len(notices) == 1
    assert notices[0].startswith("~ APPLYING ADJUSTMENT FAILED (hue)")
    assert (a.frame.img == 110).all()

def test_missing_image(workdir):
    (td, config) = workdir
    a = ImageAsset("dog.png", effect=EffectSpec(blur_radius=3), config=config)
    with pytest.raises(NotFound):
        a.load()
    assert not a.loaded
    assert a.apply_all() == ["~ NOTHING LOADED"]
    b = ImageAsset("ignored", path=join(td, "cat.png"), absolute=True, config=config)
    b.load()
    assert b.location == join(td, "cat.png")

def test_save(workdir):
    (td, config) = workdir
    a = ImageAsset("cat.png", effect=EffectSpec(to_grayscale=True), adjustment=AdjustmentSpec(), config=config)
    a.load()
    a.apply_all()
    urn = a.save()
    assert urn == join(td, "edited", "cat_Edited.png")
    saved = cv2.imread(urn, cv2.IMREAD_UNCHANGED)
    assert saved.shape == (64, 96)
    assert a.frame.urn == join(td, "cat.png")       # save does not change the asset's frame
    e = ImageAsset("cat.png", effect=EffectSpec(), config=config)
    assert e.output_urn() == join(td, "fx", "cat_withEffects.png")
    j = ImageAsset("cat.png", adjustment=AdjustmentSpec(), config=config)
    assert j.output_urn() == join(td, "adj", "cat_withAdjustments.png")

def test_video_from_camera(workdir):
    (td, config) = workdir
    out = io.StringIO()
    v = VideoAsset(source=0, capture_factory=camera(), options=SourceOptions(show=False),
                   config=config, out=out)
    assert v.from_camera
    v.load()
    assert len(v.sequence) == 6
    assert v.fps > 0
    v.update_adjustment(brightness=50)
    assert v.apply_all() == []
    assert v.applied
    assert all((f.img == 255).all() for f in v.sequence)
    assert "~ FINISHED" in out.getvalue()
    v.reset()
    assert not v.applied
    assert all((f.img == 220).all() for f in v.sequence)
    assert "Frames: 6" in v.info()

def test_empty_camera(workdir):
    (td, config) = workdir
    v = VideoAsset(source=0, capture_factory=camera(0), options=SourceOptions(show=False), config=config)
    with pytest.raises(LoadFailure):
        v.load()
    with pytest.raises(LoadFailure):
        v.reset()

def test_video_file(workdir):
    (td, config) = workdir
    v = VideoAsset("clip.mp4", source=0, capture_factory=camera(8, 128), options=SourceOptions(show=False),
                   config=config, progress=False)
    v.load()
    v.fps = 10.0
    urn = v.save()
    assert urn == join(td, "videos", "clip.mp4")
    assert exists(urn)

    w = VideoAsset(source=urn, config=config, progress=False)
    assert not w.from_camera
    w.load()
    assert len(w.sequence) == 8
    assert w.fps == pytest.approx(10.0)
    w.update_effect(to_grayscale=True)
    assert w.apply_all() == []
    assert w.sequence.channels == 1
    w.reset()
    assert w.sequence.channels == 3

def test_missing_video(workdir):
    (td, config) = workdir
    with pytest.raises(NotFound):
        VideoAsset(source=join(td, "nothing.mp4"), config=config).load()

def test_apply_all_with_invalid_blur(workdir):
    (td, config) = workdir
    for bad in [None, float('nan')]:
        a = ImageAsset("cat.png", effect=EffectSpec(blur_radius=bad, to_grayscale=True), config=config)
        a.load()
        assert a.apply_all() == []
        assert a.applied_ops() == {'grayscale'}

        v = VideoAsset(source=0, capture_factory=camera(4), options=SourceOptions(show=False),
                       effect=EffectSpec(blur_radius=bad), adjustment=AdjustmentSpec(brightness=bad),
                       config=config, progress=False)
        v.load()
        assert v.apply_all() == []
        assert not v.applied
        assert all((f.img == 220).all() for f in v.sequence)
