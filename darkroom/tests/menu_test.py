"""
Tests for the console menu. The menu reads from a scripted input function.
"""

import io
import sys
import tempfile
from os.path import abspath, dirname, join, exists

import pytest
import numpy as np
import cv2

sys.path.append( dirname(dirname(dirname(abspath(__file__)))))

from darkroom.asset import ImageAsset
from darkroom.config import DEFAULTS
from darkroom.menu import AppContext, Menu, main
from darkroom.params import EffectSpec
from darkroom.project import Project
import darkroom.source as source

def scripted(*answers):
    it = iter(answers)
    def inp(prompt):
        try:
            return next(it)
        except StopIteration:
            raise EOFError()
    return inp

@pytest.fixture
def workdir():
    with tempfile.TemporaryDirectory() as td:
        img = np.zeros((40, 60, 3), np.uint8)
        img[10:30, 10:50] = (20, 160, 240)
        cv2.imwrite(join(td, "cat.png"), img)
        config = dict(DEFAULTS, images_dir=td, effects_dir=join(td, "fx"), edited_dir=join(td, "edited"))
        yield (td, config)

def run_menu(config, *answers, project=None):
    out = io.StringIO()
    ctx = AppContext(config=config, project=project, inp=scripted(*answers), out=out,
                     project_path=join(config['images_dir'], "project.txt"))
    Menu(ctx).run()
    return (ctx, out.getvalue())

def loaded_project(config):
    p = Project()
    a = ImageAsset("cat.png", effect=EffectSpec(blur_radius=3), config=config)
    a.load()
    p.create(a)
    return p


def test_invalid_input(workdir):
    (td, config) = workdir
    (ctx, text) = run_menu(config, "9", "abc", "0")
    assert "~ INVALID OPTION" in text
    assert "~ INVALID INPUT" in text

def test_end_of_input(workdir):
    (td, config) = workdir
    (ctx, text) = run_menu(config, "1")
    assert "---------- CREATE ----------" in text

def test_create(workdir):
    (td, config) = workdir
    (ctx, text) = run_menu(config,
                           "1", "1",            # create, effects
                           "cat.png", "1",      # name, relative path
                           "1", "5", "0", "0",  # blur 5, no B&W, no cartoon
                           "1",                 # favorite
                           "0")
    assert len(ctx.project) == 1
    a = ctx.project.get(0)
    assert a.kind == 'effect'
    assert a.loaded
    assert a.favorite
    assert a.effect == EffectSpec(blur_radius=5)

def test_create_missing(workdir):
    (td, config) = workdir
    (ctx, text) = run_menu(config,
                           "1", "2", "dog.png", "1",   # adjustments
                           "10", "1.5", "20",          # brightness, contrast, hue
                           "0", "0")
    assert "~ LOAD FAILED" in text
    assert len(ctx.project) == 1
    assert not ctx.project.get(0).loaded

def test_no_images(workdir):
    (td, config) = workdir
    (ctx, text) = run_menu(config, "2", "3", "4", "0")
    assert text.count("~ NO IMAGES") == 3

def test_edit(workdir):
    (td, config) = workdir
    (ctx, text) = run_menu(config,
                           "2", "7",                    # invalid index
                           "2", "0",
                           "2", "1", "50", "0",         # adjustments on an effect image
                           "1", "3", "1", "0",          # cartoon on
                           "3",                         # apply all
                           "4",                         # reset
                           "0", "0",
                           project=loaded_project(config))
    assert "~ INVALID INDEX" in text
    assert "~ OBJECT IS NOT OF TYPE ADJUSTMENT OR EDITING" in text
    assert "~ EFFECT WAS SET SUCCESSFULLY" in text
    assert "~ CHANGES APPLIED SUCCESSFULLY" in text
    assert "~ IMAGE RESET SUCCESSFULLY" in text
    a = ctx.project.get(0)
    assert a.effect.to_cartoon
    assert not a.frame.edited

def test_display_and_delete(workdir):
    (td, config) = workdir
    (ctx, text) = run_menu(config,
                           "4", "0", "1", "3", "0",     # info, save
                           "3", "0",                    # delete
                           "0",
                           project=loaded_project(config))
    assert "Name: cat.png" in text
    assert "~ SAVED SUCCESSFULLY TO" in text
    assert exists(join(td, "fx", "cat_withEffects.png"))
    assert "~ IMAGE DELETED SUCCESSFULLY" in text
    assert len(ctx.project) == 0

def test_save_and_open_project(workdir):
    (td, config) = workdir
    path = join(td, "p.txt")
    (ctx, text) = run_menu(config, "5", path, "3", "0", "6", path, "0",
                           project=loaded_project(config))
    assert "~ PROJECT SAVED SUCCESSFULLY" in text
    assert "~ OPENED untitled WITH 1 ASSETS" in text
    assert len(ctx.project) == 1
    assert ctx.project.get(0).loaded
    (ctx, text) = run_menu(config, "6", join(td, "none.txt"), "0")
    assert "~ LOAD FAILED" in text

def test_main_help():
    with pytest.raises(SystemExit):
        main(["--help"])

class BrokenCamera:
    def isOpened(self):
        return True

    def read(self):
        raise cv2.error("no camera")

    def release(self):
        pass

def test_camera_failure_is_a_notice(workdir, monkeypatch):
    (td, config) = workdir
    monkeypatch.setattr(source, "open_camera", lambda camera, o, capture_factory: BrokenCamera())
    monkeypatch.setattr(cv2, "destroyAllWindows", lambda: None)
    (ctx, text) = run_menu(config,
                           "1", "4", "",                # create, camera, default name
                           "0", "0", "0",               # no effects
                           "0", "1", "0",               # no adjustments
                           "0",                         # not a favorite
                           "0")
    assert "~ LOAD FAILED" in text
    assert len(ctx.project) == 1
    assert not ctx.project.get(0).loaded
