import sys
from os.path import dirname, abspath

import pytest

sys.path.append( dirname(dirname(dirname(abspath(__file__)))))

from darkroom.params import EffectSpec, AdjustmentSpec, effective_blur_radius

def test_effect_spec():
    e = EffectSpec()
    assert e.fields() == {'blur_radius':0, 'to_grayscale':False, 'to_cartoon':False}
    e2 = e.replace(blur_radius=4)
    assert e2.blur_radius == 4
    assert e.blur_radius == 0
    assert e2.effective_blur_radius == 5
    assert e2 != e
    assert e2 == EffectSpec(blur_radius=4)
    with pytest.raises(TypeError):
        EffectSpec(radius=3)

def test_effective_blur_radius():
    assert effective_blur_radius(0) == 0
    assert effective_blur_radius(-2) == 0
    assert effective_blur_radius(1) == 1
    assert effective_blur_radius(4) == 5
    assert effective_blur_radius(7) == 7

def test_adjustment_spec():
    a = AdjustmentSpec()
    assert not (a.brightness_enabled or a.contrast_enabled or a.hue_enabled)
    a = AdjustmentSpec(brightness=150, contrast=2, hue=200)
    assert not a.brightness_enabled
    assert a.contrast_enabled
    assert not a.hue_enabled
    a = AdjustmentSpec(brightness=-100, contrast=0, hue=180)
    assert a.brightness_enabled and a.contrast_enabled and a.hue_enabled
    assert not AdjustmentSpec(contrast=10.5).contrast_enabled

def test_invalid_values_are_disabled():
    for bad in [float('nan'), float('-inf'), None, "3"]:
        assert effective_blur_radius(bad) == 0
        a = AdjustmentSpec(brightness=bad, contrast=bad, hue=bad)
        assert not (a.brightness_enabled or a.contrast_enabled or a.hue_enabled)
