"""
Parameter records for effects and adjustments.

The records hold whatever they are given. Range checks happen when the
filters run: a value outside its range disables that one field and leaves
the others alone.
"""

import math
import numbers

from .constants import C

# pylint: disable=too-few-public-methods
class _Params:
    __slots__ = ()
    DEFAULTS = {}

    def __init__(self, **kwargs):
        for (k,v) in self.DEFAULTS.items():
            setattr(self, k, v)
        for (k,v) in kwargs.items():
            if k not in self.DEFAULTS:
                raise TypeError(f"{self.__class__.__name__} has no field {k}")
            setattr(self, k, v)

    def __eq__(self, b):
        return type(self)==type(b) and self.fields()==b.fields()

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.fields()}>"

    def fields(self):
        return {k:getattr(self,k) for k in self.DEFAULTS}

    def replace(self, **kwargs):
        """Return a copy with some fields changed"""
        return self.__class__(**{**self.fields(), **kwargs})


class EffectSpec(_Params):
    """blur_radius: non-negative odd integer, 0 disables. Even radii are rounded up."""
    __slots__ = ('blur_radius','to_grayscale','to_cartoon')
    DEFAULTS = {'blur_radius':0, 'to_grayscale':False, 'to_cartoon':False}

    @property
    def effective_blur_radius(self):
        return effective_blur_radius(self.blur_radius)


class AdjustmentSpec(_Params):
    """brightness in [-100,100] (0 disables), contrast in [0,10] (1 disables), hue in [0,180] (0 disables)"""
    __slots__ = ('brightness','contrast','hue')
    DEFAULTS = {'brightness':0.0, 'contrast':1.0, 'hue':0}

    @property
    def brightness_enabled(self):
        return brightness_enabled(self.brightness)

    @property
    def contrast_enabled(self):
        return contrast_enabled(self.contrast)

    @property
    def hue_enabled(self):
        return hue_enabled(self.hue)


def is_number(value):
    """True for a finite real number. Anything else disables its field."""
    return isinstance(value, numbers.Real) and math.isfinite(value)

def effective_blur_radius(radius):
    """GaussianBlur needs an odd kernel, so even radii become radius+1"""
    if not is_number(radius) or radius <= 0:
        return 0
    radius = int(radius)
    if radius == 0:
        return 0
    return radius+1 if radius % 2 == 0 else radius

def brightness_enabled(delta):
    return is_number(delta) and delta != 0 and C.BRIGHTNESS_MIN <= delta <= C.BRIGHTNESS_MAX

def contrast_enabled(factor):
    return is_number(factor) and factor != 1 and C.CONTRAST_MIN <= factor <= C.CONTRAST_MAX

def hue_enabled(shift):
    return is_number(shift) and shift != 0 and C.HUE_MIN <= shift <= C.HUE_MAX
