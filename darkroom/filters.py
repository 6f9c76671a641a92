"""
The transformations. Each takes an OpenCV image (a numpy array with 1 or 3
channels) and its parameter, and returns the transformed image. When there
is nothing to do the same object is returned, so callers can tell a no-op
by identity.

Failures are raised as FilterFailure. They are caught by the stages, not here.
"""

import functools
import logging

import cv2
import numpy as np

from .constants import C
from .errors import FilterFailure
from .params import effective_blur_radius, brightness_enabled, contrast_enabled, hue_enabled

logger = logging.getLogger(__name__)

def filter_op(func):
    """Refuse empty images and turn OpenCV and argument errors into FilterFailure"""
    @functools.wraps(func)
    def wrapper(img, *args, **kwargs):
        if img is None or img.size==0:
            raise FilterFailure(f"{func.__name__}: image is empty")
        try:
            return func(img, *args, **kwargs)
        except (cv2.error, TypeError, ValueError) as e:  # pylint: disable=catching-non-exception
            raise FilterFailure(f"{func.__name__}: {e}") from e
    return wrapper

def is_gray(img):
    return img.ndim==2 or img.shape[2]==1

def _scale(img, alpha, beta):
    """alpha*img + beta, rounded and clamped to the sample range (no wraparound)"""
    out = img.astype(np.float32) * alpha + beta
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


@filter_op
def blur(img, radius):
    """Gaussian blur with a radius x radius kernel; sigma is computed from the kernel size."""
    k = effective_blur_radius(radius)
    if k == 0:
        return img
    return cv2.GaussianBlur(img, (k, k), 0)

@filter_op
def grayscale(img, enabled=True):
    """Convert BGR to a single luminance channel"""
    if not enabled or is_gray(img):
        return img
    return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)

@filter_op
def cartoonize(img, enabled=True):
    """Flatten the colors with a bilateral filter and keep the result only where
    the adaptive threshold of the gray image finds no edge. Edge pixels keep
    their original values."""
    if not enabled:
        return img
    if is_gray(img):
        gray = img.copy()
    else:
        gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)

    # remove noise so that the outline mask is cleaner
    gray = cv2.medianBlur(gray, C.CARTOON_MEDIAN_KERNEL)
    mask = cv2.adaptiveThreshold(gray, 255, cv2.ADAPTIVE_THRESH_MEAN_C, cv2.THRESH_BINARY,
                                 C.CARTOON_BLOCK_SIZE, C.CARTOON_THRESHOLD_C)

    smooth = cv2.bilateralFilter(img, C.CARTOON_BILATERAL_D, C.CARTOON_SIGMA_COLOR, C.CARTOON_SIGMA_SPACE)

    # smooth & smooth under the mask, written over a copy of the original
    out = img.copy()
    keep = mask != 0
    out[keep] = smooth[keep]
    return out

@filter_op
def adjust_brightness(img, delta):
    """Add delta to every sample"""
    if not brightness_enabled(delta):
        return img
    return _scale(img, 1.0, delta)

@filter_op
def adjust_contrast(img, factor):
    """Multiply every sample by factor"""
    if not contrast_enabled(factor):
        return img
    return _scale(img, factor, 0)

@filter_op
def adjust_hue(img, shift):
    """Rotate the hue. OpenCV's 8-bit hue runs from 0 to 179, so the rotation is modulo 180."""
    if not hue_enabled(shift):
        return img
    if is_gray(img):
        raise FilterFailure("adjust_hue: image has no color")
    hsv = cv2.cvtColor(img, cv2.COLOR_BGR2HSV)
    hue = (hsv[:,:,0].astype(np.int32) + int(shift)) % C.HUE_MODULUS
    hsv[:,:,0] = hue.astype(np.uint8)
    return cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)
