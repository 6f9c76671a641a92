"""This module provides the following classes:

Frame - Holds an individual image and the logic for working on it with OpenCV.
FrameSequence - An ordered list of frames (a video).

Frames are mutated in place by the filter stages. Each mutation is recorded
in the frame's history, which starts with the urn the frame was read from.
"""
import os
import copy
import logging

import cv2
import numpy as np
import imutils

from .constants import C
from .errors import LoadFailure, FilterFailure, WriteFailure
from .storage import darkroom_load, darkroom_save

logger = logging.getLogger(__name__)

P_URN = 'urn'

def image_read(urn):
    """Read and decode an image. Color images are BGR with 3 channels; gray images stay gray."""
    assert urn is not None
    img = cv2.imdecode(np.frombuffer( darkroom_load(urn), np.uint8), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise LoadFailure("cannot decode: "+str(urn))
    if img.ndim==3 and img.shape[2]==4:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2BGR)
    if img.dtype == np.uint16:
        img = cv2.convertScaleAbs(img, alpha=255.0/65535)
    elif img.dtype != np.uint8:
        raise LoadFailure(f"unsupported sample type {img.dtype}: {urn}")
    return img

def channels_of(img):
    """Number of channels in an OpenCV image"""
    return 1 if img.ndim==2 else img.shape[2]


class Frame:
    """Abstraction to hold an image frame.
    A frame with no image is empty; filters refuse to work on it."""
    jpeg_quality = C.DEFAULT_JPEG_QUALITY
    display_height = C.DISPLAY_HEIGHT

    def __init__(self, *, img=None, urn=None, history=None):
        self.urn  = urn       # if read or written to a file, the urn to which it was read or written
        if history is not None:
            self.history = history
        else:
            self.history  = [[P_URN,urn]]          # new history
        self.edited = False
        self._img = None
        if img is not None:
            self.img = img

    def __eq__(self, b):
        if not isinstance(b, Frame):
            return NotImplemented
        if self.empty or b.empty:
            return self.empty and b.empty
        return self.shape==b.shape and np.array_equal(self._img, b._img)

    __hash__ = None

    def __repr__(self):
        return f"<Frame urn={self.urn} shape={None if self.empty else self.shape} history={self.history}>"

    @classmethod
    def read(cls, urn):
        """Return a new frame populated from urn"""
        return cls(img=image_read(urn), urn=urn)

    def reload(self):
        """Replace the image with a fresh read from the urn. The history restarts."""
        if self.urn is None:
            raise LoadFailure("frame has no urn to reload from")
        self.img = image_read(self.urn)
        self.history = [[P_URN,self.urn]]
        self.edited = False

    @property
    def img(self):
        """return the opencv image object (None when empty)"""
        return self._img

    @img.setter
    def img(self, img):
        if img is None:
            self._img = None
            return
        if img.ndim not in (2,3) or channels_of(img) not in (1,3):
            raise FilterFailure(f"images must have 1 or 3 channels, not shape {img.shape}")
        if img.ndim==3 and img.shape[2]==1:
            img = img[:,:,0]
        self._img = img

    @property
    def empty(self):
        return self._img is None or self._img.size==0

    @property
    def shape(self):
        """Returns shape. note: shape[0] = height, shape[1]=width, shape[2]==depth if color"""
        return tuple(self._img.shape)

    @property
    def width(self):
        return 0 if self.empty else self._img.shape[1]

    @property
    def height(self):
        return 0 if self.empty else self._img.shape[0]

    @property
    def channels(self):
        return 0 if self.empty else channels_of(self._img)

    def record(self, operation, params):
        """Note in the history that operation was applied."""
        self.history.append([operation, params])
        self.edited = True

    def copy(self):
        """Returns a copy that shares the image array. Replacing the image of one does not change the other."""
        c = copy.copy(self)
        c.history = copy.copy(self.history)
        return c

    def writable_copy(self):
        """Returns a copy with its own image array"""
        c = self.copy()
        if not self.empty:
            c._img = self._img.copy()
        return c

    def encode(self, ext='.jpg'):
        """Returns the image compressed in the format given by ext"""
        if self.empty:
            raise WriteFailure("frame is empty")
        params = [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality] if ext.lower() in ('.jpg','.jpeg') else []
        try:
            ok, buf = cv2.imencode(ext, self._img, params)
        except cv2.error as e:  # pylint: disable=catching-non-exception
            raise WriteFailure(f"cannot encode as {ext}: {e}") from e
        if not ok:
            raise WriteFailure(f"cannot encode as {ext}")
        return buf.tobytes()

    def save(self, urn):
        """Write the image to a file. The format comes from the extension."""
        logger.debug("save urn=%s self=%s",urn,self)
        ext = os.path.splitext(urn)[1] or '.jpg'
        darkroom_save(urn, self.encode(ext))
        self.history.append([P_URN,urn])
        self.urn = urn

    def show(self, i=None, title=None, wait=0):
        """show the frame, optionally waiting for keyboard. Returns the key pressed."""
        if title is None:
            title = self.urn
        if title is None:
            title = ""
        if i is None:
            i = self._img
        if i is None or i.size==0:
            raise LoadFailure("nothing to show")
        if i.shape[0] > self.display_height:
            i = imutils.resize(i, height=self.display_height)
        cv2.namedWindow(title, cv2.WINDOW_NORMAL)
        cv2.imshow(title, i)
        return cv2.waitKey(wait)


class FrameSequence(list):
    """Array of frames in temporal order. All frames have the same number of channels."""

    def add(self, f:Frame):
        if f.empty:
            raise FilterFailure("cannot add an empty frame to a sequence")
        if len(self) and f.channels != self.channels:
            raise FilterFailure(f"frame has {f.channels} channels; sequence has {self.channels}")
        self.append(f)

    @property
    def channels(self):
        return self[0].channels if len(self) else 0

    @property
    def shape(self):
        return self[0].shape if len(self) else None

    @property
    def edited(self):
        return any(f.edited for f in self)

    def copy(self):
        """A copy in which every frame has its own image"""
        return FrameSequence([f.writable_copy() for f in self])

    def images(self):
        return [f.img for f in self]
