"""
This module provides the following functions:

resolve(name, path, absolute) - Find the file for an image or video
CameraFrameStream(camera) - A generator of frames from a camera
capture_sequence(camera) - Record a FrameSequence from a camera and estimate its frame rate
VideoFrameStream(path) - A generator of frames from a video file
read_video(path) - Read a video file into a FrameSequence
write_video(path, sequence, fps) - Write a FrameSequence as a video file

Details:
https://docs.opencv.org/4.x/dd/d43/tutorial_py_video_display.html

Cameras do not report a useful frame rate to OpenCV, so capture_sequence
measures it: the number of frames divided by the time from the first frame
received to the end of the capture. The time the camera takes to warm up
before the first frame is not counted.

OpenCV errors while opening, reading or showing a source are raised as
LoadFailure.
"""

import os
import time
import logging

import cv2

from .constants import C
from .errors import LoadFailure, NotFound, WriteFailure
from .frame import Frame, FrameSequence
from .storage import local_path, mkdirs

logger = logging.getLogger(__name__)


def resolve(name, path=C.IMAGES_DIR, absolute=False):
    """Return the location of an asset.
    :param name: - the file name
    :param path: - the directory holding name, or with absolute=True the full location
    """
    urn = path if absolute else os.path.join(path, name)
    try:
        urn = local_path(urn)
    except ValueError as e:
        raise NotFound(str(e)) from e
    if not os.path.isfile(urn):
        raise NotFound(urn)
    return urn


class SourceOptions:
    __slots__=('limit','frameWidth','frameHeight','counter','show')
    def __init__(self,**kwargs):
        self.limit = None
        self.frameWidth = None
        self.frameHeight = None
        self.counter = 0
        self.show = True        # show the feed while capturing; ESC stops
        for (k,v) in kwargs.items():
            setattr(self,k,v)

    def atlimit(self):
        """Increment counter and return True if we are at the limit."""
        self.counter += 1
        if self.limit is None:
            return False
        elif self.counter >= self.limit:
            return True
        return False


def estimate_fps(count, elapsed):
    """frames per second, or 0 if no time has passed"""
    if elapsed <= 0:
        return 0.0
    return count / elapsed


def open_camera(camera=0, o:SourceOptions=None, capture_factory=cv2.VideoCapture):
    # https://docs.opencv.org/3.4/dd/d01/group__videoio__c.html
    o = o or SourceOptions()
    try:
        cap = capture_factory(camera)
        opened = cap.isOpened()
    except cv2.error as e:  # pylint: disable=catching-non-exception
        raise LoadFailure(f"Failed to open camera {camera}: {e}") from e
    if not opened:
        raise LoadFailure(f"Failed to open camera {camera}")
    if o.frameWidth is not None:
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, o.frameWidth)
    if o.frameHeight is not None:
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, o.frameHeight)
    return cap


def open_video(path):
    try:
        cap = cv2.VideoCapture(path)
        opened = cap.isOpened()
    except cv2.error as e:  # pylint: disable=catching-non-exception
        raise LoadFailure(f"cannot open video {path}: {e}") from e
    if not opened:
        raise LoadFailure(f"cannot open video {path}")
    return cap


def close_windows():
    try:
        cv2.destroyAllWindows()
    except cv2.error as e:  # pylint: disable=catching-non-exception
        logger.debug("destroyAllWindows: %s", e)


def CameraFrameStream(camera=0, o:SourceOptions=None, capture_factory=cv2.VideoCapture):
    """Generator of frames from the camera until it stops, ESC is pressed, or the limit is reached.
    OpenCV failures while reading or showing the feed are raised as LoadFailure."""
    o = o or SourceOptions()
    cap = open_camera(camera, o, capture_factory)
    try:
        while True:
            key = None
            try:
                ret, img = cap.read()
                if ret and o.show:
                    cv2.imshow("Camera feed", img)
                    key = cv2.waitKey(1)
            except cv2.error as e:  # pylint: disable=catching-non-exception
                raise LoadFailure(f"camera {camera}: {e}") from e
            if not ret or key == C.ESC:
                break
            yield Frame(img=img.copy(), urn=None, history=[['camera',camera]])
            if o.atlimit():
                return
    finally:
        cap.release()
        if o.show:
            close_windows()


def capture_sequence(camera=0, o:SourceOptions=None, capture_factory=cv2.VideoCapture, clock=time.monotonic):
    """Record from the camera. Returns (FrameSequence, fps)"""
    seq = FrameSequence()
    first = None
    for f in CameraFrameStream(camera, o, capture_factory):
        if first is None:
            first = clock()
        seq.add(f)
    if first is None:
        logger.warning("camera %s produced no frames", camera)
        return (seq, 0.0)
    fps = estimate_fps(len(seq), clock() - first)
    logger.info("captured %s frames at %.2f fps", len(seq), fps)
    return (seq, fps)


def VideoFrameStream(path, o:SourceOptions=None):
    """Generator of frames from a video file"""
    o = o or SourceOptions()
    cap = open_video(path)
    try:
        ct = 0
        while True:
            try:
                ret, img = cap.read()
            except cv2.error as e:  # pylint: disable=catching-non-exception
                raise LoadFailure(f"{path} frame {ct}: {e}") from e
            if not ret:
                break
            yield Frame(img=img, urn=None, history=[['video',path],['frame',ct]])
            if o.atlimit():
                return
            ct += 1
    finally:
        cap.release()


def read_video(path, o:SourceOptions=None):
    """Returns (FrameSequence, fps) for a video file"""
    if not os.path.isfile(path):
        raise NotFound(path)
    cap = open_video(path)
    fps = cap.get(cv2.CAP_PROP_FPS)
    cap.release()
    seq = FrameSequence()
    for f in VideoFrameStream(path, o):
        seq.add(f)
    if len(seq)==0:
        raise LoadFailure(f"no frames in {path}")
    return (seq, fps)


def write_video(path, sequence, fps):
    """Write the frames with the mp4v codec. Gray frames are written as color."""
    if len(sequence)==0:
        raise WriteFailure("no frames to write")
    if fps <= 0:
        raise WriteFailure(f"bad frame rate {fps}")
    path = local_path(path)
    if os.path.dirname(path):
        mkdirs(os.path.dirname(path))
    (h, w) = sequence.shape[:2]
    writer = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*C.VIDEO_FOURCC), fps, (w, h), True)
    if not writer.isOpened():
        raise WriteFailure(f"Failed to open the video writer for {path}")
    try:
        for f in sequence:
            img = f.img
            if img.ndim==2:
                img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
            writer.write(img)
    finally:
        writer.release()
    logger.info("wrote %s frames to %s", len(sequence), path)
