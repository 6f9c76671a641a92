"""
Stage implementation, the filter stages, and a few simple stages for showing and saving.
"""

import os
import math
import time
import logging
import functools
import threading
from abc import ABC

import cv2

from . import filters
from .constants import C
from .errors import FilterFailure, WriteFailure
from .frame import Frame

logger = logging.getLogger(__name__)

DEFAULT_JPEG_TEMPLATE="{counter_div_1000:03}/frame{counter:08}.jpg"

def validate_stage(stage):
    if not hasattr(stage,'count'):
        raise RuntimeError(str(stage) + "did not call super().__init__()")


@functools.lru_cache(maxsize=128)
def caching_mkdir(path):
    os.makedirs(path, exist_ok=True)


class Stage(ABC):
    """Abstract base class for processing DAG"""

    def __init__(self):
        self.next_stages = set()
        self.sum_t   = 0
        self.sum_t2  = 0
        self.count   = 0
        self.error_counter = 0
        self.pipeline = None    # my pipeline
        self.lock = threading.Lock()

    def __repr__(self):
        return f"<{self.__class__.__name__}>"

    def process(self, f:Frame):
        """Called to process. Default behavior is to copy frame to output."""
        self.output(f)

    def _run_frame(self,f):
        """called at the start of processing of this stage.
        Processes and then passes the frame to the output stages."""
        t0 = time.time()
        self.process(f)
        t = time.time() - t0
        with self.lock:
            self.sum_t  += t
            self.sum_t2 += (t*t)
            self.count  += 1

    def output(self,f):
        """output(f) queues f for output when the current stage is done."""
        for s in self.next_stages:
            self.pipeline.queue_output_stage_frame_pair( (s,f) )

    def error(self, msg):
        """Count a failure and report it to the pipeline as a notice"""
        with self.lock:
            self.error_counter += 1
        if self.pipeline is not None:
            self.pipeline.notice(msg)

    def pipeline_shutdown(self):
        """Called when pipeline is being shut down."""

    @property
    def t_mean(self):
        return self.sum_t / self.count if self.count>0 else float("nan")

    @property
    def t2_mean(self):
        return self.sum_t2 / self.count if self.count>0 else float("nan")

    @property
    def t_variance(self):
        return max(0.0, self.t2_mean - self.t_mean * self.t_mean)

    @property
    def t_stddev(self):
        return math.sqrt(self.t_variance)


class FilterStage(Stage):
    """Applies one of the filters to each frame, in place.
    A frame that cannot be filtered is reported and passed on unchanged."""
    name = None
    category = 'EFFECT'
    func = None

    def __init__(self, param):
        super().__init__()
        self.param = param

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.param}>"

    def process(self, f:Frame):
        try:
            img = self.func(f.img, self.param)
            if img is not f.img:
                f.img = img
                f.record(self.name, self.param)
        except FilterFailure as e:
            logger.warning("%s failed on %s: %s", self.name, f.urn, e)
            self.error(f"~ APPLYING {self.category} FAILED ({self.name}): {e}")
        self.output(f)


class Contrast(FilterStage):
    name = 'contrast'
    category = 'ADJUSTMENT'
    func = staticmethod(filters.adjust_contrast)

class Brightness(FilterStage):
    name = 'brightness'
    category = 'ADJUSTMENT'
    func = staticmethod(filters.adjust_brightness)

class Hue(FilterStage):
    name = 'hue'
    category = 'ADJUSTMENT'
    func = staticmethod(filters.adjust_hue)

class Blur(FilterStage):
    name = 'blur'
    func = staticmethod(filters.blur)

class Grayscale(FilterStage):
    name = 'grayscale'
    func = staticmethod(filters.grayscale)

class Cartoon(FilterStage):
    name = 'cartoon'
    func = staticmethod(filters.cartoonize)


# The order in which apply-all runs the filters. Cartoon derives its edge
# mask from the current pixels, so it must be last.
APPLY_ORDER = ('contrast','brightness','hue','blur','grayscale','cartoon')

def filter_stages(effect=None, adjustment=None):
    """Return the stages for the given specs in APPLY_ORDER. A spec that is None contributes nothing."""
    stages = []
    if adjustment is not None:
        stages += [ Contrast(adjustment.contrast),
                    Brightness(adjustment.brightness),
                    Hue(adjustment.hue) ]
    if effect is not None:
        stages += [ Blur(effect.blur_radius),
                    Grayscale(effect.to_grayscale),
                    Cartoon(effect.to_cartoon) ]
    return stages


class ShowFrames(Stage):
    """Pipeline that shows every frame coming through, and then copy to output.
    Pressing ESC stops the showing; the frames still go to the output."""
    wait = None
    def __init__(self, wait=None, title=None):
        super().__init__()
        if wait is not None:
            self.wait=wait
        self.title = title
        self.cancelled = False

    def process(self, f:Frame):
        if not self.cancelled:
            key = f.show(title=self.title, wait=self.wait or 0)
            if key == C.ESC:
                self.cancelled = True
        self.output(f)

    def pipeline_shutdown(self):
        cv2.destroyAllWindows()


class SaveFramesToDirectory(Stage):
    def __init__(self, root, *, template=DEFAULT_JPEG_TEMPLATE, nonstop=False):
        """Save the images to the directory, record the path where written, and move on.
        Format is determined by template.
        :param nonstop: - If True, do not stop for failed writes
        """
        super().__init__()
        self.root     = root
        self.counter  = 0
        self.template = template
        self.nonstop  = nonstop

    def process(self, f:Frame):
        with self.lock:
            while True:
                path = os.path.join(self.root, self.template.format(counter_div_1000=self.counter//1000,
                                                                    counter=self.counter))
                self.counter += 1
                if not os.path.exists(path):
                    break
        f = f.copy()
        try:
            caching_mkdir( os.path.dirname( path ))
            f.save(path)        # updates f.urn
        except (WriteFailure, OSError) as e:
            if self.nonstop:
                logger.error("Could not write %s %s",path,str(e))
                self.error(f"~ WRITING IMAGE FAILED: {path}")
            else:
                raise
        # and copy the frame to the output (we are not a sink!)
        self.output(f)


def Connect(prev_:Stage, next_:Stage):
    """Make the output of stage prev_ go to next_"""
    validate_stage(prev_)
    validate_stage(next_)
    prev_.next_stages.add(next_)
