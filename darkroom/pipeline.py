"""
Pipeline

A pipeline holds a linear list of stages and moves frames through them.
SingleThreadedPipeline does the work in the caller's thread.
ThreadPoolPipeline gives each frame to a worker thread; OpenCV releases the
GIL while it filters, so the frames of a video are processed in parallel.

Frames are independent and each is mutated only by the worker that owns it,
so the result for each frame is the same whatever the order or the number
of workers.
"""

import sys
import collections
import threading
import logging
from abc import ABC,abstractmethod
from concurrent.futures import ThreadPoolExecutor

from .errors import LoadFailure, FilterFailure
from .progress import ProgressBar
from .stage import Connect, validate_stage

logger = logging.getLogger(__name__)

class Pipeline(ABC):
    """Base pipeline class"""
    def __init__(self, verbose=False, debug=False, out=sys.stdout):
        self._local = threading.local()
        self.head = None
        self.stages = []
        self.count  = 0
        self.running = False
        self.verbose = verbose
        self.debug   = debug
        self.out     = out
        self.notices = []
        self.failures = 0
        self.lock = threading.Lock()
        if debug:
            logger.setLevel(logging.DEBUG)
        elif verbose:
            logger.setLevel(logging.INFO)

    @property
    def queued_output_stage_frame_pairs(self):
        """Each thread has its own queue, so frames in different workers never mix."""
        if not hasattr(self._local, 'queue'):
            self._local.queue = collections.deque()
        return self._local.queue

    def queue_output_stage_frame_pair(self, pair):
        self.queued_output_stage_frame_pairs.append(pair)

    def notice(self, msg):
        """Record a non-fatal problem for the user"""
        with self.lock:
            self.notices.append(msg)

    def addLinearPipeline(self, stages:list):
        [validate_stage(stage) for stage in stages]
        if not stages:
            return
        self.head = stages[0]
        self.stages.extend(stages)   # collect all stages for printing stats
        for stage in stages:
            stage.pipeline = self
        for i in range(len(stages)-1):
            Connect( stages[i], stages[i+1] )

    def process(self, f):
        """Run a frame through the pipeline."""
        if not self.running:
            raise RuntimeError("pipeline not running")
        with self.lock:
            self.count += 1
        logger.debug("== process %s",f)
        if self.head is None:
            return
        self.queue_output_stage_frame_pair( (self.head, f))
        self.run_queue()

    def run_queue(self):
        while True:
            try:
                (s,f) = self.queued_output_stage_frame_pairs.popleft()
            except IndexError:
                break
            logger.debug("<%s> processing %s",s.__class__.__name__,f)
            try:
                s._run_frame(f)
            except (LoadFailure, FilterFailure) as e:
                logger.error("frame %s: %s", f.urn, e)
                with self.lock:
                    self.failures += 1
                self.notice(e.notice)
                self.queued_output_stage_frame_pairs.clear()

    @abstractmethod
    def process_list(self, flist, progress=None):
        """Run every frame in flist through the pipeline"""

    def print_stats(self, out=None):
        out = out or self.out
        for stage in self.stages:
            name = stage.__class__.__name__
            print(f"{name}: calls: {stage.count}  mean: {stage.t_mean:.2}s  stddev: {stage.t_stddev:.2}",
                  file=out)

    def __enter__(self):
        self.running = True
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        for stage in self.stages:
            stage.pipeline_shutdown()
        if self.verbose:
            self.print_stats()
        self.running = False
        return False


class SingleThreadedPipeline(Pipeline):
    """Runs the pipeline in the caller's thread."""

    def process_list(self, flist, progress=None):
        logger.info("== process_list ==")
        for f in flist:
            self.process(f)
            if progress is not None:
                progress.tick()


class ThreadPoolPipeline(Pipeline):
    """Runs each frame in a worker from a pool of threads."""
    def __init__(self, workers=4, **kwargs):
        super().__init__(**kwargs)
        self.workers = max(1, int(workers))

    def _process_one(self, f, progress):
        self.process(f)
        if progress is not None:
            progress.tick()

    def process_list(self, flist, progress=None):
        logger.info("== process_list workers=%s ==", self.workers)
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(self._process_one, f, progress) for f in flist]
            for future in futures:
                future.result()


def apply_to_sequence(sequence, stages, *, workers=1, progress=True, out=sys.stdout, verbose=False):
    """Apply the stages to every frame of sequence, in place.
    Returns the pipeline, which holds the notices and per-stage statistics.
    :param workers: - number of threads. 1 runs in the caller's thread.
    :param progress: - if True, draw a progress bar on out.
    """
    if len(sequence)==0:
        raise FilterFailure("sequence is empty")
    if workers > 1:
        p = ThreadPoolPipeline(workers=workers, out=out, verbose=verbose)
    else:
        p = SingleThreadedPipeline(out=out, verbose=verbose)
    bar = ProgressBar(len(sequence), out=out) if progress else None
    with p:
        p.addLinearPipeline(stages)
        if bar:
            bar.start()
        p.process_list(sequence, progress=bar)
        if bar:
            bar.finish()
    return p
