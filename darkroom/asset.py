"""
Editable assets: an image or a video, plus the parameters of the edits.

An asset may carry an EffectSpec, an AdjustmentSpec, or both. Which of the
two it carries is fixed when it is created and is what decides its kind:

    image       neither (the image can only be shown and saved)
    effect      EffectSpec only
    adjustment  AdjustmentSpec only
    edited      both
    video       both, over a FrameSequence

apply_all() runs the filters in APPLY_ORDER and never raises; what went
wrong comes back as a list of notices. reset() throws the edits away by
reading the source again.
"""

import os
import itertools
import logging
import sys

import cv2

from .config import DEFAULTS
from .constants import C
from .errors import DarkroomError, LoadFailure
from .frame import Frame
from .image_utils import img_sim, sharpness
from .params import EffectSpec, AdjustmentSpec
from .pipeline import SingleThreadedPipeline, apply_to_sequence
from .source import resolve, capture_sequence, read_video, write_video, SourceOptions
from .stage import filter_stages, ShowFrames, APPLY_ORDER

logger = logging.getLogger(__name__)

EFFECT_OPS = set(APPLY_ORDER[3:])
ADJUSTMENT_OPS = set(APPLY_ORDER[:3])

def yes_no(flag, yes, no):
    return yes if flag else no


class EditableAsset:
    """Base class for ImageAsset and VideoAsset"""
    def __init__(self, name, *, effect=None, adjustment=None, favorite=False, config=None, out=sys.stdout):
        self.name = name
        self.effect = effect
        self.adjustment = adjustment
        self.favorite = favorite
        self.config = config or DEFAULTS
        self.out = out
        self.applied = False

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.kind} {self.name}>"

    @property
    def has_effect(self):
        return self.effect is not None

    @property
    def has_adjustment(self):
        return self.adjustment is not None

    @property
    def kind(self):
        if self.has_effect and self.has_adjustment:
            return 'edited'
        if self.has_effect:
            return 'effect'
        if self.has_adjustment:
            return 'adjustment'
        return 'image'

    def set_effect(self, spec:EffectSpec):
        if not self.has_effect:
            raise ValueError(f"{self.name} does not take effects")
        self.effect = spec

    def set_adjustment(self, spec:AdjustmentSpec):
        if not self.has_adjustment:
            raise ValueError(f"{self.name} does not take adjustments")
        self.adjustment = spec

    def update_effect(self, **kwargs):
        self.set_effect(self.effect.replace(**kwargs) if self.has_effect else None)

    def update_adjustment(self, **kwargs):
        self.set_adjustment(self.adjustment.replace(**kwargs) if self.has_adjustment else None)

    def stages(self):
        return filter_stages(effect=self.effect, adjustment=self.adjustment)

    def apply_all(self):
        """Apply every enabled edit. Returns the list of notices; never raises."""
        if not self.loaded:
            return ["~ NOTHING LOADED"]
        stages = self.stages()
        if not stages:
            return ["~ NOTHING TO APPLY"]
        try:
            notices = self._run(stages)
        except DarkroomError as e:
            logger.error("apply_all %s: %s", self.name, e)
            return [e.notice]
        if self.buffer_edited:
            self.applied = True
        return notices

    def applied_ops(self):
        """Names of the operations that changed the buffer since it was loaded"""
        return {op for f in self.frames() for (op, _) in f.history[1:] if op in APPLY_ORDER}

    def parameter_lines(self):
        lines = []
        ops = self.applied_ops()
        if self.has_effect:
            e = self.effect
            lines += [yes_no(ops & EFFECT_OPS, "Has effects applied", "Doesn't have effects applied"),
                      f"Blur amount: {e.blur_radius}",
                      yes_no(e.to_grayscale, "Has Black and White effect", "Doesn't have Black and White effect"),
                      yes_no(e.to_cartoon, "Has Cartoon effect", "Doesn't have Cartoon effect")]
        if self.has_adjustment:
            a = self.adjustment
            lines += [yes_no(ops & ADJUSTMENT_OPS, "Has adjustments applied", "Doesn't have adjustments applied"),
                      f"Brightness value: {a.brightness}",
                      f"Contrast value: {a.contrast}",
                      f"Hue value: {a.hue}"]
        return lines

    # subclasses provide these
    loaded = False
    buffer_edited = False

    def frames(self):
        return []

    def _run(self, stages):
        raise NotImplementedError()


class ImageAsset(EditableAsset):
    """An image read from the images directory or from an absolute path"""
    def __init__(self, name=C.DEFAULT_IMAGE, *, path=None, absolute=False, **kwargs):
        super().__init__(name, **kwargs)
        self.path = path if path is not None else self.config['images_dir']
        self.absolute = absolute
        self.frame = Frame()
        self.source = None
        self.original = None

    @property
    def location(self):
        return self.path if self.absolute else os.path.join(self.path, self.name)

    @property
    def loaded(self):
        return not self.frame.empty

    @property
    def buffer_edited(self):
        return self.frame.edited

    def frames(self):
        return [] if self.frame.empty else [self.frame]

    def load(self):
        """Read the image. On failure the frame is left empty and LoadFailure is raised."""
        self.frame = Frame()
        self.original = None
        urn = resolve(self.name, self.path, self.absolute)
        self.frame = Frame.read(urn)
        self.source = urn
        self.original = self.frame.img.copy()
        self.original.flags.writeable = False
        self.applied = False
        logger.info("loaded %s %s", urn, self.frame.shape)
        return self

    def reset(self):
        """Read the source again, discarding the edits"""
        if self.source is None:
            return self.load()
        frame = Frame.read(self.source)
        self.frame = frame
        self.original = frame.img.copy()
        self.original.flags.writeable = False
        self.applied = False
        return self

    def _run(self, stages):
        with SingleThreadedPipeline(out=self.out) as p:
            p.addLinearPipeline(stages)
            p.process(self.frame)
        return p.notices

    def output_urn(self):
        """Where save() writes. Edited images go to a directory for their kind."""
        (stem, ext) = os.path.splitext(os.path.basename(self.name))
        ext = ext or '.jpg'
        kind = self.kind
        if kind == 'effect':
            return os.path.join(self.config['effects_dir'], f"{stem}_withEffects{ext}")
        if kind == 'adjustment':
            return os.path.join(self.config['adjustments_dir'], f"{stem}_withAdjustments{ext}")
        if kind == 'edited':
            return os.path.join(self.config['edited_dir'], f"{stem}_Edited{ext}")
        return self.location

    def save(self):
        """Write the image. Raises WriteFailure."""
        urn = self.output_urn()
        self.frame.copy().save(urn)
        logger.info("saved %s", urn)
        return urn

    def show(self):
        self.frame.display_height = self.config['display_height']
        self.frame.show(title=self.name, wait=0)
        cv2.destroyAllWindows()

    def info(self):
        lines = [f"Name: {self.name}",
                 f"Path to image: {self.location}"]
        lines += self.parameter_lines()
        if self.loaded:
            lines.append(f"Size: {self.frame.width}x{self.frame.height} channels: {self.frame.channels}")
            lines.append(f"Similarity to source: {img_sim(self.original, self.frame.img):.3f}")
            lines.append(f"Sharpness: {sharpness(self.frame.img):.1f}")
        else:
            lines.append("Not loaded")
        lines.append(yes_no(self.favorite, "Is a favorite image", "Is not a favorite image"))
        return "\n".join(lines)


class VideoAsset(EditableAsset):
    """A video recorded from a camera or read from a file.
    A video takes both effects and adjustments."""
    ids = itertools.count()

    def __init__(self, name=None, *, source=None, fps=0.0, workers=None, effect=None, adjustment=None,
                 options=None, capture_factory=cv2.VideoCapture, progress=True, **kwargs):
        self.id = next(self.ids)
        if not name:
            name = f"video{self.id}.mp4"
        super().__init__(name,
                         effect = effect if effect is not None else EffectSpec(),
                         adjustment = adjustment if adjustment is not None else AdjustmentSpec(),
                         **kwargs)
        self.source = source if source is not None else self.config['camera']
        self.fps = fps
        self.workers = workers if workers is not None else self.config['workers']
        self.options = options or SourceOptions()
        self.capture_factory = capture_factory
        self.progress = progress
        self.sequence = None
        self._pristine = None

    @property
    def kind(self):
        return 'video'

    @property
    def from_camera(self):
        return isinstance(self.source, int)

    @property
    def loaded(self):
        return self.sequence is not None and len(self.sequence)>0

    @property
    def buffer_edited(self):
        return self.loaded and self.sequence.edited

    def frames(self):
        return list(self.sequence) if self.loaded else []

    def load(self):
        """Record from the camera, or read the file. Raises LoadFailure."""
        self.sequence = None
        self._pristine = None
        if self.from_camera:
            self.options.counter = 0
            (seq, fps) = capture_sequence(self.source, self.options, self.capture_factory)
            if len(seq)==0:
                raise LoadFailure(f"camera {self.source} produced no frames")
            self._pristine = seq.copy()
        else:
            (seq, fps) = read_video(self.source, self.options)
        self.sequence = seq
        self.fps = fps
        self.applied = False
        return self

    def reset(self):
        """Discard the edits. A file is read again; a recording returns to the frames as captured."""
        if self.from_camera:
            if self._pristine is None:
                raise LoadFailure("nothing was recorded")
            self.sequence = self._pristine.copy()
        else:
            (seq, fps) = read_video(self.source, self.options)
            self.sequence = seq
            self.fps = fps
        self.applied = False
        return self

    def _run(self, stages):
        p = apply_to_sequence(self.sequence, stages, workers=self.workers, progress=self.progress, out=self.out)
        return p.notices

    def output_urn(self):
        return os.path.join(self.config['videos_dir'], self.name)

    def save(self):
        urn = self.output_urn()
        write_video(urn, self.sequence if self.sequence is not None else [], self.fps)
        return urn

    def show(self):
        self.play()

    def play(self):
        """Show the frames at the recorded frame rate. ESC stops."""
        if not self.loaded:
            raise LoadFailure("nothing to play")
        wait = max(1, int(1000.0/self.fps)) if self.fps > 0 else C.DEFAULT_WAIT_MS
        with SingleThreadedPipeline(out=self.out) as p:
            p.addLinearPipeline([ShowFrames(wait=wait, title="Video")])
            p.process_list(self.sequence)

    def info(self):
        lines = [f"Name: {self.name}",
                 f"Source: {yes_no(self.from_camera, 'camera ', '')}{self.source}",
                 f"Frames: {len(self.sequence) if self.loaded else 0}",
                 f"Frame rate: {self.fps:.2f}"]
        lines += self.parameter_lines()
        lines.append(yes_no(self.favorite, "Is a favorite video", "Is not a favorite video"))
        return "\n".join(lines)
