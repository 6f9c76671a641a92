"""
A project is an ordered list of assets.

Projects are kept in flat text files. Saving appends a snapshot and never
rewrites what is already there; opening reads the last snapshot:

    @project holiday 2 2024-04-01T10:54:04
    kind=effect name=cat.png path=../Images/ absolute=0 favorite=1 blur_radius=5 to_grayscale=0 to_cartoon=1
    kind=video name=video0.mp4 source=0 fps=14.8 favorite=0 blur_radius=0 ...

Tokens are whitespace-delimited key=value pairs, quoted as a shell would
quote them. Only the parameters are stored, not the pixels; assets are
loaded when they are needed.
"""

import os
import shlex
import logging
from datetime import datetime

from filelock import FileLock

from .asset import ImageAsset, VideoAsset
from .errors import LoadFailure, NotFound, WriteFailure
from .params import EffectSpec, AdjustmentSpec

logger = logging.getLogger(__name__)

SNAPSHOT_TAG = '@project'
KINDS = ('image','effect','adjustment','edited','video')

FIELD_TYPES = {
    'absolute': bool,
    'favorite': bool,
    'blur_radius': int,
    'to_grayscale': bool,
    'to_cartoon': bool,
    'brightness': float,
    'contrast': float,
    'hue': int,
    'fps': float,
}

def _format(v):
    if isinstance(v, bool):
        return '1' if v else '0'
    return str(v)

def _parse(k, v):
    t = FIELD_TYPES.get(k)
    if t is bool:
        return v not in ('0','','False','false')
    if t is not None:
        return t(v)
    return v


def serialize(asset):
    """Return the one-line text form of asset"""
    fields = {'kind':asset.kind, 'name':asset.name}
    if isinstance(asset, VideoAsset):
        fields['source'] = asset.source
        fields['fps'] = asset.fps
    else:
        fields['path'] = asset.path
        fields['absolute'] = asset.absolute
    fields['favorite'] = asset.favorite
    if asset.has_effect:
        fields.update(asset.effect.fields())
    if asset.has_adjustment:
        fields.update(asset.adjustment.fields())
    return " ".join(f"{k}={shlex.quote(_format(v))}" for (k,v) in fields.items())


def deserialize(line, config=None):
    """Return a new, unloaded asset from its one-line text form"""
    try:
        fields = dict(token.split('=',1) for token in shlex.split(line))
        fields = {k:_parse(k,v) for (k,v) in fields.items()}
    except ValueError as e:
        raise LoadFailure(f"malformed asset line: {line!r}") from e
    kind = fields.pop('kind', None)
    if kind not in KINDS:
        raise LoadFailure(f"unknown asset kind {kind!r}")
    if not fields.get('name'):
        raise LoadFailure(f"asset has no name: {line!r}")
    effect = EffectSpec(**{k:fields[k] for k in EffectSpec.DEFAULTS if k in fields})
    adjustment = AdjustmentSpec(**{k:fields[k] for k in AdjustmentSpec.DEFAULTS if k in fields})
    if kind == 'video':
        source = fields.get('source', '0')
        if source.isdigit():
            source = int(source)
        return VideoAsset(fields.get('name'), source=source, fps=fields.get('fps', 0.0),
                          effect=effect, adjustment=adjustment,
                          favorite=fields.get('favorite', False), config=config)
    return ImageAsset(fields.get('name'), path=fields.get('path'), absolute=fields.get('absolute', False),
                      effect = effect if kind in ('effect','edited') else None,
                      adjustment = adjustment if kind in ('adjustment','edited') else None,
                      favorite=fields.get('favorite', False), config=config)


class Project:
    def __init__(self, name="untitled"):
        self.name = name
        self.assets = []

    def __len__(self):
        return len(self.assets)

    def __iter__(self):
        return iter(self.assets)

    def __repr__(self):
        return f"<Project {self.name} {len(self)} assets>"

    def create(self, asset):
        self.assets.append(asset)
        return len(self.assets)-1

    def verify_index(self, index):
        return 0 <= index < len(self.assets)

    def get(self, index):
        if not self.verify_index(index):
            raise IndexError(index)
        return self.assets[index]

    def delete(self, index):
        if not self.verify_index(index):
            raise IndexError(index)
        return self.assets.pop(index)

    def save(self, path):
        """Append a snapshot of the project to path"""
        lines = [f"{SNAPSHOT_TAG} {shlex.quote(self.name)} {len(self)} {datetime.now().isoformat(timespec='seconds')}"]
        lines += [serialize(a) for a in self.assets]
        try:
            with FileLock(path + ".lock"):
                with open(path, "a") as f:
                    f.write("\n".join(lines) + "\n")
        except OSError as e:
            raise WriteFailure(f"{path}: {e}") from e
        logger.info("saved %s to %s", self, path)

    @classmethod
    def open(cls, path, config=None):
        """Return the project in the last snapshot of path"""
        if not os.path.exists(path):
            raise NotFound(path)
        try:
            with FileLock(path + ".lock"):
                with open(path) as f:
                    lines = [line.rstrip("\n") for line in f]
        except OSError as e:
            raise LoadFailure(f"{path}: {e}") from e
        starts = [i for (i,line) in enumerate(lines) if line.startswith(SNAPSHOT_TAG+" ")]
        if not starts:
            raise LoadFailure(f"{path}: no project snapshot")
        header = shlex.split(lines[starts[-1]])
        try:
            (name, count) = (header[1], int(header[2]))
        except (IndexError, ValueError) as e:
            raise LoadFailure(f"{path}: malformed snapshot header") from e
        body = lines[starts[-1]+1 : starts[-1]+1+count]
        if len(body) != count:
            raise LoadFailure(f"{path}: snapshot is truncated")
        project = cls(name)
        for line in body:
            project.create(deserialize(line, config))
        logger.info("opened %s from %s", project, path)
        return project
