"""
Storage layer for darkroom.
Handles all get and put operations in a single place, so that the rest of the
code never opens image files directly.
"""

import urllib.parse
import os
import functools
import logging
from os.path import dirname

from .errors import LoadFailure, NotFound, WriteFailure

logger = logging.getLogger(__name__)

@functools.lru_cache(maxsize=4)
def mkdirs(path):
    logger.debug("mkdirs %s",path)
    os.makedirs(path, exist_ok = True)

def local_path(url):
    """Return the file system path for url, which is a path or a file: url"""
    o = urllib.parse.urlparse(url)
    if o.scheme=='file':
        return urllib.parse.unquote(o.path)
    if o.scheme=='' or len(o.scheme)==1:   # len 1 is a windows drive letter
        return url
    raise ValueError(f"unknown scheme {o.scheme} in url {url}")

def darkroom_save(url, data):
    path = local_path(url)
    logger.debug("save url=%s len=%s",url,len(data))
    try:
        if dirname(path):
            mkdirs( dirname(path))
        with open(path,'wb') as f:
            f.write(data)
    except OSError as e:
        raise WriteFailure(f"{path}: {e}") from e

def darkroom_load(url):
    path = local_path(url)
    try:
        with open(path,'rb') as f:
            return f.read()
    except FileNotFoundError as e:
        raise NotFound(path) from e
    except OSError as e:
        raise LoadFailure(f"{path}: {e}") from e
