"""
Configuration for darkroom.

The configuration is a YAML file. Anything that it does not set comes from
the defaults below, which in turn come from the constants.

Example config.yml:

    images_dir: ../Images/
    videos_dir: ../Videos/
    camera: 0
    workers: 4
    log_level: INFO
"""

import os
import copy
import logging

import yaml

from .constants import C

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = 'config.yml'

DEFAULTS = {
    'images_dir': C.IMAGES_DIR,
    'effects_dir': C.EFFECTS_DIR,
    'adjustments_dir': C.ADJUSTMENTS_DIR,
    'edited_dir': C.EDITED_DIR,
    'videos_dir': C.VIDEOS_DIR,
    'camera': 0,
    'workers': os.cpu_count() or 1,
    'display_height': C.DISPLAY_HEIGHT,
    'log_level': 'WARNING',
}


def load_config(path=None):
    """Return the configuration dictionary. A missing file gives the defaults.
    :param path: - the YAML file. If None, config.yml in the current directory is used if it exists.
    """
    config = copy.copy(DEFAULTS)
    if path is None:
        if not os.path.exists(DEFAULT_CONFIG_FILE):
            return config
        path = DEFAULT_CONFIG_FILE
    if not os.path.exists(path):
        logger.warning("config file %s not found; using defaults", path)
        return config
    with open(path) as f:
        try:
            loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"cannot parse {path}: {e}") from e
    if loaded is None:
        return config
    if not isinstance(loaded, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    for (k,v) in loaded.items():
        if k not in DEFAULTS:
            logger.warning("%s: unknown key %s ignored", path, k)
            continue
        config[k] = v
    logger.debug("config=%s", config)
    return config
