"""
StrayLight: Configuration Defaults
==================================

Default parameters for the region queries and the cross-instrument scattered
light estimate. Any of them can be overridden from a `params.txt` style file:

    # comment
    REFERENCE_INTENSITY = 1843.0
    BOX_HALF_WIDTH      = 15       # arcsec
"""

import ast
import logging
import os

logger = logging.getLogger(__name__)

CONFIG = {
    # Geometry
    "SOLAR_RADIUS_ARCSEC": 960.0,     # fixed reference scale for full-disk averaging
    "RADIUS_FRACTION": 1.1,           # full-disk radius, in solar radii
    "BOX_HALF_WIDTH": 10.0,           # arcsec
    "ANNULUS_INNER": 0.0,             # arcsec
    "ANNULUS_OUTER": 10.0,            # arcsec

    # Cross-calibration
    "INVALID_PIXEL_THRESHOLD": 100000,
    "REFERENCE_INTENSITY": 1.0,       # published full-disk reference level
    "DARK_OFFSET": 0.0,
    "INTENSITY_SCALE": 1.0,
}


def load_config(path, base=None):
    """Returns a copy of `base` (default: CONFIG) updated from a KEY = value file."""
    cfg = dict(CONFIG if base is None else base)
    if not path or not os.path.exists(path):
        if path: logger.warning("Config file %s not found, using defaults", path)
        return cfg
    with open(path, 'r') as f:
        for line in f:
            line = line.split('#')[0].strip()
            if not line or "=" not in line: continue
            key, val_str = line.split("=", 1)
            key = key.strip().upper(); val_str = val_str.strip()
            if key not in cfg:
                logger.debug("Ignoring unknown config key %s", key)
                continue
            try:
                cfg[key] = ast.literal_eval(val_str)  # numbers, tuples
            except (ValueError, SyntaxError):
                cfg[key] = val_str
    return cfg


def config_value(cfg, key, value=None, kind=float):
    """`value` (or cfg[key] when None) converted with `kind`; ValueError names the key."""
    raw = cfg[key] if value is None else value
    try:
        return kind(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a number, got {raw!r}") from None
