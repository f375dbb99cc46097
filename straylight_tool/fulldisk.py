"""
StrayLight: Full-Disk Averaging
===============================

Description:
    Mean and median intensity of all pixels within a given fraction of the
    solar radius, for full-disk images, normalized by the exposure time.

    The distance test is done in pixel-index space and converted to solar radii
    with a fixed reference of 960 arcsec per solar radius:

        r = pixel_distance * pixel_scale / 960      (included when r <= fraction)

    where pixel_scale comes from the instrument profile (AIA: 0.6"/px at
    4096^2, 2.4"/px at 1024^2; other instruments: the map's own plate scale).

    The default center is the pixel midpoint (nx//2, ny//2), not the disk
    center recorded in the map metadata. Off-center frames therefore need an
    explicit `center`.
"""

import logging
from typing import NamedTuple

import numpy as np

from .config import CONFIG
from .errors import InvalidExposure, MissingInput, UnsupportedFrameSize
from .imagemap import profile_for
from .statistics import region_statistics

logger = logging.getLogger(__name__)


class FullDiskAverage(NamedTuple):
    count: int
    mean: float            # per second
    median: float          # per second
    radius_fraction: float
    exposure_duration: float
    observation_time: object
    center: tuple          # pixel index (x, y)
    profile: str


def check_exposure(image_map):
    """Returns the exposure duration, or raises InvalidExposure if it cannot normalize."""
    exp = image_map.exposure_duration
    if exp is None or not np.isfinite(exp) or exp <= 0:
        raise InvalidExposure(f"Exposure duration must be positive, got {exp} "
                              f"({image_map.instrument_id or 'unknown instrument'})")
    return exp


def disk_selection(image_map, radius_fraction, center, profile, solar_radius):
    """Boolean grid of usable pixels within radius_fraction of `center` (pixel indices)."""
    yy, xx = np.indices(image_map.shape)
    d = np.sqrt((xx - center[0])**2 + (yy - center[1])**2)
    r = d * profile.pixel_scale(image_map) / solar_radius
    sel = (r <= radius_fraction) & ~image_map.invalid_mask()
    if profile.requires_non_negative:
        with np.errstate(invalid='ignore'):
            sel &= (image_map.data >= 0)  # download/sensor artifacts
    return sel


def average_full_disk(image_map, radius_fraction=None, center=None, profile=None,
                      solar_radius=None):
    """
    Exposure-normalized mean/median within `radius_fraction` solar radii.

    `center` is a pixel index pair (x, y); defaults to the frame midpoint.
    """
    if image_map is None:
        raise MissingInput("No full-disk map supplied")
    exp = check_exposure(image_map)
    radius_fraction = CONFIG["RADIUS_FRACTION"] if radius_fraction is None else float(radius_fraction)
    solar_radius = CONFIG["SOLAR_RADIUS_ARCSEC"] if solar_radius is None else float(solar_radius)
    if radius_fraction < 0:
        raise ValueError(f"radius_fraction must be non-negative, got {radius_fraction}")

    profile = profile or profile_for(image_map)
    if not profile.supports(image_map.shape):
        allowed = "any square" if profile.frame_sizes is None else \
            " or ".join(f"{n}x{n}" for n in profile.frame_sizes)
        raise UnsupportedFrameSize(f"{profile.name} frame must be {allowed}, got "
                                   f"{image_map.nx}x{image_map.ny}")

    if center is None:
        center = (image_map.nx // 2, image_map.ny // 2)
    center = (float(center[0]), float(center[1]))

    sel = disk_selection(image_map, radius_fraction, center, profile, solar_radius)
    stats = region_statistics(image_map.data[sel], image_map.missing)
    logger.info("Full-disk average (%s, %.2f Rsun): %d px, mean %.4g, exposure %.3gs",
                profile.name, radius_fraction, stats.count, stats.mean, exp)
    return FullDiskAverage(count=stats.count, mean=stats.mean / exp, median=stats.median / exp,
                           radius_fraction=radius_fraction, exposure_duration=exp,
                           observation_time=image_map.observation_time,
                           center=center, profile=profile.name)
