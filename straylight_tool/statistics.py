"""
StrayLight: Region Statistics
=============================

Mean, median and pixel count over a selected set of samples, plus the
point-centred region queries used by the interactive workflow: the user picks
a point, and the annulus, disk or box around it is summarized.

Samples equal to the map's missing sentinel, and any non-finite samples, never
take part in a statistic.
"""

import logging
from typing import NamedTuple

import numpy as np

from .errors import EmptySelection
from .geometry import (coordinate_grid, annulus_mask, disk_mask, rectangle_mask,
                       AnnulusGeometry, BoxGeometry)
from .selection import as_point

logger = logging.getLogger(__name__)


class RegionStatistics(NamedTuple):
    mean: float
    median: float
    count: int


class RegionSample(NamedTuple):
    statistics: RegionStatistics
    geometry: object  # AnnulusGeometry or BoxGeometry


def valid_values(values, missing=np.nan):
    """Flattened samples with missing and non-finite entries removed."""
    v = np.asarray(values, dtype=float).ravel()
    keep = np.isfinite(v)
    if missing is not None and np.isfinite(missing):
        keep &= (v != missing)
    return v[keep]


def region_statistics(values, missing=np.nan):
    """Mean/median/count of `values`, excluding the missing sentinel."""
    v = valid_values(values, missing)
    if v.size == 0:
        raise EmptySelection("No valid samples in the selected region")
    return RegionStatistics(mean=float(np.mean(v)), median=float(np.median(v)), count=int(v.size))


def masked_statistics(image_map, mask):
    return region_statistics(image_map.data[mask], image_map.missing)


# =====================================
# POINT-CENTRED QUERIES
# =====================================
def annulus_statistics(image_map, point, inner_radius, outer_radius):
    """Statistics of the ring inner < r <= outer (arcsec) around `point`."""
    p = as_point(point)
    mask = annulus_mask(coordinate_grid(image_map), p, inner_radius, outer_radius)
    stats = masked_statistics(image_map, mask)
    logger.debug("Annulus %.2f-%.2f at %s: %d px", inner_radius, outer_radius, p, stats.count)
    return RegionSample(stats, AnnulusGeometry(p, float(inner_radius), float(outer_radius)))


def disk_statistics(image_map, point, radius):
    """Statistics of the disk r <= radius (arcsec) around `point`."""
    p = as_point(point)
    stats = masked_statistics(image_map, disk_mask(coordinate_grid(image_map), p, radius))
    return RegionSample(stats, AnnulusGeometry(p, 0.0, float(radius)))


def box_statistics(image_map, point, width, height=None):
    """Statistics of the width x height (arcsec) box centred on `point`."""
    p = as_point(point)
    height = width if height is None else height
    stats = masked_statistics(image_map, rectangle_mask(coordinate_grid(image_map), p, width, height))
    return RegionSample(stats, BoxGeometry(p, float(width), float(height)))
