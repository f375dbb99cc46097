"""
StrayLight: Sub-map Extraction
==============================

Cuts a rectangular physical range (arcsec) out of an `ImageMap`. The range is
converted to an inclusive pixel range and clamped to the image; a range that
only partly overlaps the image is silently clipped, one that misses it
completely raises `OutOfBounds`.

The sub-map carries its own center, chosen so that its coordinate grid gives
every retained pixel the same coordinate it had in the source map.
"""

import logging

import numpy as np

from .errors import OutOfBounds, MissingInput
from .geometry import axis_coordinates, world_to_pixel

logger = logging.getLogger(__name__)


def map_extent(n, center, scale):
    """(low, high) physical edges of an axis, pixel borders included."""
    return (center - (n // 2) * scale - scale / 2.0,
            center + (n - 1 - n // 2) * scale + scale / 2.0)


def pixel_range(coord_range, n, center, scale, axis="x"):
    """Inclusive, clamped pixel index range covering a physical range."""
    if coord_range is None:
        raise MissingInput(f"No {axis} range supplied")
    lo, hi = sorted(float(c) for c in coord_range)
    if not (np.isfinite(lo) and np.isfinite(hi)):
        raise MissingInput(f"{axis} range must be finite, got {tuple(coord_range)}")
    first, last = map_extent(n, center, scale)
    if hi < first or lo > last:
        raise OutOfBounds(f"{axis} range [{lo:.2f}, {hi:.2f}] lies outside the map extent "
                          f"[{first:.2f}, {last:.2f}]")
    i0 = int(np.clip(world_to_pixel(lo, center, scale, n), 0, n - 1))
    i1 = int(np.clip(world_to_pixel(hi, center, scale, n), 0, n - 1))
    return i0, i1


def extract_submap(image_map, x_range, y_range):
    """Returns an independent ImageMap holding the pixels inside x_range, y_range."""
    if image_map is None:
        raise MissingInput("No map to extract from")
    (xc, yc), (dx, dy) = image_map.center, image_map.scale
    x0, x1 = pixel_range(x_range, image_map.nx, xc, dx, "x")
    y0, y1 = pixel_range(y_range, image_map.ny, yc, dy, "y")

    crop = image_map.data[y0:y1 + 1, x0:x1 + 1]
    h, w = crop.shape
    new_xc = axis_coordinates(image_map.nx, xc, dx)[x0 + w // 2]
    new_yc = axis_coordinates(image_map.ny, yc, dy)[y0 + h // 2]
    logger.debug("Sub-map x[%d:%d] y[%d:%d] -> center (%.2f, %.2f)", x0, x1, y0, y1, new_xc, new_yc)
    return image_map.replace(data=crop, center=(new_xc, new_yc))
