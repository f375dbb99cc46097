"""
StrayLight: Coordinate Grids & Region Masks
===========================================

Description:
    Converts pixel indices of an `ImageMap` into helioprojective (arcsec)
    coordinates and builds boolean selection masks over the resulting grid.

    Pixel convention: the center coordinate sits on pixel index n//2 of each
    axis, so column i lies at

        x_i = xc - (nx//2 - i) * dx

    and a 1-pixel axis maps onto the center itself.

    Masks (disk, annulus, rectangle) are measured in physical units from an
    explicit center point. An empty mask is a valid answer; it is the
    statistics step that refuses to work on zero samples.
"""

from dataclasses import dataclass

import numpy as np


# =====================================
# 1. COORDINATE GRID
# =====================================
def axis_coordinates(n, center, scale):
    """Physical coordinate of every pixel along one axis."""
    return center - (n // 2 - np.arange(n)) * scale


def coordinate_grid(image_map):
    """Returns (x, y) arcsec grids of shape (ny, nx) for the map."""
    xs = axis_coordinates(image_map.nx, image_map.center[0], image_map.scale[0])
    ys = axis_coordinates(image_map.ny, image_map.center[1], image_map.scale[1])
    return np.meshgrid(xs, ys)


def _round_half_away(v):
    return np.sign(v) * np.floor(np.abs(v) + 0.5)


def world_to_pixel(coord, center, scale, n):
    """Inverse of axis_coordinates: nearest (unclamped) pixel index for a coordinate."""
    return int(_round_half_away((coord - center) / scale + n // 2))


def radial_distance(grid, center):
    """Euclidean distance (physical units) of every grid point from `center`."""
    x, y = grid
    return np.hypot(x - center[0], y - center[1])


# =====================================
# 2. REGION MASKS
# =====================================
def disk_mask(grid, center, radius):
    """Pixels with r <= radius."""
    if radius < 0: raise ValueError(f"Radius must be non-negative, got {radius}")
    return radial_distance(grid, center) <= radius


def annulus_mask(grid, center, inner_radius, outer_radius):
    """Pixels with inner < r <= outer (inner edge excluded, outer edge included)."""
    if inner_radius < 0 or outer_radius < 0:
        raise ValueError("Annulus radii must be non-negative")
    if inner_radius > outer_radius:
        raise ValueError(f"Inner radius {inner_radius} exceeds outer radius {outer_radius}")
    r = radial_distance(grid, center)
    return (r > inner_radius) & (r <= outer_radius)


def rectangle_mask(grid, center, width, height):
    """Pixels with |x-x0| <= width/2 and |y-y0| <= height/2."""
    if width < 0 or height < 0:
        raise ValueError("Rectangle sides must be non-negative")
    x, y = grid
    return (np.abs(x - center[0]) <= width / 2.0) & (np.abs(y - center[1]) <= height / 2.0)


# =====================================
# 3. OVERLAY GEOMETRY
# =====================================
# Plain descriptions of the selected regions, for whoever draws them.
@dataclass(frozen=True)
class AnnulusGeometry:
    center: tuple
    inner_radius: float
    outer_radius: float


@dataclass(frozen=True)
class BoxGeometry:
    center: tuple
    width: float
    height: float

    @property
    def x_range(self):
        return (self.center[0] - self.width / 2.0, self.center[0] + self.width / 2.0)

    @property
    def y_range(self):
        return (self.center[1] - self.height / 2.0, self.center[1] + self.height / 2.0)

    @property
    def corners(self):
        """Bottom-left, bottom-right, top-right, top-left."""
        (x0, x1), (y0, y1) = self.x_range, self.y_range
        return ((x0, y0), (x1, y0), (x1, y1), (x0, y1))
