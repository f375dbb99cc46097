"""
StrayLight: Cross-Instrument Alignment & Scattered-Light Estimate
================================================================

Description:
    Compares a (typically small field of view) image A with a full-disk image B
    of the same region taken by another instrument at a different time, and
    infers the full-disk intensity level that image A would have had. Its ratio
    to a published reference level is the scale factor used to estimate the
    scattered-light contamination of A.

    Steps:
    1.  **Rotation Correction:** the center of A is carried from A's time to
        B's time by differential rotation (sunpy `RotatedSunFrame`). The
        resulting shift is applied uniformly to A's footprint.
    2.  **Overlap:** the shifted footprint of A is cut out of B.
    3.  **Box Photometry:** a box of side 2*half_width around the selection
        point in A, and the shifted box in B, give exposure-normalized mean
        intensities.
    4.  **Full-Disk Scaling:** B's full-disk average rescaled by the box ratio
        gives the inferred full-disk intensity of A.

    If the overlap in B is largely empty (many NaN/missing pixels, e.g. a
    partially downloaded frame), the result is still returned but flagged with
    `partial_frame_warning`.

    `regrid_to()` re-grids one map onto another map's pixel grid with
    `reproject`, for callers that want pixel-by-pixel comparisons.
"""

import logging
from typing import NamedTuple

import numpy as np
import astropy.units as u
from astropy.coordinates import SkyCoord
from astropy.time import Time
from sunpy.coordinates import RotatedSunFrame, Helioprojective
from reproject import reproject_interp

from .config import CONFIG, config_value
from .errors import MissingInput
from .fulldisk import average_full_disk, check_exposure
from .geometry import axis_coordinates, coordinate_grid, rectangle_mask, BoxGeometry
from .selection import as_point
from .statistics import masked_statistics
from .submap import extract_submap

logger = logging.getLogger(__name__)


class CrossCalibration(NamedTuple):
    intensity_a: float
    intensity_b: float
    full_disk_intensity_b: float
    inferred_full_disk_intensity_a: float
    scale_factor: float
    rotation_shift: tuple
    box_a: BoxGeometry
    box_b: BoxGeometry
    overlap: object        # ImageMap cut from B
    invalid_count: int
    partial_frame_warning: bool


# =====================================
# 1. SOLAR ROTATION
# =====================================
def solar_rotate_point(x, y, t_start, t_end):
    """Differentially rotates an Earth-view helioprojective point (arcsec) from t_start to t_end."""
    t0, t1 = Time(t_start), Time(t_end)
    p0 = SkyCoord(x * u.arcsec, y * u.arcsec,
                  frame=Helioprojective(observer="earth", obstime=t0))
    rp = SkyCoord(RotatedSunFrame(base=p0, duration=(t1 - t0).to(u.day)))
    out = rp.transform_to(Helioprojective(observer="earth", obstime=t1))
    x1, y1 = out.Tx.to_value(u.arcsec), out.Ty.to_value(u.arcsec)
    if not (np.isfinite(x1) and np.isfinite(y1)):
        raise ValueError(f"Point ({x:.1f}, {y:.1f}) arcsec is off the solar disk; cannot rotate it")
    return float(x1), float(y1)


def rotation_shift(map_a, map_b, rotate=None):
    """(dx, dy) arcsec moving A's center to where it sits at B's observation time."""
    if map_a.observation_time is None or map_b.observation_time is None:
        raise MissingInput("Both maps need an observation time for rotation correction")
    rotate = rotate or solar_rotate_point
    xc, yc = map_a.center
    x1, y1 = rotate(xc, yc, map_a.observation_time, map_b.observation_time)
    return (x1 - xc, y1 - yc)


# =====================================
# 2. CROSS-CALIBRATION
# =====================================
def align_and_compare(map_a, map_b, box_half_width, selection_point, rotate=None,
                      dark_offset=None, intensity_scale=None, reference_intensity=None,
                      radius_fraction=None, invalid_threshold=None, profile=None,
                      config=None):
    """
    Infers A's full-disk intensity from B's, through a common box around `selection_point`.

    Parameters
    ----------
    map_a, map_b : ImageMap
        Partial-field image to calibrate, and full-disk reference image.
    box_half_width : float
        Half side of the comparison box, arcsec.
    selection_point : (float, float)
        Box center in A's frame, arcsec.
    rotate : callable, optional
        (x, y, t_start, t_end) -> (x', y'). Defaults to `solar_rotate_point`.
    dark_offset, intensity_scale : float, optional
        Applied to A's raw box mean as (mean - dark_offset) * intensity_scale.
    reference_intensity : float, optional
        Published full-disk level used for the final scale factor.
    """
    cfg = CONFIG if config is None else config
    if map_a is None or map_b is None:
        raise MissingInput("Cross-calibration needs both maps")
    point = as_point(selection_point)
    half = config_value(cfg, "BOX_HALF_WIDTH", box_half_width)
    if half <= 0:
        raise ValueError(f"Box half width must be positive, got {half}")
    dark = config_value(cfg, "DARK_OFFSET", dark_offset)
    gain = config_value(cfg, "INTENSITY_SCALE", intensity_scale)
    ref = config_value(cfg, "REFERENCE_INTENSITY", reference_intensity)
    if not ref > 0:
        raise ValueError(f"Reference intensity must be positive, got {ref}")
    threshold = config_value(cfg, "INVALID_PIXEL_THRESHOLD", invalid_threshold, int)
    radius_fraction = config_value(cfg, "RADIUS_FRACTION", radius_fraction)
    solar_radius = config_value(cfg, "SOLAR_RADIUS_ARCSEC")
    exp_a, exp_b = check_exposure(map_a), check_exposure(map_b)

    # Step 1: rotation
    sx, sy = rotation_shift(map_a, map_b, rotate)
    logger.info("Rotation shift %s -> %s: (%.2f, %.2f) arcsec",
                map_a.observation_time, map_b.observation_time, sx, sy)

    # Step 2: A's footprint in B
    xs_a = axis_coordinates(map_a.nx, map_a.center[0], map_a.scale[0])
    ys_a = axis_coordinates(map_a.ny, map_a.center[1], map_a.scale[1])
    ax0, ax1, ay0, ay1 = xs_a[0], xs_a[-1], ys_a[0], ys_a[-1]
    overlap = extract_submap(map_b, (ax0 + sx, ax1 + sx), (ay0 + sy, ay1 + sy))
    invalid = int(np.count_nonzero(overlap.invalid_mask()))
    partial = invalid >= threshold
    if partial:
        logger.warning("Overlap region of %s has %d invalid pixels (>= %d); frame may be partial",
                       map_b.instrument_id or "map B", invalid, threshold)

    # Step 3-4: box photometry
    box_a = BoxGeometry(point, 2 * half, 2 * half)
    box_b = BoxGeometry((point[0] + sx, point[1] + sy), 2 * half, 2 * half)
    stats_a = masked_statistics(map_a, rectangle_mask(coordinate_grid(map_a), box_a.center, 2 * half, 2 * half))
    stats_b = masked_statistics(map_b, rectangle_mask(coordinate_grid(map_b), box_b.center, 2 * half, 2 * half))
    intensity_a = (stats_a.mean - dark) * gain / exp_a
    intensity_b = stats_b.mean / exp_b
    if intensity_b == 0:
        raise ValueError("Box intensity in map B is zero; cannot scale full-disk level")

    # Step 5-7: full-disk scaling
    full_b = average_full_disk(map_b, profile=profile,
                               radius_fraction=radius_fraction, solar_radius=solar_radius).mean
    inferred_a = full_b / intensity_b * intensity_a
    scale_factor = inferred_a / ref
    logger.info("Box A %.4g, box B %.4g, full-disk B %.4g -> inferred A %.4g (x%.4g of reference)",
                intensity_a, intensity_b, full_b, inferred_a, scale_factor)

    return CrossCalibration(intensity_a=intensity_a, intensity_b=intensity_b,
                            full_disk_intensity_b=full_b, inferred_full_disk_intensity_a=inferred_a,
                            scale_factor=scale_factor, rotation_shift=(sx, sy),
                            box_a=box_a, box_b=box_b, overlap=overlap,
                            invalid_count=invalid, partial_frame_warning=partial)


# =====================================
# 3. RE-GRIDDING
# =====================================
def regrid_to(source, target, order="bilinear"):
    """
    Re-grids `source` onto `target`'s pixel grid.
    Pixels of the target not covered by the source come back as NaN.
    """
    if source is None or target is None:
        raise MissingInput("Re-gridding needs a source and a target map")
    data = np.where(source.invalid_mask(), np.nan, source.data)
    reproj, _ = reproject_interp((data, source.to_wcs()), target.to_wcs(),
                                 shape_out=target.shape, order=order)
    return target.replace(data=reproj, missing=np.nan,
                          observation_time=source.observation_time,
                          exposure_duration=source.exposure_duration,
                          instrument_id=source.instrument_id)
