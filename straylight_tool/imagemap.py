"""
StrayLight: Image Maps & Instrument Profiles
============================================

Description:
    An `ImageMap` is a calibrated 2D solar image together with the metadata the
    analysis needs: the helioprojective coordinate of the grid center, the
    per-axis plate scale, the missing-value sentinel, the observation time and
    the exposure duration. Data is stored numpy style, `data[y, x]`, so the
    array shape is (ny, nx).

    Instrument-specific interpretation (allowed frame sizes, the plate scale
    used for full-disk averaging, negative-pixel filtering) lives in a small
    closed set of `InstrumentProfile` values, selected once per map by
    `profile_for()` and then passed around explicitly.

Adapters:
    `ImageMap.from_sunpy_map()` converts a `sunpy.map.GenericMap` (e.g. an
    SDO/AIA or HMI FITS file opened with `sunpy.map.Map`), and
    `ImageMap.to_wcs()` builds the matching helioprojective `astropy.wcs.WCS`
    used for reprojection.
"""

import logging
from dataclasses import dataclass, field, replace as dc_replace

import numpy as np
import astropy.units as u
from astropy.time import Time
from astropy.wcs import WCS

from .errors import MissingInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ImageMap:
    """2D image plus pointing, scale and timing metadata (arcsec, seconds)."""
    data: np.ndarray
    center: tuple
    scale: tuple
    missing: float = np.nan
    observation_time: Time = None
    exposure_duration: float = None
    instrument_id: str = ""

    def __post_init__(self):
        if self.data is None:
            raise MissingInput("ImageMap requires pixel data")
        arr = np.array(self.data, dtype=float)  # private copy
        if arr.ndim != 2 or arr.shape[0] < 1 or arr.shape[1] < 1:
            raise ValueError(f"ImageMap data must be a non-empty 2D array, got shape {arr.shape}")
        arr.flags.writeable = False
        object.__setattr__(self, "data", arr)

        if self.center is None or self.scale is None:
            raise MissingInput("ImageMap requires center and scale")
        xc, yc = (float(v) for v in self.center)
        dx, dy = (float(v) for v in self.scale)
        if not (dx > 0 and dy > 0):
            raise ValueError(f"Pixel scale must be positive, got ({dx}, {dy})")
        object.__setattr__(self, "center", (xc, yc))
        object.__setattr__(self, "scale", (dx, dy))

        if self.observation_time is not None and not isinstance(self.observation_time, Time):
            object.__setattr__(self, "observation_time", Time(self.observation_time))
        if self.exposure_duration is not None:
            object.__setattr__(self, "exposure_duration", float(self.exposure_duration))
        object.__setattr__(self, "missing", np.nan if self.missing is None else float(self.missing))
        object.__setattr__(self, "instrument_id", str(self.instrument_id or ""))

    @property
    def shape(self):
        return self.data.shape

    @property
    def nx(self):
        return self.data.shape[1]

    @property
    def ny(self):
        return self.data.shape[0]

    def replace(self, **changes):
        """Copy of this map with some fields changed (validated again)."""
        return dc_replace(self, **changes)

    def invalid_mask(self):
        """Boolean grid of samples that are non-finite or equal to the missing sentinel."""
        bad = ~np.isfinite(self.data)
        if np.isfinite(self.missing):
            bad |= (self.data == self.missing)
        return bad

    def to_wcs(self):
        """Helioprojective TAN WCS consistent with the coordinate grid convention."""
        w = WCS(naxis=2)
        w.wcs.ctype = ["HPLN-TAN", "HPLT-TAN"]
        w.wcs.cunit = ["arcsec", "arcsec"]
        w.wcs.cdelt = [self.scale[0], self.scale[1]]
        w.wcs.crpix = [self.nx // 2 + 1, self.ny // 2 + 1]  # FITS is 1-based
        w.wcs.crval = [self.center[0], self.center[1]]
        return w

    @classmethod
    def from_sunpy_map(cls, smap, missing=np.nan):
        """Builds an ImageMap from a sunpy GenericMap."""
        if smap is None:
            raise MissingInput("No sunpy map supplied")
        ny, nx = smap.data.shape
        c = smap.pixel_to_world((nx // 2) * u.pix, (ny // 2) * u.pix)
        center = (c.Tx.to_value(u.arcsec), c.Ty.to_value(u.arcsec))
        scale = (smap.scale.axis1.to_value(u.arcsec / u.pix),
                 smap.scale.axis2.to_value(u.arcsec / u.pix))
        exp = smap.exposure_time
        return cls(data=smap.data, center=center, scale=scale, missing=missing,
                   observation_time=smap.date,
                   exposure_duration=None if exp is None else exp.to_value(u.s),
                   instrument_id=smap.instrument or "")


# =====================================
# INSTRUMENT PROFILES
# =====================================
@dataclass(frozen=True)
class InstrumentProfile:
    """Instrument-specific rules for full-disk averaging."""
    name: str
    frame_sizes: tuple = None          # allowed square sizes, None = any square
    reference_scale: float = None      # arcsec/px at reference_size, None = use map dx
    reference_size: int = None
    requires_non_negative: bool = False
    aliases: tuple = field(default=(), compare=False)

    def pixel_scale(self, image_map):
        """Plate scale (arcsec/px) used to convert pixel distances to solar radii."""
        if self.reference_scale is None:
            return image_map.scale[0]
        return self.reference_scale * (self.reference_size / float(image_map.nx))

    def supports(self, shape):
        ny, nx = shape
        if nx != ny: return False
        return self.frame_sizes is None or nx in self.frame_sizes


AIA = InstrumentProfile("AIA", frame_sizes=(1024, 4096), reference_scale=0.6,
                        reference_size=4096, requires_non_negative=True,
                        aliases=("AIA",))
GENERIC = InstrumentProfile("GENERIC")

PROFILES = {p.name: p for p in (AIA, GENERIC)}


def get_profile(name):
    """Looks a profile up by name (case-insensitive)."""
    try:
        return PROFILES[str(name).upper()]
    except KeyError:
        raise KeyError(f"Unknown instrument profile '{name}'. Known: {sorted(PROFILES)}") from None


def profile_for(image_map):
    """Selects the instrument profile from the map's instrument label."""
    label = (image_map.instrument_id or "").upper()
    for p in PROFILES.values():
        if any(a in label for a in p.aliases):
            logger.debug("Instrument '%s' -> profile %s", image_map.instrument_id, p.name)
            return p
    return GENERIC
