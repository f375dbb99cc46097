"""
straylight_tool
===============

Region statistics and cross-instrument scattered-light estimates for
calibrated solar image maps.
"""

__version__ = "0.1.0"

from .errors import (StrayLightError, EmptySelection, OutOfBounds, UnsupportedFrameSize,
                     InvalidExposure, MissingInput)
from .imagemap import ImageMap, InstrumentProfile, AIA, GENERIC, get_profile, profile_for
from .geometry import (coordinate_grid, world_to_pixel, disk_mask, annulus_mask, rectangle_mask,
                       AnnulusGeometry, BoxGeometry)
from .statistics import (RegionStatistics, RegionSample, region_statistics, annulus_statistics,
                         disk_statistics, box_statistics)
from .submap import extract_submap
from .fulldisk import FullDiskAverage, average_full_disk
from .alignment import CrossCalibration, align_and_compare, solar_rotate_point, regrid_to
from .selection import acquire_point, FixedPoints
