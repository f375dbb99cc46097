"""
StrayLight: Error Kinds
=======================

Every failure the analysis core can raise. They all derive from ValueError, so a
caller that catches ValueError (as `run_analysis.py` does) also handles them.
The one soft condition, a mostly-empty overlap frame during cross-calibration,
is reported as a flag on the result and is not an exception.
"""


class StrayLightError(ValueError):
    """Base class for all analysis failures."""


class EmptySelection(StrayLightError):
    """No usable samples remain after masking and missing-value exclusion."""


class OutOfBounds(StrayLightError):
    """A requested physical range lies entirely outside the image extent."""


class UnsupportedFrameSize(StrayLightError):
    """The image dimensions do not match the instrument profile."""


class InvalidExposure(StrayLightError):
    """Exposure duration is zero, negative or not a number."""


class MissingInput(StrayLightError):
    """A required map or selection point was not supplied."""
