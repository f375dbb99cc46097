"""
StrayLight: Point Selection
===========================

The analysis core never waits on a mouse click. Whoever drives it (a
matplotlib `ginput` callback, a notebook widget, a batch script) hands over a
point, and this module checks that what was handed over is usable.

A selection provider is any zero-argument callable returning an (x, y) pair in
arcsec, or None when the user cancelled.
"""

import math

from .errors import MissingInput


def as_point(point, what="selection point"):
    """Validates an (x, y) pair and returns it as a tuple of floats."""
    if point is None:
        raise MissingInput(f"No {what} supplied")
    try:
        x, y = point
        x, y = float(x), float(y)
    except (TypeError, ValueError):
        raise MissingInput(f"Invalid {what}: {point!r}") from None
    if not (math.isfinite(x) and math.isfinite(y)):
        raise MissingInput(f"Non-finite {what}: {point!r}")
    return x, y


def acquire_point(provider):
    """Asks the provider for one point and validates it."""
    if provider is None:
        raise MissingInput("No selection provider supplied")
    return as_point(provider())


class FixedPoints:
    """Provider that replays a fixed sequence of points (scripted or batch runs)."""

    def __init__(self, points):
        self._points = list(points)
        self._next = 0

    def __call__(self):
        if self._next >= len(self._points):
            raise MissingInput("No more points to select")
        p = self._points[self._next]
        self._next += 1
        return p

    def __len__(self):
        return len(self._points) - self._next
