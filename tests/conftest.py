import numpy as np
import pytest

from straylight_tool.imagemap import ImageMap

OBS_TIME = "2017-09-06T12:00:00"


@pytest.fixture
def make_map():
    """Factory for small synthetic maps."""
    def _make(data=None, shape=(11, 11), value=10.0, center=(0.0, 0.0), scale=(1.0, 1.0),
              missing=-100.0, time=OBS_TIME, exposure=1.0, instrument="TEST"):
        if data is None:
            data = np.full(shape, value, dtype=float)
        return ImageMap(data=data, center=center, scale=scale, missing=missing,
                        observation_time=time, exposure_duration=exposure,
                        instrument_id=instrument)
    return _make


@pytest.fixture
def block_map(make_map):
    """11x11 map of 10s with a 3x3 block of 100 at pixel (5, 5); coordinates equal pixel indices."""
    data = np.full((11, 11), 10.0)
    data[4:7, 4:7] = 100.0
    return make_map(data=data, center=(5.0, 5.0))


@pytest.fixture
def fixed_rotation():
    """Deterministic stand-in for solar rotation: a constant shift, recording its calls."""
    class _Rotate:
        def __init__(self):
            self.shift = (3.0, -2.0)
            self.calls = []

        def __call__(self, x, y, t_start, t_end):
            self.calls.append((x, y, t_start, t_end))
            return x + self.shift[0], y + self.shift[1]
    return _Rotate()
