import logging

import numpy as np
import pytest

from straylight_tool.config import CONFIG
from straylight_tool.alignment import align_and_compare, rotation_shift, solar_rotate_point, regrid_to
from straylight_tool.errors import InvalidExposure, MissingInput, OutOfBounds


@pytest.fixture
def map_a(make_map):
    return make_map(value=20.0, exposure=2.0, instrument="IBIS", time="2017-09-06T12:00:00")


@pytest.fixture
def full_disk_b(make_map):
    data = np.full((41, 41), 10.0)
    data[17:22, 22:27] = 40.0   # box around (4, -1) arcsec
    return make_map(data=data, exposure=1.0, instrument="HMI", time="2017-09-06T13:00:00")


def test_cross_calibration_chain(map_a, full_disk_b, fixed_rotation):
    res = align_and_compare(map_a, full_disk_b, 2.0, (1.0, 1.0), rotate=fixed_rotation,
                            reference_intensity=2.0)
    full = full_disk_b.data.mean()
    assert res.rotation_shift == (3.0, -2.0)
    assert res.intensity_a == 10.0
    assert res.intensity_b == 40.0
    assert res.full_disk_intensity_b == pytest.approx(full)
    assert res.inferred_full_disk_intensity_a == pytest.approx(full / 40.0 * 10.0)
    assert res.scale_factor == pytest.approx(full / 8.0)
    assert not res.partial_frame_warning


def test_rotation_uses_map_center_and_times(map_a, full_disk_b, fixed_rotation):
    align_and_compare(map_a, full_disk_b, 2.0, (1.0, 1.0), rotate=fixed_rotation)
    (x, y, t0, t1), = fixed_rotation.calls
    assert (x, y) == map_a.center
    assert t0 == map_a.observation_time and t1 == full_disk_b.observation_time


def test_overlap_is_shifted_footprint(map_a, full_disk_b, fixed_rotation):
    res = align_and_compare(map_a, full_disk_b, 2.0, (1.0, 1.0), rotate=fixed_rotation)
    assert res.overlap.shape == map_a.shape
    assert res.overlap.center == (3.0, -2.0)
    np.testing.assert_array_equal(res.overlap.data, full_disk_b.data[13:24, 18:29])
    assert res.box_a.center == (1.0, 1.0)
    assert res.box_b.center == (4.0, -1.0)
    assert res.box_b.width == 4.0


def test_dark_offset_and_intensity_scale(map_a, full_disk_b, fixed_rotation):
    res = align_and_compare(map_a, full_disk_b, 2.0, (1.0, 1.0), rotate=fixed_rotation,
                            dark_offset=4.0, intensity_scale=0.5)
    assert res.intensity_a == pytest.approx(4.0)


def test_partial_frame_is_a_warning(map_a, full_disk_b, fixed_rotation, caplog):
    data = np.array(full_disk_b.data)
    data[13:15, 18:24] = np.nan
    b = full_disk_b.replace(data=data)
    with caplog.at_level(logging.WARNING):
        res = align_and_compare(map_a, b, 2.0, (1.0, 1.0), rotate=fixed_rotation,
                                invalid_threshold=10)
    assert res.partial_frame_warning
    assert res.invalid_count == 12
    assert res.full_disk_intensity_b == pytest.approx(np.nanmean(data))
    assert "partial" in caplog.text


def test_shift_off_the_map_is_out_of_bounds(map_a, full_disk_b):
    far = lambda x, y, t0, t1: (x + 1000.0, y)
    with pytest.raises(OutOfBounds):
        align_and_compare(map_a, full_disk_b, 2.0, (1.0, 1.0), rotate=far)


@pytest.mark.parametrize("which", ["a", "b", "point"])
def test_missing_inputs(map_a, full_disk_b, fixed_rotation, which):
    args = {"a": map_a, "b": full_disk_b, "point": (1.0, 1.0)}
    args[which] = None
    with pytest.raises(MissingInput):
        align_and_compare(args["a"], args["b"], 2.0, args["point"], rotate=fixed_rotation)


def test_missing_observation_time(map_a, full_disk_b, fixed_rotation):
    with pytest.raises(MissingInput):
        rotation_shift(map_a.replace(observation_time=None), full_disk_b, fixed_rotation)


def test_zero_exposure(map_a, full_disk_b, fixed_rotation):
    with pytest.raises(InvalidExposure):
        align_and_compare(map_a.replace(exposure_duration=0.0), full_disk_b, 2.0, (1.0, 1.0),
                          rotate=fixed_rotation)


def test_reference_must_be_positive(map_a, full_disk_b, fixed_rotation):
    with pytest.raises(ValueError):
        align_and_compare(map_a, full_disk_b, 2.0, (1.0, 1.0), rotate=fixed_rotation,
                          reference_intensity=0.0)


def test_solar_rotation_moves_disk_center_west():
    x1, y1 = solar_rotate_point(0.0, 0.0, "2017-09-06T00:00:00", "2017-09-07T00:00:00")
    # roughly 13 degrees of longitude per day near the equator
    assert 150.0 < x1 < 260.0
    assert abs(y1) < 20.0


def test_regrid_onto_own_grid(make_map):
    src = make_map(data=np.arange(121, dtype=float).reshape(11, 11), exposure=5.0)
    out = regrid_to(src, src)
    np.testing.assert_allclose(out.data, src.data, atol=1e-6)
    assert out.exposure_duration == 5.0


def test_regrid_onto_shifted_grid(make_map):
    src = make_map(data=np.tile(np.arange(11, dtype=float), (11, 1)), instrument="AIA")
    target = make_map(center=(2.0, 0.0), instrument="HMI", exposure=9.0)
    out = regrid_to(src, target)
    assert out.center == target.center and out.shape == target.shape
    assert out.instrument_id == "AIA" and out.exposure_duration == 1.0
    np.testing.assert_allclose(out.data[2:9, :8], src.data[2:9, 2:10], atol=1e-3)
    assert np.all(np.isnan(out.data[:, -2:]))


@pytest.mark.parametrize("key, value", [("DARK_OFFSET", "dark.fits"), ("INVALID_PIXEL_THRESHOLD", "many"),
                                        ("REFERENCE_INTENSITY", (1, 2)), ("RADIUS_FRACTION", None)])
def test_unusable_config_values_fail_before_rotation(map_a, full_disk_b, fixed_rotation, key, value):
    cfg = dict(CONFIG, **{key: value})
    with pytest.raises(ValueError, match=key):
        align_and_compare(map_a, full_disk_b, 2.0, (1.0, 1.0), rotate=fixed_rotation, config=cfg)
    assert fixed_rotation.calls == []


def test_numeric_strings_in_config_are_accepted(map_a, full_disk_b, fixed_rotation):
    cfg = dict(CONFIG, DARK_OFFSET="4", INTENSITY_SCALE="0.5")
    res = align_and_compare(map_a, full_disk_b, 2.0, (1.0, 1.0), rotate=fixed_rotation, config=cfg)
    assert res.intensity_a == pytest.approx(4.0)
