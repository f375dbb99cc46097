from straylight_tool import config


def test_load_config_overrides(tmp_path):
    p = tmp_path / "params.txt"
    p.write_text("# scattered light run\n"
                 "reference_intensity = 1843.5   # published level\n"
                 "BOX_HALF_WIDTH=15\n"
                 "\n"
                 "DARK_OFFSET = dark.fits\n"
                 "NOT_A_KEY = 3\n"
                 "garbage line\n")
    cfg = config.load_config(str(p))
    assert cfg["REFERENCE_INTENSITY"] == 1843.5
    assert cfg["BOX_HALF_WIDTH"] == 15
    assert cfg["DARK_OFFSET"] == "dark.fits"
    assert "NOT_A_KEY" not in cfg
    assert cfg["RADIUS_FRACTION"] == config.CONFIG["RADIUS_FRACTION"]


def test_load_config_does_not_touch_defaults(tmp_path):
    p = tmp_path / "params.txt"
    p.write_text("RADIUS_FRACTION = 0.5\n")
    before = dict(config.CONFIG)
    cfg = config.load_config(str(p))
    assert cfg["RADIUS_FRACTION"] == 0.5
    assert config.CONFIG == before


def test_missing_file_returns_defaults(tmp_path):
    assert config.load_config(str(tmp_path / "nope.txt")) == config.CONFIG
    assert config.load_config(None) == config.CONFIG


def test_base_config_is_layered(tmp_path):
    p = tmp_path / "params.txt"
    p.write_text("DARK_OFFSET = 2.0\n")
    base = config.load_config(None)
    base["INTENSITY_SCALE"] = 3.0
    cfg = config.load_config(str(p), base=base)
    assert cfg["DARK_OFFSET"] == 2.0 and cfg["INTENSITY_SCALE"] == 3.0
