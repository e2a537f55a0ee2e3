import json

import pytest

from bellows_config import GeometryConfig, get_defaults, load_config, save_config


def test_defaults():
    config = GeometryConfig()
    assert (config.canvas_width, config.canvas_height) == (800.0, 500.0)
    assert config.bellows_radius == 60.0
    assert config.peak_radius == 85.0
    assert config.base_length == 350.0
    assert config.single_convolutions == 10
    assert config.universal_convolutions == 5
    assert config.handle_ratio == 0.35
    assert config.tilt_clamp == 0.8
    assert get_defaults() == config.to_dict()


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(str(tmp_path / "absent.json")) == GeometryConfig()


def test_partial_file_overlays_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"base_length": 400.0, "single_convolutions": 8}))
    config = load_config(str(path))
    assert config.base_length == 400.0
    assert config.single_convolutions == 8
    assert config.bellows_radius == 60.0


def test_save_and_load(tmp_path):
    path = str(tmp_path / "config.json")
    config = GeometryConfig(lateral_travel=80.0, animation_speed=0.05)
    save_config(config, path)
    assert load_config(path) == config


def test_float_convolution_count_rejected_on_load(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"single_convolutions": 8.0}))
    with pytest.raises(ValueError, match="single_convolutions"):
        load_config(str(path))


def test_zero_convolutions_accepted():
    config = GeometryConfig.from_dict(dict(get_defaults(), single_convolutions=0))
    assert config.single_convolutions == 0


def test_unknown_key_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"bellow_radius": 50.0}))
    with pytest.raises(ValueError, match="bellow_radius"):
        load_config(str(path))


@pytest.mark.parametrize("overrides", [
    {"base_length": 0.0},
    {"axial_travel": 400.0},
    {"tilt_clamp": 1.0},
    {"bend_epsilon": 0.0},
    {"universal_spool_fraction": 0.6},
    {"pressure_opacity_divisor": 0.0},
    {"single_convolutions": 8.0},
    {"universal_convolutions": -1},
    {"universal_convolutions": True},
    {"universal_bellows_fraction": 0.0, "universal_spool_fraction": 1.0},
])
def test_invalid_values_rejected(overrides):
    data = get_defaults()
    data.update(overrides)
    with pytest.raises(ValueError):
        GeometryConfig.from_dict(data)
