"""Tests for run configuration."""

import pytest
from omegaconf import OmegaConf
from octet.config import EmulatorConfig, config_from_dict


def test_defaults():
    config = config_from_dict()
    assert config == EmulatorConfig()
    assert config.instruction_frequency == 700
    assert config.timer_frequency == 60


def test_overrides_from_dictconfig():
    cfg = OmegaConf.create({"rom": "pong.ch8", "instruction_frequency": 500, "color_scheme": "amber"})
    config = config_from_dict(cfg)
    assert config.rom == "pong.ch8"
    assert config.instruction_frequency == 500
    assert config.color_scheme == "amber"
    assert config.render_frequency == 60


@pytest.mark.parametrize("overrides", [
    {"instruction_frequency": 0},
    {"timer_frequency": -60},
    {"scale": 0},
    {"idle_sleep": -1.0},
    {"color_scheme": "plaid"},
])
def test_invalid_settings(overrides):
    with pytest.raises(ValueError):
        config_from_dict(overrides)


def test_unknown_key_rejected():
    with pytest.raises(Exception):
        config_from_dict({"turbo": True})
