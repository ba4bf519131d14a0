"""Run configuration, loaded through hydra/omegaconf by ``main.py``."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from omegaconf import OmegaConf

from octet.rendering import COLOR_SCHEMES


@dataclass
class EmulatorConfig:
    """Settings for one interpreter run.

    Attributes:
        rom: Path of the program to load
        instruction_frequency: Instructions executed per second
        timer_frequency: Delay/sound timer decrements per second
        render_frequency: Input polls and redraw checks per second
        scale: Window pixels per CHIP-8 pixel
        color_scheme: Name of a scheme in ``octet.rendering.COLOR_SCHEMES``
        log_level: Console logger level
        seed: PRNG seed for CXNN
        idle_sleep: Seconds to sleep when nothing is due
    """
    rom: Optional[str] = None
    instruction_frequency: int = 700
    timer_frequency: int = 60
    render_frequency: int = 60
    scale: int = 8
    color_scheme: str = "classic"
    log_level: str = "INFO"
    seed: int = 0
    idle_sleep: float = 0.001


def validate_config(config: EmulatorConfig) -> EmulatorConfig:
    for name in ("instruction_frequency", "timer_frequency", "render_frequency", "scale"):
        if getattr(config, name) <= 0:
            raise ValueError(f"{name} must be positive, got {getattr(config, name)}")
    if config.idle_sleep < 0:
        raise ValueError(f"idle_sleep must not be negative, got {config.idle_sleep}")
    if config.color_scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{config.color_scheme}'. Available: {list(COLOR_SCHEMES.keys())}"
        )
    return config


def config_from_dict(cfg: Optional[Mapping[str, Any]] = None) -> EmulatorConfig:
    """Merge ``cfg`` (a dict or DictConfig) onto the defaults and validate."""
    merged = OmegaConf.merge(OmegaConf.structured(EmulatorConfig), cfg or {})
    return validate_config(OmegaConf.to_object(merged))
