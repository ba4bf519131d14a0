"""
Run a CHIP-8 program in a pygame window.

    python main.py rom=games/pong.ch8 instruction_frequency=600 color_scheme=amber

Exits with status 1 when no program is given and 2 when the program faults.
"""

import hydra
from omegaconf import DictConfig, OmegaConf

from octet.config import EmulatorConfig, config_from_dict
from octet.errors import EmulatorError
from octet.logging import EmulatorLogger
from octet.machine import Chip8
from octet.scheduler import CycleScheduler


def run(config: EmulatorConfig) -> int:
    """Run ``config.rom`` until quit or fault and return the exit status."""
    logger = EmulatorLogger(log_level=config.log_level)

    if config.rom is None:
        logger.error("No program given, pass rom=<path>")
        return 1

    machine = Chip8.from_file(hydra.utils.to_absolute_path(config.rom), seed=config.seed, logger=logger)

    # Imported late so the package stays usable without a display
    from octet.frontend import PygameFrontend
    frontend = PygameFrontend(scale=config.scale, color_scheme=config.color_scheme, logger=logger)
    try:
        result = CycleScheduler(machine, config, frontend, logger=logger).run()
    finally:
        frontend.close()

    if isinstance(result.fault, EmulatorError):
        return 2
    return 0


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    # hydra discards the task's return value
    raise SystemExit(run(config_from_dict(OmegaConf.to_container(cfg))))


if __name__ == "__main__":
    main()
