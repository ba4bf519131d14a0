"""Cooperative cycle scheduler.

One loop multiplexes three cadences from a single clock: timer ticks,
instruction cycles, and frontend input/redraw. Each iteration checks the
elapsed time against each cadence independently and sleeps briefly when
nothing is due, so a program spinning on FX0A never stops the timers or
input polling.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

import jax.numpy as jnp

from octet.config import EmulatorConfig
from octet.errors import EmulatorError
from octet.logging import EmulatorLogger, build_progress_bar
from octet.machine import Chip8

# Upper bound on catch-up work per iteration after a stall
MAX_INSTRUCTIONS_PER_ITERATION = 64
MAX_TIMER_TICKS_PER_ITERATION = 4


class Frontend:
    """External input/render collaborator driven by the scheduler.

    The default implementation is headless: it never quits and draws nothing.
    """

    def poll(self, machine: Chip8) -> bool:
        """Feed pending input events into ``machine``. Return False to quit."""
        return True

    def render(self, display: jnp.ndarray) -> None:
        """Draw a display grid that changed since the last render."""

    def close(self) -> None:
        pass


@dataclass
class RunResult:
    instructions: int
    timer_ticks: int
    frames: int
    elapsed: float
    fault: Optional[EmulatorError] = None
    dropped: int = 0

    def as_dict(self) -> dict:
        return {
            "instructions": self.instructions,
            "timer_ticks": self.timer_ticks,
            "frames": self.frames,
            "elapsed_s": self.elapsed,
            "fault": repr(self.fault) if self.fault else None,
            "dropped": self.dropped,
        }


class CycleScheduler:
    """Drive a ``Chip8`` at fixed timer, instruction and render rates."""

    def __init__(
        self,
        machine: Chip8,
        config: Optional[EmulatorConfig] = None,
        frontend: Optional[Frontend] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[EmulatorLogger] = None,
    ):
        self.machine = machine
        self.config = config or EmulatorConfig()
        self.frontend = frontend or Frontend()
        self.clock = clock
        self.sleep = sleep
        self.logger = logger or machine.logger

        self.instruction_period = 1.0 / self.config.instruction_frequency
        self.timer_period = 1.0 / self.config.timer_frequency
        self.render_period = 1.0 / self.config.render_frequency
        self._quit = False

    def stop(self) -> None:
        """Request shutdown; honored at the start of the next iteration."""
        self._quit = True

    def run(self, max_instructions: Optional[int] = None, max_time: Optional[float] = None) -> RunResult:
        """Run until quit, a fatal fault, or one of the optional limits."""
        self._quit = False
        start = self.clock()
        last_timer = last_instruction = last_render = start
        instructions = timer_ticks = frames = dropped = 0
        fault = None

        self.logger.info(
            f"Running at {self.config.instruction_frequency} Hz, "
            f"timers {self.config.timer_frequency} Hz, render {self.config.render_frequency} Hz"
        )

        while not self._quit:
            now = self.clock()
            if max_time is not None and now - start >= max_time:
                break
            did_work = False

            if now - last_render >= self.render_period:
                last_render = now
                if not self.frontend.poll(self.machine):
                    self.logger.info("Quit requested")
                    break
                display = self.machine.consume_display()
                if display is not None:
                    self.frontend.render(display)
                    frames += 1
                did_work = True

            ticks = 0
            while now - last_timer >= self.timer_period and ticks < MAX_TIMER_TICKS_PER_ITERATION:
                self.machine.tick_timers()
                last_timer += self.timer_period
                ticks += 1
            if ticks == MAX_TIMER_TICKS_PER_ITERATION:
                last_timer = now
            timer_ticks += ticks
            did_work = did_work or ticks > 0

            due = int((now - last_instruction) / self.instruction_period)
            if due > 0:
                batch = min(due, MAX_INSTRUCTIONS_PER_ITERATION)
                if max_instructions is not None:
                    batch = min(batch, max_instructions - instructions)
                try:
                    for _ in range(batch):
                        self.machine.step()
                        instructions += 1
                except EmulatorError as e:
                    fault = e
                    break
                if due > MAX_INSTRUCTIONS_PER_ITERATION:
                    if not dropped:
                        self.logger.warning(
                            f"Falling behind {self.config.instruction_frequency} Hz, "
                            f"dropping {due - batch} due instructions"
                        )
                    dropped += due - batch
                    last_instruction = now
                else:
                    last_instruction += batch * self.instruction_period
                did_work = True
                if max_instructions is not None and instructions >= max_instructions:
                    break

            if not did_work and self.config.idle_sleep > 0:
                self.sleep(self.config.idle_sleep)

        result = RunResult(instructions, timer_ticks, frames, self.clock() - start, fault, dropped)
        self.logger.log_run_summary(result.as_dict())
        return result


def run_headless(
    machine: Chip8,
    instructions: int,
    instructions_per_tick: int = 12,
    progress: Optional[bool] = None,
) -> RunResult:
    """Execute up to ``instructions`` cycles as fast as possible.

    Timers tick once every ``instructions_per_tick`` instructions, which keeps
    the 700 Hz / 60 Hz ratio of a real-time run. Stops at the first fault.
    """
    start = time.perf_counter()
    executed = ticks = 0
    fault = None
    with build_progress_bar(instructions, disable=None if progress is None else not progress) as bar:
        for executed in range(instructions):
            try:
                machine.step()
            except EmulatorError as e:
                fault = e
                break
            if (executed + 1) % instructions_per_tick == 0:
                machine.tick_timers()
                ticks += 1
            bar.update(1)
        else:
            executed = instructions
    return RunResult(executed, ticks, 0, time.perf_counter() - start, fault)
