"""Tests for the cooperative cycle scheduler."""

import pytest
from octet import StackUnderflow, PROGRAM_START
from octet.config import EmulatorConfig
from octet.scheduler import CycleScheduler, Frontend, run_headless


class FakeClock:
    """Deterministic time source; every reading moves time forward a little."""

    def __init__(self, step: float = 0.0005):
        self.now = 0.0
        self.step = step
        self.slept = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now

    def sleep(self, seconds: float) -> None:
        self.slept += seconds
        self.now += seconds


class RecordingFrontend(Frontend):
    def __init__(self, quit_after=None, press_at=None, key=None):
        self.polls = 0
        self.renders = []
        self.quit_after = quit_after
        self.press_at = press_at
        self.key = key

    def poll(self, machine):
        self.polls += 1
        if self.press_at is not None and self.polls == self.press_at:
            machine.press_key(self.key)
        return self.quit_after is None or self.polls < self.quit_after

    def render(self, display):
        self.renders.append(display)


def make_scheduler(machine, frontend=None, **overrides):
    clock = FakeClock()
    config = EmulatorConfig(**overrides)
    return CycleScheduler(machine, config, frontend, clock=clock, sleep=clock.sleep), clock


class TestCadences:
    """Timers, instructions and rendering run independently."""

    def test_instruction_limit(self, make_machine):
        machine = make_machine(0x1200)  # jump to self
        scheduler, _ = make_scheduler(machine)

        result = scheduler.run(max_instructions=70)

        assert result.instructions == 70
        assert result.fault is None
        assert result.timer_ticks >= 4

    def test_instruction_rate(self, make_machine):
        machine = make_machine(0x1200)
        scheduler, _ = make_scheduler(machine, instruction_frequency=500)

        result = scheduler.run(max_time=0.2)

        assert 90 <= result.instructions <= 101
        assert result.dropped == 0

    def test_backlog_is_dropped_and_counted(self, make_machine):
        machine = make_machine(0x1200)
        clock = FakeClock(step=0.5)  # every reading is 350 instructions late
        scheduler = CycleScheduler(machine, EmulatorConfig(), clock=clock, sleep=clock.sleep)

        result = scheduler.run(max_instructions=200)

        assert result.instructions == 200
        assert result.dropped > 0
        assert result.as_dict()["dropped"] == result.dropped

    def test_timers_tick_while_waiting_for_key(self, make_machine):
        machine = make_machine(0x6010, 0xF015, 0xF00A)  # DT = 16, wait for key
        scheduler, _ = make_scheduler(machine)

        scheduler.run(max_time=0.5)

        assert machine.delay_timer == 0
        assert machine.state.pc == PROGRAM_START + 4

    def test_key_releases_wait(self, make_machine):
        machine = make_machine(0xF00A, 0x1202)
        frontend = RecordingFrontend(press_at=5, key=0x4)
        scheduler, _ = make_scheduler(machine, frontend)

        scheduler.run(max_time=0.3)

        assert machine.state.V[0] == 4
        assert machine.state.pc == PROGRAM_START + 2

    def test_render_only_when_changed(self, make_machine):
        machine = make_machine(0x00E0, 0x1202)
        frontend = RecordingFrontend()
        scheduler, _ = make_scheduler(machine, frontend)

        result = scheduler.run(max_time=0.2)

        assert len(frontend.renders) == 1
        assert result.frames == 1
        assert frontend.polls >= 5

    def test_idle_sleeps(self, make_machine):
        machine = make_machine(0x1200)
        scheduler, clock = make_scheduler(machine, instruction_frequency=10)

        scheduler.run(max_time=0.1)

        assert clock.slept > 0


class TestShutdown:
    """Quit signals and faults end the run."""

    def test_frontend_quit(self, make_machine):
        machine = make_machine(0x1200)
        frontend = RecordingFrontend(quit_after=3)
        scheduler, _ = make_scheduler(machine, frontend)

        result = scheduler.run()

        assert frontend.polls == 3
        assert result.fault is None

    def test_stop(self, make_machine):
        machine = make_machine(0x1200)
        scheduler, _ = make_scheduler(machine)

        class StoppingFrontend(Frontend):
            def poll(self, machine):
                scheduler.stop()
                return True

        scheduler.frontend = StoppingFrontend()
        result = scheduler.run()

        assert result.fault is None
        assert machine.state.pc == 0x200

    def test_fault_ends_run(self, make_machine):
        machine = make_machine(0x00EE)
        scheduler, _ = make_scheduler(machine)

        result = scheduler.run()

        assert isinstance(result.fault, StackUnderflow)
        assert result.instructions == 0
        assert machine.halted


class TestHeadless:
    """run_headless steps as fast as possible."""

    def test_headless_ticks_timers(self, make_machine):
        machine = make_machine(0x6003, 0xF015, 0x1204)

        result = run_headless(machine, 40, instructions_per_tick=12, progress=False)

        assert result.instructions == 40
        assert result.timer_ticks == 3
        assert machine.delay_timer == 0

    def test_headless_stops_on_fault(self, make_machine):
        machine = make_machine(0x6001, 0x00EE)

        result = run_headless(machine, 10, progress=False)

        assert result.instructions == 1
        assert isinstance(result.fault, StackUnderflow)
