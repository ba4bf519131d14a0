"""Console logging utilities for the octet interpreter.

This module provides a small level-filtered console logger, a specialization
that knows how to report programs, faults and register dumps, and a tqdm
progress bar helper for headless runs.
"""

import time
import sys
from typing import Any, Dict, Optional

from tqdm import tqdm

from octet.errors import EmulatorError


class ConsoleLogger:
    """Flexible console logger with level filtering and colors."""

    def __init__(
        self,
        name: str = "Octet",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class EmulatorLogger(ConsoleLogger):
    """Logger with helpers for interpreter events."""

    def __init__(self, name: str = "Octet", **kwargs):
        super().__init__(name, **kwargs)

    def log_program_loaded(self, source: str, size: int):
        self.info(f"Loaded {source} ({size} bytes)")

    def log_fault(self, error: EmulatorError):
        """Report a fatal condition with the instruction that caused it."""
        self.error(f"{type(error).__name__}: {error}")

    def log_state(self, state: Any, level: str = "DEBUG"):
        """Dump pc, I, timers and the sixteen registers."""
        if not self._should_log(level):
            return
        self.log(
            level,
            f"PC: 0x{int(state.pc):03X} I: 0x{int(state.I):03X} "
            f"DT: {int(state.delay_timer)} ST: {int(state.sound_timer)} "
            f"SP: {int(state.stack.pointer)}"
        )
        for i in range(0, 16, 4):
            regs = " ".join(f"V{j:X}:{int(state.V[j]):02X}" for j in range(i, i + 4))
            self.log(level, f"  {regs}")

    def log_run_summary(self, summary: Dict[str, Any]):
        """Log run completion with final counters."""
        elapsed = time.time() - self.start_time
        self.info("=" * 60)
        self.info(f"Run finished after {elapsed:.1f}s")
        for key, value in summary.items():
            if isinstance(value, float):
                self.info(f"  {key}: {value:.2f}")
            else:
                self.info(f"  {key}: {value}")
        self.info("=" * 60)


def build_progress_bar(total: int, desc: str = "Cycles", disable: Optional[bool] = None) -> tqdm:
    """Progress bar for headless runs, silent when stdout is not a terminal."""
    if disable is None:
        disable = not (hasattr(sys.stdout, "isatty") and sys.stdout.isatty())
    return tqdm(total=total, desc=desc, unit="instr", disable=disable)
