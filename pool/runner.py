"""
runner — interactive scheduling around one pool run.

Session owns the grid, the machine state and everything the stepper shows
(output bytes, pause flag, edit cursor). The TUI only forwards timer ticks
and key presses here, so the engine is driven from a single place.
"""

from __future__ import annotations

from .grid import Grid
from .machine import (
    Fault, MachineState, Output, StepOutcome, Terminated, Vec,
    is_terminal, step,
)

# Seconds between timer ticks in the interactive stepper.
DEFAULT_TICK = 0.2


class Session:
    """Pause/step/reset control for the interactive driver."""

    def __init__(self, grid: Grid, paused: bool = False):
        self.grid = grid
        self.paused = paused
        self.state = MachineState.fresh(grid)
        self.output = bytearray()
        self.outcome: StepOutcome | None = None
        row, col = grid.start
        self.cursor = Vec(col, row)

    @property
    def finished(self) -> bool:
        return self.outcome is not None

    @property
    def terminated(self) -> bool:
        return isinstance(self.outcome, Terminated)

    @property
    def fault(self) -> Fault | None:
        return self.outcome if isinstance(self.outcome, Fault) else None

    # -------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------

    def _step(self) -> StepOutcome:
        outcome = step(self.grid, self.state)
        if isinstance(outcome, Output):
            self.output.extend(outcome.data)
        elif is_terminal(outcome):
            self.outcome = outcome
        return outcome

    def tick(self) -> StepOutcome | None:
        """Timer tick: one step unless paused or finished."""
        if self.paused or self.finished:
            return None
        return self._step()

    def step_once(self) -> StepOutcome | None:
        """Manual single step, only while paused."""
        if not self.paused or self.finished:
            return None
        return self._step()

    def toggle_pause(self):
        self.paused = not self.paused

    def reset(self) -> bool:
        """Start over after a normal exit. Faulted runs are not resumable."""
        if not self.terminated:
            return False
        self.state = MachineState.fresh(self.grid)
        self.output.clear()
        self.outcome = None
        return True

    # -------------------------------------------------------------------
    # Edit cursor
    # -------------------------------------------------------------------

    def move_cursor(self, dx: int, dy: int):
        x = min(max(self.cursor.x + dx, 0), max(self.grid.width - 1, 0))
        y = min(max(self.cursor.y + dy, 0), max(self.grid.height - 1, 0))
        self.cursor = Vec(x, y)

    # -------------------------------------------------------------------
    # Display helpers
    # -------------------------------------------------------------------

    def output_text(self) -> str:
        """Emitted bytes as text; the zero padding of each word is dropped."""
        return self.output.replace(b"\x00", b"").decode("latin-1")

    def status(self) -> str:
        if self.fault is not None:
            return f"fault: {self.fault.message}"
        if self.terminated:
            return f"exited with {self.outcome.code} (r to reset)"
        return "paused" if self.paused else "running"

    def exit_code(self) -> int:
        return self.outcome.code if self.terminated else 0
