"""
Textual TUI stepper for pool programs.

Runs a program one cell per timer tick and shows the grid with the pointer
highlighted, the operand stack, the memory bank and the output so far.

Usage:
    pool examples/squares.pool -g
    pool examples/hello.pool -g --tick 0.05

Keys: q quit, tab focus, space pause/resume, . step (paused),
r reset (after exit), h/j/k/l or arrows move the edit cursor.
"""

from __future__ import annotations

import sys

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import ScrollableContainer
from textual.widgets import Footer, Static

from pool.grid import Grid
from pool.machine import FAULT_EXIT_CODE, Fault, StepOutcome, exit_status
from pool.runner import DEFAULT_TICK, Session

MEMORY_ROW_WORDS = 8


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

DEBUGGER_CSS = """
Screen {
    layout: grid;
    grid-size: 3 3;
    grid-rows: 2fr 1fr auto;
}

.panel {
    border: round $accent;
    border-title-align: left;
    overflow-y: auto;
    height: 100%;
}

.panel:focus {
    border: heavy $accent;
}

#program-panel { column-span: 3; }

#status {
    column-span: 3;
    height: 1;
    color: $text-muted;
}
"""


# ---------------------------------------------------------------------------
# Panel widgets
# ---------------------------------------------------------------------------

class ProgramPanel(ScrollableContainer):
    """The grid, pointer in red, edit cursor in cyan while paused."""
    BORDER_TITLE = "Program"

    def compose(self) -> ComposeResult:
        yield Static("", id="program-content")


class StackPanel(ScrollableContainer):
    """Operand stack, top first."""
    BORDER_TITLE = "Stack"

    def compose(self) -> ComposeResult:
        yield Static("", id="stack-content")


class MemoryPanel(ScrollableContainer):
    """Hex dump of the memory bank."""
    BORDER_TITLE = "Memory"

    def compose(self) -> ComposeResult:
        yield Static("", id="memory-content")


class OutputPanel(ScrollableContainer):
    """Text written by `,` so far."""
    BORDER_TITLE = "Output"

    def compose(self) -> ComposeResult:
        yield Static("", id="output-content")


# ---------------------------------------------------------------------------
# Main app
# ---------------------------------------------------------------------------

class PoolDebugger(App):
    """Timer-driven stepper. Exits with the Fault outcome if the run faults."""

    CSS = DEBUGGER_CSS
    TITLE = "pool"
    SUB_TITLE = "graphical pool interpreter"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("tab", "focus_next", "Focus"),
        Binding("space", "toggle_pause", "Pause"),
        Binding("full_stop", "step", "Step"),
        Binding("r", "reset", "Reset"),
        Binding("h,left", "cursor(-1, 0)", "Cursor", priority=True),
        Binding("j,down", "cursor(0, 1)", "Cursor", show=False, priority=True),
        Binding("k,up", "cursor(0, -1)", "Cursor", show=False, priority=True),
        Binding("l,right", "cursor(1, 0)", "Cursor", show=False, priority=True),
    ]

    def __init__(self, session: Session, tick: float = DEFAULT_TICK):
        super().__init__()
        self.session = session
        self.tick_interval = tick

    def compose(self) -> ComposeResult:
        yield ProgramPanel(id="program-panel", classes="panel")
        yield StackPanel(id="stack-panel", classes="panel")
        yield MemoryPanel(id="memory-panel", classes="panel")
        yield OutputPanel(id="output-panel", classes="panel")
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#program-panel").focus()
        self.set_interval(self.tick_interval, self.advance)
        self.refresh_panels()

    # -------------------------------------------------------------------
    # Panel refresh
    # -------------------------------------------------------------------

    def refresh_panels(self) -> None:
        self._refresh_program()
        self._refresh_stack()
        self._refresh_memory()
        self._refresh_output()
        self._refresh_status()

    def _refresh_program(self) -> None:
        s = self.session
        ptr = s.state.pointer
        text = Text()
        for y, row in enumerate(s.grid.rows()):
            for x, ch in enumerate(row):
                if s.paused and x == s.cursor.x and y == s.cursor.y:
                    text.append(ch, style="black on bright_cyan")
                elif x == ptr.x and y == ptr.y:
                    text.append(ch, style="bold white on red")
                else:
                    text.append(ch)
            text.append("\n")
        content = self.query_one("#program-content", Static)
        content.update(text if s.grid.height else "(empty program)")

    def _refresh_stack(self) -> None:
        words = list(self.session.state.stack)
        lines = []
        for i in range(len(words) - 1, -1, -1):
            if i == len(words) - 1:
                lines.append(f"[[ {words[i]:5d} ]]")
            else:
                lines.append(f" [ {words[i]:5d} ] ")
        content = self.query_one("#stack-content", Static)
        content.update(Text("\n".join(lines) if lines else "(empty)"))

    def _refresh_memory(self) -> None:
        bank = self.session.state.memory
        lines = []
        for base in range(0, bank.size, MEMORY_ROW_WORDS):
            row = bank.data[base:base + MEMORY_ROW_WORDS]
            words = " ".join(f"{int(w):02x}" for w in row)
            lines.append(f"{base:06x}  {words}")
        content = self.query_one("#memory-content", Static)
        content.update(Text("\n".join(lines)))

    def _refresh_output(self) -> None:
        content = self.query_one("#output-content", Static)
        content.update(Text(self.session.output_text()))

    def _refresh_status(self) -> None:
        st = self.session.state
        mode = " string" if st.in_string else ""
        text = (
            f"{self.session.status()}  step {st.steps}  "
            f"pos ({st.pointer.x},{st.pointer.y})  "
            f"vel ({st.velocity.x},{st.velocity.y}){mode}"
        )
        self.query_one("#status", Static).update(Text(text))

    # -------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------

    def advance(self) -> None:
        """Timer callback."""
        outcome = self.session.tick()
        if outcome is not None:
            self._after_step(outcome)

    def _after_step(self, outcome: StepOutcome) -> None:
        if isinstance(outcome, Fault):
            # Leave the UI first; the caller reports the fault.
            self.exit(outcome)
            return
        self.refresh_panels()

    # -------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------

    def action_toggle_pause(self) -> None:
        self.session.toggle_pause()
        self.refresh_panels()

    def action_step(self) -> None:
        outcome = self.session.step_once()
        if outcome is not None:
            self._after_step(outcome)

    def action_reset(self) -> None:
        if self.session.reset():
            self.refresh_panels()

    def action_cursor(self, dx: int, dy: int) -> None:
        self.session.move_cursor(dx, dy)
        self._refresh_program()


def run_debugger(grid: Grid, tick: float = DEFAULT_TICK) -> int:
    """Run the TUI and return the process exit status."""
    session = Session(grid)
    result = PoolDebugger(session, tick).run()
    if isinstance(result, Fault):
        print(f"Error: {result.message}", file=sys.stderr)
        return FAULT_EXIT_CODE
    return exit_status(session.exit_code())
