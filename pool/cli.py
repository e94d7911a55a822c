"""
pool — command-line interpreter for the pool 2D language.

Usage:
    pool examples/hello.pool
    pool examples/squares.pool --trace
    pool examples/squares.pool -g
    python -m pool.cli examples/hello.pool
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import BinaryIO, List, Optional

from pool.grid import Grid, load_grid
from pool.machine import (
    FAULT_EXIT_CODE, Fault, MachineState, StepOutcome,
    encode_word, exit_status, run,
)
from pool.runner import DEFAULT_TICK


def _trace_printer(grid: Grid):
    """Per-step trace line on stderr: step, pointer, cell, stack."""
    def trace(state: MachineState, outcome: StepOutcome) -> None:
        p = state.pointer
        ch = grid.at(p.x, p.y) if grid.contains(p.x, p.y) else ""
        stack = " ".join(str(v) for v in state.stack)
        print(f"{state.steps:6d} ({p.x},{p.y}) {ch!r} [{stack}]", file=sys.stderr)
    return trace


def run_batch(grid: Grid, out: BinaryIO, trace: bool = False) -> int:
    """Run to completion, writing output words to `out`. Returns exit status."""
    state = MachineState.fresh(grid)

    def emit(value: int) -> None:
        out.write(encode_word(value))
        out.flush()

    outcome = run(grid, state, on_output=emit,
                  trace=_trace_printer(grid) if trace else None)
    if isinstance(outcome, Fault):
        print(f"Error: {outcome.message}", file=sys.stderr)
        return FAULT_EXIT_CODE
    return exit_status(outcome.code)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="interpreter for the pool 2d language",
        prog="pool",
    )
    parser.add_argument("file", help="Path to .pool program file")
    parser.add_argument("-g", "--graphical", action="store_true",
                        help="Run in the interactive terminal stepper")
    parser.add_argument("--tick", type=float, default=DEFAULT_TICK,
                        help="Seconds between steps in graphical mode "
                             f"(default {DEFAULT_TICK})")
    parser.add_argument("--trace", action="store_true",
                        help="Print every step to stderr (batch mode)")
    args = parser.parse_args(argv)

    if args.tick <= 0:
        parser.error("--tick must be positive")

    path = Path(args.file)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1
    try:
        grid = load_grid(path)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.graphical:
        from pool.debugger import run_debugger
        return run_debugger(grid, tick=args.tick)

    return run_batch(grid, sys.stdout.buffer, trace=args.trace)


if __name__ == "__main__":
    sys.exit(main())
