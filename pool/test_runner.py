"""Session tests: the scheduling logic behind the TUI stepper."""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pool.errors import StackUnderflow
from pool.grid import parse_grid
from pool.machine import CONTINUE, Fault, Output, Terminated, Vec
from pool.runner import Session


def _finish(session: Session, limit: int = 1000):
    for _ in range(limit):
        if session.finished:
            return
        session.tick()
    raise AssertionError("program did not finish")


def test_tick_steps_while_running():
    session = Session(parse_grid(".5:*;"))
    assert session.tick() is CONTINUE
    assert list(session.state.stack) == [5]
    assert session.status() == "running"


def test_step_once_only_while_paused():
    session = Session(parse_grid(".5:*;"))
    assert session.step_once() is None
    assert session.state.steps == 0

    session.toggle_pause()
    assert session.paused
    assert session.tick() is None
    assert session.step_once() is CONTINUE
    assert session.state.steps == 1
    assert session.status() == "paused"


def test_output_collected():
    session = Session(parse_grid('."iH",,0;'))
    outcomes = []
    while not session.finished:
        outcomes.append(session.tick())
    assert Output(ord("H")) in outcomes
    assert len(session.output) == 16
    assert session.output_text() == "Hi"
    assert session.outcome == Terminated(0)


def test_no_steps_after_finish():
    session = Session(parse_grid(".7;"))
    _finish(session)
    steps = session.state.steps
    assert session.tick() is None
    session.toggle_pause()
    assert session.step_once() is None
    assert session.state.steps == steps


def test_reset_only_after_exit():
    grid = parse_grid('."A",3;')
    session = Session(grid)
    session.tick()
    assert not session.reset()

    _finish(session)
    assert session.terminated
    assert session.exit_code() == 3
    assert "exited with 3" in session.status()

    assert session.reset()
    assert session.grid is grid
    assert not session.finished
    assert session.output == bytearray()
    assert session.state.steps == 0
    assert session.state.pointer == Vec(0, 0)

    _finish(session)
    assert session.outcome == Terminated(3)


def test_fault_is_final():
    session = Session(parse_grid(".+"))
    outcome = session.tick()
    assert isinstance(outcome, Fault)
    assert isinstance(session.fault.error, StackUnderflow)
    assert session.status().startswith("fault: stack-underflow")
    assert not session.reset()
    assert session.tick() is None
    assert session.exit_code() == 0


def test_cursor_clamped_to_grid():
    session = Session(parse_grid("ab\n.cd\n"))
    assert session.cursor == Vec(0, 1)
    session.move_cursor(-1, 0)
    assert session.cursor == Vec(0, 1)
    session.move_cursor(10, 10)
    assert session.cursor == Vec(3, 1)
    session.move_cursor(0, -5)
    assert session.cursor == Vec(3, 0)
