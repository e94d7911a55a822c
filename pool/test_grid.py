"""Loader tests: padding, start marker, line endings."""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import dataclasses

import pytest

from pool.grid import Grid, load_grid, parse_grid


def test_rows_padded_to_widest_plus_one():
    grid = parse_grid("ab\nabcd\n")
    assert grid.height == 2
    assert grid.width == 5
    assert len(grid.cells) == grid.width * grid.height
    assert grid.rows() == ["ab   ", "abcd "]


def test_start_marker_first_row_major():
    grid = parse_grid("xx\nx.x.\n.\n")
    assert grid.start == (1, 1)


def test_start_defaults_to_origin():
    grid = parse_grid("123\n")
    assert grid.start == (0, 0)


def test_crlf_and_missing_final_newline():
    grid = parse_grid("ab\r\ncd")
    assert grid.rows() == ["ab ", "cd "]


def test_empty_source():
    grid = parse_grid("")
    assert grid.height == 0
    assert grid.width == 1
    assert not grid.contains(0, 0)


def test_at_and_contains():
    grid = parse_grid(".5:*;")
    assert grid.at(1, 0) == "5"
    assert grid.contains(5, 0)      # trailing padding column
    assert not grid.contains(6, 0)
    assert not grid.contains(-1, 0)
    assert not grid.contains(0, 1)


def test_grid_is_immutable():
    grid = parse_grid("ab")
    with pytest.raises(dataclasses.FrozenInstanceError):
        grid.width = 10


def test_cell_count_checked():
    with pytest.raises(ValueError):
        Grid(("a", "b", "c"), 2, 2)


def test_load_grid_reads_file(tmp_path):
    path = tmp_path / "prog.pool"
    path.write_text("  .1;\n√\n", encoding="utf-8")
    grid = load_grid(path)
    assert grid.start == (0, 2)
    assert grid.at(0, 1) == "√"
