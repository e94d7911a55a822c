"""
Program grid and loader.

A pool program is a rectangle of characters. Rows shorter than the widest
one are padded with spaces, and one extra padding column is added on the
right. The first `.` (row-major) marks the start cell; without one the start
is (0, 0). The pointer begins *on* the start cell, so the first step moves
past it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

START_MARKER = "."
FILLER = " "


@dataclass(frozen=True)
class Grid:
    cells: tuple[str, ...]
    width: int
    height: int
    start: tuple[int, int] = (0, 0)   # (row, col)

    def __post_init__(self):
        if len(self.cells) != self.width * self.height:
            raise ValueError(
                f"grid holds {len(self.cells)} cells, "
                f"expected {self.width}x{self.height}")

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def at(self, x: int, y: int) -> str:
        return self.cells[x + y * self.width]

    def rows(self) -> list[str]:
        w = self.width
        return ["".join(self.cells[i:i + w]) for i in range(0, len(self.cells), w)]


def _split_rows(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_grid(text: str) -> Grid:
    """Build a Grid from program source text."""
    rows = _split_rows(text)
    width = max((len(r) for r in rows), default=0) + 1
    height = len(rows)

    start = (0, 0)
    for row, line in enumerate(rows):
        col = line.find(START_MARKER)
        if col >= 0:
            start = (row, col)
            break

    cells: list[str] = []
    for line in rows:
        cells.extend(line.ljust(width, FILLER))
    return Grid(tuple(cells), width, height, start)


def load_grid(path: str | Path) -> Grid:
    """Read a .pool file. OSError propagates to the caller."""
    return parse_grid(Path(path).read_text(encoding="utf-8"))
