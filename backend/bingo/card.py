"""Bingo card model and win-line detection.

Win detection works over any NxN boolean matrix where ``True`` means the cell
is marked or free. A line is a full row, a full column, the main diagonal or
the anti-diagonal. Nothing here does I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

Coord = Tuple[int, int]
Matrix = Sequence[Sequence[bool]]


def _check_square(matrix: Matrix) -> int:
    size = len(matrix)
    if size == 0:
        raise ValueError("Matrix must have at least one row")
    for row in matrix:
        if len(row) != size:
            raise ValueError(f"Matrix must be square, got a row of {len(row)} in a {size}-row matrix")
    return size


def winning_lines(matrix: Matrix) -> List[List[Coord]]:
    """Return every satisfied line as a list of coordinates.

    Lines are reported rows first, then columns, then the main diagonal and
    the anti-diagonal. A cell shared by two satisfied lines shows up in both.
    """
    size = _check_square(matrix)
    lines: List[List[Coord]] = []

    for r in range(size):
        if all(matrix[r][c] for c in range(size)):
            lines.append([(r, c) for c in range(size)])

    for c in range(size):
        if all(matrix[r][c] for r in range(size)):
            lines.append([(r, c) for r in range(size)])

    if all(matrix[i][i] for i in range(size)):
        lines.append([(i, i) for i in range(size)])

    if all(matrix[i][size - 1 - i] for i in range(size)):
        lines.append([(i, size - 1 - i) for i in range(size)])

    return lines


def has_bingo(matrix: Matrix) -> bool:
    return bool(winning_lines(matrix))


def winning_cells(matrix: Matrix) -> List[Coord]:
    """Sorted union of the cells of all satisfied lines."""
    cells = set()
    for line in winning_lines(matrix):
        cells.update(line)
    return sorted(cells)


@dataclass
class Cell:
    label: str
    marked: bool = False
    free: bool = False

    @property
    def is_covered(self) -> bool:
        return self.marked or self.free

    def to_dict(self) -> dict:
        return {'airline': self.label, 'marked': self.marked, 'free': self.free}


class Card:
    """A square grid of cells. Labels are fixed, marks change as draws occur."""

    def __init__(self, cells: Iterable[Iterable[Cell]]):
        self.cells: List[List[Cell]] = [list(row) for row in cells]
        _check_square(self.cells)
        free_count = sum(1 for row in self.cells for cell in row if cell.free)
        if free_count > 1:
            raise ValueError(f"A card may hold at most one free cell, got {free_count}")

    @classmethod
    def from_payload(cls, rows) -> "Card":
        # The data service may encode flags as 0/1
        return cls(
            [
                Cell(
                    label=str(cell.get('airline', '')),
                    marked=bool(cell.get('marked')),
                    free=bool(cell.get('free')),
                )
                for cell in row
            ]
            for row in rows
        )

    def to_payload(self) -> List[List[dict]]:
        return [[cell.to_dict() for cell in row] for row in self.cells]

    @property
    def size(self) -> int:
        return len(self.cells)

    def mark(self, label: str) -> int:
        """Mark every cell carrying ``label``; returns how many changed."""
        changed = 0
        for row in self.cells:
            for cell in row:
                if cell.label == label and not cell.free and not cell.marked:
                    cell.marked = True
                    changed += 1
        return changed

    def covered_matrix(self) -> List[List[bool]]:
        return [[cell.is_covered for cell in row] for row in self.cells]

    def has_bingo(self) -> bool:
        return has_bingo(self.covered_matrix())

    def winning_lines(self) -> List[List[Coord]]:
        return winning_lines(self.covered_matrix())

    def winning_cells(self) -> List[Coord]:
        return winning_cells(self.covered_matrix())

    def labels(self) -> List[str]:
        return [cell.label for row in self.cells for cell in row]
