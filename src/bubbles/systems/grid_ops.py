from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import List, Tuple

from bubbles.components.grid import Grid
from bubbles.constants import (
    BUBBLE_DIAMETER,
    BUBBLE_RADIUS,
    GRID_OFFSET_X,
    GRID_OFFSET_Y,
    ROW_HEIGHT,
)

Position = Tuple[int, int]

# Hex adjacency expressed in (row, col) index space. Odd rows sit half a bubble
# to the right, so their diagonal neighbors lean right instead of left.
EVEN_ROW_OFFSETS: Tuple[Position, ...] = ((-1, -1), (-1, 0), (0, -1), (0, 1), (1, -1), (1, 0))
ODD_ROW_OFFSETS: Tuple[Position, ...] = ((-1, 0), (-1, 1), (0, -1), (0, 1), (1, 0), (1, 1))


@dataclass(frozen=True, slots=True)
class SnapResult:
    row: int
    col: int
    x: float
    y: float

    @property
    def cell(self) -> Position:
        return self.row, self.col


def neighbor_offsets(row: int) -> Tuple[Position, ...]:
    return ODD_ROW_OFFSETS if row % 2 == 1 else EVEN_ROW_OFFSETS


def parity_offset(row: int) -> float:
    return BUBBLE_RADIUS if row % 2 == 1 else 0.0


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def cell_center(row: int, col: int, ceiling_offset: float = 0.0) -> Tuple[float, float]:
    x = GRID_OFFSET_X + col * BUBBLE_DIAMETER + parity_offset(row)
    y = GRID_OFFSET_Y + row * ROW_HEIGHT + ceiling_offset
    return x, y


def snap_to_cell(grid: Grid, x: float, y: float) -> SnapResult:
    """Map continuous coordinates onto the nearest valid grid cell."""
    row = max(0, round_half_up((y - GRID_OFFSET_Y - grid.ceiling_offset) / ROW_HEIGHT))
    col = round_half_up((x - GRID_OFFSET_X - parity_offset(row)) / BUBBLE_DIAMETER)
    col = max(0, min(col, grid.row_max_col(row)))
    cx, cy = cell_center(row, col, grid.ceiling_offset)
    return SnapResult(row=row, col=col, x=cx, y=cy)


def adjacent_cells(grid: Grid, row: int, col: int) -> List[Position]:
    """All in-bounds cells around (row, col), occupied or not, in table order."""
    cells: List[Position] = []
    for dr, dc in neighbor_offsets(row):
        r, c = row + dr, col + dc
        if grid.in_bounds(r, c):
            cells.append((r, c))
    return cells


def neighbors_of(grid: Grid, row: int, col: int) -> List[Position]:
    """Occupied cells adjacent to (row, col)."""
    return [(r, c) for r, c in adjacent_cells(grid, row, col) if grid.get(r, c) is not None]


def find_nearest_empty_neighbor(grid: Grid, row: int, col: int) -> SnapResult | None:
    """First empty in-bounds neighbor in adjacency-table order, or None."""
    for r, c in adjacent_cells(grid, row, col):
        if grid.get(r, c) is None:
            x, y = cell_center(r, c, grid.ceiling_offset)
            return SnapResult(row=r, col=c, x=x, y=y)
    return None


def find_nearest_empty_cell(grid: Grid, row: int, col: int, max_rings: int = 1) -> SnapResult | None:
    """Breadth-first search outward from (row, col) for an empty cell.

    Ring 1 is exactly ``find_nearest_empty_neighbor``; each further ring expands
    through the adjacency table in the same fixed order, so the result is
    deterministic. Returns None when every cell within ``max_rings`` is full.
    """
    if grid.get(row, col) is None and grid.in_bounds(row, col):
        x, y = cell_center(row, col, grid.ceiling_offset)
        return SnapResult(row=row, col=col, x=x, y=y)
    visited = {(row, col)}
    frontier = deque([((row, col), 0)])
    while frontier:
        (r, c), depth = frontier.popleft()
        if depth >= max_rings:
            continue
        for nr, nc in adjacent_cells(grid, r, c):
            if (nr, nc) in visited:
                continue
            visited.add((nr, nc))
            if grid.get(nr, nc) is None:
                x, y = cell_center(nr, nc, grid.ceiling_offset)
                return SnapResult(row=nr, col=nc, x=x, y=y)
            frontier.append(((nr, nc), depth + 1))
    return None
