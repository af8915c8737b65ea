from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set, Tuple

from bubbles.constants import COLORS, GRID_COLS


@dataclass(slots=True)
class Grid:
    """Row-major sparse table of anchored bubble entities.

    Even rows hold ``cols`` cells; odd rows hold ``cols - 1`` cells shifted
    right by one bubble radius. ``cells[r][c]`` is an entity id or None.
    """
    cols: int = GRID_COLS
    cells: List[List[Optional[int]]] = field(default_factory=list)
    ceiling_offset: float = 0.0
    active_colors: Set[int] = field(default_factory=set)
    # Color bound of the loaded level; random picks fall back to this range.
    palette_size: int = len(COLORS)

    def row_width(self, row: int) -> int:
        return self.cols - 1 if row % 2 == 1 else self.cols

    def row_max_col(self, row: int) -> int:
        return self.row_width(row) - 1

    def in_bounds(self, row: int, col: int) -> bool:
        return row >= 0 and 0 <= col <= self.row_max_col(row)

    def get(self, row: int, col: int) -> Optional[int]:
        if not self.in_bounds(row, col) or row >= len(self.cells):
            return None
        return self.cells[row][col]

    def ensure_row(self, row: int) -> None:
        while len(self.cells) <= row:
            self.cells.append([None] * self.row_width(len(self.cells)))

    def occupied(self) -> Iterator[Tuple[int, int, int]]:
        for row, cells in enumerate(self.cells):
            for col, entity in enumerate(cells):
                if entity is not None:
                    yield row, col, entity

    def count(self) -> int:
        return sum(1 for _ in self.occupied())
