from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Tuple

from bubbles.constants import COLORS, EMPTY_CELL, GRID_COLS
from bubbles.errors import LevelDataError


@dataclass(frozen=True, slots=True)
class Level:
    """Static starting pattern for one round.

    ``rows`` holds color indices or EMPTY_CELL; ``colors`` bounds which palette
    entries random generation may use.
    """
    rows: Tuple[Tuple[int, ...], ...]
    colors: int

    @classmethod
    def from_data(cls, data: Mapping[str, Any], *, cols: int = GRID_COLS) -> "Level":
        """Build a Level from plain ``{"rows": [...], "colors": n}`` data.

        Raises LevelDataError for anything the grid could not place faithfully.
        """
        try:
            raw_rows = data["rows"]
            colors = data["colors"]
        except (KeyError, TypeError) as exc:
            raise LevelDataError("Level data needs 'rows' and 'colors'") from exc
        if isinstance(colors, bool) or not isinstance(colors, int):
            raise LevelDataError(f"Color bound must be an integer, got {colors!r}")
        if not 1 <= colors <= len(COLORS):
            raise LevelDataError(f"Color bound {colors} outside 1..{len(COLORS)}")
        rows = _normalize_rows(raw_rows, cols=cols)
        for row_index, row in enumerate(rows):
            for col, value in enumerate(row):
                if value != EMPTY_CELL and not 0 <= value < len(COLORS):
                    raise LevelDataError(
                        f"Row {row_index} col {col}: color {value} outside palette"
                    )
        return cls(rows=rows, colors=colors)

    @property
    def bubble_count(self) -> int:
        return sum(1 for row in self.rows for value in row if value != EMPTY_CELL)


def _normalize_rows(raw_rows: Any, *, cols: int) -> Tuple[Tuple[int, ...], ...]:
    if isinstance(raw_rows, (str, bytes)) or not isinstance(raw_rows, Sequence):
        raise LevelDataError("Level rows must be a sequence of sequences")
    if not raw_rows:
        raise LevelDataError("Level needs at least one row")
    rows = []
    for row_index, raw in enumerate(raw_rows):
        if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
            raise LevelDataError(f"Row {row_index} is not a sequence")
        width = cols - 1 if row_index % 2 == 1 else cols
        values = []
        for value in raw:
            if isinstance(value, bool) or not isinstance(value, int):
                raise LevelDataError(f"Row {row_index} holds non-integer {value!r}")
            values.append(value)
        if len(values) < width:
            raise LevelDataError(
                f"Row {row_index} has {len(values)} cells; it needs {width}"
            )
        # Trailing empty cells past the row width are tolerated and dropped.
        if any(value != EMPTY_CELL for value in values[width:]):
            raise LevelDataError(
                f"Row {row_index} has {len(values)} cells; at most {width} fit"
            )
        rows.append(tuple(values[:width]))
    return tuple(rows)
