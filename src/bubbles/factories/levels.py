"""Level catalogue: ten authored patterns followed by procedural rounds.

Numbers are palette indices; -1 marks an empty cell. Odd rows are one cell
shorter because they sit half a bubble to the right.
"""
from __future__ import annotations

import random
from typing import Any, Dict, List, Mapping

from bubbles.components.level import Level
from bubbles.constants import COLORS, EMPTY_CELL, GRID_COLS
from bubbles.errors import LevelDataError

_ = EMPTY_CELL

AUTHORED_LEVELS: List[Dict[str, Any]] = [
    # 1 - introduction
    {
        "rows": [
            [0, 1, 2, 3, 0, 1, 2, 3],
            [1, 2, 3, 0, 1, 2, 3],
            [2, 3, 0, 1, 2, 3, 0, 1],
            [3, 0, 1, 2, 3, 0, 1],
        ],
        "colors": 4,
    },
    # 2
    {
        "rows": [
            [0, 0, 1, 1, 2, 2, 3, 3],
            [0, 1, 1, 2, 2, 3, 3],
            [1, 1, 2, 2, 3, 3, 0, 0],
            [1, 2, 2, 3, 3, 0, 0],
            [2, 2, 3, 3, 0, 0, 1, 1],
        ],
        "colors": 4,
    },
    # 3
    {
        "rows": [
            [0, 1, 0, 1, 0, 1, 0, 1],
            [2, 3, 2, 3, 2, 3, 2],
            [0, 1, 0, 1, 0, 1, 0, 1],
            [2, 3, 2, 3, 2, 3, 2],
            [4, 4, 4, 4, 4, 4, 4, 4],
        ],
        "colors": 5,
    },
    # 4 - diamond
    {
        "rows": [
            [_, _, _, 0, 0, _, _, _],
            [_, _, 1, 1, 1, _, _],
            [_, 2, 2, 2, 2, 2, _, _],
            [3, 3, 3, 3, 3, 3, 3],
            [_, 2, 2, 2, 2, 2, _, _],
            [_, _, 1, 1, 1, _, _],
        ],
        "colors": 4,
    },
    # 5
    {
        "rows": [
            [0, 0, 0, 0, 1, 1, 1, 1],
            [0, 0, 0, 1, 1, 1, 1],
            [2, 2, 2, 2, 3, 3, 3, 3],
            [2, 2, 2, 3, 3, 3, 3],
            [4, 4, 4, 4, 5, 5, 5, 5],
            [4, 4, 4, 5, 5, 5, 5],
        ],
        "colors": 6,
    },
    # 6 - stripes
    {
        "rows": [
            [0, 0, 0, 0, 0, 0, 0, 0],
            [1, 1, 1, 1, 1, 1, 1],
            [2, 2, 2, 2, 2, 2, 2, 2],
            [3, 3, 3, 3, 3, 3, 3],
            [4, 4, 4, 4, 4, 4, 4, 4],
            [5, 5, 5, 5, 5, 5, 5],
        ],
        "colors": 6,
    },
    # 7 - checkerboard
    {
        "rows": [
            [0, 1, 0, 1, 0, 1, 0, 1],
            [1, 0, 1, 0, 1, 0, 1],
            [0, 1, 0, 1, 0, 1, 0, 1],
            [1, 0, 1, 0, 1, 0, 1],
            [0, 1, 0, 1, 0, 1, 0, 1],
            [1, 0, 1, 0, 1, 0, 1],
        ],
        "colors": 2,
    },
    # 8 - arrow
    {
        "rows": [
            [_, _, _, 0, 0, _, _, _],
            [_, _, 0, 0, 0, _, _],
            [_, 0, 1, 0, 0, 1, _, _],
            [0, 1, 1, 0, 0, 1, 1],
            [_, _, 1, 0, 0, 1, _, _],
            [_, _, _, 0, 0, _, _],
            [_, _, _, 0, 0, _, _, _],
        ],
        "colors": 2,
    },
    # 9
    {
        "rows": [
            [0, 1, 2, 3, 4, 5, 0, 1],
            [1, 2, 3, 4, 5, 0, 1],
            [2, 3, 4, 5, 0, 1, 2, 3],
            [3, 4, 5, 0, 1, 2, 3],
            [4, 5, 0, 1, 2, 3, 4, 5],
            [5, 0, 1, 2, 3, 4, 5],
        ],
        "colors": 6,
    },
    # 10 - heart
    {
        "rows": [
            [_, 0, 0, _, _, 0, 0, _],
            [0, 0, 0, 0, 0, 0, 0],
            [0, 0, 0, 0, 0, 0, 0, 0],
            [0, 0, 0, 0, 0, 0, 0],
            [_, 0, 0, 0, 0, 0, _, _],
            [_, _, 0, 0, 0, _, _],
            [_, _, _, 0, _, _, _, _],
        ],
        "colors": 1,
    },
]

FIRST_PROCEDURAL_LEVEL = len(AUTHORED_LEVELS) + 1
LAST_LEVEL = 30
MAX_PROCEDURAL_ROWS = 8


def load_level(data: Mapping[str, Any], *, cols: int = GRID_COLS) -> Level:
    """Validate raw level data and freeze it into a Level."""
    return Level.from_data(data, cols=cols)


def procedural_level(number: int, rng: random.Random | None = None, *, cols: int = GRID_COLS) -> Level:
    """Build round ``number`` (11 and up) from one of three rotating patterns.

    Rows grow by one every three rounds up to eight; colors grow by one every
    five rounds up to the full palette. Every third round is a diagonal sweep,
    the next a two-wide cluster pattern, the next random.
    """
    if number < FIRST_PROCEDURAL_LEVEL:
        raise LevelDataError(f"Level {number} is authored, not procedural")
    rng = rng or random.Random(number)
    num_rows = min(4 + (number - 10) // 3, MAX_PROCEDURAL_ROWS)
    num_colors = min(2 + number // 5, len(COLORS))
    rows: List[List[int]] = []
    for r in range(num_rows):
        width = cols - 1 if r % 2 == 1 else cols
        if number % 3 == 0:
            row = [(r + c) % num_colors for c in range(width)]
        elif number % 3 == 1:
            row = [(c // 2) % num_colors for c in range(width)]
        else:
            row = [rng.randrange(num_colors) for _ in range(width)]
        rows.append(row)
    return load_level({"rows": rows, "colors": num_colors}, cols=cols)


def get_level(number: int, rng: random.Random | None = None) -> Level:
    """Return round ``number`` (1-based), clamped to the last available round."""
    number = max(1, min(number, LAST_LEVEL))
    if number <= len(AUTHORED_LEVELS):
        return load_level(AUTHORED_LEVELS[number - 1])
    return procedural_level(number, rng)
