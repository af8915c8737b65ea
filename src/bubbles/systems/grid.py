import logging
import random
from typing import Callable, List, Optional

from esper import World

from bubbles.components.bubble import Bubble, BubbleSnapshot
from bubbles.components.grid import Grid
from bubbles.components.grid_position import GridPosition
from bubbles.components.level import Level
from bubbles.components.screen_position import ScreenPosition
from bubbles.constants import CEILING_DROP_AMOUNT, COLORS, EMPTY_CELL, GRID_COLS
from bubbles.errors import CellOccupiedError
from bubbles.events.bus import EventBus, EVENT_CEILING_DROPPED, EVENT_ROW_INSERTED
from bubbles.systems.grid_ops import (
    SnapResult,
    cell_center,
    find_nearest_empty_cell,
    find_nearest_empty_neighbor,
    neighbors_of,
    snap_to_cell,
)
from bubbles.utils.bubble_pool import BubblePool

logger = logging.getLogger(__name__)

ColorPicker = Callable[[], int]


class GridSystem:
    """Owns the grid entity and every mutation of anchored bubbles."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        pool: BubblePool | None = None,
        cols: int = GRID_COLS,
        rng: random.Random | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.pool = pool or getattr(world, "bubble_pool", None) or BubblePool(world)
        candidate_rng = rng or getattr(world, "random", None)
        self.rng = candidate_rng if isinstance(candidate_rng, random.Random) else random.Random()
        self.grid_entity = self.world.create_entity(Grid(cols=cols))

    @property
    def grid(self) -> Grid:
        return self.world.component_for_entity(self.grid_entity, Grid)

    # ------------------------------------------------------------------
    # Level lifecycle
    # ------------------------------------------------------------------
    def clear(self) -> None:
        grid = self.grid
        for _, _, entity in list(grid.occupied()):
            self.pool.release(entity)
        grid.cells = []
        grid.ceiling_offset = 0.0
        grid.active_colors.clear()

    def initialize_from_level(self, level: Level) -> None:
        self.clear()
        grid = self.grid
        grid.palette_size = max(1, min(level.colors, len(COLORS)))
        for row, row_data in enumerate(level.rows):
            grid.ensure_row(row)
            for col, color_index in enumerate(row_data):
                if color_index == EMPTY_CELL:
                    continue
                if not 0 <= color_index < len(COLORS) or not grid.in_bounds(row, col):
                    logger.warning("Skipping malformed level cell (%s, %s) = %r", row, col, color_index)
                    continue
                x, y = cell_center(row, col, grid.ceiling_offset)
                self.add_bubble(self.pool.acquire(x, y, color_index), row, col)
        logger.debug("Grid initialized with %s bubbles", grid.count())

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------
    def add_bubble(self, entity: int, row: int, col: int) -> None:
        grid = self.grid
        if not grid.in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is outside the grid")
        grid.ensure_row(row)
        existing = grid.cells[row][col]
        if existing is not None and existing != entity:
            raise CellOccupiedError(row, col)
        grid.cells[row][col] = entity
        self.world.add_component(entity, GridPosition(row=row, col=col))
        grid.active_colors.add(self.world.component_for_entity(entity, Bubble).color_index)

    def remove_bubble(self, entity: int) -> Optional[BubbleSnapshot]:
        """Detach ``entity`` from the grid. The caller decides when to release it."""
        if not self.world.has_component(entity, GridPosition):
            return None
        grid = self.grid
        pos = self.world.component_for_entity(entity, GridPosition)
        if grid.get(pos.row, pos.col) == entity:
            grid.cells[pos.row][pos.col] = None
        self.world.remove_component(entity, GridPosition)
        color = self.world.component_for_entity(entity, Bubble).color_index
        screen = self.world.component_for_entity(entity, ScreenPosition)
        if not any(self._color_of(other) == color for _, _, other in grid.occupied()):
            grid.active_colors.discard(color)
        return BubbleSnapshot(row=pos.row, col=pos.col, x=screen.x, y=screen.y, color_index=color)

    def entity_at(self, row: int, col: int) -> Optional[int]:
        return self.grid.get(row, col)

    def neighbors_of(self, row: int, col: int):
        return neighbors_of(self.grid, row, col)

    def update_active_colors(self) -> None:
        grid = self.grid
        grid.active_colors = {self._color_of(entity) for _, _, entity in grid.occupied()}

    def _color_of(self, entity: int) -> int:
        return self.world.component_for_entity(entity, Bubble).color_index

    # ------------------------------------------------------------------
    # Ceiling
    # ------------------------------------------------------------------
    def drop_ceiling(self) -> None:
        grid = self.grid
        grid.ceiling_offset += CEILING_DROP_AMOUNT
        for _, _, entity in grid.occupied():
            self.world.component_for_entity(entity, ScreenPosition).y += CEILING_DROP_AMOUNT
        logger.info("Ceiling dropped to offset %.1f", grid.ceiling_offset)
        self.event_bus.emit(EVENT_CEILING_DROPPED, ceiling_offset=grid.ceiling_offset)

    def insert_row_at_top(self, color_picker: ColorPicker | None = None) -> List[int]:
        """Push every row down by one and fill a fresh row 0. Returns its colors."""
        picker = color_picker or self.random_active_color
        grid = self.grid
        shifted = list(grid.occupied())
        grid.cells = []
        grid.ensure_row(max((row for row, _, _ in shifted), default=-1) + 1)
        overflow = []
        for row, col, entity in shifted:
            if grid.in_bounds(row + 1, col):
                self._move_anchored(entity, row + 1, col)
            else:
                overflow.append((row + 1, entity))
        # Last column of an even row has no counterpart on the narrower odd row.
        for new_row, entity in overflow:
            free = [c for c in range(grid.row_max_col(new_row), -1, -1) if grid.cells[new_row][c] is None]
            if free:
                self._move_anchored(entity, new_row, free[0])
            else:
                logger.warning("No room for bubble %s on row %s; releasing it", entity, new_row)
                self.pool.release(entity)
        self.update_active_colors()
        colors: List[int] = []
        for col in range(grid.row_width(0)):
            color_index = picker()
            x, y = cell_center(0, col, grid.ceiling_offset)
            self.add_bubble(self.pool.acquire(x, y, color_index), 0, col)
            colors.append(color_index)
        self.event_bus.emit(EVENT_ROW_INSERTED, colors=colors)
        return colors

    def _move_anchored(self, entity: int, row: int, col: int) -> None:
        grid = self.grid
        grid.cells[row][col] = entity
        pos = self.world.component_for_entity(entity, GridPosition)
        pos.row, pos.col = row, col
        screen = self.world.component_for_entity(entity, ScreenPosition)
        screen.x, screen.y = cell_center(row, col, grid.ceiling_offset)

    # ------------------------------------------------------------------
    # Snapping
    # ------------------------------------------------------------------
    def snap_to_cell(self, x: float, y: float) -> SnapResult:
        return snap_to_cell(self.grid, x, y)

    def find_nearest_empty_neighbor(self, row: int, col: int) -> Optional[SnapResult]:
        return find_nearest_empty_neighbor(self.grid, row, col)

    def resolve_landing_cell(self, x: float, y: float, *, max_rings: int = 1) -> Optional[SnapResult]:
        """Snap, then fall back to the nearest empty cell within ``max_rings``."""
        grid = self.grid
        snapped = snap_to_cell(grid, x, y)
        if grid.get(snapped.row, snapped.col) is None:
            return snapped
        fallback = find_nearest_empty_neighbor(grid, snapped.row, snapped.col)
        if fallback is None and max_rings > 1:
            fallback = find_nearest_empty_cell(grid, snapped.row, snapped.col, max_rings=max_rings)
        return fallback

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def random_active_color(self) -> int:
        grid = self.grid
        if grid.active_colors:
            return self.rng.choice(sorted(grid.active_colors))
        return self.rng.randrange(grid.palette_size)

    def is_empty(self) -> bool:
        return next(self.grid.occupied(), None) is None

    def lowest_occupied_y(self) -> float:
        """Largest y among anchored bubbles (they hang downward), 0.0 when empty."""
        lowest = 0.0
        for _, _, entity in self.grid.occupied():
            y = self.world.component_for_entity(entity, ScreenPosition).y
            if y > lowest:
                lowest = y
        return lowest

    def any_bubble_below(self, threshold_y: float) -> bool:
        return any(
            self.world.component_for_entity(entity, ScreenPosition).y >= threshold_y
            for _, _, entity in self.grid.occupied()
        )
