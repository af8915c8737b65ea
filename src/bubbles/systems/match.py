from __future__ import annotations

from typing import Callable, Iterable, List, Set

from esper import World

from bubbles.components.bubble import Bubble
from bubbles.components.grid import Grid
from bubbles.systems.grid_ops import Position, neighbors_of

EdgePredicate = Callable[[Position, Position], bool]


def connected_cells(grid: Grid, seeds: Iterable[Position], predicate: EdgePredicate | None = None) -> Set[Position]:
    """Return every occupied cell reachable from ``seeds``.

    Traversal follows ``neighbors_of`` and only crosses an edge when
    ``predicate(current, neighbor)`` allows it. Empty seeds are ignored.
    """
    reached: Set[Position] = set()
    stack: List[Position] = []
    for seed in seeds:
        if seed not in reached and grid.get(*seed) is not None:
            reached.add(seed)
            stack.append(seed)
    while stack:
        current = stack.pop()
        for neighbor in neighbors_of(grid, *current):
            if neighbor in reached:
                continue
            if predicate is not None and not predicate(current, neighbor):
                continue
            reached.add(neighbor)
            stack.append(neighbor)
    return reached


def connected_same_color(world: World, grid: Grid, row: int, col: int) -> List[Position]:
    """Same-colored group containing (row, col), sorted; empty if the cell is."""
    seed_entity = grid.get(row, col)
    if seed_entity is None:
        return []
    color = world.component_for_entity(seed_entity, Bubble).color_index

    def same_color(_current: Position, neighbor: Position) -> bool:
        entity = grid.get(*neighbor)
        return entity is not None and world.component_for_entity(entity, Bubble).color_index == color

    return sorted(connected_cells(grid, [(row, col)], same_color))


def floating_bubbles(grid: Grid) -> List[Position]:
    """Occupied cells with no adjacency path to any occupied cell in row 0."""
    anchors = [(0, col) for col, entity in enumerate(grid.cells[0])] if grid.cells else []
    attached = connected_cells(grid, anchors)
    return sorted((row, col) for row, col, _ in grid.occupied() if (row, col) not in attached)
