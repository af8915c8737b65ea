from dataclasses import dataclass


@dataclass(slots=True)
class Bubble:
    """Colored unit owned by the pool, the launcher, the flight, or the grid.

    ``active`` is False while the entity sits unused in the BubblePool.
    """
    color_index: int
    active: bool = True


@dataclass(frozen=True, slots=True)
class BubbleSnapshot:
    """Immutable record of a bubble taken just before it leaves the grid."""
    row: int
    col: int
    x: float
    y: float
    color_index: int
