from dataclasses import dataclass

@dataclass(slots=True)
class GridPosition:
    """Cell a bubble is anchored to. Present only while the bubble is in the grid."""
    row: int
    col: int
