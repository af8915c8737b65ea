"""Exception types raised by the bubble shooter core."""


class LevelDataError(ValueError):
    """Level pattern or color bound is malformed."""


class GameRulesError(ValueError):
    """A GameRules value is outside its allowed range."""


class CellOccupiedError(RuntimeError):
    """A bubble was anchored onto a cell that already holds one."""

    def __init__(self, row: int, col: int):
        super().__init__(f"Grid cell ({row}, {col}) is already occupied")
        self.row = row
        self.col = col
