from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class TurnPhase(Enum):
    """Steps of a single shot, looping back to AIMING until WON or LOST."""
    AIMING = auto()
    FLYING = auto()
    COLLIDED = auto()
    MATCH_RESOLVING = auto()
    FLOATING_RESOLVING = auto()
    FINALIZING = auto()
    WON = auto()
    LOST = auto()


TERMINAL_PHASES = frozenset({TurnPhase.WON, TurnPhase.LOST})


@dataclass(slots=True)
class TurnState:
    """Tracks current turn-level state owned by the TurnSystem."""

    phase: TurnPhase = TurnPhase.AIMING
    score: int = 0
    combo_count: int = 0
    shots_since_drop: int = 0
    current_color: int = 0
    next_color: int = 0
    # Non-reentrant lock: aim/shoot inputs are dropped while True.
    is_processing: bool = False
    flying_entity: Optional[int] = None
    idle_elapsed: float = 0.0
    level_number: Optional[int] = None
    in_danger_zone: bool = False

    @property
    def finished(self) -> bool:
        return self.phase in TERMINAL_PHASES
