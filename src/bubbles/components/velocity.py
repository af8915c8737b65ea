from dataclasses import dataclass

@dataclass(slots=True)
class Velocity:
    """Per-second velocity of the bubble currently in flight."""
    vx: float
    vy: float
