from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from bubbles.constants import DEFAULT_AIM_ANGLE, LAUNCHER_X, LAUNCHER_Y


@dataclass(slots=True)
class Launcher:
    """Aim state of the cannon plus the bubble waiting in it."""
    x: float = LAUNCHER_X
    y: float = LAUNCHER_Y
    angle: float = DEFAULT_AIM_ANGLE
    loaded_entity: Optional[int] = None
    can_shoot: bool = False
    # Sampled trajectory preview for the current angle.
    preview: List[Tuple[float, float]] = field(default_factory=list)
