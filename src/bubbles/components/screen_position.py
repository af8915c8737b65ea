from dataclasses import dataclass

@dataclass(slots=True)
class ScreenPosition:
    x: float
    y: float
