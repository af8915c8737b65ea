from __future__ import annotations

from time import monotonic
from typing import Any, Callable

from bubbles.events.bus import (
    EventBus,
    EVENT_AIM_REQUEST,
    EVENT_KEY_PRESS,
    EVENT_MOUSE_MOVE,
    EVENT_MOUSE_PRESS,
    EVENT_SHOOT_REQUEST,
)

MOUSE_BUTTON_LEFT = 1
SHOOT_KEYS = frozenset({"space"})
SHOOT_REPEAT_INTERVAL = 0.15


class InputSystem:
    """Maps pointer and keyboard input to aim and shoot requests.

    Coordinates arrive already converted to game space (y grows downward).
    Whether a request is honored is the TurnSystem's call, not ours; we only
    drop a shoot press that follows the previous one (from either device)
    within ``repeat_interval`` seconds, or lands inside a ``suppress`` window.
    """

    def __init__(
        self,
        event_bus: EventBus,
        *,
        repeat_interval: float = SHOOT_REPEAT_INTERVAL,
        clock: Callable[[], float] | None = None,
    ):
        self.event_bus = event_bus
        self.repeat_interval = max(0.0, float(repeat_interval))
        self._clock = clock or monotonic
        self._last_shot: float | None = None
        self._suppressed_until = 0.0
        self.event_bus.subscribe(EVENT_MOUSE_MOVE, self.on_mouse_move)
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self.on_mouse_press)
        self.event_bus.subscribe(EVENT_KEY_PRESS, self.on_key_press)

    def suppress(self, duration: float) -> None:
        """Ignore shoot presses for ``duration`` seconds, e.g. after a round restart."""
        if duration > 0.0:
            self._suppressed_until = max(self._suppressed_until, self._clock() + duration)

    def on_mouse_move(self, sender: Any, **payload: Any) -> None:
        point = _coerce_point(payload)
        if point is None:
            return
        self.event_bus.emit(EVENT_AIM_REQUEST, x=point[0], y=point[1])

    def on_mouse_press(self, sender: Any, **payload: Any) -> None:
        point = _coerce_point(payload)
        if point is None or payload.get("button") != MOUSE_BUTTON_LEFT:
            return
        if not self._shot_allowed():
            return
        # Aim at the click point first so a click without prior movement still fires there.
        self.event_bus.emit(EVENT_AIM_REQUEST, x=point[0], y=point[1])
        self.event_bus.emit(EVENT_SHOOT_REQUEST, source="mouse")

    def on_key_press(self, sender: Any, **payload: Any) -> None:
        key = payload.get("key")
        if not isinstance(key, str) or key.lower() not in SHOOT_KEYS:
            return
        if not self._shot_allowed():
            return
        self.event_bus.emit(EVENT_SHOOT_REQUEST, source="keyboard")

    def _shot_allowed(self) -> bool:
        now = self._clock()
        if now < self._suppressed_until:
            return False
        if self._last_shot is not None and now - self._last_shot < self.repeat_interval:
            return False
        self._last_shot = now
        return True


def _coerce_point(payload: dict) -> tuple[float, float] | None:
    x = payload.get("x")
    y = payload.get("y")
    if x is None or y is None:
        return None
    try:
        return float(x), float(y)
    except (TypeError, ValueError):
        return None
