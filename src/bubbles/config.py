from __future__ import annotations

from dataclasses import dataclass

from bubbles.constants import (
    BUBBLE_SPEED,
    DANGER_MARGIN,
    GAME_OVER_LINE,
    IDLE_SHOOT_TIME,
    MAX_SNAP_SEARCH_RINGS,
    MIN_MATCH_SIZE,
    SCORE_BASE_MATCH,
    SCORE_EXTRA_BUBBLE,
    SCORE_FLOATING,
    SHOTS_BEFORE_DROP,
)
from bubbles.errors import GameRulesError


@dataclass(slots=True)
class GameRules:
    """Per-game tunables shared by the grid, projectile and turn systems.

    Defaults mirror the module constants; tests and alternate game modes pass
    their own instance to ``create_world``.
    """

    shots_before_drop: int = SHOTS_BEFORE_DROP
    idle_shoot_time: float = IDLE_SHOOT_TIME
    bubble_speed: float = BUBBLE_SPEED
    min_match_size: int = MIN_MATCH_SIZE
    score_base_match: int = SCORE_BASE_MATCH
    score_extra_bubble: int = SCORE_EXTRA_BUBBLE
    score_floating: int = SCORE_FLOATING
    game_over_line: float = GAME_OVER_LINE
    danger_margin: float = DANGER_MARGIN
    max_snap_search_rings: int = MAX_SNAP_SEARCH_RINGS
    # Insert a fresh top row whenever the ceiling drops.
    insert_row_on_drop: bool = False
    # Idle auto-fire can be disabled entirely (e.g. for scripted tests).
    auto_fire: bool = True

    def __post_init__(self) -> None:
        if self.shots_before_drop < 1:
            raise GameRulesError("shots_before_drop must be at least 1")
        if self.idle_shoot_time <= 0.0:
            raise GameRulesError("idle_shoot_time must be positive")
        if self.bubble_speed <= 0.0:
            raise GameRulesError("bubble_speed must be positive")
        if self.min_match_size < 2:
            raise GameRulesError("min_match_size must be at least 2")
        if self.max_snap_search_rings < 1:
            raise GameRulesError("max_snap_search_rings must be at least 1")
        for name in ("score_base_match", "score_extra_bubble", "score_floating"):
            if getattr(self, name) < 0:
                raise GameRulesError(f"{name} cannot be negative")

    def match_score(self, size: int) -> int:
        """Points for popping a same-color group of ``size`` bubbles."""
        if size < self.min_match_size:
            return 0
        return self.score_base_match + max(0, size - self.min_match_size) * self.score_extra_bubble

    def floating_score(self, count: int) -> int:
        return max(0, count) * self.score_floating
