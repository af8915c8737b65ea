from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple

from esper import World

from bubbles.components.bubble import Bubble
from bubbles.components.screen_position import ScreenPosition
from bubbles.constants import (
    BACKGROUND_COLOR,
    BUBBLE_RADIUS,
    COLORS,
    DANGER_COLOR,
    FRAME_COLOR,
    GAME_HEIGHT,
    GAME_WIDTH,
    PLAYFIELD_BOTTOM,
    PLAYFIELD_LEFT,
    PLAYFIELD_RIGHT,
    PLAYFIELD_TOP,
    PREVIEW_DOT_COLOR,
    PREVIEW_DOT_RADIUS,
    TEXT_COLOR,
)
from bubbles.events.bus import (
    EventBus,
    EVENT_DANGER_ZONE_CHANGED,
    EVENT_SCORE_CHANGED,
    EVENT_SHOTS_REMAINING_CHANGED,
    EVENT_TURN_FINALIZED,
)
from bubbles.systems.turn_state_utils import get_or_create_launcher, get_or_create_turn_state


@dataclass(slots=True)
class BubbleSprite:
    """Frame-scoped draw data for one bubble, already in window coordinates."""
    entity: int
    x: float
    y: float
    color: Tuple[int, int, int]


class RenderSystem:
    """Draws the playfield, bubbles, aim preview and HUD with arcade.

    The game model is y-down; arcade is y-up, so every y is flipped against
    the game height and then scaled to the window.
    """

    def __init__(self, world: World, event_bus: EventBus, window, *, game_over_line: float | None = None):
        self.world = world
        self.event_bus = event_bus
        self.window = window
        rules = getattr(world, "rules", None)
        self.game_over_line = game_over_line if game_over_line is not None else getattr(rules, "game_over_line", 500)
        self.event_bus.subscribe(EVENT_SCORE_CHANGED, self.on_score_changed)
        self.event_bus.subscribe(EVENT_SHOTS_REMAINING_CHANGED, self.on_shots_remaining_changed)
        self.event_bus.subscribe(EVENT_DANGER_ZONE_CHANGED, self.on_danger_zone_changed)
        self.event_bus.subscribe(EVENT_TURN_FINALIZED, self.on_turn_finalized)
        self.score = 0
        self.shots_remaining = 0
        self.in_danger = False
        self.banner: str | None = None
        self.sprites: List[BubbleSprite] = []
        self.preview_points: List[Tuple[float, float]] = []

    # Event mirrors for the HUD -------------------------------------------------
    def on_score_changed(self, sender, **kwargs):
        self.score = kwargs.get('score', self.score)

    def on_shots_remaining_changed(self, sender, **kwargs):
        self.shots_remaining = kwargs.get('count', self.shots_remaining)

    def on_danger_zone_changed(self, sender, **kwargs):
        self.in_danger = bool(kwargs.get('active', False))

    def on_turn_finalized(self, sender, **kwargs):
        outcome = kwargs.get('outcome')
        if outcome == 'won':
            self.banner = 'ROUND CLEAR!'
        elif outcome == 'lost':
            self.banner = 'GAME OVER'
        else:
            self.banner = None

    # Coordinate mapping --------------------------------------------------------
    @property
    def scale(self) -> float:
        return min(self.window.width / GAME_WIDTH, self.window.height / GAME_HEIGHT)

    def to_window(self, x: float, y: float) -> Tuple[float, float]:
        scale = self.scale
        left = (self.window.width - GAME_WIDTH * scale) / 2
        bottom = (self.window.height - GAME_HEIGHT * scale) / 2
        return left + x * scale, bottom + (GAME_HEIGHT - y) * scale

    def to_game(self, x: float, y: float) -> Tuple[float, float]:
        """Inverse of to_window: window pixels back to y-down game space."""
        scale = self.scale or 1.0
        left = (self.window.width - GAME_WIDTH * scale) / 2
        bottom = (self.window.height - GAME_HEIGHT * scale) / 2
        return (x - left) / scale, GAME_HEIGHT - (y - bottom) / scale

    def build_frame(self) -> None:
        """Collect draw data for every active bubble and the aim preview."""
        sprites: List[BubbleSprite] = []
        for entity, (bubble, pos) in self.world.get_components(Bubble, ScreenPosition):
            if not bubble.active:
                continue
            wx, wy = self.to_window(pos.x, pos.y)
            sprites.append(BubbleSprite(entity=entity, x=wx, y=wy, color=COLORS[bubble.color_index % len(COLORS)]))
        self.sprites = sprites
        launcher = get_or_create_launcher(self.world)
        self.preview_points = [self.to_window(px, py) for px, py in launcher.preview]

    def process(self):
        # Local import keeps tests headless without creating a window.
        import arcade
        headless = False
        try:
            arcade.get_window()
        except Exception:
            headless = True
        self.build_frame()
        if headless:
            return
        self._draw_playfield(arcade)
        radius = BUBBLE_RADIUS * self.scale
        for sprite in self.sprites:
            arcade.draw_circle_filled(sprite.x, sprite.y, radius - 1, sprite.color)
            arcade.draw_circle_outline(sprite.x, sprite.y, radius - 1, (255, 255, 255), 1)
        count = len(self.preview_points)
        for index, (px, py) in enumerate(self.preview_points):
            alpha = int(255 * (0.7 - (index / max(1, count)) * 0.6))
            arcade.draw_circle_filled(px, py, PREVIEW_DOT_RADIUS * self.scale, (*PREVIEW_DOT_COLOR, alpha))
        self._draw_hud(arcade)

    def _draw_playfield(self, arcade: Any) -> None:
        left, top = self.to_window(PLAYFIELD_LEFT, PLAYFIELD_TOP)
        right, bottom = self.to_window(PLAYFIELD_RIGHT, PLAYFIELD_BOTTOM)
        arcade.draw_lrbt_rectangle_filled(left, right, bottom, top, BACKGROUND_COLOR)
        arcade.draw_lrbt_rectangle_outline(left, right, bottom, top, FRAME_COLOR, 2)
        _, line_y = self.to_window(0, self.game_over_line)
        line_color = DANGER_COLOR if self.in_danger else (120, 40, 40)
        arcade.draw_line(left, line_y, right, line_y, line_color, 1)

    def _draw_hud(self, arcade: Any) -> None:
        state = get_or_create_turn_state(self.world)
        text_x, text_y = self.to_window(PLAYFIELD_LEFT, PLAYFIELD_TOP - 30)
        arcade.draw_text(f"SCORE {self.score:08d}", text_x, text_y, TEXT_COLOR, 12)
        shots_x, _ = self.to_window(PLAYFIELD_RIGHT - 120, 0)
        arcade.draw_text(f"SHOTS {self.shots_remaining}", shots_x, text_y, TEXT_COLOR, 12)
        next_x, next_y = self.to_window(PLAYFIELD_RIGHT - 30, PLAYFIELD_BOTTOM + 40)
        arcade.draw_circle_filled(next_x, next_y, BUBBLE_RADIUS * 0.85 * self.scale, COLORS[state.next_color % len(COLORS)])
        if self.banner:
            cx, cy = self.to_window(GAME_WIDTH / 2, GAME_HEIGHT / 2)
            arcade.draw_text(self.banner, cx, cy, TEXT_COLOR, 20, anchor_x="center")
