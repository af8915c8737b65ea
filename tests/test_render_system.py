import pytest

from bubbles.constants import COLORS, GAME_HEIGHT, GAME_WIDTH
from bubbles.events.bus import EVENT_SCORE_CHANGED, EVENT_SHOTS_REMAINING_CHANGED, EVENT_TURN_FINALIZED
from bubbles.systems.grid_ops import cell_center
from bubbles.systems.render import RenderSystem
from tests.helpers import DummyWindow, build_game

_ = -1


def test_build_frame_flips_y_into_window_space():
    game = build_game([[_, 2]], colors=3)
    render = RenderSystem(game.world, game.bus, DummyWindow())
    render.build_frame()
    anchored = game.grid_system.entity_at(0, 1)
    sprite = next(s for s in render.sprites if s.entity == anchored)
    x, y = cell_center(0, 1)
    assert (sprite.x, sprite.y) == (x, GAME_HEIGHT - y)
    assert sprite.color == COLORS[2]
    # Grid bubble plus the one waiting in the launcher.
    assert len(render.sprites) == 2
    assert render.preview_points


def test_window_mapping_round_trips_when_scaled():
    game = build_game([[0]], colors=1)
    render = RenderSystem(game.world, game.bus, DummyWindow(GAME_WIDTH * 2, GAME_HEIGHT * 2 + 100))
    wx, wy = render.to_window(100.0, 200.0)
    assert render.to_game(wx, wy) == pytest.approx((100.0, 200.0))


def test_hud_mirrors_events():
    game = build_game([[0]], colors=1)
    render = RenderSystem(game.world, game.bus, DummyWindow())
    game.bus.emit(EVENT_SCORE_CHANGED, score=130, delta=100, reason="floating")
    game.bus.emit(EVENT_SHOTS_REMAINING_CHANGED, count=5)
    game.bus.emit(EVENT_TURN_FINALIZED, outcome="lost")
    assert render.score == 130
    assert render.shots_remaining == 5
    assert render.banner == "GAME OVER"


def test_process_headless_does_not_draw():
    game = build_game([[0, 1]], colors=2)
    render = RenderSystem(game.world, game.bus, DummyWindow())
    render.process()
    assert len(render.sprites) == 3
