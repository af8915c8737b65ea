import pytest

from bubbles.components.bubble import Bubble
from bubbles.components.turn_state import TurnPhase
from bubbles.config import GameRules
from bubbles.constants import ROW_HEIGHT
from bubbles.events.bus import (
    EVENT_AIM_CHANGED,
    EVENT_AIM_REQUEST,
    EVENT_AUTO_FIRE,
    EVENT_BUBBLE_ANCHORED,
    EVENT_BUBBLE_FIRED,
    EVENT_CEILING_DROPPED,
    EVENT_COMBO_TRIGGERED,
    EVENT_DANGER_ZONE_CHANGED,
    EVENT_FLOATING_RESOLVED,
    EVENT_MATCH_RESOLVED,
    EVENT_ROW_INSERTED,
    EVENT_SCORE_CHANGED,
    EVENT_SHOOT_REQUEST,
    EVENT_SHOT_REJECTED,
    EVENT_SHOTS_REMAINING_CHANGED,
    EVENT_TURN_FINALIZED,
)
from bubbles.factories.levels import get_level
from tests.helpers import build_game, drive_ticks, land_at, record

_ = -1


def test_level_start_loads_launcher_and_waits_for_aim():
    game = build_game([[0, 1, 0, 1]], colors=2)
    state = game.state
    assert state.phase == TurnPhase.AIMING
    assert not state.is_processing
    assert state.score == 0
    assert game.launcher.can_shoot
    loaded = game.launcher.loaded_entity
    assert loaded is not None
    assert game.world.component_for_entity(loaded, Bubble).color_index in (0, 1)
    assert state.next_color in (0, 1)


def test_clearing_the_board_wins_with_real_flight():
    game = build_game([[_, _, 0, 0, 0, _, _, _]], colors=1, with_projectile=True)
    finals = record(game.bus, EVENT_TURN_FINALIZED)
    matches = record(game.bus, EVENT_MATCH_RESOLVED)
    assert game.turn_system.shoot()
    drive_ticks(game.bus, count=60, dt=1/60)

    assert [m["score"] for m in matches] == [50]
    assert len(matches[0]["bubbles"]) == 4
    assert game.state.score == 50
    assert game.state.phase == TurnPhase.WON
    assert game.state.is_processing
    assert finals == [{"outcome": "won"}]
    assert game.grid_system.is_empty()


def test_miss_anchors_bubble_and_counts_shot():
    game = build_game([[0, 1, 0, 1]], colors=2)
    anchored = record(game.bus, EVENT_BUBBLE_ANCHORED)
    remaining = record(game.bus, EVENT_SHOTS_REMAINING_CHANGED)
    entity = land_at(game, 0, 5, color=0)

    assert anchored[0]["entity"] == entity
    assert (anchored[0]["row"], anchored[0]["col"]) == (0, 5)
    assert game.grid_system.entity_at(0, 5) == entity
    assert game.state.shots_since_drop == 1
    assert remaining[-1]["count"] == 7
    assert game.state.phase == TurnPhase.AIMING
    assert not game.state.is_processing
    assert game.launcher.loaded_entity not in (None, entity)


def test_ceiling_drops_exactly_once_per_threshold():
    rules = GameRules(auto_fire=False, shots_before_drop=3)
    game = build_game([[0, 1, 0, 1, 0, 1, 0, 1]], colors=2, rules=rules)
    drops = record(game.bus, EVENT_CEILING_DROPPED)
    remaining = record(game.bus, EVENT_SHOTS_REMAINING_CHANGED)
    first = game.grid_system.entity_at(0, 0)

    land_at(game, 1, 0, color=0)
    land_at(game, 1, 2, color=0)
    assert drops == []
    land_at(game, 1, 4, color=0)
    assert len(drops) == 1
    assert game.grid_system.grid.ceiling_offset == pytest.approx(ROW_HEIGHT)
    assert remaining[-1]["count"] == 3
    assert game.state.shots_since_drop == 0
    # Grid indices survive the drop.
    assert game.grid_system.entity_at(0, 0) == first

    land_at(game, 1, 6, color=0)
    land_at(game, 1, 1, color=1)
    assert len(drops) == 1
    assert game.state.shots_since_drop == 2


def test_match_resets_shot_counter():
    rules = GameRules(auto_fire=False, shots_before_drop=3)
    game = build_game([[0, 0, _, _, _, _, _, 1]], colors=2, rules=rules)
    land_at(game, 1, 6, color=0)
    assert game.state.shots_since_drop == 1
    land_at(game, 0, 2, color=0)
    assert game.state.shots_since_drop == 0
    assert game.state.score == 30
    assert game.state.phase == TurnPhase.AIMING


def test_floating_bubbles_drop_after_match():
    game = build_game(
        [
            [2, _, _, _, 1, _, _, _],
            [_, _, _, _, 1, _, _],
            [_, _, _, _, 2, _, _, _],
        ],
        colors=3,
    )
    floating = record(game.bus, EVENT_FLOATING_RESOLVED)
    combos = record(game.bus, EVENT_COMBO_TRIGGERED)
    scores = record(game.bus, EVENT_SCORE_CHANGED)
    finals = record(game.bus, EVENT_TURN_FINALIZED)

    land_at(game, 0, 5, color=1)

    assert len(floating) == 1
    dropped = floating[0]["bubbles"]
    assert [(b.row, b.col, b.color_index) for b in dropped] == [(2, 4, 2)]
    assert floating[0]["score"] == 100
    assert game.state.score == 130
    assert [c["combo"] for c in combos] == [1, 2]
    assert [s["delta"] for s in scores] == [30, 100]
    assert game.grid_system.grid.count() == 1
    assert finals == [{"outcome": "continuing"}]


def test_auto_fire_after_idle_timeout():
    rules = GameRules(auto_fire=True, idle_shoot_time=10.0)
    game = build_game([[0, 1]], colors=2, rules=rules)
    auto = record(game.bus, EVENT_AUTO_FIRE)
    fired = record(game.bus, EVENT_BUBBLE_FIRED)

    drive_ticks(game.bus, count=9, dt=1.0)
    assert fired == []
    drive_ticks(game.bus, count=1, dt=1.0)
    assert len(auto) == 1
    assert len(fired) == 1
    assert fired[0]["auto"] is True
    assert game.state.phase == TurnPhase.FLYING


def test_input_locked_while_bubble_in_flight():
    game = build_game([[0, 1]], colors=2)
    fired = record(game.bus, EVENT_BUBBLE_FIRED)
    aims = record(game.bus, EVENT_AIM_CHANGED)
    assert game.turn_system.shoot()
    angle = game.launcher.angle

    assert not game.turn_system.shoot()
    game.bus.emit(EVENT_SHOOT_REQUEST, source="mouse")
    game.bus.emit(EVENT_AIM_REQUEST, x=50.0, y=300.0)

    assert len(fired) == 1
    assert aims == []
    assert game.launcher.angle == angle
    assert game.state.is_processing


def test_aim_request_updates_angle_and_preview():
    game = build_game([[0, 1]], colors=2)
    aims = record(game.bus, EVENT_AIM_CHANGED)
    game.bus.emit(EVENT_AIM_REQUEST, x=game.launcher.x + 100.0, y=game.launcher.y - 100.0)
    assert game.launcher.angle == pytest.approx(-45.0)
    assert aims and aims[0]["preview"]
    assert game.launcher.preview == aims[0]["preview"]


def test_crowded_landing_is_rejected_as_a_miss():
    rules = GameRules(auto_fire=False, max_snap_search_rings=1)
    rows = [
        [0, 1, 2, 0, 1, 2, 0, 1],
        [2, 0, 1, 2, 0, 1, 2],
        [1, 2, 0, 1, 2, 0, 1, 2],
    ]
    game = build_game(rows, colors=3, rules=rules)
    rejected = record(game.bus, EVENT_SHOT_REJECTED)
    anchored = record(game.bus, EVENT_BUBBLE_ANCHORED)
    active_before = game.grid_system.pool.active_count

    land_at(game, 1, 3, color=0)

    assert len(rejected) == 1
    assert (rejected[0]["row"], rejected[0]["col"]) == (1, 3)
    assert anchored == []
    assert game.state.shots_since_drop == 1
    assert game.grid_system.grid.count() == 23
    assert game.grid_system.pool.active_count == active_before
    assert game.state.phase == TurnPhase.AIMING


def test_crowded_landing_searches_outer_rings():
    rows = [
        [0, 1, 2, 0, 1, 2, 0, 1],
        [2, 0, 1, 2, 0, 1, 2],
        [1, 2, 0, 1, 2, 0, 1, 2],
    ]
    game = build_game(rows, colors=3)
    anchored = record(game.bus, EVENT_BUBBLE_ANCHORED)
    land_at(game, 1, 3, color=0)
    assert len(anchored) == 1
    assert anchored[0]["row"] == 3


def test_crossing_the_line_loses():
    rules = GameRules(auto_fire=False, game_over_line=150)
    game = build_game([[0], [1], [0], [1]], colors=3, rules=rules)
    finals = record(game.bus, EVENT_TURN_FINALIZED)
    land_at(game, 0, 5, color=2)
    assert finals == [{"outcome": "lost"}]
    assert game.state.phase == TurnPhase.LOST
    assert game.state.is_processing
    assert not game.turn_system.shoot()


def test_danger_zone_reported_on_change():
    rules = GameRules(auto_fire=False, danger_margin=450)
    game = build_game([[0], [1]], colors=3, rules=rules)
    danger = record(game.bus, EVENT_DANGER_ZONE_CHANGED)
    land_at(game, 0, 5, color=2)
    land_at(game, 0, 7, color=2)
    assert len(danger) == 1
    assert danger[0]["active"] is True
    assert game.state.in_danger_zone


def test_ceiling_drop_can_insert_a_row():
    rules = GameRules(auto_fire=False, shots_before_drop=1, insert_row_on_drop=True)
    game = build_game([[0]], colors=2, rules=rules)
    inserted = record(game.bus, EVENT_ROW_INSERTED)
    seeded = game.grid_system.entity_at(0, 0)
    shot = land_at(game, 0, 5, color=1)
    assert len(inserted) == 1
    assert game.grid_system.entity_at(1, 0) == seeded
    assert game.grid_system.entity_at(1, 5) == shot
    assert game.grid_system.grid.count() == 10


def test_restart_and_advance_level():
    game = build_game([[0, 0, _, 1]], colors=2)
    land_at(game, 0, 2, color=0)
    assert game.state.score == 30

    game.turn_system.restart_level()
    assert game.state.score == 0
    assert game.state.level_number == 1
    assert game.grid_system.grid.count() == 3
    assert game.state.phase == TurnPhase.AIMING

    game.turn_system.advance_level()
    assert game.state.level_number == 2
    assert game.grid_system.grid.count() == get_level(2).bubble_count


def test_start_level_by_number_uses_catalogue():
    game = build_game([[0]], colors=1)
    game.turn_system.start_level(1)
    assert game.state.level_number == 1
    assert game.grid_system.grid.count() == get_level(1).bubble_count
    # Pool slots are recycled: only the grid and the loaded bubble are live.
    assert game.grid_system.pool.active_count == get_level(1).bubble_count + 1
