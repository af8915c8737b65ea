from __future__ import annotations

import logging
from typing import List, Sequence

from esper import World

from bubbles.components.bubble import Bubble, BubbleSnapshot
from bubbles.components.level import Level
from bubbles.components.screen_position import ScreenPosition
from bubbles.components.turn_state import TurnPhase, TurnState
from bubbles.components.velocity import Velocity
from bubbles.config import GameRules
from bubbles.constants import PLAYFIELD_BOTTOM
from bubbles.events.bus import (
    EventBus,
    EVENT_AIM_CHANGED,
    EVENT_AIM_REQUEST,
    EVENT_AUTO_FIRE,
    EVENT_BUBBLE_ANCHORED,
    EVENT_BUBBLE_FIRED,
    EVENT_BUBBLE_LOADED,
    EVENT_COMBO_TRIGGERED,
    EVENT_DANGER_ZONE_CHANGED,
    EVENT_FLOATING_RESOLVED,
    EVENT_LEVEL_STARTED,
    EVENT_MATCH_RESOLVED,
    EVENT_NEXT_BUBBLE_CHANGED,
    EVENT_PROJECTILE_CEILING,
    EVENT_PROJECTILE_COLLISION,
    EVENT_PROJECTILE_OUT_OF_BOUNDS,
    EVENT_SCORE_CHANGED,
    EVENT_SHOOT_REQUEST,
    EVENT_SHOT_REJECTED,
    EVENT_SHOTS_REMAINING_CHANGED,
    EVENT_TICK,
    EVENT_TURN_FINALIZED,
    EVENT_TURN_PHASE_CHANGED,
)
from bubbles.factories.levels import get_level
from bubbles.systems.grid import GridSystem
from bubbles.systems.match import connected_same_color, floating_bubbles
from bubbles.systems.trajectory import aim_angle, launch_origin, launch_velocity, preview_trajectory
from bubbles.systems.turn_state_utils import get_or_create_launcher, get_or_create_turn_state

logger = logging.getLogger(__name__)


class TurnSystem:
    """Sequences one shot at a time through aim, flight, resolution and finalize.

    Flow:
      - AIMING accepts aim/shoot requests; idle time auto-fires the loaded bubble.
      - Shooting hands the bubble to the ProjectileSystem (FLYING) and locks input.
      - A projectile collision, ceiling or out-of-bounds event lands the bubble
        (COLLIDED), then match and floating resolution run synchronously.
      - FINALIZING checks win, then loss, then loads the next bubble.
    Score and grid mutations happen at resolution time; the emitted snapshots
    let presentation stagger pops however it likes.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        grid_system: GridSystem,
        *,
        rules: GameRules | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.grid_system = grid_system
        self.pool = grid_system.pool
        self.rules = rules or getattr(world, "rules", None) or GameRules()
        self._current_level: Level | None = None
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_AIM_REQUEST, self.on_aim_request)
        self.event_bus.subscribe(EVENT_SHOOT_REQUEST, self.on_shoot_request)
        self.event_bus.subscribe(EVENT_PROJECTILE_COLLISION, self.on_projectile_landed)
        self.event_bus.subscribe(EVENT_PROJECTILE_CEILING, self.on_projectile_landed)
        self.event_bus.subscribe(EVENT_PROJECTILE_OUT_OF_BOUNDS, self.on_projectile_landed)

    @property
    def state(self) -> TurnState:
        return get_or_create_turn_state(self.world)

    @property
    def launcher(self):
        return get_or_create_launcher(self.world)

    # ------------------------------------------------------------------
    # Level lifecycle
    # ------------------------------------------------------------------
    def start_level(self, level: Level | int, *, level_number: int | None = None) -> None:
        """Tear down any running round and start ``level`` (a Level or its number)."""
        if isinstance(level, int):
            level_number = level
            level = get_level(level, rng=self.grid_system.rng)
        self._current_level = level
        self._teardown_round()
        self.grid_system.initialize_from_level(level)

        state = self.state
        state.score = 0
        state.combo_count = 0
        state.shots_since_drop = 0
        state.flying_entity = None
        state.idle_elapsed = 0.0
        state.in_danger_zone = False
        state.level_number = level_number
        state.next_color = self.grid_system.random_active_color()
        logger.info("Level %s started with %s colors", level_number, level.colors)
        self.event_bus.emit(EVENT_LEVEL_STARTED, level_number=level_number, colors=level.colors)
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=0, delta=0, reason="level_start")
        self._emit_shots_remaining()
        self._load_next_bubble()
        self._set_phase(TurnPhase.AIMING)
        state.is_processing = False

    def restart_level(self) -> None:
        if self._current_level is None:
            self.start_level(self.state.level_number or 1)
            return
        self.start_level(self._current_level, level_number=self.state.level_number)

    def advance_level(self) -> None:
        self.start_level((self.state.level_number or 0) + 1)

    def _teardown_round(self) -> None:
        state = self.state
        launcher = self.launcher
        if state.flying_entity is not None:
            self.pool.release(state.flying_entity)
            state.flying_entity = None
        if launcher.loaded_entity is not None:
            self.pool.release(launcher.loaded_entity)
            launcher.loaded_entity = None
        launcher.can_shoot = False
        self.grid_system.clear()

    # ------------------------------------------------------------------
    # AIMING
    # ------------------------------------------------------------------
    def on_aim_request(self, sender, **kwargs):
        x = kwargs.get('x')
        y = kwargs.get('y')
        if x is None or y is None:
            return
        if not self._accepting_input():
            return
        self.aim_at(float(x), float(y))

    def aim_at(self, x: float, y: float) -> float:
        launcher = self.launcher
        launcher.angle = aim_angle((launcher.x, launcher.y), (x, y))
        launcher.preview = preview_trajectory(launch_origin(launcher.x, launcher.y), launcher.angle)
        self.event_bus.emit(EVENT_AIM_CHANGED, angle=launcher.angle, preview=list(launcher.preview))
        return launcher.angle

    def on_shoot_request(self, sender, **kwargs):
        self.shoot()

    def on_tick(self, sender, **kwargs):
        state = self.state
        if not self.rules.auto_fire or not self._accepting_input():
            return
        try:
            state.idle_elapsed += float(kwargs.get('dt', 1/60))
        except (TypeError, ValueError):
            return
        if state.idle_elapsed >= self.rules.idle_shoot_time:
            logger.debug("Auto-firing after %.2fs idle", state.idle_elapsed)
            self.event_bus.emit(EVENT_AUTO_FIRE, idle=state.idle_elapsed)
            self.shoot(auto=True)

    def _accepting_input(self) -> bool:
        state = self.state
        return (
            state.phase == TurnPhase.AIMING
            and not state.is_processing
            and self.launcher.can_shoot
            and self.launcher.loaded_entity is not None
        )

    def shoot(self, *, auto: bool = False) -> bool:
        """Fire the loaded bubble. Returns False when input is locked."""
        if not self._accepting_input():
            return False
        state = self.state
        launcher = self.launcher
        entity = launcher.loaded_entity
        launcher.loaded_entity = None
        launcher.can_shoot = False
        launcher.preview = []

        state.is_processing = True
        state.combo_count = 0
        state.idle_elapsed = 0.0
        state.flying_entity = entity

        x, y = launch_origin(launcher.x, launcher.y)
        position = self.world.component_for_entity(entity, ScreenPosition)
        position.x, position.y = x, y
        vx, vy = launch_velocity(launcher.angle, self.rules.bubble_speed)
        self.world.add_component(entity, Velocity(vx=vx, vy=vy))
        self._set_phase(TurnPhase.FLYING)
        self.event_bus.emit(EVENT_BUBBLE_FIRED, entity=entity, angle=launcher.angle, vx=vx, vy=vy, auto=auto)
        return True

    # ------------------------------------------------------------------
    # COLLIDED -> MATCH_RESOLVING -> FLOATING_RESOLVING
    # ------------------------------------------------------------------
    def on_projectile_landed(self, sender, **kwargs):
        entity = kwargs.get('entity')
        state = self.state
        if entity is None or entity != state.flying_entity or state.phase != TurnPhase.FLYING:
            return
        self._resolve_landing(entity)

    def _resolve_landing(self, entity: int) -> None:
        state = self.state
        self._set_phase(TurnPhase.COLLIDED)
        if self.world.has_component(entity, Velocity):
            self.world.remove_component(entity, Velocity)
        state.flying_entity = None

        position = self.world.component_for_entity(entity, ScreenPosition)
        target = self.grid_system.resolve_landing_cell(
            position.x, position.y, max_rings=self.rules.max_snap_search_rings
        )
        if target is None:
            self._reject_shot(entity, position)
            self._finalize()
            return

        position.x, position.y = target.x, target.y
        self.grid_system.add_bubble(entity, target.row, target.col)
        color = self.world.component_for_entity(entity, Bubble).color_index
        self.event_bus.emit(EVENT_BUBBLE_ANCHORED, entity=entity, row=target.row, col=target.col, color_index=color)

        group = connected_same_color(self.world, self.grid_system.grid, target.row, target.col)
        if len(group) >= self.rules.min_match_size:
            self._resolve_match(group)
            self._resolve_floating()
            state.shots_since_drop = 0
            self._emit_shots_remaining()
        else:
            state.shots_since_drop += 1
            self._check_shot_counter()
        self._finalize()

    def _reject_shot(self, entity: int, position: ScreenPosition) -> None:
        # Every cell within the search radius is full: the shot counts as a miss.
        snapped = self.grid_system.snap_to_cell(position.x, position.y)
        logger.warning("No empty cell near (%s, %s); rejecting shot", snapped.row, snapped.col)
        self.pool.release(entity)
        self.event_bus.emit(EVENT_SHOT_REJECTED, entity=entity, row=snapped.row, col=snapped.col, reason="no_empty_cell")
        self.state.shots_since_drop += 1
        self._check_shot_counter()

    def _resolve_match(self, group: Sequence[tuple[int, int]]) -> None:
        state = self.state
        self._set_phase(TurnPhase.MATCH_RESOLVING)
        popped = self._remove_cells(group)
        points = self.rules.match_score(len(popped))
        state.combo_count += 1
        self._add_score(points, reason="match")
        self.event_bus.emit(EVENT_MATCH_RESOLVED, bubbles=popped, score=points)
        self.event_bus.emit(EVENT_COMBO_TRIGGERED, combo=state.combo_count)

    def _resolve_floating(self) -> None:
        state = self.state
        self._set_phase(TurnPhase.FLOATING_RESOLVING)
        cells = floating_bubbles(self.grid_system.grid)
        if not cells:
            return
        dropped = self._remove_cells(cells)
        points = self.rules.floating_score(len(dropped))
        state.combo_count += 1
        self._add_score(points, reason="floating")
        self.event_bus.emit(EVENT_FLOATING_RESOLVED, bubbles=dropped, score=points)
        self.event_bus.emit(EVENT_COMBO_TRIGGERED, combo=state.combo_count)

    def _remove_cells(self, cells: Sequence[tuple[int, int]]) -> List[BubbleSnapshot]:
        removed: List[BubbleSnapshot] = []
        for row, col in cells:
            entity = self.grid_system.entity_at(row, col)
            if entity is None:
                continue
            snapshot = self.grid_system.remove_bubble(entity)
            self.pool.release(entity)
            if snapshot is not None:
                removed.append(snapshot)
        return removed

    def _add_score(self, points: int, *, reason: str) -> None:
        if points <= 0:
            return
        state = self.state
        state.score += points
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=state.score, delta=points, reason=reason)

    def _check_shot_counter(self) -> None:
        state = self.state
        self._emit_shots_remaining()
        if state.shots_since_drop < self.rules.shots_before_drop:
            return
        self.grid_system.update_active_colors()
        self.grid_system.drop_ceiling()
        if self.rules.insert_row_on_drop:
            self.grid_system.insert_row_at_top()
        state.shots_since_drop = 0
        self._emit_shots_remaining()

    def _emit_shots_remaining(self) -> None:
        remaining = self.rules.shots_before_drop - self.state.shots_since_drop
        self.event_bus.emit(EVENT_SHOTS_REMAINING_CHANGED, count=remaining)

    # ------------------------------------------------------------------
    # FINALIZING
    # ------------------------------------------------------------------
    def _finalize(self) -> None:
        state = self.state
        self._set_phase(TurnPhase.FINALIZING)
        if self.grid_system.is_empty():
            logger.info("Level %s cleared with score %s", state.level_number, state.score)
            self._set_phase(TurnPhase.WON)
            self.event_bus.emit(EVENT_TURN_FINALIZED, outcome="won")
            return
        if self.grid_system.any_bubble_below(self.rules.game_over_line):
            logger.info("Bubbles crossed the line on level %s", state.level_number)
            self._set_phase(TurnPhase.LOST)
            self.event_bus.emit(EVENT_TURN_FINALIZED, outcome="lost")
            return
        self._update_danger_zone()
        self._load_next_bubble()
        self._set_phase(TurnPhase.AIMING)
        state.is_processing = False
        self.event_bus.emit(EVENT_TURN_FINALIZED, outcome="continuing")

    def _update_danger_zone(self) -> None:
        state = self.state
        lowest = self.grid_system.lowest_occupied_y()
        in_danger = lowest > PLAYFIELD_BOTTOM - self.rules.danger_margin
        if in_danger != state.in_danger_zone:
            state.in_danger_zone = in_danger
            self.event_bus.emit(EVENT_DANGER_ZONE_CHANGED, active=in_danger, lowest_y=lowest)

    def _load_next_bubble(self) -> None:
        state = self.state
        launcher = self.launcher
        state.current_color = state.next_color
        self.grid_system.update_active_colors()
        state.next_color = self.grid_system.random_active_color()
        if launcher.loaded_entity is not None:
            self.pool.release(launcher.loaded_entity)
        x, y = launch_origin(launcher.x, launcher.y)
        launcher.loaded_entity = self.pool.acquire(x, y, state.current_color)
        launcher.can_shoot = True
        launcher.preview = preview_trajectory((x, y), launcher.angle)
        self.event_bus.emit(EVENT_BUBBLE_LOADED, entity=launcher.loaded_entity, color_index=state.current_color)
        self.event_bus.emit(EVENT_NEXT_BUBBLE_CHANGED, color_index=state.next_color)

    def _set_phase(self, phase: TurnPhase) -> None:
        state = self.state
        previous = state.phase
        state.phase = phase
        if previous != phase:
            self.event_bus.emit(EVENT_TURN_PHASE_CHANGED, previous=previous, phase=phase)
