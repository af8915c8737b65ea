from __future__ import annotations

import math
from typing import Optional

from esper import World

from bubbles.components.bubble import Bubble
from bubbles.components.grid_position import GridPosition
from bubbles.components.screen_position import ScreenPosition
from bubbles.components.velocity import Velocity
from bubbles.constants import COLLISION_RADIUS, MAX_FLIGHT_SUBSTEP, PLAYFIELD_LEFT, PLAYFIELD_RIGHT, WORLD_BOUNDS_BOTTOM
from bubbles.events.bus import (
    EventBus,
    EVENT_PROJECTILE_CEILING,
    EVENT_PROJECTILE_COLLISION,
    EVENT_PROJECTILE_OUT_OF_BOUNDS,
    EVENT_PROJECTILE_WALL_BOUNCE,
    EVENT_TICK,
)
from bubbles.systems.trajectory import CEILING_Y, step_flight


class ProjectileSystem:
    """Moves bubbles that carry a Velocity and reports how their flight ends.

    Flight stops (Velocity removed) as soon as one terminal event fires:
    collision with an anchored bubble, ceiling contact, or leaving the world.
    """

    def __init__(self, world: World, event_bus: EventBus, *, collision_radius: float = COLLISION_RADIUS):
        self.world = world
        self.event_bus = event_bus
        self._contact_distance_sq = (2 * collision_radius) ** 2
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        try:
            dt = float(dt)
        except (TypeError, ValueError):
            return
        if dt <= 0.0:
            return
        for entity, (velocity, position) in list(self.world.get_components(Velocity, ScreenPosition)):
            self._advance(entity, velocity, position, dt)

    def _advance(self, entity: int, velocity: Velocity, position: ScreenPosition, dt: float) -> None:
        speed = math.hypot(velocity.vx, velocity.vy)
        substeps = max(1, math.ceil(speed * dt / MAX_FLIGHT_SUBSTEP))
        sub_dt = dt / substeps
        for _ in range(substeps):
            step = step_flight(position.x, position.y, velocity.vx, velocity.vy, sub_dt)
            position.x, position.y = step.x, step.y
            velocity.vx, velocity.vy = step.vx, step.vy
            if step.bounced:
                self.event_bus.emit(
                    EVENT_PROJECTILE_WALL_BOUNCE, entity=entity, side=step.bounced, x=step.x, y=step.y
                )
            target = self._overlapping_anchor(entity, position)
            if target is not None:
                self._stop(entity)
                self.event_bus.emit(
                    EVENT_PROJECTILE_COLLISION, entity=entity, target_entity=target, x=position.x, y=position.y
                )
                return
            if position.y <= CEILING_Y:
                self._stop(entity)
                self.event_bus.emit(EVENT_PROJECTILE_CEILING, entity=entity, x=position.x, y=position.y)
                return
            if self._out_of_bounds(position):
                self._stop(entity)
                self.event_bus.emit(EVENT_PROJECTILE_OUT_OF_BOUNDS, entity=entity, x=position.x, y=position.y)
                return

    def _overlapping_anchor(self, entity: int, position: ScreenPosition) -> Optional[int]:
        closest: Optional[int] = None
        closest_sq = self._contact_distance_sq
        for other, (_, other_pos, bubble) in self.world.get_components(GridPosition, ScreenPosition, Bubble):
            if other == entity or not bubble.active:
                continue
            dx = other_pos.x - position.x
            dy = other_pos.y - position.y
            dist_sq = dx * dx + dy * dy
            if dist_sq < closest_sq:
                closest, closest_sq = other, dist_sq
        return closest

    @staticmethod
    def _out_of_bounds(position: ScreenPosition) -> bool:
        if not (math.isfinite(position.x) and math.isfinite(position.y)):
            return True
        return (
            position.y > WORLD_BOUNDS_BOTTOM
            or position.x < PLAYFIELD_LEFT
            or position.x > PLAYFIELD_RIGHT
        )

    def _stop(self, entity: int) -> None:
        if self.world.has_component(entity, Velocity):
            self.world.remove_component(entity, Velocity)
