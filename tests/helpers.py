from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Sequence

from esper import World

from bubbles.components.bubble import Bubble
from bubbles.components.level import Level
from bubbles.components.screen_position import ScreenPosition
from bubbles.config import GameRules
from bubbles.constants import EMPTY_CELL, GRID_COLS
from bubbles.events.bus import EventBus, EVENT_PROJECTILE_COLLISION, EVENT_TICK
from bubbles.systems.grid import GridSystem
from bubbles.systems.grid_ops import cell_center
from bubbles.systems.projectile import ProjectileSystem
from bubbles.systems.turn_state_utils import get_or_create_launcher, get_or_create_turn_state
from bubbles.systems.turn_system import TurnSystem
from bubbles.world import create_world


def pad_rows(rows: Sequence[Sequence[int]], cols: int = GRID_COLS) -> list[list[int]]:
    """Fill each row out to its parity width with empty cells."""
    padded = []
    for index, row in enumerate(rows):
        width = cols - 1 if index % 2 == 1 else cols
        padded.append(list(row) + [EMPTY_CELL] * (width - len(row)))
    return padded


class DummyWindow:
    def __init__(self, width=480, height=640):
        self.width = width
        self.height = height


@dataclass
class Game:
    bus: EventBus
    world: World
    grid_system: GridSystem
    turn_system: TurnSystem
    projectile_system: ProjectileSystem | None = None

    @property
    def state(self):
        return get_or_create_turn_state(self.world)

    @property
    def launcher(self):
        return get_or_create_launcher(self.world)


def build_game(
    rows: Sequence[Sequence[int]],
    colors: int = 6,
    *,
    rules: GameRules | None = None,
    seed: int = 0,
    with_projectile: bool = False,
    level_number: int | None = 1,
) -> Game:
    """Wire a world with grid and turn systems and start the given pattern."""
    bus = EventBus()
    rules = rules or GameRules(auto_fire=False)
    world = create_world(bus, rules=rules, rng=random.Random(seed))
    grid_system = GridSystem(world, bus)
    projectile = ProjectileSystem(world, bus) if with_projectile else None
    turn_system = TurnSystem(world, bus, grid_system)
    level = Level.from_data({"rows": pad_rows(rows), "colors": colors})
    turn_system.start_level(level, level_number=level_number)
    return Game(bus, world, grid_system, turn_system, projectile)


def drive_ticks(bus, count=30, dt=0.02):
    for _ in range(count):
        bus.emit(EVENT_TICK, dt=dt)


def record(bus: EventBus, name: str) -> list[dict[str, Any]]:
    received: list[dict[str, Any]] = []
    bus.subscribe(name, lambda sender, **payload: received.append(payload))
    return received


def land_at(game: Game, row: int, col: int, color: int | None = None) -> int:
    """Fire the loaded bubble and report it touching down at (row, col)."""
    entity = game.launcher.loaded_entity
    assert entity is not None
    if color is not None:
        game.world.component_for_entity(entity, Bubble).color_index = color
    assert game.turn_system.shoot()
    pos = game.world.component_for_entity(entity, ScreenPosition)
    pos.x, pos.y = cell_center(row, col, game.grid_system.grid.ceiling_offset)
    game.bus.emit(EVENT_PROJECTILE_COLLISION, entity=entity, target_entity=None, x=pos.x, y=pos.y)
    return entity
