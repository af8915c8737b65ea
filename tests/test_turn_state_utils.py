from esper import World

from bubbles.components.launcher import Launcher
from bubbles.components.turn_state import TurnState
from bubbles.systems.turn_state_utils import (
    get_or_create_launcher,
    get_or_create_singleton,
    get_or_create_turn_state,
)


def test_singletons_are_created_once_per_world():
    world = World()
    state = get_or_create_turn_state(world)
    launcher = get_or_create_launcher(world)
    assert get_or_create_turn_state(world) is state
    assert get_or_create_launcher(world) is launcher
    assert len(list(world.get_component(TurnState))) == 1
    assert len(list(world.get_component(Launcher))) == 1


def test_existing_component_is_reused():
    world = World()
    seeded = TurnState()
    world.create_entity(seeded)
    assert get_or_create_singleton(world, TurnState) is seeded
    assert get_or_create_turn_state(World()) is not seeded
