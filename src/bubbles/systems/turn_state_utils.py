from typing import Type, TypeVar

from esper import World

from bubbles.components.launcher import Launcher
from bubbles.components.turn_state import TurnState

T = TypeVar("T")


def get_or_create_singleton(world: World, component_type: Type[T]) -> T:
    """Return the one ``component_type`` instance in ``world``, creating it if absent."""
    for _, component in world.get_component(component_type):
        return component
    component = component_type()
    world.create_entity(component)
    return component


def get_or_create_turn_state(world: World) -> TurnState:
    return get_or_create_singleton(world, TurnState)


def get_or_create_launcher(world: World) -> Launcher:
    return get_or_create_singleton(world, Launcher)
