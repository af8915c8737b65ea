import random

from esper import World

from bubbles.config import GameRules
from bubbles.constants import DEFAULT_POOL_SIZE
from bubbles.events.bus import EventBus
from bubbles.systems.turn_state_utils import get_or_create_launcher, get_or_create_turn_state
from bubbles.utils.bubble_pool import BubblePool


def create_world(
    event_bus: EventBus,
    *,
    rules: GameRules | None = None,
    rng: random.Random | None = None,
    pool_size: int = DEFAULT_POOL_SIZE,
) -> World:
    """Build the ECS world with its shared resources.

    Resources that are not components (rules, rng, bubble pool) hang off the
    world as attributes so every system constructed later finds the same ones.
    """
    world = World()
    setattr(world, "random", rng or random.Random())
    setattr(world, "rules", rules or GameRules())
    setattr(world, "bubble_pool", BubblePool(world, initial_size=pool_size))

    get_or_create_turn_state(world)
    get_or_create_launcher(world)
    return world
