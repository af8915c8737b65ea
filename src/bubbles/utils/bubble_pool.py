from __future__ import annotations

import logging
from typing import Dict, List

from esper import World

from bubbles.components.bubble import Bubble
from bubbles.components.grid_position import GridPosition
from bubbles.components.screen_position import ScreenPosition
from bubbles.components.velocity import Velocity
from bubbles.constants import DEFAULT_POOL_SIZE

logger = logging.getLogger(__name__)


class BubblePool:
    """Arena of reusable bubble entities.

    Every entity the pool ever creates stays in ``_slots``; ``_free`` holds the
    indices of slots not currently in use. Acquire pops a free index (or grows
    the arena) and release pushes it back, both O(1). No ordering guarantee is
    made about which released slot comes back next.
    """

    def __init__(self, world: World, initial_size: int = DEFAULT_POOL_SIZE):
        self.world = world
        self._slots: List[int] = []
        self._free: List[int] = []
        self._slot_of: Dict[int, int] = {}
        for _ in range(max(0, initial_size)):
            self._free.append(self._grow())

    def _grow(self) -> int:
        entity = self.world.create_entity(Bubble(color_index=0, active=False), ScreenPosition(0.0, 0.0))
        index = len(self._slots)
        self._slots.append(entity)
        self._slot_of[entity] = index
        return index

    def acquire(self, x: float, y: float, color_index: int) -> int:
        index = self._free.pop() if self._free else self._grow()
        entity = self._slots[index]
        bubble = self.world.component_for_entity(entity, Bubble)
        bubble.color_index = color_index
        bubble.active = True
        position = self.world.component_for_entity(entity, ScreenPosition)
        position.x = x
        position.y = y
        self._strip(entity)
        return entity

    def release(self, entity: int) -> bool:
        """Return ``entity`` to the pool. Releasing twice is a no-op."""
        index = self._slot_of.get(entity)
        if index is None:
            logger.warning("Entity %s does not belong to this pool", entity)
            return False
        bubble = self.world.component_for_entity(entity, Bubble)
        if not bubble.active:
            return False
        bubble.active = False
        self._strip(entity)
        self._free.append(index)
        return True

    def _strip(self, entity: int) -> None:
        # Grid association and flight state never survive a pool round-trip.
        for comp_type in (GridPosition, Velocity):
            if self.world.has_component(entity, comp_type):
                self.world.remove_component(entity, comp_type)

    @property
    def active_count(self) -> int:
        return len(self._slots) - len(self._free)
