"""Entry point for the bubble shooter.

Sets up ECS world, event bus, systems, and Arcade window.
"""
import logging

from arcade import Window, key, run, set_background_color, color
from bubbles.world import create_world
from bubbles.constants import GAME_HEIGHT, GAME_WIDTH, GRID_COLS
from bubbles.components.turn_state import TurnPhase, TurnState
from bubbles.events.bus import EVENT_TICK, EventBus, EVENT_KEY_PRESS, EVENT_MOUSE_MOVE, EVENT_MOUSE_PRESS
from bubbles.systems.grid import GridSystem
from bubbles.systems.input import InputSystem
from bubbles.systems.projectile import ProjectileSystem
from bubbles.systems.render import RenderSystem
from bubbles.systems.turn_system import TurnSystem
from bubbles.systems.turn_state_utils import get_or_create_turn_state

logger = logging.getLogger(__name__)

KEY_NAMES = {
    key.SPACE: "space",
    key.ENTER: "enter",
    key.R: "r",
}


class BubbleShooterWindow(Window):
    def __init__(self, start_level: int = 1):
        super().__init__(GAME_WIDTH, GAME_HEIGHT, "Bubble Shooter", resizable=True)
        self.set_update_rate(1/60)
        self.event_bus = EventBus()
        self.world = create_world(self.event_bus)

        # Board and flight systems
        self.grid_system = GridSystem(self.world, self.event_bus, cols=GRID_COLS)
        self.projectile_system = ProjectileSystem(self.world, self.event_bus)
        self.turn_system = TurnSystem(self.world, self.event_bus, self.grid_system)

        # Interface systems
        self.input_system = InputSystem(self.event_bus)
        self.render_system = RenderSystem(self.world, self.event_bus, self)

        set_background_color(color.BLACK)
        self.turn_system.start_level(start_level)

    def on_draw(self):
        self.clear()
        self.render_system.process()

    def on_update(self, delta_time: float):
        if self._state().finished:
            return
        self.event_bus.emit(EVENT_TICK, dt=delta_time)

    def on_mouse_motion(self, x: float, y: float, dx: float, dy: float):
        gx, gy = self.render_system.to_game(x, y)
        self.event_bus.emit(EVENT_MOUSE_MOVE, x=gx, y=gy)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        if self._state().finished:
            self._continue_after_round()
            return
        gx, gy = self.render_system.to_game(x, y)
        self.event_bus.emit(EVENT_MOUSE_PRESS, x=gx, y=gy, button=button)

    def on_key_press(self, symbol: int, modifiers: int):
        name = KEY_NAMES.get(symbol)
        if name is None:
            return
        if name == "r":
            self.turn_system.restart_level()
            return
        if self._state().finished:
            self._continue_after_round()
            return
        self.event_bus.emit(EVENT_KEY_PRESS, key=name)

    def _continue_after_round(self) -> None:
        # Swallow the follow-up press that would otherwise fire the first bubble.
        self.input_system.suppress(0.3)
        if self._state().phase == TurnPhase.WON:
            self.turn_system.advance_level()
        else:
            self.turn_system.restart_level()

    def _state(self) -> TurnState:
        return get_or_create_turn_state(self.world)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    window = BubbleShooterWindow()
    run()

if __name__ == "__main__":
    main()
