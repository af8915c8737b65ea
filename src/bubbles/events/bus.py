from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of systems nobody else references alive.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float


# ============================================================================
# INPUT
# ============================================================================
EVENT_MOUSE_MOVE = "mouse_move"                    # payload: x, y (game coordinates)
EVENT_MOUSE_PRESS = "mouse_press"                  # payload: x, y, button
EVENT_KEY_PRESS = "key_press"                      # payload: key=str
EVENT_AIM_REQUEST = "aim_request"                  # payload: x, y
EVENT_SHOOT_REQUEST = "shoot_request"              # payload: source=str


# ============================================================================
# LAUNCHER & PROJECTILE
# ============================================================================
EVENT_AIM_CHANGED = "aim_changed"                          # payload: angle=float, preview=list[(x,y)]
EVENT_BUBBLE_LOADED = "bubble_loaded"                      # payload: entity=int, color_index=int
EVENT_BUBBLE_FIRED = "bubble_fired"                        # payload: entity=int, angle=float, vx=float, vy=float, auto=bool
EVENT_AUTO_FIRE = "auto_fire"                              # payload: idle=float
EVENT_PROJECTILE_WALL_BOUNCE = "projectile_wall_bounce"    # payload: entity=int, side=str, x, y
EVENT_PROJECTILE_COLLISION = "projectile_collision"        # payload: entity=int, target_entity=int, x, y
EVENT_PROJECTILE_CEILING = "projectile_ceiling"            # payload: entity=int, x, y
EVENT_PROJECTILE_OUT_OF_BOUNDS = "projectile_out_of_bounds"  # payload: entity=int, x, y


# ============================================================================
# GRID
# ============================================================================
EVENT_BUBBLE_ANCHORED = "bubble_anchored"          # payload: entity=int, row, col, color_index
EVENT_SHOT_REJECTED = "shot_rejected"              # payload: entity=int, row, col, reason=str
EVENT_CEILING_DROPPED = "ceiling_dropped"          # payload: ceiling_offset=float
EVENT_ROW_INSERTED = "row_inserted"                # payload: colors=list[int]


# ============================================================================
# MATCH & SCORE
# ============================================================================
EVENT_MATCH_RESOLVED = "match_resolved"            # payload: bubbles=list[BubbleSnapshot], score=int
EVENT_FLOATING_RESOLVED = "floating_resolved"      # payload: bubbles=list[BubbleSnapshot], score=int
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int, reason=str
EVENT_COMBO_TRIGGERED = "combo_triggered"          # payload: combo=int


# ============================================================================
# TURN FLOW
# ============================================================================
EVENT_TURN_PHASE_CHANGED = "turn_phase_changed"            # payload: previous=TurnPhase, phase=TurnPhase
EVENT_TURN_FINALIZED = "turn_finalized"                    # payload: outcome='won'|'lost'|'continuing'
EVENT_NEXT_BUBBLE_CHANGED = "next_bubble_changed"          # payload: color_index=int
EVENT_SHOTS_REMAINING_CHANGED = "shots_remaining_changed"  # payload: count=int
EVENT_DANGER_ZONE_CHANGED = "danger_zone_changed"          # payload: active=bool, lowest_y=float
EVENT_LEVEL_STARTED = "level_started"                      # payload: level_number=int|None, colors=int
