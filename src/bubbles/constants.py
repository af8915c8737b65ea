# ============================================================================
# PALETTE
# ============================================================================
COLORS = [
    (255, 51, 51),    # red
    (51, 255, 51),    # green
    (51, 153, 255),   # blue
    (255, 255, 51),   # yellow
    (255, 51, 255),   # pink
    (255, 153, 51),   # orange
]
EMPTY_CELL = -1


# ============================================================================
# BUBBLE & GRID GEOMETRY (y grows downward, toward the launcher)
# ============================================================================
BUBBLE_RADIUS = 18
BUBBLE_DIAMETER = BUBBLE_RADIUS * 2
# Physics body is slightly smaller than the drawn bubble so grazing shots slip past.
COLLISION_RADIUS = BUBBLE_RADIUS - 2
GRID_COLS = 8
GRID_OFFSET_X = 58
GRID_OFFSET_Y = 70
ROW_HEIGHT = BUBBLE_RADIUS * 1.73
CEILING_DROP_AMOUNT = ROW_HEIGHT


# ============================================================================
# PLAYFIELD
# ============================================================================
GAME_WIDTH = 480
GAME_HEIGHT = 640
PLAYFIELD_LEFT = 40
PLAYFIELD_RIGHT = 440
PLAYFIELD_TOP = 50
PLAYFIELD_BOTTOM = 540
WORLD_BOUNDS_BOTTOM = GAME_HEIGHT


# ============================================================================
# LAUNCHER & FLIGHT
# ============================================================================
LAUNCHER_X = GAME_WIDTH / 2
LAUNCHER_Y = 570
# Loaded bubble sits this far above the launcher pivot.
LAUNCHER_LOAD_OFFSET = 25
BUBBLE_SPEED = 900.0
MIN_AIM_ANGLE = -170.0
MAX_AIM_ANGLE = -10.0
DEFAULT_AIM_ANGLE = -90.0
PREVIEW_STEP_SIZE = 22.0
PREVIEW_MAX_STEPS = 20
# Largest distance a flying bubble may travel in a single integration substep.
MAX_FLIGHT_SUBSTEP = BUBBLE_RADIUS / 2


# ============================================================================
# GAMEPLAY
# ============================================================================
IDLE_SHOOT_TIME = 10.0          # seconds
SHOTS_BEFORE_DROP = 8
GAME_OVER_LINE = 500
DANGER_MARGIN = 80
MIN_MATCH_SIZE = 3
MAX_SNAP_SEARCH_RINGS = 3
DEFAULT_POOL_SIZE = 100


# ============================================================================
# SCORING
# ============================================================================
SCORE_BASE_MATCH = 30
SCORE_EXTRA_BUBBLE = 20
SCORE_FLOATING = 100


# ============================================================================
# RENDERING
# ============================================================================
BACKGROUND_COLOR = (26, 10, 46)
FRAME_COLOR = (0, 217, 255)
DANGER_COLOR = (255, 51, 51)
TEXT_COLOR = (255, 235, 59)
PREVIEW_DOT_RADIUS = 2.5
PREVIEW_DOT_COLOR = (0, 217, 255)

