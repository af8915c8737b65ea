"""Aiming and flight math shared by the launcher preview and the real shot.

Everything here is pure: no world access, no events. The preview and the
ProjectileSystem both reflect off the same walls so the dotted line the
player sees is the path the bubble will take.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from bubbles.constants import (
    BUBBLE_RADIUS,
    LAUNCHER_LOAD_OFFSET,
    MAX_AIM_ANGLE,
    MIN_AIM_ANGLE,
    PLAYFIELD_LEFT,
    PLAYFIELD_RIGHT,
    PLAYFIELD_TOP,
    PREVIEW_MAX_STEPS,
    PREVIEW_STEP_SIZE,
)

Point = Tuple[float, float]

LEFT_WALL_X = PLAYFIELD_LEFT + BUBBLE_RADIUS
RIGHT_WALL_X = PLAYFIELD_RIGHT - BUBBLE_RADIUS
CEILING_Y = PLAYFIELD_TOP + BUBBLE_RADIUS


@dataclass(slots=True)
class FlightStep:
    x: float
    y: float
    vx: float
    vy: float
    bounced: Optional[str] = None  # 'left', 'right' or None


def clamp_angle(angle: float) -> float:
    """Keep shots pointing upward: [-170, -10] degrees, y-down screen space."""
    if math.isnan(angle):
        return -90.0
    # Pointing down-left (atan2 near +180) should pin to the left limit.
    if angle > 90.0:
        angle -= 360.0
    return max(MIN_AIM_ANGLE, min(MAX_AIM_ANGLE, angle))


def aim_angle(origin: Point, target: Point) -> float:
    dx = target[0] - origin[0]
    dy = target[1] - origin[1]
    return clamp_angle(math.degrees(math.atan2(dy, dx)))


def launch_velocity(angle: float, speed: float) -> Tuple[float, float]:
    radians = math.radians(clamp_angle(angle))
    return math.cos(radians) * speed, math.sin(radians) * speed


def launch_origin(launcher_x: float, launcher_y: float) -> Point:
    return launcher_x, launcher_y - LAUNCHER_LOAD_OFFSET


def reflect(x: float, vx: float, left: float = LEFT_WALL_X, right: float = RIGHT_WALL_X) -> Tuple[float, float, Optional[str]]:
    if x < left:
        return left, -vx, 'left'
    if x > right:
        return right, -vx, 'right'
    return x, vx, None


def step_flight(x: float, y: float, vx: float, vy: float, dt: float) -> FlightStep:
    """Advance one integration step, bouncing horizontally off the side walls."""
    nx = x + vx * dt
    ny = y + vy * dt
    nx, nvx, side = reflect(nx, vx)
    return FlightStep(x=nx, y=ny, vx=nvx, vy=vy, bounced=side)


def preview_trajectory(
    origin: Point,
    angle: float,
    *,
    step_size: float = PREVIEW_STEP_SIZE,
    max_steps: int = PREVIEW_MAX_STEPS,
    ceiling_y: float = CEILING_Y,
) -> List[Point]:
    """Sample the path a shot at ``angle`` would take, stopping at the ceiling."""
    radians = math.radians(clamp_angle(angle))
    x, y = origin
    vx = math.cos(radians)
    vy = math.sin(radians)
    points: List[Point] = []
    for _ in range(max_steps):
        x += vx * step_size
        y += vy * step_size
        x, vx, _ = reflect(x, vx)
        if y < ceiling_y:
            break
        points.append((x, y))
    return points
