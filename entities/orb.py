"""
orb.py – The two circular agents: mouse-steered player and AI chaser.

Kinematics only.  The AI orb's velocity is decided by ai.behavior; this
module just integrates it and keeps both orbs inside the arena.
"""

from __future__ import annotations

import math

from settings import (
    ORB_RADIUS, PLAYER_START_X, PLAYER_START_Y, PLAYER_MAX_SPEED,
    PLAYER_ACCEL, PLAYER_FRICTION, AI_START_X, AI_START_Y, AI_BASE_SPEED,
)


class Orb:
    """A point mass with a collision radius.

    Attributes
    ----------
    x, y    : float – center position (pixels)
    vx, vy  : float – velocity (pixels per tick)
    radius  : int
    """

    __slots__ = ("x", "y", "vx", "vy", "radius", "spawn_x", "spawn_y")

    def __init__(self, x: float, y: float, radius: int = ORB_RADIUS):
        self.x = float(x)
        self.y = float(y)
        self.vx = 0.0
        self.vy = 0.0
        self.radius = radius
        self.spawn_x = float(x)
        self.spawn_y = float(y)

    @property
    def speed(self) -> float:
        return math.hypot(self.vx, self.vy)

    def integrate(self):
        self.x += self.vx
        self.y += self.vy

    def clamp_to(self, width: float, height: float):
        """Keep the whole circle on screen."""
        r = self.radius
        self.x = max(r, min(width - r, self.x))
        self.y = max(r, min(height - r, self.y))

    def distance_to(self, other) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def touches(self, other) -> bool:
        return self.distance_to(other) < self.radius + other.radius

    def respawn(self):
        self.x, self.y = self.spawn_x, self.spawn_y
        self.vx = self.vy = 0.0


class PlayerOrb(Orb):
    """Springs toward a target point with friction and a speed cap."""

    __slots__ = ("target_x", "target_y", "accel", "friction", "max_speed")

    def __init__(self, x: float = PLAYER_START_X, y: float = PLAYER_START_Y):
        super().__init__(x, y)
        self.target_x = float(x)
        self.target_y = float(y)
        self.accel = PLAYER_ACCEL
        self.friction = PLAYER_FRICTION
        self.max_speed = PLAYER_MAX_SPEED

    def steer(self, width: float, height: float):
        self.vx += (self.target_x - self.x) * self.accel
        self.vy += (self.target_y - self.y) * self.accel
        self.vx *= self.friction
        self.vy *= self.friction

        speed = self.speed
        if speed > self.max_speed:
            self.vx = self.vx / speed * self.max_speed
            self.vy = self.vy / speed * self.max_speed

        self.integrate()
        self.clamp_to(width, height)

    def respawn(self):
        super().respawn()
        self.target_x, self.target_y = self.x, self.y


class AIOrb(Orb):
    """The network-driven chaser.  ``base_speed`` is its unboosted pace."""

    __slots__ = ("base_speed",)

    def __init__(self, x: float = AI_START_X, y: float = AI_START_Y,
                 base_speed: float = AI_BASE_SPEED):
        super().__init__(x, y)
        self.base_speed = base_speed
