"""
snapshot.py – Per-tick view of the arena as the opponent sees it.

The normalized vector built here is the network's input contract; the
component order must never change or previously learned weights stop
meaning anything:

    0  opponent x / arena width
    1  opponent y / arena height
    2  opponent vx / 10
    3  opponent vy / 10
    4  self x / arena width
    5  self y / arena height
    6  projectile ready (1.0 / 0.0)
    7  dash ready (1.0 / 0.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from settings import NN_VELOCITY_SCALE


@dataclass(frozen=True)
class WorldSnapshot:
    """Positions and velocities of both orbs plus cooldown flags."""

    self_x: float
    self_y: float
    self_vx: float
    self_vy: float
    opponent_x: float
    opponent_y: float
    opponent_vx: float
    opponent_vy: float
    projectile_ready: bool
    dash_ready: bool
    arena_width: float
    arena_height: float

    @classmethod
    def capture(cls, body, opponent, projectile_ready: bool, dash_ready: bool,
                arena_width: float, arena_height: float) -> WorldSnapshot:
        """Build from any two objects exposing ``x, y, vx, vy``."""
        return cls(
            self_x=body.x, self_y=body.y, self_vx=body.vx, self_vy=body.vy,
            opponent_x=opponent.x, opponent_y=opponent.y,
            opponent_vx=opponent.vx, opponent_vy=opponent.vy,
            projectile_ready=projectile_ready, dash_ready=dash_ready,
            arena_width=arena_width, arena_height=arena_height,
        )

    @property
    def distance(self) -> float:
        return math.hypot(self.opponent_x - self.self_x,
                          self.opponent_y - self.self_y)

    def predicted_opponent(self, ticks: float) -> tuple[float, float]:
        """Linear extrapolation of the opponent *ticks* frames ahead."""
        return (self.opponent_x + self.opponent_vx * ticks,
                self.opponent_y + self.opponent_vy * ticks)

    def to_inputs(self) -> list[float]:
        w = max(1.0, self.arena_width)
        h = max(1.0, self.arena_height)
        return [
            self.opponent_x / w,
            self.opponent_y / h,
            self.opponent_vx / NN_VELOCITY_SCALE,
            self.opponent_vy / NN_VELOCITY_SCALE,
            self.self_x / w,
            self.self_y / h,
            1.0 if self.projectile_ready else 0.0,
            1.0 if self.dash_ready else 0.0,
        ]
