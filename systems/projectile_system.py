"""
projectile_system.py – AI projectiles and beams.

Handles:
- Spawning shots and beams from the controller's ability-fired events
- Projectile movement, lifetime and out-of-bounds removal
- Circle (projectile) and segment (beam) hit tests against the player
- Glowing orb / beam rendering

Nothing here feeds back into the controller; it only consumes events.
"""

from __future__ import annotations

import logging
import math

logger = logging.getLogger(__name__)

import pygame
from settings import (
    SCREEN_WIDTH, SCREEN_HEIGHT,
    PROJECTILE_SPEED, PROJECTILE_RADIUS, PROJECTILE_LIFETIME,
    PROJECTILE_COLOR, BEAM_COLOR, BEAM_WIDTH, BEAM_LIFETIME,
)
from systems.ability_system import AbilityKind
from systems.events import AbilityFired


class Projectile:
    """A single aimed shot.

    Attributes
    ----------
    x, y        : float  – center position
    vx, vy      : float  – velocity in pixels/tick
    radius      : int    – collision radius
    active      : bool   – False after hit or lifetime expires
    """

    __slots__ = ("x", "y", "vx", "vy", "radius", "timer", "active", "_trail")

    def __init__(self, x: float, y: float, vx: float, vy: float,
                 radius: int = PROJECTILE_RADIUS,
                 lifetime: float = PROJECTILE_LIFETIME):
        self.x = x
        self.y = y
        self.vx = vx
        self.vy = vy
        self.radius = radius
        self.timer = lifetime
        self.active = True
        self._trail: list[tuple[float, float]] = []

    def update(self, dt: float, width: float, height: float):
        """Move one tick and age the projectile."""
        if not self.active:
            return
        self.x += self.vx
        self.y += self.vy
        self.timer -= dt

        self._trail.append((self.x, self.y))
        if len(self._trail) > 10:
            self._trail.pop(0)

        if self.timer <= 0:
            self.active = False
        if self.x < 0 or self.x > width or self.y < 0 or self.y > height:
            self.active = False

    def hits(self, target) -> bool:
        if not self.active:
            return False
        return math.hypot(self.x - target.x, self.y - target.y) < self.radius + target.radius

    def draw(self, surface: pygame.Surface):
        if not self.active:
            return
        if len(self._trail) > 1:
            pygame.draw.lines(surface, (120, 50, 50), False,
                              [(int(px), int(py)) for px, py in self._trail],
                              max(1, self.radius // 2))

        glow_r = self.radius * 2
        glow = pygame.Surface((glow_r * 2 + 2, glow_r * 2 + 2), pygame.SRCALPHA)
        pygame.draw.circle(glow, (*PROJECTILE_COLOR, 70), (glow_r + 1, glow_r + 1), glow_r)
        surface.blit(glow, (int(self.x) - glow_r - 1, int(self.y) - glow_r - 1))
        pygame.draw.circle(surface, PROJECTILE_COLOR, (int(self.x), int(self.y)), self.radius)


class Beam:
    """A straight, short-lived line from the AI to the arena edge."""

    __slots__ = ("start_x", "start_y", "end_x", "end_y", "width", "timer", "lifetime")

    def __init__(self, x: float, y: float, dir_x: float, dir_y: float,
                 width: float = BEAM_WIDTH, lifetime: float = BEAM_LIFETIME,
                 length: float = math.hypot(SCREEN_WIDTH, SCREEN_HEIGHT)):
        self.start_x = x
        self.start_y = y
        self.end_x = x + dir_x * length
        self.end_y = y + dir_y * length
        self.width = width
        self.timer = lifetime
        self.lifetime = lifetime

    @property
    def active(self) -> bool:
        return self.timer > 0

    def update(self, dt: float):
        self.timer -= dt

    def hits(self, target) -> bool:
        """Segment-vs-circle test, slightly forgiving on the player's radius."""
        if not self.active:
            return False
        seg_x = self.end_x - self.start_x
        seg_y = self.end_y - self.start_y
        length = math.hypot(seg_x, seg_y)
        if length <= 0:
            return False
        ux, uy = seg_x / length, seg_y / length

        proj = (target.x - self.start_x) * ux + (target.y - self.start_y) * uy
        if proj < 0 or proj > length:
            return False
        cx = self.start_x + ux * proj
        cy = self.start_y + uy * proj
        return math.hypot(target.x - cx, target.y - cy) < self.width / 2 + target.radius * 0.8

    def draw(self, surface: pygame.Surface):
        if not self.active:
            return
        fade = max(0.0, self.timer / self.lifetime)
        color = tuple(int(c * fade) for c in BEAM_COLOR)
        start = (int(self.start_x), int(self.start_y))
        end = (int(self.end_x), int(self.end_y))
        pygame.draw.line(surface, color, start, end, int(self.width * 3))
        pygame.draw.line(surface, (255, 255, 255), start, end, max(1, int(self.width / 2)))


class ProjectileSystem:
    """Manages every AI projectile and beam in flight.

    Call ``handle_event`` for each drained controller event, then
    ``update(dt)`` and ``draw(surface)`` each frame.
    """

    def __init__(self, width: float = SCREEN_WIDTH, height: float = SCREEN_HEIGHT):
        self.width = width
        self.height = height
        self._projectiles: list[Projectile] = []
        self._beams: list[Beam] = []

    @property
    def projectiles(self) -> list[Projectile]:
        return self._projectiles

    @property
    def beams(self) -> list[Beam]:
        return self._beams

    # ── Spawners ──────────────────────────────────────────

    def handle_event(self, event) -> None:
        """Spawn whatever an ``AbilityFired`` event describes; ignore the rest."""
        if not isinstance(event, AbilityFired):
            return
        p = event.params
        if event.kind is AbilityKind.PROJECTILE:
            self.spawn_at(*p["origin"], *p["target"], speed=p.get("speed", PROJECTILE_SPEED))
        elif event.kind is AbilityKind.BEAM:
            x, y = p["origin"]
            dx, dy = p["direction"]
            self._beams.append(Beam(x, y, dx, dy, width=p.get("width", BEAM_WIDTH),
                                    length=math.hypot(self.width, self.height)))
            logger.debug("Beam fired from (%.0f,%.0f) dir=(%.2f,%.2f)", x, y, dx, dy)

    def spawn_at(self, x: float, y: float, target_x: float, target_y: float,
                 speed: float = PROJECTILE_SPEED) -> Projectile:
        """Spawn a projectile aimed at (target_x, target_y)."""
        dx = target_x - x
        dy = target_y - y
        dist = math.hypot(dx, dy)
        if dist < 1:
            dx, dy, dist = 1, 0, 1
        proj = Projectile(x, y, dx / dist * speed, dy / dist * speed)
        self._projectiles.append(proj)
        logger.debug("Projectile spawned at (%.0f,%.0f) → (%.0f,%.0f)", x, y, target_x, target_y)
        return proj

    # ── Collision ─────────────────────────────────────────

    def check_hit(self, target) -> str | None:
        """Return a reason string if anything in flight touches *target*."""
        for proj in self._projectiles:
            if proj.hits(target):
                proj.active = False
                return "Hit by projectile!"
        for beam in self._beams:
            if beam.hits(target):
                return "Hit by beam!"
        return None

    # ── Per-frame ─────────────────────────────────────────

    def update(self, dt: float):
        for p in self._projectiles:
            p.update(dt, self.width, self.height)
        for b in self._beams:
            b.update(dt)
        self._projectiles = [p for p in self._projectiles if p.active]
        self._beams = [b for b in self._beams if b.active]

    def draw(self, surface: pygame.Surface):
        for b in self._beams:
            b.draw(surface)
        for p in self._projectiles:
            p.draw(surface)

    def clear(self):
        self._projectiles.clear()
        self._beams.clear()
