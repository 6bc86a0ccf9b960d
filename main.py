"""
main.py - Entry point for Neural Chaser.

Integrates all systems:
- Online-learning opponent (ai/ai_core.py)
- Ability cooldowns and progressive unlocks (systems/ability_system.py)
- Projectiles and beams (systems/projectile_system.py)
- Per-match accuracy stats (ai/stats.py)
- Optional weight persistence (ai/persistence.py)

Run:  python main.py
      python main.py --headless 5000 --seed 3
"""
VERSION = "1.0.0"

import argparse
import logging
import math
import sys

import pygame

logger = logging.getLogger(__name__)

# ── Project imports ───────────────────────────────────────
from settings import (
    SCREEN_WIDTH, SCREEN_HEIGHT, FPS, TITLE, BG_COLOR, WHITE, GRAY, LIGHT_GRAY,
    PLAYER_COLOR, AI_COLOR, DASH_COLOR, BEAM_COLOR, BOOST_COLOR, YELLOW,
    TICK_MS, SMALL_FONT_SIZE, PROGRESS_BAR_WIDTH, PROGRESS_BAR_HEIGHT,
)
from ai.ai_core import OpponentBrain, create_context
from ai.behavior import BehaviorMode
from ai.persistence import load_network, save_network
from ai.ports import ManualClock, PygameClock
from ai.stats import MatchStats
from entities import PlayerOrb
from systems.ability_system import AbilityKind
from systems.events import EventLog
from systems.projectile_system import ProjectileSystem
from utils import draw_text, draw_end_screen

_ABILITY_LABELS = [
    (AbilityKind.PROJECTILE, "Q  Shot"),
    (AbilityKind.DASH, "W  Dash"),
    (AbilityKind.SPEED_BOOST, "E  Boost"),
    (AbilityKind.BEAM, "R  Beam"),
]


# ══════════════════════════════════════════════════════════
#  MATCH (shared by the window and headless runs)
# ══════════════════════════════════════════════════════════

class Match:
    """One opponent context plus the player, projectiles and stats around it."""

    def __init__(self, clock, seed: int | None = None, weights_path: str | None = None,
                 plot: bool = True):
        self.events = EventLog()
        self.ctx = create_context(seed=seed, clock=clock, port=self.events)
        self.brain = OpponentBrain()
        self.player = PlayerOrb()
        self.projectiles = ProjectileSystem()
        self.weights_path = weights_path
        self.plot = plot

        if weights_path:
            load_network(self.ctx.network, weights_path)

        self.match_number = 1
        self.stats = MatchStats(self.match_number)
        self.over_reason: str | None = None
        self.history: list[dict] = []

    def update(self, dt: float):
        if self.over_reason is not None:
            return
        self.player.steer(SCREEN_WIDTH, SCREEN_HEIGHT)
        self.brain.update(self.ctx, self.player, dt)

        for event in self.events.drain():
            self.projectiles.handle_event(event)
            self.stats.record_event(event)

        self.projectiles.update(dt)
        self.stats.tick(self.ctx.score, self.ctx.accuracy)

        reason = self.projectiles.check_hit(self.player)
        if reason is None and self.ctx.body.touches(self.player):
            reason = "Caught by AI!"
        if reason is not None:
            self.end(reason)

    def end(self, reason: str):
        self.over_reason = reason
        self.stats.end_match(
            reason, self.ctx.score, self.ctx.accuracy,
            self.ctx.trainer.training_events,
            plot_path="accuracy_trend.png" if self.plot else None,
        )
        self.history.append(self.stats.as_dict())

    def restart(self):
        self.brain.reset_match(self.ctx)
        self.player.respawn()
        self.projectiles.clear()
        self.events.drain()
        self.match_number += 1
        self.stats = MatchStats(self.match_number)
        self.over_reason = None

    def save(self):
        if self.weights_path:
            save_network(self.ctx.network, self.weights_path)


# ══════════════════════════════════════════════════════════
#  HEADLESS RUN
# ══════════════════════════════════════════════════════════

def run_headless(ticks: int, seed: int | None, weights_path: str | None) -> list[dict]:
    """Play *ticks* frames against a scripted circling player; no window."""
    clock = ManualClock()
    match = Match(clock, seed=seed, weights_path=weights_path, plot=False)
    cx, cy = SCREEN_WIDTH / 2, SCREEN_HEIGHT / 2
    dt = TICK_MS / 1000.0

    for i in range(ticks):
        clock.advance(TICK_MS)
        angle = i * 0.02
        match.player.target_x = cx + math.cos(angle) * 250
        match.player.target_y = cy + math.sin(angle) * 200
        match.update(dt)
        if match.over_reason is not None:
            match.restart()

    if match.over_reason is None:
        match.end("Time limit")
    match.save()
    logger.info("Headless run finished: %d ticks, %d matches, accuracy=%.1f",
                ticks, match.match_number, match.ctx.accuracy)
    return match.history


# ══════════════════════════════════════════════════════════
#  GAME CLASS
# ══════════════════════════════════════════════════════════

class Game:
    """Top-level game controller.  Owns the loop, events, and rendering."""

    def __init__(self, seed: int | None = None, weights_path: str | None = None):
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption(f"{TITLE}  v{VERSION}")
        self.clock = pygame.time.Clock()
        self.match = Match(PygameClock(), seed=seed, weights_path=weights_path)
        self.running = True

    # ── Loop ──────────────────────────────────────────────

    def run(self):
        while self.running:
            dt = self.clock.tick(FPS) / 1000.0
            self._handle_events()
            self.match.update(dt)
            self._draw()
        self.match.save()
        pygame.quit()

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEMOTION:
                self.match.player.target_x, self.match.player.target_y = event.pos
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key in (pygame.K_r, pygame.K_SPACE) and self.match.over_reason:
                    self.match.restart()

    # ── Rendering ─────────────────────────────────────────

    def _draw(self):
        m = self.match
        self.screen.fill(BG_COLOR)
        self._draw_telegraphs()
        m.projectiles.draw(self.screen)

        p = m.player
        pygame.draw.circle(self.screen, PLAYER_COLOR, (int(p.x), int(p.y)), p.radius)

        ai = m.ctx.body
        color = AI_COLOR
        if m.ctx.behavior.mode is BehaviorMode.DASHING:
            color = DASH_COLOR
        if m.ctx.behavior.state.speed_boosted:
            pygame.draw.circle(self.screen, BOOST_COLOR, (int(ai.x), int(ai.y)), ai.radius + 5, 2)
        pygame.draw.circle(self.screen, color, (int(ai.x), int(ai.y)), ai.radius)

        self._draw_hud()
        if m.over_reason:
            draw_end_screen(self.screen, "Game Over",
                            f"{m.over_reason}  Survived {m.ctx.score:.1f}s")
        pygame.display.flip()

    def _draw_telegraphs(self):
        """Show where a dash will land and where a beam is aimed."""
        behavior = self.match.ctx.behavior
        ai = self.match.ctx.body
        origin = (int(ai.x), int(ai.y))

        if behavior.mode is BehaviorMode.DASH_WINDUP:
            tx, ty = behavior.dash_target
            pygame.draw.line(self.screen, DASH_COLOR, origin, (int(tx), int(ty)), 2)
            pygame.draw.circle(self.screen, DASH_COLOR, (int(tx), int(ty)), ai.radius, 1)
        elif behavior.mode is BehaviorMode.BEAM_WINDUP:
            dx, dy = behavior.beam_direction
            length = math.hypot(SCREEN_WIDTH, SCREEN_HEIGHT)
            end = (int(ai.x + dx * length), int(ai.y + dy * length))
            width = 3 if behavior.state.phase.locked else 1
            pygame.draw.line(self.screen, BEAM_COLOR, origin, end, width)

    def _draw_hud(self):
        ctx = self.match.ctx
        now = ctx.clock.now_ms()
        draw_text(self.screen, f"AI accuracy: {ctx.accuracy:5.1f}%", 20, 20)
        draw_text(self.screen, f"Time: {ctx.score:5.1f}s", 20, 44)

        # Progress bar with unlock ticks
        x, y = SCREEN_WIDTH - PROGRESS_BAR_WIDTH - 20, 20
        pygame.draw.rect(self.screen, GRAY, (x, y, PROGRESS_BAR_WIDTH, PROGRESS_BAR_HEIGHT))
        fill = int(PROGRESS_BAR_WIDTH * ctx.registry.progress)
        pygame.draw.rect(self.screen, YELLOW, (x, y, fill, PROGRESS_BAR_HEIGHT))
        for kind, _ in _ABILITY_LABELS[1:]:
            tick_x = x + int(PROGRESS_BAR_WIDTH * ctx.registry.spec(kind).unlock_at)
            pygame.draw.line(self.screen, WHITE, (tick_x, y - 3), (tick_x, y + PROGRESS_BAR_HEIGHT + 3))

        # Ability slots
        for i, (kind, label) in enumerate(_ABILITY_LABELS):
            if not ctx.registry.is_unlocked(kind):
                status, color = "LOCKED", LIGHT_GRAY
            else:
                left = ctx.registry.cooldown_remaining_ms(kind, now)
                status = f"{math.ceil(left / 1000)}s" if left > 0 else "ready"
                color = WHITE if left > 0 else BOOST_COLOR
            draw_text(self.screen, f"{label}: {status}", x, y + 20 + i * 20,
                      color=color, size=SMALL_FONT_SIZE)


# ── Run ───────────────────────────────────────────────────

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Neural Chaser – online-learning opponent")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for weight init and random rolls")
    parser.add_argument("--headless", type=int, default=0, metavar="TICKS",
                        help="run TICKS frames with a scripted player and no window")
    parser.add_argument("--weights", default=None, metavar="PATH",
                        help="load network weights from PATH at start, save on exit")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    if args.headless > 0:
        run_headless(args.headless, args.seed, args.weights)
    else:
        Game(seed=args.seed, weights_path=args.weights).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
