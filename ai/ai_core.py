"""
ai_core.py – Central AI brain that runs the adaptive opponent each tick.

Architecture:
    ai_core.OpponentBrain.update(ctx, player, dt)
      ├── systems.ability_system.AbilityRegistry   (progress → unlocks)
      ├── ai.snapshot.WorldSnapshot                (normalized 8-vector)
      ├── ai.neural_network.NeuralNetwork          (predict → action)
      ├── ai.behavior.BehaviorStateMachine         (mode, velocity, abilities)
      ├── entities.orb.AIOrb                       (integrate + clamp)
      ├── ai.training.HeuristicLabeler             (target vector)
      └── ai.training.OnlineTrainer                (buffer + occasional backprop)

All mutable state for one match lives in a ``ControllerContext`` owned by
the game loop and handed to every call; the brain itself only holds
immutable configuration.  Network weights survive ``reset_match`` so the
opponent keeps what it learned across restarts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from ai.behavior import BehaviorConfig, BehaviorStateMachine, Readiness
from ai.neural_network import NetworkConfig, NeuralNetwork
from ai.ports import Clock, ManualClock, RandomSource, SeededRandom
from ai.snapshot import WorldSnapshot
from ai.training import HeuristicLabeler, LabelConfig, OnlineTrainer, TrainingConfig
from entities.orb import AIOrb
from settings import SCREEN_WIDTH, SCREEN_HEIGHT, MATCH_MAX_DURATION
from systems.ability_system import AbilityRegistry
from systems.events import AbilityUIPort, AbilityUnlocked, NullPort

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════
#  Controller context
# ══════════════════════════════════════════════════════════

@dataclass
class ControllerContext:
    """Everything the opponent mutates, in one explicit bundle."""

    network: NeuralNetwork
    trainer: OnlineTrainer
    registry: AbilityRegistry
    behavior: BehaviorStateMachine
    body: AIOrb
    clock: Clock
    rng: RandomSource
    port: AbilityUIPort
    arena_width: float = SCREEN_WIDTH
    arena_height: float = SCREEN_HEIGHT

    # ── Per-match counters ────────────────────────────────
    score: float = 0.0                  # seconds survived this match
    ticks: int = 0
    last_tick_ms: float | None = None
    last_action: np.ndarray | None = field(default=None, repr=False)

    @property
    def accuracy(self) -> float:
        return self.trainer.accuracy


def create_context(seed: int | None = None,
                   clock: Clock | None = None,
                   rng: RandomSource | None = None,
                   port: AbilityUIPort | None = None,
                   body: AIOrb | None = None,
                   arena: tuple[float, float] = (SCREEN_WIDTH, SCREEN_HEIGHT),
                   network_config: NetworkConfig | None = None,
                   training_config: TrainingConfig | None = None,
                   behavior_config: BehaviorConfig | None = None,
                   match_max_duration: float = MATCH_MAX_DURATION) -> ControllerContext:
    """Wire up a fresh opponent.  *seed* fixes both weight init and rolls."""
    clock = clock or ManualClock()
    rng = rng or SeededRandom(seed)
    port = port or NullPort()

    network = NeuralNetwork(network_config, rng=np.random.default_rng(seed))
    registry = AbilityRegistry(match_max_duration=match_max_duration)
    return ControllerContext(
        network=network,
        trainer=OnlineTrainer(network, rng, training_config),
        registry=registry,
        behavior=BehaviorStateMachine(registry, rng, port, behavior_config),
        body=body or AIOrb(),
        clock=clock,
        rng=rng,
        port=port,
        arena_width=arena[0],
        arena_height=arena[1],
    )


# ══════════════════════════════════════════════════════════
#  Opponent brain
# ══════════════════════════════════════════════════════════

class OpponentBrain:
    """Per-tick orchestration of the learning opponent.

    Usage:
        ctx = create_context(seed=1, clock=PygameClock(), port=events)
        brain = OpponentBrain()
        # every frame:
        action = brain.update(ctx, player, dt)
    """

    def __init__(self, label_config: LabelConfig | None = None):
        self.labeler = HeuristicLabeler(label_config)

    def update(self, ctx: ControllerContext, player, dt: float) -> np.ndarray:
        """One tick.  *dt* is seconds of match time elapsed since the last tick.

        Returns the raw 4-vector the network produced this tick.
        """
        now = ctx.clock.now_ms()
        elapsed_ms = 0.0 if ctx.last_tick_ms is None else max(0.0, now - ctx.last_tick_ms)
        ctx.last_tick_ms = now
        ctx.ticks += 1

        # ── Match progress → unlocks ──────────────────────
        ctx.score += max(0.0, dt)
        for kind in ctx.registry.update_progress(ctx.score):
            ctx.port.on_ability_unlocked(AbilityUnlocked(kind))

        # ── Observe + predict ─────────────────────────────
        ready = Readiness.sample(ctx.registry, now)
        snap = WorldSnapshot.capture(
            ctx.body, player, ready.projectile, ready.dash,
            ctx.arena_width, ctx.arena_height,
        )
        inputs = snap.to_inputs()
        action = ctx.network.predict(inputs)
        ctx.last_action = action

        # ── Act ───────────────────────────────────────────
        body = ctx.body
        ctx.behavior.step(body, player, action, now, elapsed_ms, ready)
        body.integrate()
        body.clamp_to(ctx.arena_width, ctx.arena_height)
        ctx.behavior.after_move(body)
        body.clamp_to(ctx.arena_width, ctx.arena_height)

        # ── Learn ─────────────────────────────────────────
        ctx.trainer.step(inputs, self.labeler.label(snap))

        if ctx.ticks % 60 == 0:
            logger.debug(
                "mode=%s boost=%s dist=%.0f acc=%.1f buf=%d progress=%.2f "
                "action=[%.2f %.2f %.2f %.2f]",
                ctx.behavior.mode.value, ctx.behavior.state.speed_boosted,
                snap.distance, ctx.trainer.accuracy, len(ctx.trainer.buffer),
                ctx.registry.progress, *action,
            )
        return action

    def reset_match(self, ctx: ControllerContext) -> None:
        """Start a new match.  The network keeps its weights."""
        ctx.trainer.reset()
        ctx.registry.reset()
        ctx.behavior.reset()
        ctx.body.respawn()
        ctx.score = 0.0
        ctx.ticks = 0
        ctx.last_tick_ms = None
        ctx.last_action = None
        logger.info("Match reset – network weights kept")
