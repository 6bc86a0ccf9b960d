"""
behavior.py – Behavior state machine for the AI orb.

Turns the network's 4-vector into movement and ability use, one tick at
a time.  The primary mode is a single enum, so at most one of the
windup / dash states can ever be active:

    NORMAL ──dash signal──▶ DASH_WINDUP ──timer──▶ DASHING ──arrived──▶ NORMAL
    NORMAL ──beam gate────▶ BEAM_WINDUP ──timer──▶ (beam fired) ──────▶ NORMAL

Speed boost is an orthogonal flag with its own countdown; it neither
blocks nor is blocked by the primary mode.

Mode-specific data (dash direction / target, beam aim) lives in a
``phase`` object that exists only while its mode is active.

During a beam windup the aim keeps tracking the player for the first
half of the windup and then freezes, giving the player a fixed, visible
line to step out of.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Union

from ai.ports import RandomSource
from settings import (
    PROJECTILE_SIGNAL_THRESHOLD, DASH_SIGNAL_THRESHOLD,
    LABEL_PREDICTION_TICKS, PROJECTILE_LEAD_TICKS,
    BEAM_LOCK_PROGRESS, DASH_ARRIVE_EPSILON,
)
from systems.ability_system import AbilityKind, AbilityRegistry
from systems.events import AbilityFired, AbilityUIPort, ModeChanged

logger = logging.getLogger(__name__)

Vec2 = tuple[float, float]


class BehaviorMode(Enum):
    NORMAL = "normal"
    DASH_WINDUP = "dash_windup"
    DASHING = "dashing"
    BEAM_WINDUP = "beam_windup"


# ══════════════════════════════════════════════════════════
#  Mode-specific transient data
# ══════════════════════════════════════════════════════════

@dataclass
class DashWindupPhase:
    direction: Vec2
    start: Vec2
    ends_at_ms: float


@dataclass
class DashingPhase:
    direction: Vec2
    start: Vec2
    target: Vec2
    remaining: float


@dataclass
class BeamWindupPhase:
    started_at_ms: float
    ends_at_ms: float
    direction: Vec2
    locked: bool = False

    def progress(self, now_ms: float) -> float:
        span = self.ends_at_ms - self.started_at_ms
        if span <= 0:
            return 1.0
        return min(1.0, max(0.0, (now_ms - self.started_at_ms) / span))


Phase = Union[DashWindupPhase, DashingPhase, BeamWindupPhase]

_PHASE_FOR_MODE = {
    BehaviorMode.NORMAL: type(None),
    BehaviorMode.DASH_WINDUP: DashWindupPhase,
    BehaviorMode.DASHING: DashingPhase,
    BehaviorMode.BEAM_WINDUP: BeamWindupPhase,
}


@dataclass
class BehaviorState:
    """Primary mode + its phase data, plus the orthogonal speed boost."""

    mode: BehaviorMode = BehaviorMode.NORMAL
    phase: Phase | None = None
    speed_boosted: bool = False
    speed_boost_remaining_ms: float = 0.0

    def reset(self):
        self.mode = BehaviorMode.NORMAL
        self.phase = None
        self.speed_boosted = False
        self.speed_boost_remaining_ms = 0.0


@dataclass
class BehaviorConfig:
    """Thresholds that turn raw network output into decisions."""

    projectile_threshold: float = PROJECTILE_SIGNAL_THRESHOLD
    dash_threshold: float = DASH_SIGNAL_THRESHOLD
    prediction_ticks: float = LABEL_PREDICTION_TICKS
    projectile_lead_ticks: float = PROJECTILE_LEAD_TICKS
    beam_lock_progress: float = BEAM_LOCK_PROGRESS
    dash_arrive_epsilon: float = DASH_ARRIVE_EPSILON


def normalize(dx: float, dy: float) -> Vec2 | None:
    """Unit vector, or None for a zero-length input."""
    length = math.hypot(dx, dy)
    if length <= 0 or not math.isfinite(length):
        return None
    return (dx / length, dy / length)


@dataclass(frozen=True)
class Readiness:
    """Cooldown flags sampled once at the start of a tick."""

    projectile: bool
    dash: bool
    speed_boost: bool
    beam: bool

    @classmethod
    def sample(cls, registry: AbilityRegistry, now_ms: float) -> Readiness:
        return cls(
            projectile=registry.is_ready(AbilityKind.PROJECTILE, now_ms),
            dash=registry.is_ready(AbilityKind.DASH, now_ms),
            speed_boost=registry.is_ready(AbilityKind.SPEED_BOOST, now_ms),
            beam=registry.is_ready(AbilityKind.BEAM, now_ms),
        )


# ══════════════════════════════════════════════════════════
#  State machine
# ══════════════════════════════════════════════════════════

class BehaviorStateMachine:
    """Drives the AI orb's mode, velocity and ability use.

    Usage (once per tick):
        ready = Readiness.sample(registry, now)
        fsm.step(body, opponent, action, now, elapsed_ms, ready)
        body.integrate()
        fsm.after_move(body)
    """

    def __init__(self, registry: AbilityRegistry, rng: RandomSource,
                 port: AbilityUIPort, config: BehaviorConfig | None = None):
        self.cfg = config or BehaviorConfig()
        self.registry = registry
        self.rng = rng
        self.port = port
        self.state = BehaviorState()

    # ── Queries ───────────────────────────────────────────

    @property
    def mode(self) -> BehaviorMode:
        return self.state.mode

    @property
    def is_busy(self) -> bool:
        """True while a windup or dash owns the orb's movement."""
        return self.state.mode is not BehaviorMode.NORMAL

    @property
    def beam_direction(self) -> Vec2 | None:
        phase = self.state.phase
        return phase.direction if isinstance(phase, BeamWindupPhase) else None

    @property
    def dash_target(self) -> Vec2 | None:
        phase = self.state.phase
        if isinstance(phase, DashingPhase):
            return phase.target
        if isinstance(phase, DashWindupPhase):
            dist = self.registry.spec(AbilityKind.DASH).distance
            return (phase.start[0] + phase.direction[0] * dist,
                    phase.start[1] + phase.direction[1] * dist)
        return None

    def reset(self):
        self.state.reset()

    # ══════════════════════════════════════════════════════
    #  Per-tick update
    # ══════════════════════════════════════════════════════

    def step(self, body, opponent, action, now_ms: float, elapsed_ms: float,
             ready: Readiness):
        """Set ``body.vx/vy`` for this tick and fire any triggered ability.

        *action* is the raw network output (4 floats in (0, 1)).
        """
        self._tick_speed_boost(elapsed_ms)

        move_x = (float(action[0]) - 0.5) * 2.0
        move_y = (float(action[1]) - 0.5) * 2.0

        mode = self.state.mode
        if mode is BehaviorMode.BEAM_WINDUP:
            self._tick_beam_windup(body, opponent, now_ms)
        elif mode is BehaviorMode.DASH_WINDUP:
            self._tick_dash_windup(body, now_ms)
        elif mode is BehaviorMode.DASHING:
            phase = self.state.phase
            body.vx = phase.direction[0] * self.registry.spec(AbilityKind.DASH).speed
            body.vy = phase.direction[1] * self.registry.spec(AbilityKind.DASH).speed
        else:
            speed = body.base_speed
            if self.state.speed_boosted:
                speed *= self.registry.spec(AbilityKind.SPEED_BOOST).multiplier
            body.vx = move_x * speed
            body.vy = move_y * speed
            self._evaluate_triggers(body, opponent, action, move_x, move_y,
                                    now_ms, ready)

        self._maybe_speed_boost(body, opponent, now_ms, ready)

    def after_move(self, body):
        """Dash bookkeeping once the body has applied this tick's velocity."""
        if self.state.mode is not BehaviorMode.DASHING:
            return
        phase = self.state.phase

        phase.remaining -= math.hypot(body.vx, body.vy)
        to_target = math.hypot(phase.target[0] - body.x, phase.target[1] - body.y)
        if phase.remaining <= 0 or to_target < self.cfg.dash_arrive_epsilon:
            body.x, body.y = phase.target
            body.vx = body.vy = 0.0
            self._enter(BehaviorMode.NORMAL, None)

    # ── Triggers (NORMAL only) ────────────────────────────

    def _evaluate_triggers(self, body, opponent, action, move_x: float,
                           move_y: float, now_ms: float, ready: Readiness):
        reg = self.registry
        cfg = self.cfg
        dist = math.hypot(opponent.x - body.x, opponent.y - body.y)

        if (float(action[2]) > cfg.projectile_threshold and ready.projectile
                and reg.is_unlocked(AbilityKind.PROJECTILE)):
            self._fire_projectile(body, opponent, now_ms)

        if (self.state.mode is BehaviorMode.NORMAL
                and float(action[3]) > cfg.dash_threshold and ready.dash
                and reg.is_unlocked(AbilityKind.DASH)):
            self._start_dash_windup(body, opponent, move_x, move_y, now_ms)

        # Secondary ranged option: only while the primary shot is cooling down.
        if (self.state.mode is BehaviorMode.NORMAL
                and ready.beam and not ready.projectile
                and dist < reg.spec(AbilityKind.BEAM).range
                and reg.is_unlocked(AbilityKind.BEAM)):
            self._start_beam_windup(body, opponent, now_ms)

    def _fire_projectile(self, body, opponent, now_ms: float):
        if not self.registry.try_use(AbilityKind.PROJECTILE, now_ms):
            return
        lead = self.cfg.projectile_lead_ticks
        target = (opponent.x + opponent.vx * lead, opponent.y + opponent.vy * lead)
        self.port.on_ability_fired(AbilityFired(AbilityKind.PROJECTILE, {
            "origin": (body.x, body.y),
            "target": target,
            "speed": self.registry.spec(AbilityKind.PROJECTILE).speed,
        }))

    # ── Dash ──────────────────────────────────────────────

    def _start_dash_windup(self, body, opponent, move_x: float, move_y: float,
                           now_ms: float):
        if not self.registry.try_use(AbilityKind.DASH, now_ms):
            return
        direction = (normalize(move_x, move_y)
                     or normalize(opponent.x - body.x, opponent.y - body.y)
                     or (1.0, 0.0))
        spec = self.registry.spec(AbilityKind.DASH)
        body.vx = body.vy = 0.0
        self._enter(BehaviorMode.DASH_WINDUP, DashWindupPhase(
            direction=direction,
            start=(body.x, body.y),
            ends_at_ms=now_ms + spec.windup_ms,
        ))

    def _tick_dash_windup(self, body, now_ms: float):
        phase = self.state.phase
        body.vx = body.vy = 0.0
        if now_ms < phase.ends_at_ms:
            return

        spec = self.registry.spec(AbilityKind.DASH)
        dx, dy = phase.direction
        start = phase.start
        target = (start[0] + dx * spec.distance, start[1] + dy * spec.distance)
        body.vx = dx * spec.speed
        body.vy = dy * spec.speed
        self._enter(BehaviorMode.DASHING, DashingPhase(
            direction=phase.direction, start=start, target=target,
            remaining=spec.distance,
        ))
        self.port.on_ability_fired(AbilityFired(AbilityKind.DASH, {
            "start": start, "target": target,
            "speed": spec.speed, "distance": spec.distance,
        }))

    # ── Beam ──────────────────────────────────────────────

    def _start_beam_windup(self, body, opponent, now_ms: float):
        if not self.registry.try_use(AbilityKind.BEAM, now_ms):
            return
        spec = self.registry.spec(AbilityKind.BEAM)
        body.vx = body.vy = 0.0
        self._enter(BehaviorMode.BEAM_WINDUP, BeamWindupPhase(
            started_at_ms=now_ms,
            ends_at_ms=now_ms + spec.windup_ms,
            direction=self._aim_beam(body, opponent, (1.0, 0.0)),
        ))

    def _tick_beam_windup(self, body, opponent, now_ms: float):
        phase = self.state.phase
        body.vx = body.vy = 0.0

        if not phase.locked:
            if phase.progress(now_ms) < self.cfg.beam_lock_progress:
                phase.direction = self._aim_beam(body, opponent, phase.direction)
            else:
                phase.locked = True
                logger.debug("beam aim locked at (%.2f, %.2f)", *phase.direction)

        if now_ms < phase.ends_at_ms:
            return

        spec = self.registry.spec(AbilityKind.BEAM)
        self.registry.mark_used(AbilityKind.BEAM, now_ms)
        self.port.on_ability_fired(AbilityFired(AbilityKind.BEAM, {
            "origin": (body.x, body.y),
            "direction": phase.direction,
            "width": spec.width,
        }))
        self._enter(BehaviorMode.NORMAL, None)

    def _aim_beam(self, body, opponent, fallback: Vec2) -> Vec2:
        """Aim at the predicted player position with a little random error."""
        ticks = self.cfg.prediction_ticks
        dx = opponent.x + opponent.vx * ticks - body.x
        dy = opponent.y + opponent.vy * ticks - body.y
        if math.hypot(dx, dy) <= 0:
            return fallback
        spread = self.registry.spec(AbilityKind.BEAM).inaccuracy
        angle = math.atan2(dy, dx) + (self.rng.random() - 0.5) * spread
        return (math.cos(angle), math.sin(angle))

    # ── Speed boost (independent of mode) ─────────────────

    def _tick_speed_boost(self, elapsed_ms: float):
        st = self.state
        if not st.speed_boosted:
            return
        st.speed_boost_remaining_ms -= elapsed_ms
        if st.speed_boost_remaining_ms <= 0:
            st.speed_boosted = False
            st.speed_boost_remaining_ms = 0.0
            logger.debug("speed boost expired")

    def _maybe_speed_boost(self, body, opponent, now_ms: float, ready: Readiness):
        if self.state.speed_boosted or not ready.speed_boost:
            return
        if not self.registry.is_unlocked(AbilityKind.SPEED_BOOST):
            return
        spec = self.registry.spec(AbilityKind.SPEED_BOOST)
        if math.hypot(opponent.x - body.x, opponent.y - body.y) <= spec.range:
            return
        if not self.registry.try_use(AbilityKind.SPEED_BOOST, now_ms):
            return
        self.state.speed_boosted = True
        self.state.speed_boost_remaining_ms = spec.duration_ms
        self.port.on_ability_fired(AbilityFired(AbilityKind.SPEED_BOOST, {
            "duration_ms": spec.duration_ms, "multiplier": spec.multiplier,
        }))

    # ── Transitions ───────────────────────────────────────

    def _enter(self, mode: BehaviorMode, phase: Phase | None):
        expected = _PHASE_FOR_MODE[mode]
        if not isinstance(phase, expected):
            raise TypeError(f"{mode.name} requires {expected.__name__}, got {type(phase).__name__}")
        previous = self.state.mode
        self.state.mode = mode
        self.state.phase = phase
        logger.debug("mode %s -> %s", previous.value, mode.value)
        self.port.on_mode_changed(ModeChanged(mode=mode, previous=previous))
