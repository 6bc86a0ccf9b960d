"""
ability_system.py – Cooldown and unlock bookkeeping for the AI's abilities.

The registry only answers two questions – "is it off cooldown?" and
"has the match progressed far enough to allow it?" – and records when an
ability was last used.  What an ability actually *does* (windups,
movement, beams) belongs to ai.behavior.

Abilities
─────────
PROJECTILE   – aimed shot, always unlocked
DASH         – windup then fixed-distance lunge
SPEED_BOOST  – temporary movement multiplier
BEAM         – long windup, telegraphed narrow beam

Unlocks are driven by a match-progress fraction (score / max duration).
Once an ability unlocks it stays unlocked until ``reset()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from settings import (
    PROJECTILE_COOLDOWN, PROJECTILE_RANGE, PROJECTILE_SPEED,
    DASH_COOLDOWN, DASH_WINDUP, DASH_DISTANCE, DASH_SPEED, DASH_UNLOCK,
    SPEED_BOOST_COOLDOWN, SPEED_BOOST_DURATION, SPEED_BOOST_MULT,
    SPEED_BOOST_MIN_DIST, SPEED_BOOST_UNLOCK,
    BEAM_COOLDOWN, BEAM_RANGE, BEAM_SPEED, BEAM_WINDUP, BEAM_WIDTH,
    BEAM_INACCURACY, BEAM_UNLOCK, MATCH_MAX_DURATION,
)

logger = logging.getLogger(__name__)


class AbilityKind(Enum):
    PROJECTILE = "projectile"
    DASH = "dash"
    SPEED_BOOST = "speed_boost"
    BEAM = "beam"


# ══════════════════════════════════════════════════════════
#  Static parameters
# ══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AbilitySpec:
    """Fixed per-ability tuning.  Fields an ability does not use stay 0."""

    kind: AbilityKind
    cooldown_ms: float
    unlock_at: float = 0.0         # match-progress fraction
    always_unlocked: bool = False
    range: float = 0.0
    windup_ms: float = 0.0
    speed: float = 0.0
    distance: float = 0.0
    duration_ms: float = 0.0
    multiplier: float = 1.0
    width: float = 0.0
    inaccuracy: float = 0.0        # radians, full jitter span


def default_specs() -> dict[AbilityKind, AbilitySpec]:
    return {
        AbilityKind.PROJECTILE: AbilitySpec(
            AbilityKind.PROJECTILE, PROJECTILE_COOLDOWN,
            always_unlocked=True, range=PROJECTILE_RANGE, speed=PROJECTILE_SPEED,
        ),
        AbilityKind.DASH: AbilitySpec(
            AbilityKind.DASH, DASH_COOLDOWN, unlock_at=DASH_UNLOCK,
            windup_ms=DASH_WINDUP, speed=DASH_SPEED, distance=DASH_DISTANCE,
        ),
        AbilityKind.SPEED_BOOST: AbilitySpec(
            AbilityKind.SPEED_BOOST, SPEED_BOOST_COOLDOWN,
            unlock_at=SPEED_BOOST_UNLOCK, range=SPEED_BOOST_MIN_DIST,
            duration_ms=SPEED_BOOST_DURATION, multiplier=SPEED_BOOST_MULT,
        ),
        AbilityKind.BEAM: AbilitySpec(
            AbilityKind.BEAM, BEAM_COOLDOWN, unlock_at=BEAM_UNLOCK,
            range=BEAM_RANGE, windup_ms=BEAM_WINDUP, speed=BEAM_SPEED,
            width=BEAM_WIDTH, inaccuracy=BEAM_INACCURACY,
        ),
    }


# ══════════════════════════════════════════════════════════
#  Mutable per-match state
# ══════════════════════════════════════════════════════════

@dataclass
class AbilityState:
    """``last_used_at_ms`` is None until the ability is first used."""

    last_used_at_ms: float | None = None
    unlocked: bool = False


class AbilityRegistry:
    """Per-match cooldown / unlock tracker for the four AI abilities.

    Usage:
        reg = AbilityRegistry()
        newly = reg.update_progress(score_seconds)
        if reg.is_ready(AbilityKind.DASH, now) and reg.is_unlocked(AbilityKind.DASH):
            reg.mark_used(AbilityKind.DASH, now)
    """

    def __init__(self, specs: dict[AbilityKind, AbilitySpec] | None = None,
                 match_max_duration: float = MATCH_MAX_DURATION):
        self.specs = specs or default_specs()
        missing = set(AbilityKind) - set(self.specs)
        if missing:
            raise ValueError(f"missing ability specs: {sorted(k.value for k in missing)}")
        self.match_max_duration = match_max_duration
        self._states: dict[AbilityKind, AbilityState] = {}
        self._progress: float = 0.0
        self.reset()

    def spec(self, kind: AbilityKind) -> AbilitySpec:
        return self.specs[kind]

    def state(self, kind: AbilityKind) -> AbilityState:
        return self._states[kind]

    @property
    def progress(self) -> float:
        """Match progress fraction, 0.0–1.0, never decreasing."""
        return self._progress

    # ── Queries ───────────────────────────────────────────

    def is_ready(self, kind: AbilityKind, now_ms: float) -> bool:
        last = self._states[kind].last_used_at_ms
        if last is None:
            return True
        return now_ms - last >= self.specs[kind].cooldown_ms

    def is_unlocked(self, kind: AbilityKind) -> bool:
        if self.specs[kind].always_unlocked:
            return True
        return self._states[kind].unlocked

    def can_use(self, kind: AbilityKind, now_ms: float) -> bool:
        return self.is_unlocked(kind) and self.is_ready(kind, now_ms)

    def cooldown_remaining_ms(self, kind: AbilityKind, now_ms: float) -> float:
        last = self._states[kind].last_used_at_ms
        if last is None:
            return 0.0
        return max(0.0, self.specs[kind].cooldown_ms - (now_ms - last))

    def cooldown_fraction(self, kind: AbilityKind, now_ms: float) -> float:
        """0.0 = ready, 1.0 = just used.  For UI display."""
        cd = self.specs[kind].cooldown_ms
        if cd <= 0:
            return 0.0
        return min(1.0, self.cooldown_remaining_ms(kind, now_ms) / cd)

    # ── Mutations ─────────────────────────────────────────

    def mark_used(self, kind: AbilityKind, now_ms: float) -> None:
        st = self._states[kind]
        if st.last_used_at_ms is None or now_ms > st.last_used_at_ms:
            st.last_used_at_ms = now_ms

    def try_use(self, kind: AbilityKind, now_ms: float) -> bool:
        """Mark *kind* used if it passes both gates.

        A failed gate is a silent no-op: nothing changes and False is returned.
        """
        if not self.is_unlocked(kind):
            logger.debug("ability %s not unlocked (progress=%.2f)",
                         kind.value, self._progress)
            return False
        if not self.is_ready(kind, now_ms):
            logger.debug("ability %s on cooldown (%.0f ms left)",
                         kind.value, self.cooldown_remaining_ms(kind, now_ms))
            return False
        self.mark_used(kind, now_ms)
        return True

    def update_progress(self, elapsed_score: float) -> list[AbilityKind]:
        """Advance match progress and return abilities unlocked by this call."""
        frac = min(1.0, max(0.0, elapsed_score) / max(1e-9, self.match_max_duration))
        self._progress = max(self._progress, frac)

        newly: list[AbilityKind] = []
        for kind, spec in self.specs.items():
            st = self._states[kind]
            if spec.always_unlocked or st.unlocked:
                continue
            if self._progress >= spec.unlock_at:
                st.unlocked = True
                newly.append(kind)
                logger.info("Ability '%s' unlocked at progress %.2f",
                            kind.value, self._progress)
        return newly

    def reset(self) -> None:
        """Back to match start: nothing used, only always-on abilities unlocked."""
        self._progress = 0.0
        self._states = {
            kind: AbilityState(unlocked=spec.always_unlocked)
            for kind, spec in self.specs.items()
        }
