"""
ports.py – Injectable time and randomness sources.

Every cooldown, windup and training roll in the controller reads time
and chance through these two small interfaces, so a match can be
replayed tick-for-tick under test.

    Clock         – monotonic millisecond source
    RandomSource  – uniform floats in [0, 1)

Implementations:
    PygameClock   – pygame.time.get_ticks() (the live game)
    ManualClock   – advanced by hand (tests, headless runs)
    SeededRandom  – random.Random with a fixed seed
"""

from __future__ import annotations

import random
from typing import Protocol

import pygame


class Clock(Protocol):
    def now_ms(self) -> float: ...


class RandomSource(Protocol):
    def random(self) -> float: ...

    def uniform(self, a: float, b: float) -> float: ...


class PygameClock:
    """Milliseconds since ``pygame.init()``."""

    def now_ms(self) -> float:
        return float(pygame.time.get_ticks())


class ManualClock:
    """A clock that only moves when told to."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = float(start_ms)

    def now_ms(self) -> float:
        return self._now

    def advance(self, ms: float) -> float:
        if ms < 0:
            raise ValueError("ManualClock cannot run backwards")
        self._now += ms
        return self._now

    def set(self, ms: float) -> None:
        if ms < self._now:
            raise ValueError("ManualClock cannot run backwards")
        self._now = float(ms)


class SeededRandom:
    """Thin wrapper over ``random.Random`` so the seed travels with it."""

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)
