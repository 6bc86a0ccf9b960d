"""
training.py – Online heuristic-label training for the opponent network.

Each tick the controller hands the trainer the network input it just
used plus a hand-computed "what a sensible chaser would do" target.
Samples pile up in a short FIFO; every so often the most recent few are
replayed through backprop so the network drifts toward the heuristic
while the player watches.

    Sample            – immutable (inputs, targets) pair
    SampleBuffer      – fixed-capacity FIFO, chronological
    HeuristicLabeler  – target vector from a WorldSnapshot
    OnlineTrainer     – buffer + probabilistic replay + rolling accuracy

The buffer resets every match; the network it trains does not.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Iterator

from ai.neural_network import NeuralNetwork
from ai.ports import RandomSource
from ai.snapshot import WorldSnapshot
from settings import (
    SAMPLE_BUFFER_CAPACITY, TRAIN_MIN_SAMPLES, TRAIN_PROBABILITY,
    TRAIN_BATCH, ACCURACY_ERROR_SCALE,
    LABEL_PREDICTION_TICKS, LABEL_MOVE_SCALE, LABEL_HIGH, LABEL_LOW,
    LABEL_PROJECTILE_MIN_DIST, LABEL_DASH_MIN_DIST, LABEL_DASH_MAX_DIST,
    PROJECTILE_RANGE,
)

logger = logging.getLogger(__name__)


def clamp(lo: float, hi: float, value: float) -> float:
    return max(lo, min(hi, value))


# ══════════════════════════════════════════════════════════
#  Samples
# ══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Sample:
    """One training pair.  Frozen so the buffer can share it safely."""

    inputs: tuple[float, ...]
    targets: tuple[float, ...]

    @classmethod
    def of(cls, inputs, targets) -> Sample:
        return cls(tuple(float(v) for v in inputs),
                   tuple(float(v) for v in targets))


class SampleBuffer:
    """Bounded FIFO of samples; the oldest falls off the head when full."""

    def __init__(self, capacity: int = SAMPLE_BUFFER_CAPACITY):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._samples: deque[Sample] = deque(maxlen=capacity)

    def append(self, sample: Sample) -> None:
        self._samples.append(sample)

    def recent(self, n: int) -> list[Sample]:
        """Up to *n* samples, most recently appended first."""
        n = max(0, min(n, len(self._samples)))
        return [self._samples[-1 - i] for i in range(n)]

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)


# ══════════════════════════════════════════════════════════
#  Heuristic labeler
# ══════════════════════════════════════════════════════════

@dataclass
class LabelConfig:
    """Constants of the hand-written chaser the network imitates."""

    prediction_ticks: float = LABEL_PREDICTION_TICKS
    move_scale: float = LABEL_MOVE_SCALE
    high: float = LABEL_HIGH
    low: float = LABEL_LOW
    projectile_min_dist: float = LABEL_PROJECTILE_MIN_DIST
    projectile_range: float = PROJECTILE_RANGE
    dash_min_dist: float = LABEL_DASH_MIN_DIST
    dash_max_dist: float = LABEL_DASH_MAX_DIST


class HeuristicLabeler:
    """Turns a snapshot into the target action vector.

    Output order matches the network: move x, move y (both mapped from
    [-1, 1] to [0, 1]), projectile signal, dash signal.
    """

    def __init__(self, config: LabelConfig | None = None):
        self.cfg = config or LabelConfig()

    def label(self, snap: WorldSnapshot) -> tuple[float, float, float, float]:
        cfg = self.cfg
        future_x, future_y = snap.predicted_opponent(cfg.prediction_ticks)
        move_x = clamp(-1.0, 1.0, (future_x - snap.self_x) / cfg.move_scale)
        move_y = clamp(-1.0, 1.0, (future_y - snap.self_y) / cfg.move_scale)

        dist = snap.distance
        projectile = (cfg.high if cfg.projectile_min_dist < dist < cfg.projectile_range
                      else cfg.low)
        dash = cfg.high if cfg.dash_min_dist < dist < cfg.dash_max_dist else cfg.low

        return ((move_x + 1.0) / 2.0, (move_y + 1.0) / 2.0, projectile, dash)


# ══════════════════════════════════════════════════════════
#  Online trainer
# ══════════════════════════════════════════════════════════

@dataclass
class TrainingConfig:
    """How often and how much the network is trained per tick."""

    buffer_capacity: int = SAMPLE_BUFFER_CAPACITY
    min_samples: int = TRAIN_MIN_SAMPLES
    probability: float = TRAIN_PROBABILITY
    batch: int = TRAIN_BATCH
    error_scale: float = ACCURACY_ERROR_SCALE


class OnlineTrainer:
    """Collects samples every tick and occasionally replays the newest.

    Usage:
        trainer = OnlineTrainer(net, rng)
        # every tick:
        trained = trainer.step(inputs, targets)
        trainer.accuracy   # 0–100 display metric
    """

    def __init__(self, network: NeuralNetwork, rng: RandomSource,
                 config: TrainingConfig | None = None):
        self.cfg = config or TrainingConfig()
        self.network = network
        self._rng = rng
        self.buffer = SampleBuffer(self.cfg.buffer_capacity)
        self._accuracy: float = 0.0
        self.training_events: int = 0

    @property
    def accuracy(self) -> float:
        """Rolling accuracy from the latest training event."""
        return self._accuracy

    def step(self, inputs, targets) -> bool:
        """Record one sample; maybe train.  Returns True if training ran."""
        self.buffer.append(Sample.of(inputs, targets))

        if len(self.buffer) <= self.cfg.min_samples:
            return False
        if self._rng.random() >= self.cfg.probability:
            return False

        self.train_recent()
        return True

    def train_recent(self) -> float:
        """Train once on each of the newest samples; returns mean error."""
        batch = self.buffer.recent(min(self.cfg.batch, len(self.buffer)))
        if not batch:
            return 0.0

        total_error = 0.0
        for sample in batch:
            total_error += self.network.train(sample.inputs, sample.targets)
        mean_error = total_error / len(batch)

        self._accuracy = clamp(0.0, 100.0, 100.0 - mean_error * self.cfg.error_scale)
        self.training_events += 1
        logger.debug(
            "trained on %d samples: mean_err=%.4f accuracy=%.1f buffer=%d",
            len(batch), mean_error, self._accuracy, len(self.buffer),
        )
        return mean_error

    def reset(self) -> None:
        """Forget this match's samples.  Network weights are kept."""
        self.buffer.clear()
        self._accuracy = 0.0
        self.training_events = 0
