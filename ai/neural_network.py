"""
neural_network.py – Tiny feed-forward network with online backprop.

One hidden layer, logistic activations everywhere, trained one sample at
a time with momentum on the weight matrices.  The topology is fixed at
construction; only the values inside the matrices ever change.

    predict(x)      – pure forward pass
    train(x, t)     – one backprop-with-momentum step, returns mean |error|

The derivative used during backprop is y * (1 - y) evaluated on the
*post-activation* value, and the hidden-layer error is propagated through
the output weights as they were *before* this step's update.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from settings import (
    NN_INPUT_SIZE, NN_HIDDEN_SIZE, NN_OUTPUT_SIZE,
    NN_LEARNING_RATE, NN_MOMENTUM, NN_INIT_RANGE,
)

# Logistic saturates to exactly 0.0 / 1.0 in float64 past roughly ±37.
_PREACTIVATION_LIMIT = 30.0


class DimensionError(ValueError):
    """Vector length does not match the network's layer size."""


@dataclass
class NetworkConfig:
    """Shape and learning constants for the opponent's network."""

    input_size: int = NN_INPUT_SIZE
    hidden_size: int = NN_HIDDEN_SIZE
    output_size: int = NN_OUTPUT_SIZE
    learning_rate: float = NN_LEARNING_RATE
    momentum: float = NN_MOMENTUM
    init_range: float = NN_INIT_RANGE


def sigmoid(x: np.ndarray) -> np.ndarray:
    x = np.clip(x, -_PREACTIVATION_LIMIT, _PREACTIVATION_LIMIT)
    return 1.0 / (1.0 + np.exp(-x))


def sigmoid_derivative(y: np.ndarray) -> np.ndarray:
    """Slope of the logistic expressed through its output ``y``."""
    return y * (1.0 - y)


class NeuralNetwork:
    """8-16-4 perceptron owned by a single opponent controller.

    Usage:
        net = NeuralNetwork(rng=np.random.default_rng(7))
        action = net.predict(inputs)
        err = net.train(inputs, targets)
    """

    def __init__(self, config: NetworkConfig | None = None,
                 rng: np.random.Generator | None = None):
        self.cfg = config or NetworkConfig()
        rng = rng if rng is not None else np.random.default_rng()
        cfg = self.cfg
        r = cfg.init_range

        self.weights_ih = rng.uniform(-r, r, (cfg.hidden_size, cfg.input_size))
        self.weights_ho = rng.uniform(-r, r, (cfg.output_size, cfg.hidden_size))
        self.bias_h = rng.uniform(-r, r, cfg.hidden_size)
        self.bias_o = rng.uniform(-r, r, cfg.output_size)

        self.prev_delta_ih = np.zeros((cfg.hidden_size, cfg.input_size))
        self.prev_delta_ho = np.zeros((cfg.output_size, cfg.hidden_size))

    # ── Properties ────────────────────────────────────────

    @property
    def input_size(self) -> int:
        return self.cfg.input_size

    @property
    def hidden_size(self) -> int:
        return self.cfg.hidden_size

    @property
    def output_size(self) -> int:
        return self.cfg.output_size

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self.cfg.input_size, self.cfg.hidden_size, self.cfg.output_size)

    # ══════════════════════════════════════════════════════
    #  Forward / backward
    # ══════════════════════════════════════════════════════

    def predict(self, inputs) -> np.ndarray:
        """Forward pass.  Never mutates the network."""
        x = self._as_vector(inputs, self.cfg.input_size, "input")
        _, output = self._forward(x)
        return output

    def train(self, inputs, targets) -> float:
        """One online backprop step toward *targets*.

        Returns the mean absolute output error measured *before* the update.
        """
        cfg = self.cfg
        x = self._as_vector(inputs, cfg.input_size, "input")
        t = self._as_vector(targets, cfg.output_size, "target")

        hidden, output = self._forward(x)
        output_errors = t - output

        # Captured before the output weights move.
        weights_ho_t = self.weights_ho.T.copy()

        # ── Hidden → output ───────────────────────────────
        gradients = output_errors * sigmoid_derivative(output) * cfg.learning_rate
        delta_ho = np.outer(gradients, hidden) + cfg.momentum * self.prev_delta_ho
        self.weights_ho += delta_ho
        self.prev_delta_ho = delta_ho
        self.bias_o += gradients

        # ── Input → hidden ────────────────────────────────
        hidden_errors = weights_ho_t @ output_errors
        hidden_gradients = hidden_errors * sigmoid_derivative(hidden) * cfg.learning_rate
        delta_ih = np.outer(hidden_gradients, x) + cfg.momentum * self.prev_delta_ih
        self.weights_ih += delta_ih
        self.prev_delta_ih = delta_ih
        self.bias_h += hidden_gradients

        return float(np.mean(np.abs(output_errors)))

    def _forward(self, x: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        hidden = sigmoid(self.weights_ih @ x + self.bias_h)
        output = sigmoid(self.weights_ho @ hidden + self.bias_o)
        return hidden, output

    @staticmethod
    def _as_vector(values, size: int, what: str) -> np.ndarray:
        vec = np.asarray(values, dtype=np.float64).reshape(-1)
        if vec.shape[0] != size:
            raise DimensionError(
                f"{what} vector has length {vec.shape[0]}, expected {size}"
            )
        return vec

    # ══════════════════════════════════════════════════════
    #  State snapshot (used by persistence)
    # ══════════════════════════════════════════════════════

    _STATE_KEYS = (
        "weights_ih", "weights_ho", "bias_h", "bias_o",
        "prev_delta_ih", "prev_delta_ho",
    )

    def get_state(self) -> dict:
        """Return a JSON-friendly copy of every learned array."""
        state = {key: getattr(self, key).tolist() for key in self._STATE_KEYS}
        state["shape"] = list(self.shape)
        return state

    def set_state(self, state: dict) -> None:
        """Load arrays produced by :meth:`get_state`.

        Raises DimensionError if the stored shape differs from this network.
        """
        if tuple(state.get("shape", ())) != self.shape:
            raise DimensionError(
                f"stored network shape {state.get('shape')} != {list(self.shape)}"
            )
        loaded = {}
        for key in self._STATE_KEYS:
            arr = np.asarray(state[key], dtype=np.float64)
            if arr.shape != getattr(self, key).shape:
                raise DimensionError(f"{key} has shape {arr.shape}")
            loaded[key] = arr
        for key, arr in loaded.items():
            setattr(self, key, arr)
