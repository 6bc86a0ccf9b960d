"""
persistence.py  –  Optional on-disk copy of the opponent's network.

Weights already survive match restarts in memory.  With ``--weights``
the game also loads them at startup and saves them on exit, so the
opponent keeps learning across sessions.

A missing or corrupt file is never fatal: the freshly initialised
network is kept and a warning is logged.
"""

import json
import logging
import os

from ai.neural_network import DimensionError, NeuralNetwork

logger = logging.getLogger(__name__)

_FORMAT_VERSION = 1


def save_network(net: NeuralNetwork, path: str) -> None:
    """Write every learned array of *net* to *path* as JSON."""
    data = {"version": _FORMAT_VERSION, "network": net.get_state()}
    folder = os.path.dirname(os.path.abspath(path))
    os.makedirs(folder, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    logger.info("Network weights saved to %s", path)


def load_network(net: NeuralNetwork, path: str) -> bool:
    """Load weights from *path* into *net*.  Returns True on success."""
    if not os.path.isfile(path):
        logger.info("No saved weights at %s – starting fresh", path)
        return False

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict) or not isinstance(data.get("network"), dict):
            raise ValueError("weights file is not a saved network")
        if data.get("version") != _FORMAT_VERSION:
            raise ValueError(f"unsupported weights version {data.get('version')!r}")
        net.set_state(data["network"])
    except (json.JSONDecodeError, OSError, KeyError, ValueError, TypeError) as exc:
        # DimensionError is a ValueError: a file from a differently shaped net.
        kind = "shape mismatch" if isinstance(exc, DimensionError) else "unreadable"
        logger.warning("Ignoring saved weights at %s (%s): %s", path, kind, exc)
        return False

    logger.info("Network weights loaded from %s", path)
    return True
