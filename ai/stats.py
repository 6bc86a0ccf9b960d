"""
stats.py  –  Per-match statistics for the learning opponent.

MatchStats snapshots the network's rolling accuracy every couple of
seconds and counts ability usage.  At match end it prints a formatted
summary and saves an accuracy-trend line graph via matplotlib.
"""

import logging

logger = logging.getLogger(__name__)

import matplotlib
matplotlib.use("Agg")  # non-interactive backend so the plot doesn't block pygame
import matplotlib.pyplot as plt

from systems.ability_system import AbilityKind
from systems.events import AbilityFired, AbilityUnlocked, ModeChanged

# Accuracy snapshot interval (seconds of match time)
_ACCURACY_INTERVAL = 2.0


class MatchStats:
    """Tracks one match and produces an end-of-match report.

    Attributes tracked:
        match_number        – int
        abilities_fired     – dict[str, int]
        unlocked            – list[str] in unlock order
        mode_changes        – int
        training_events     – int  (set at end_match)
        match_duration      – float (seconds, set at end_match)
        accuracy_history    – list[(seconds, accuracy)]
    """

    def __init__(self, match_number: int = 1):
        self.match_number = match_number
        self.abilities_fired: dict[str, int] = {k.value: 0 for k in AbilityKind}
        self.unlocked: list[str] = []
        self.mode_changes: int = 0
        self.training_events: int = 0
        self.match_duration: float = 0.0
        self.accuracy_history: list[tuple[float, float]] = []
        self._next_snapshot: float = 0.0

    # ===========================================================
    #  Per-frame / per-event recorders
    # ===========================================================

    def record_event(self, event):
        """Feed every controller event through here."""
        if isinstance(event, AbilityFired):
            self.abilities_fired[event.kind.value] += 1
        elif isinstance(event, AbilityUnlocked):
            self.unlocked.append(event.kind.value)
        elif isinstance(event, ModeChanged):
            self.mode_changes += 1

    def tick(self, score: float, accuracy: float):
        """Call once per frame.  Snapshots accuracy when the interval elapses."""
        if score >= self._next_snapshot:
            self.accuracy_history.append((round(score, 2), accuracy))
            self._next_snapshot = score + _ACCURACY_INTERVAL

    # ===========================================================
    #  End-of-match
    # ===========================================================

    def end_match(self, reason: str, score: float, accuracy: float,
                  training_events: int, plot_path: str | None = "accuracy_trend.png"):
        """Finalise stats, print summary, and optionally save the graph."""
        self.match_duration = score
        self.training_events = training_events
        # Final snapshot so the graph is never empty
        self.accuracy_history.append((round(score, 2), accuracy))

        self._print_summary(reason, accuracy)
        if plot_path:
            self._plot_accuracy(plot_path)

    # ===========================================================
    #  Reports
    # ===========================================================

    def _print_summary(self, reason: str, accuracy: float):
        """Print a clean formatted match summary to stdout."""
        print("\n" + "=" * 52)
        print(f"  MATCH {self.match_number} SUMMARY")
        print("=" * 52)
        print(f"  Ended by         : {reason}")
        print(f"  Survived         : {self.match_duration:.1f}s")
        print(f"  Final accuracy   : {accuracy:.1f}%")
        print(f"  Training events  : {self.training_events}")
        print("-" * 52)
        for name, count in self.abilities_fired.items():
            print(f"  {name:<17}: {count}")
        print(f"  Unlocked         : {', '.join(self.unlocked) or '-'}")
        print(f"  Mode changes     : {self.mode_changes}")
        print("=" * 52 + "\n")

    def _plot_accuracy(self, filename: str):
        """Save a simple line graph of accuracy_history to disk."""
        if not self.accuracy_history:
            return

        x = [t for t, _ in self.accuracy_history]
        y = [a for _, a in self.accuracy_history]

        fig, ax = plt.subplots()
        ax.plot(x, y, marker="o")
        ax.set_xlabel("Match time (seconds)")
        ax.set_ylabel("Rolling accuracy (%)")
        ax.set_ylim(0, 100)
        ax.set_title(f"Opponent accuracy - match {self.match_number}")
        ax.grid(True)

        fig.savefig(filename, dpi=100, bbox_inches="tight")
        plt.close(fig)
        logger.info("Accuracy graph saved to %s", filename)

    # ===========================================================
    #  Data accessors
    # ===========================================================

    def as_dict(self) -> dict:
        """Return a plain dict snapshot (useful for JSON serialisation)."""
        return {
            "match_number":     self.match_number,
            "abilities_fired":  dict(self.abilities_fired),
            "unlocked":         list(self.unlocked),
            "mode_changes":     self.mode_changes,
            "training_events":  self.training_events,
            "match_duration":   round(self.match_duration, 2),
            "accuracy_history": [list(p) for p in self.accuracy_history],
        }
