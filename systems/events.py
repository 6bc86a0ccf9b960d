"""
events.py – Discrete notifications the opponent controller emits.

The controller never touches rendering or UI directly.  Anything that
wants to react (beam visuals, ability icons, stats) implements
``AbilityUIPort`` and receives one call per event.

    AbilityFired     – an ability's effect executed this tick
    ModeChanged      – the behavior mode switched
    AbilityUnlocked  – match progress crossed an unlock threshold
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Union

from systems.ability_system import AbilityKind


@dataclass(frozen=True)
class AbilityFired:
    kind: AbilityKind
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ModeChanged:
    mode: Any          # ai.behavior.BehaviorMode
    previous: Any


@dataclass(frozen=True)
class AbilityUnlocked:
    kind: AbilityKind


Event = Union[AbilityFired, ModeChanged, AbilityUnlocked]


class AbilityUIPort(Protocol):
    def on_ability_fired(self, event: AbilityFired) -> None: ...

    def on_mode_changed(self, event: ModeChanged) -> None: ...

    def on_ability_unlocked(self, event: AbilityUnlocked) -> None: ...


class NullPort:
    """Discards everything."""

    def on_ability_fired(self, event: AbilityFired) -> None:
        pass

    def on_mode_changed(self, event: ModeChanged) -> None:
        pass

    def on_ability_unlocked(self, event: AbilityUnlocked) -> None:
        pass


class EventLog:
    """Records events in arrival order until drained.

    The game loop drains it once per frame to spawn projectiles and beams.
    """

    def __init__(self) -> None:
        self.events: list[Event] = []

    def on_ability_fired(self, event: AbilityFired) -> None:
        self.events.append(event)

    def on_mode_changed(self, event: ModeChanged) -> None:
        self.events.append(event)

    def on_ability_unlocked(self, event: AbilityUnlocked) -> None:
        self.events.append(event)

    def drain(self) -> list[Event]:
        out, self.events = self.events, []
        return out

    def of_type(self, cls) -> list:
        return [e for e in self.events if isinstance(e, cls)]
