"""systems package – Ability bookkeeping, controller events, projectiles and beams."""

from .ability_system import AbilityKind, AbilitySpec, AbilityRegistry
from .events import AbilityFired, AbilityUnlocked, ModeChanged, AbilityUIPort, EventLog, NullPort
from .projectile_system import ProjectileSystem, Projectile, Beam
