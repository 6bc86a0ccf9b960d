"""entities package – The player orb and the AI orb."""

from .orb import Orb, PlayerOrb, AIOrb
