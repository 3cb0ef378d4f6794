"""SQLAlchemy models for the Goblin War engine.

This module exports all database models and the declarative base.
"""

# Army models
from .army import PlayerArmy

# Base classes
from .base import Base, TimestampCreatedMixin, TimestampMixin, VersionedMixin, utc_now

# Battle models
from .battle import BattleResult

# Player models
from .player import Player

# Special unit models
from .special_unit import PlayerSpecialUnit, SpecialUnit

__all__ = [
    "Base",
    "BattleResult",
    "Player",
    "PlayerArmy",
    "PlayerSpecialUnit",
    "SpecialUnit",
    "TimestampCreatedMixin",
    "TimestampMixin",
    "VersionedMixin",
    "utc_now",
]
