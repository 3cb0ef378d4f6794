"""Protocol-based interfaces for Goblin War services.

This module exports the storage and service contracts, providing a clear
seam for dependency injection and testing.
"""

from goblinwar.interfaces.achievements import IAchievementEvaluator
from goblinwar.interfaces.battle import IBattleService
from goblinwar.interfaces.repository import IPlayerRepository

__all__ = [
    "IAchievementEvaluator",
    "IBattleService",
    "IPlayerRepository",
]
