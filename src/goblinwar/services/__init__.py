"""Service layer for Goblin War.

Services depend on Protocol interfaces (IPlayerRepository,
IAchievementEvaluator) rather than concrete storage:

- Use factory.py for production dependency wiring
- Inject in-memory repositories or protocol-based fakes for testing

Architecture:
    - ArmyService: Army reads, unit rewards, special-unit grants, history
    - BattleService: Battle resolution and persistence of its consequences

Production Usage:
    from goblinwar.factory import build_battle_service, create_repository
    battles = build_battle_service(create_repository(session_factory))
    outcome = battles.resolve_battle(player_id, "moderate")

Testing Usage:
    from goblinwar.repository import InMemoryPlayerRepository
    from goblinwar.services.battle_service import BattleService

    class FakeAchievements:
        def evaluate(self, player_id):
            return []

    service = BattleService(InMemoryPlayerRepository(), FakeAchievements())
"""

from goblinwar.services.achievements import NullAchievementEvaluator
from goblinwar.services.army_service import ArmyService
from goblinwar.services.battle_service import BattleService, PlayerLockRegistry

__all__ = [
    "ArmyService",
    "BattleService",
    "NullAchievementEvaluator",
    "PlayerLockRegistry",
]
