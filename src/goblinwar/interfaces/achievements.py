"""Achievement Evaluator Protocol Interface."""

from typing import Protocol

from goblinwar.domain.models import Achievement, PlayerID


class IAchievementEvaluator(Protocol):
    """Protocol for the external achievement system.

    Called once a battle is persisted; returns achievements newly unlocked
    by the player.
    """

    def evaluate(self, player_id: PlayerID) -> list[Achievement]:
        """Check and unlock achievements for a player.

        Args:
            player_id: Player whose progress changed

        Returns:
            Achievements unlocked by this call (possibly empty)
        """
        ...
