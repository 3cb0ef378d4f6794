"""Battle Service Protocol Interface.

This module defines the protocol (interface) for battle resolution
in the Goblin War engine.
"""

from typing import Protocol

from goblinwar.domain.enums import DifficultyOverride
from goblinwar.domain.models import BattleOutcome, PlayerID


class IBattleService(Protocol):
    """Protocol defining the interface for battle resolution operations."""

    def resolve_battle(
        self,
        player_id: PlayerID,
        difficulty_override: DifficultyOverride | str | None = None,
        *,
        attempt_id: str | None = None,
    ) -> BattleOutcome:
        """Fight one battle against a generated Goblin army.

        Args:
            player_id: Player whose army fights
            difficulty_override: Optional easy/moderate/hard; anything else
                falls back to adaptive progression
            attempt_id: Identifier making retries of the same request safe

        Returns:
            BattleOutcome with the persisted result
        """
        ...
