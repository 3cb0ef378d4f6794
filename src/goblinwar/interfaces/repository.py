"""Player Repository Protocol Interface.

This module defines the storage contract the battle engine depends on.  It
covers the army store, the battle history store and the special-unit store,
plus a single ``commit_battle`` operation that writes a battle's army change
and its history record together.
"""

from typing import Protocol

from goblinwar.domain.models import (
    ArmyComposition,
    BattleHistoryRecord,
    Player,
    PlayerID,
    SpecialUnitHolding,
    StoredArmy,
)


class IPlayerRepository(Protocol):
    """Protocol defining per-player persistence for battles."""

    def create_player(self, name: str) -> Player:
        """Register a new player and return it."""
        ...

    def list_players(self) -> list[Player]:
        """Return every player ordered by identifier."""
        ...

    def get_army(self, player_id: PlayerID) -> StoredArmy | None:
        """Return the player's army and its version, or ``None`` if absent."""
        ...

    def replace_army(
        self,
        player_id: PlayerID,
        army: ArmyComposition,
        *,
        expected_version: int | None = None,
    ) -> StoredArmy:
        """Overwrite the player's army, creating it if needed.

        Args:
            player_id: Player owning the army
            army: New unit counts
            expected_version: When given, the write only succeeds if the stored
                version still matches (raises ``StaleArmyError`` otherwise)

        Returns:
            The stored army with its new version
        """
        ...

    def get_battle_history(self, player_id: PlayerID) -> list[BattleHistoryRecord]:
        """Return the player's battle results, oldest first."""
        ...

    def append_battle_history(
        self, player_id: PlayerID, record: BattleHistoryRecord
    ) -> BattleHistoryRecord:
        """Append one battle result and return it with its identifier."""
        ...

    def find_battle(self, player_id: PlayerID, attempt_id: str) -> BattleHistoryRecord | None:
        """Look up a committed battle by its attempt identifier."""
        ...

    def get_special_units(self, player_id: PlayerID) -> list[SpecialUnitHolding]:
        """Return the player's special-unit holdings."""
        ...

    def add_special_units(
        self, player_id: PlayerID, holding: SpecialUnitHolding
    ) -> SpecialUnitHolding:
        """Grant special units, adding to any existing quantity of that unit."""
        ...

    def commit_battle(
        self,
        player_id: PlayerID,
        *,
        army: ArmyComposition,
        expected_version: int,
        record: BattleHistoryRecord,
    ) -> tuple[StoredArmy, BattleHistoryRecord]:
        """Replace the army and append the battle record in one transaction.

        Either both writes happen or neither does.  Raises ``StaleArmyError``
        when the army version moved, ``DuplicateAttemptError`` when the record's
        attempt id was already committed and ``PersistenceError`` otherwise.
        """
        ...
