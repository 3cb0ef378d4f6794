"""Army Service for Goblin War.

Reads and rewards outside of battle: viewing a roster, granting a unit for a
correct answer, overwriting counts, granting special units and listing past
battles.
"""

from __future__ import annotations

import logging

from goblinwar.domain import models as dm
from goblinwar.domain.enums import UnitType
from goblinwar.errors import BattleConflictError, StaleArmyError
from goblinwar.interfaces.repository import IPlayerRepository
from goblinwar.services.battle_service import PlayerLockRegistry

logger = logging.getLogger(__name__)


class ArmyService:
    """Service for army reads and reward writes."""

    def __init__(
        self,
        repository: IPlayerRepository,
        *,
        locks: PlayerLockRegistry | None = None,
        max_attempts: int = 3,
    ) -> None:
        """Initialize the army service.

        Args:
            repository: Player storage
            locks: Lock registry shared with the battle service, so rewards and
                battles for one player never interleave
            max_attempts: Retries when the army changes between read and write
        """
        self._repository = repository
        self._locks = locks or PlayerLockRegistry()
        self._max_attempts = max_attempts

    def create_player(self, name: str) -> dm.Player:
        name = name.strip()
        if not name:
            raise ValueError("Player name cannot be empty")
        return self._repository.create_player(name)

    def list_players(self) -> list[dm.Player]:
        return self._repository.list_players()

    def get_army(self, player_id: dm.PlayerID) -> dm.ArmyComposition:
        """Return the player's army, or an empty one if none was ever stored."""

        stored = self._repository.get_army(player_id)
        return dm.ArmyComposition() if stored is None else stored.army

    def add_unit(
        self, player_id: dm.PlayerID, unit_type: UnitType | str, amount: int = 1
    ) -> dm.ArmyComposition:
        """Reward the player with ``amount`` units of one type.

        Raises:
            ValueError: If the unit type is unknown or amount is not positive
        """
        try:
            unit = UnitType(unit_type)
        except ValueError as exc:
            raise ValueError(f"Invalid unit type: {unit_type}") from exc
        if amount <= 0:
            raise ValueError(f"Amount must be positive, got {amount}")

        with self._locks.hold(player_id):
            for _ in range(self._max_attempts):
                stored = self._repository.get_army(player_id)
                current = dm.ArmyComposition() if stored is None else stored.army
                updated = current.with_count(unit, current.count(unit) + amount)
                try:
                    written = self._repository.replace_army(
                        player_id,
                        updated,
                        expected_version=None if stored is None else stored.version,
                    )
                except StaleArmyError:
                    logger.warning("army for player %s changed while adding %s", player_id, unit)
                    continue
                return written.army
        raise BattleConflictError(f"could not add {unit} for player {player_id}")

    def set_army(self, player_id: dm.PlayerID, army: dm.ArmyComposition) -> dm.ArmyComposition:
        """Overwrite the player's unit counts."""

        with self._locks.hold(player_id):
            return self._repository.replace_army(player_id, army).army

    def grant_special_units(
        self, player_id: dm.PlayerID, holding: dm.SpecialUnitHolding
    ) -> dm.SpecialUnitHolding:
        if holding.quantity <= 0:
            raise ValueError(f"Quantity must be positive, got {holding.quantity}")
        if holding.power < 0:
            raise ValueError(f"Power cannot be negative, got {holding.power}")
        return self._repository.add_special_units(player_id, holding)

    def get_special_units(self, player_id: dm.PlayerID) -> list[dm.SpecialUnitHolding]:
        return self._repository.get_special_units(player_id)

    def battle_history(self, player_id: dm.PlayerID) -> list[dm.BattleHistoryRecord]:
        return self._repository.get_battle_history(player_id)
