"""Exceptions raised by the Goblin War services and repositories."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from goblinwar.domain.models import BattleHistoryRecord


class GoblinWarError(Exception):
    """Base class for every error raised by this package."""


class ArmyNotFoundError(GoblinWarError, LookupError):
    """The player has no army record, so there is nothing to battle with."""

    def __init__(self, player_id: int) -> None:
        super().__init__(f"player army not found: {player_id}")
        self.player_id = player_id


class PersistenceError(GoblinWarError, RuntimeError):
    """A write to storage failed; nothing from the operation was kept."""


class StaleArmyError(PersistenceError):
    """The army changed between read and write (optimistic concurrency)."""

    def __init__(self, player_id: int, expected_version: int, actual_version: int | None) -> None:
        super().__init__(
            f"army for player {player_id} is at version {actual_version}, "
            f"expected {expected_version}"
        )
        self.player_id = player_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class BattleConflictError(GoblinWarError, RuntimeError):
    """A battle could not be committed after repeated version conflicts."""


class DuplicateAttemptError(GoblinWarError):
    """The battle attempt was already committed; casualties are not re-applied."""

    def __init__(self, record: BattleHistoryRecord) -> None:
        super().__init__(f"battle attempt {record.attempt_id} was already resolved")
        self.record = record
