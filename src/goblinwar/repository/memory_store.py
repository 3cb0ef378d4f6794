"""In-memory player repository.

Used for tests and for running the API without a database.  All state lives
behind one lock, so ``commit_battle`` is atomic with respect to every other
call on the same repository.
"""

from __future__ import annotations

import threading
from dataclasses import replace

from goblinwar.domain import models as dm
from goblinwar.errors import ArmyNotFoundError, DuplicateAttemptError, StaleArmyError


class InMemoryPlayerRepository:
    """Keep players, armies, history and special units in dictionaries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._players: dict[dm.PlayerID, dm.Player] = {}
        self._armies: dict[dm.PlayerID, dm.StoredArmy] = {}
        self._history: dict[dm.PlayerID, list[dm.BattleHistoryRecord]] = {}
        self._special_units: dict[dm.PlayerID, dict[str, dm.SpecialUnitHolding]] = {}
        self._attempts: dict[tuple[dm.PlayerID, str], dm.BattleHistoryRecord] = {}
        self._next_player_id = 1
        self._next_battle_id = 1

    def create_player(self, name: str) -> dm.Player:
        with self._lock:
            player = dm.Player(id=dm.PlayerID(self._next_player_id), name=name)
            self._next_player_id += 1
            self._players[player.id] = player
            return player

    def list_players(self) -> list[dm.Player]:
        with self._lock:
            return [self._players[key] for key in sorted(self._players, key=int)]

    def get_army(self, player_id: dm.PlayerID) -> dm.StoredArmy | None:
        with self._lock:
            return self._armies.get(player_id)

    def replace_army(
        self,
        player_id: dm.PlayerID,
        army: dm.ArmyComposition,
        *,
        expected_version: int | None = None,
    ) -> dm.StoredArmy:
        with self._lock:
            return self._write_army(player_id, army, expected_version)

    def get_battle_history(self, player_id: dm.PlayerID) -> list[dm.BattleHistoryRecord]:
        with self._lock:
            return list(self._history.get(player_id, []))

    def append_battle_history(
        self, player_id: dm.PlayerID, record: dm.BattleHistoryRecord
    ) -> dm.BattleHistoryRecord:
        with self._lock:
            self._check_attempt(player_id, record)
            return self._append(player_id, record)

    def find_battle(
        self, player_id: dm.PlayerID, attempt_id: str
    ) -> dm.BattleHistoryRecord | None:
        with self._lock:
            return self._attempts.get((player_id, attempt_id))

    def get_special_units(self, player_id: dm.PlayerID) -> list[dm.SpecialUnitHolding]:
        with self._lock:
            return list(self._special_units.get(player_id, {}).values())

    def add_special_units(
        self, player_id: dm.PlayerID, holding: dm.SpecialUnitHolding
    ) -> dm.SpecialUnitHolding:
        with self._lock:
            holdings = self._special_units.setdefault(player_id, {})
            existing = holdings.get(holding.name)
            if existing is not None:
                holding = replace(existing, quantity=existing.quantity + holding.quantity)
            holdings[holding.name] = holding
            return holding

    def commit_battle(
        self,
        player_id: dm.PlayerID,
        *,
        army: dm.ArmyComposition,
        expected_version: int,
        record: dm.BattleHistoryRecord,
    ) -> tuple[dm.StoredArmy, dm.BattleHistoryRecord]:
        with self._lock:
            # Validate everything before mutating anything.
            self._check_attempt(player_id, record)
            self._check_version(player_id, expected_version, require_existing=True)
            stored = self._write_army(player_id, army, expected_version)
            saved = self._append(player_id, record)
            return stored, saved

    # --- helpers (caller holds the lock) ------------------------------------

    def _check_attempt(self, player_id: dm.PlayerID, record: dm.BattleHistoryRecord) -> None:
        if record.attempt_id is None:
            return
        existing = self._attempts.get((player_id, record.attempt_id))
        if existing is not None:
            raise DuplicateAttemptError(existing)

    def _check_version(
        self, player_id: dm.PlayerID, expected_version: int | None, *, require_existing: bool
    ) -> None:
        current = self._armies.get(player_id)
        if current is None:
            if require_existing:
                raise ArmyNotFoundError(player_id)
            if expected_version is not None:
                raise StaleArmyError(player_id, expected_version, None)
            return
        if expected_version is not None and current.version != expected_version:
            raise StaleArmyError(player_id, expected_version, current.version)

    def _write_army(
        self, player_id: dm.PlayerID, army: dm.ArmyComposition, expected_version: int | None
    ) -> dm.StoredArmy:
        self._check_version(player_id, expected_version, require_existing=False)
        current = self._armies.get(player_id)
        version = 1 if current is None else current.version + 1
        stored = dm.StoredArmy(player_id=player_id, army=army, version=version)
        self._armies[player_id] = stored
        return stored

    def _append(
        self, player_id: dm.PlayerID, record: dm.BattleHistoryRecord
    ) -> dm.BattleHistoryRecord:
        saved = replace(record, id=dm.BattleID(self._next_battle_id))
        self._next_battle_id += 1
        self._history.setdefault(player_id, []).append(saved)
        if saved.attempt_id is not None:
            self._attempts[(player_id, saved.attempt_id)] = saved
        return saved
