"""SQLAlchemy-backed player repository."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from goblinwar.domain import models as dm
from goblinwar.errors import (
    ArmyNotFoundError,
    DuplicateAttemptError,
    GoblinWarError,
    PersistenceError,
    StaleArmyError,
)
from goblinwar.models import BattleResult, Player, PlayerArmy, PlayerSpecialUnit, SpecialUnit

logger = logging.getLogger(__name__)


class SqlPlayerRepository:
    """Persist players and their battles through SQLAlchemy sessions.

    Every public method runs in its own transaction.  ``commit_battle`` writes
    the army and the battle record inside the same transaction, guarded by the
    army's version column.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        try:
            with self._session_factory() as session, session.begin():
                yield session
        except GoblinWarError:
            raise
        except SQLAlchemyError as exc:
            logger.exception("database failure while trying to %s", action)
            raise PersistenceError(f"failed to {action}") from exc

    def create_player(self, name: str) -> dm.Player:
        with self._transaction("create player") as session:
            row = Player(name=name)
            session.add(row)
            session.flush()
            return dm.Player(id=dm.PlayerID(row.id), name=row.name)

    def list_players(self) -> list[dm.Player]:
        with self._transaction("list players") as session:
            rows = session.scalars(select(Player).order_by(Player.id))
            return [dm.Player(id=dm.PlayerID(row.id), name=row.name) for row in rows]

    def get_army(self, player_id: dm.PlayerID) -> dm.StoredArmy | None:
        with self._transaction("read army") as session:
            row = session.get(PlayerArmy, int(player_id))
            return None if row is None else _stored_army(row)

    def replace_army(
        self,
        player_id: dm.PlayerID,
        army: dm.ArmyComposition,
        *,
        expected_version: int | None = None,
    ) -> dm.StoredArmy:
        with self._transaction("replace army") as session:
            row = session.get(PlayerArmy, int(player_id))
            if row is None:
                if expected_version is not None:
                    raise StaleArmyError(player_id, expected_version, None)
                self._ensure_player(session, player_id)
                row = PlayerArmy(player_id=int(player_id), version=1, **army.to_dict())
                session.add(row)
                session.flush()
                return _stored_army(row)
            version = row.version if expected_version is None else expected_version
            return self._update_army(session, player_id, army, version)

    def get_battle_history(self, player_id: dm.PlayerID) -> list[dm.BattleHistoryRecord]:
        with self._transaction("read battle history") as session:
            rows = session.scalars(
                select(BattleResult)
                .where(BattleResult.player_id == int(player_id))
                .order_by(BattleResult.id)
            )
            return [_history_record(row) for row in rows]

    def append_battle_history(
        self, player_id: dm.PlayerID, record: dm.BattleHistoryRecord
    ) -> dm.BattleHistoryRecord:
        with self._transaction("append battle history") as session:
            self._check_attempt(session, player_id, record)
            self._ensure_player(session, player_id)
            return self._insert_record(session, player_id, record)

    def find_battle(
        self, player_id: dm.PlayerID, attempt_id: str
    ) -> dm.BattleHistoryRecord | None:
        with self._transaction("look up battle") as session:
            row = session.scalar(
                select(BattleResult).where(
                    BattleResult.player_id == int(player_id),
                    BattleResult.attempt_id == attempt_id,
                )
            )
            return None if row is None else _history_record(row)

    def get_special_units(self, player_id: dm.PlayerID) -> list[dm.SpecialUnitHolding]:
        with self._transaction("read special units") as session:
            rows = session.execute(
                select(PlayerSpecialUnit, SpecialUnit)
                .join(SpecialUnit, PlayerSpecialUnit.special_unit_id == SpecialUnit.id)
                .where(PlayerSpecialUnit.player_id == int(player_id))
                .order_by(SpecialUnit.id)
            )
            return [
                dm.SpecialUnitHolding(
                    name=unit.name, power=unit.power, quantity=holding.quantity, icon=unit.icon
                )
                for holding, unit in rows
            ]

    def add_special_units(
        self, player_id: dm.PlayerID, holding: dm.SpecialUnitHolding
    ) -> dm.SpecialUnitHolding:
        with self._transaction("grant special units") as session:
            self._ensure_player(session, player_id)
            unit = session.scalar(select(SpecialUnit).where(SpecialUnit.name == holding.name))
            if unit is None:
                unit = SpecialUnit(name=holding.name, icon=holding.icon, power=holding.power)
                session.add(unit)
                session.flush()
            owned = session.scalar(
                select(PlayerSpecialUnit).where(
                    PlayerSpecialUnit.player_id == int(player_id),
                    PlayerSpecialUnit.special_unit_id == unit.id,
                )
            )
            if owned is None:
                owned = PlayerSpecialUnit(
                    player_id=int(player_id), special_unit_id=unit.id, quantity=0
                )
                session.add(owned)
            owned.quantity += holding.quantity
            session.flush()
            return dm.SpecialUnitHolding(
                name=unit.name, power=unit.power, quantity=owned.quantity, icon=unit.icon
            )

    def commit_battle(
        self,
        player_id: dm.PlayerID,
        *,
        army: dm.ArmyComposition,
        expected_version: int,
        record: dm.BattleHistoryRecord,
    ) -> tuple[dm.StoredArmy, dm.BattleHistoryRecord]:
        try:
            with self._transaction("commit battle") as session:
                self._check_attempt(session, player_id, record)
                stored = self._update_army(session, player_id, army, expected_version)
                saved = self._insert_record(session, player_id, record)
                return stored, saved
        except PersistenceError as exc:
            # A concurrent commit of the same attempt loses on the unique index.
            if isinstance(exc.__cause__, IntegrityError) and record.attempt_id is not None:
                existing = self.find_battle(player_id, record.attempt_id)
                if existing is not None:
                    raise DuplicateAttemptError(existing) from exc
            raise

    # --- helpers ---------------------------------------------------------------

    @staticmethod
    def _ensure_player(session: Session, player_id: dm.PlayerID) -> None:
        if session.get(Player, int(player_id)) is None:
            session.add(Player(id=int(player_id), name=f"Player {int(player_id)}"))
            session.flush()

    @staticmethod
    def _check_attempt(
        session: Session, player_id: dm.PlayerID, record: dm.BattleHistoryRecord
    ) -> None:
        if record.attempt_id is None:
            return
        existing = session.scalar(
            select(BattleResult).where(
                BattleResult.player_id == int(player_id),
                BattleResult.attempt_id == record.attempt_id,
            )
        )
        if existing is not None:
            raise DuplicateAttemptError(_history_record(existing))

    @staticmethod
    def _update_army(
        session: Session,
        player_id: dm.PlayerID,
        army: dm.ArmyComposition,
        expected_version: int,
    ) -> dm.StoredArmy:
        result = session.execute(
            update(PlayerArmy)
            .where(
                PlayerArmy.player_id == int(player_id),
                PlayerArmy.version == expected_version,
            )
            .values(version=PlayerArmy.version + 1, **army.to_dict())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            actual = session.scalar(
                select(PlayerArmy.version).where(PlayerArmy.player_id == int(player_id))
            )
            if actual is None:
                raise ArmyNotFoundError(player_id)
            raise StaleArmyError(player_id, expected_version, actual)
        return dm.StoredArmy(player_id=player_id, army=army, version=expected_version + 1)

    @staticmethod
    def _insert_record(
        session: Session, player_id: dm.PlayerID, record: dm.BattleHistoryRecord
    ) -> dm.BattleHistoryRecord:
        row = BattleResult(
            player_id=int(player_id),
            attempt_id=record.attempt_id,
            seed=record.seed,
            victory=record.victory,
            total_power=record.total_power,
            ai_power=record.ai_power,
            difficulty_tier=record.difficulty_tier,
            units_lost=record.units_lost,
            created_at=record.created_at,
        )
        session.add(row)
        session.flush()
        return _history_record(row)


def _stored_army(row: PlayerArmy) -> dm.StoredArmy:
    army = dm.ArmyComposition(
        castle=row.castle,
        cannon=row.cannon,
        knight=row.knight,
        infantry=row.infantry,
        archer=row.archer,
    )
    return dm.StoredArmy(player_id=dm.PlayerID(row.player_id), army=army, version=row.version)


def _history_record(row: BattleResult) -> dm.BattleHistoryRecord:
    created_at = row.created_at
    if created_at.tzinfo is None:
        # SQLite drops the offset; rows are always written in UTC.
        created_at = created_at.replace(tzinfo=UTC)
    return dm.BattleHistoryRecord(
        id=dm.BattleID(row.id),
        victory=row.victory,
        total_power=row.total_power,
        created_at=created_at,
        attempt_id=row.attempt_id,
        ai_power=row.ai_power,
        difficulty_tier=row.difficulty_tier,
        units_lost=row.units_lost,
        seed=row.seed,
    )
