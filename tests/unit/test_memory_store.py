"""Tests for the in-memory player repository."""

from datetime import UTC, datetime

import pytest

from goblinwar.domain import models as dm
from goblinwar.errors import ArmyNotFoundError, DuplicateAttemptError, StaleArmyError
from goblinwar.repository import InMemoryPlayerRepository

NOW = datetime(2024, 12, 20, tzinfo=UTC)


def _record(attempt_id: str | None = "attempt-1", victory: bool = True) -> dm.BattleHistoryRecord:
    return dm.BattleHistoryRecord(
        victory=victory, total_power=12, created_at=NOW, attempt_id=attempt_id
    )


class TestInMemoryPlayerRepository:
    def setup_method(self):
        self.repo = InMemoryPlayerRepository()
        self.player = self.repo.create_player("Ada")
        self.army = dm.ArmyComposition(castle=1, infantry=5, archer=2)

    def test_players_are_listed_in_id_order(self):
        second = self.repo.create_player("Grace")
        assert [p.id for p in self.repo.list_players()] == [self.player.id, second.id]

    def test_replace_army_bumps_version(self):
        first = self.repo.replace_army(self.player.id, self.army)
        second = self.repo.replace_army(self.player.id, self.army.with_count("knight", 1))
        assert (first.version, second.version) == (1, 2)
        assert self.repo.get_army(self.player.id).army.knight == 1

    def test_replace_army_rejects_stale_version(self):
        self.repo.replace_army(self.player.id, self.army)
        self.repo.replace_army(self.player.id, self.army)
        with pytest.raises(StaleArmyError) as excinfo:
            self.repo.replace_army(self.player.id, dm.ArmyComposition(), expected_version=1)
        assert excinfo.value.actual_version == 2
        assert self.repo.get_army(self.player.id).army == self.army

    def test_commit_battle_writes_both_stores(self):
        stored = self.repo.replace_army(self.player.id, self.army)
        after = dm.ArmyComposition(castle=1, infantry=3, archer=2)

        army, record = self.repo.commit_battle(
            self.player.id, army=after, expected_version=stored.version, record=_record()
        )

        assert army.version == 2
        assert record.id is not None
        assert self.repo.get_army(self.player.id).army == after
        assert self.repo.get_battle_history(self.player.id) == [record]
        assert self.repo.find_battle(self.player.id, "attempt-1") == record

    def test_stale_commit_changes_nothing(self):
        self.repo.replace_army(self.player.id, self.army)
        with pytest.raises(StaleArmyError):
            self.repo.commit_battle(
                self.player.id, army=dm.ArmyComposition(), expected_version=7, record=_record()
            )
        assert self.repo.get_army(self.player.id).army == self.army
        assert self.repo.get_battle_history(self.player.id) == []

    def test_duplicate_attempt_is_rejected(self):
        stored = self.repo.replace_army(self.player.id, self.army)
        _, first = self.repo.commit_battle(
            self.player.id, army=self.army, expected_version=stored.version, record=_record()
        )
        with pytest.raises(DuplicateAttemptError) as excinfo:
            self.repo.commit_battle(
                self.player.id, army=dm.ArmyComposition(), expected_version=2, record=_record()
            )
        assert excinfo.value.record == first
        assert self.repo.get_army(self.player.id).army == self.army
        assert len(self.repo.get_battle_history(self.player.id)) == 1

    def test_commit_without_army_raises(self):
        with pytest.raises(ArmyNotFoundError):
            self.repo.commit_battle(
                self.player.id, army=self.army, expected_version=1, record=_record()
            )

    def test_find_battle_is_scoped_to_player(self):
        stored = self.repo.replace_army(self.player.id, self.army)
        self.repo.commit_battle(
            self.player.id, army=self.army, expected_version=stored.version, record=_record()
        )
        assert self.repo.find_battle(dm.PlayerID(99), "attempt-1") is None

    def test_players_can_share_an_attempt_id(self):
        rival = self.repo.create_player("Grace")
        for player in (self.player, rival):
            self.repo.replace_army(player.id, self.army)
        _, first = self.repo.commit_battle(
            self.player.id, army=self.army, expected_version=1, record=_record("shared")
        )

        _, second = self.repo.commit_battle(
            rival.id, army=self.army, expected_version=1, record=_record("shared")
        )

        assert second.id != first.id
        assert self.repo.find_battle(rival.id, "shared") == second
        assert self.repo.find_battle(self.player.id, "shared") == first
        assert self.repo.get_battle_history(rival.id) == [second]

    def test_history_keeps_order(self):
        self.repo.append_battle_history(self.player.id, _record(None, victory=True))
        self.repo.append_battle_history(self.player.id, _record(None, victory=False))
        assert [r.victory for r in self.repo.get_battle_history(self.player.id)] == [True, False]

    def test_special_units_accumulate(self):
        golem = dm.SpecialUnitHolding(name="Ice Golem", power=3, quantity=2)
        self.repo.add_special_units(self.player.id, golem)
        merged = self.repo.add_special_units(self.player.id, golem)
        assert merged.quantity == 4
        assert self.repo.get_special_units(self.player.id) == [merged]
