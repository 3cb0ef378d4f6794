"""Tests for BattleService orchestration."""

import gc
import re
from concurrent.futures import ThreadPoolExecutor

import pytest

from fakes import (
    AlwaysStaleRepository,
    BrokenCommitRepository,
    FailingAchievements,
    FlakyRepository,
    StaticAchievements,
)
from goblinwar.domain import models as dm
from goblinwar.domain.enums import DifficultyTier, UnitType
from goblinwar.errors import (
    ArmyNotFoundError,
    BattleConflictError,
    DuplicateAttemptError,
    PersistenceError,
)
from goblinwar.repository import InMemoryPlayerRepository
from goblinwar.services.army_service import ArmyService
from goblinwar.services.battle_service import BattleService, PlayerLockRegistry

ARMY = dm.ArmyComposition(castle=2, cannon=3, knight=4, infantry=6, archer=5)


def _seed(repo: InMemoryPlayerRepository, army: dm.ArmyComposition = ARMY) -> dm.PlayerID:
    player = repo.create_player("Ada")
    repo.replace_army(player.id, army)
    return player.id


class TestResolveBattle:
    def setup_method(self):
        self.repo = InMemoryPlayerRepository()
        self.player_id = _seed(self.repo)
        self.service = BattleService(self.repo)

    def test_battle_is_persisted(self):
        outcome = self.service.resolve_battle(self.player_id, attempt_id="first")

        assert outcome.difficulty_tier is DifficultyTier.NOVICE
        assert outcome.player_power == ARMY.total
        assert outcome.ai_power == outcome.opposing_army.total
        assert outcome.army_after.total == ARMY.total - outcome.units_lost
        assert outcome.narrative_log
        assert outcome.record.id is not None
        assert outcome.record.attempt_id == "first"
        assert outcome.record.victory is outcome.victory
        assert self.repo.get_army(self.player_id).army == outcome.army_after
        assert self.repo.get_battle_history(self.player_id) == [outcome.record]

    def test_missing_army_changes_nothing(self):
        ghost = self.repo.create_player("Ghost").id
        with pytest.raises(ArmyNotFoundError):
            self.service.resolve_battle(ghost)
        assert self.repo.get_battle_history(ghost) == []

    def test_same_seed_replays_the_same_battle(self):
        other_repo = InMemoryPlayerRepository()
        other_id = _seed(other_repo)
        pinned = BattleService(self.repo, seed_factory=lambda: "pinned")
        first = pinned.resolve_battle(self.player_id, "moderate", attempt_id="one")
        second = BattleService(other_repo, seed_factory=lambda: "pinned").resolve_battle(
            other_id, "moderate", attempt_id="two"
        )

        assert first.opposing_army == second.opposing_army
        assert first.units_lost == second.units_lost
        assert first.army_after == second.army_after
        assert first.message == second.message
        assert first.narrative_log == second.narrative_log

    def test_attempt_id_does_not_choose_the_seed(self):
        other_repo = InMemoryPlayerRepository()
        other_id = _seed(other_repo)
        first = self.service.resolve_battle(self.player_id, attempt_id="same")
        second = BattleService(other_repo).resolve_battle(other_id, attempt_id="same")

        assert first.seed != second.seed
        assert first.record.seed == first.seed
        assert self.repo.get_battle_history(self.player_id)[0].seed == first.seed

    def test_stored_seed_replays_the_battle(self):
        original = self.service.resolve_battle(self.player_id, "hard")
        replay_repo = InMemoryPlayerRepository()
        replay_id = _seed(replay_repo)

        replay = BattleService(replay_repo, seed_factory=lambda: original.record.seed).resolve_battle(
            replay_id, "hard"
        )

        assert replay.opposing_army == original.opposing_army
        assert replay.army_after == original.army_after

    def test_duplicate_attempt_is_not_reapplied(self):
        first = self.service.resolve_battle(self.player_id, attempt_id="once")
        with pytest.raises(DuplicateAttemptError) as excinfo:
            self.service.resolve_battle(self.player_id, attempt_id="once")
        assert excinfo.value.record == first.record
        assert self.repo.get_army(self.player_id).army == first.army_after
        assert len(self.repo.get_battle_history(self.player_id)) == 1

    def test_attempt_ids_are_scoped_to_the_player(self):
        rival = _seed(self.repo)
        first = self.service.resolve_battle(self.player_id, attempt_id="shared")

        second = self.service.resolve_battle(rival, attempt_id="shared")

        assert second.record.attempt_id == "shared"
        assert second.record.id != first.record.id
        assert self.repo.get_battle_history(rival) == [second.record]
        assert self.repo.get_battle_history(self.player_id) == [first.record]

    def test_generated_attempt_ids_are_distinct(self):
        first = self.service.resolve_battle(self.player_id)
        second = self.service.resolve_battle(self.player_id)
        assert first.attempt_id != second.attempt_id
        assert len(self.repo.get_battle_history(self.player_id)) == 2

    def test_override_sets_tier(self):
        outcome = self.service.resolve_battle(self.player_id, "Hard")
        assert outcome.difficulty_tier is DifficultyTier.HARD_OVERRIDE
        assert outcome.record.difficulty_tier == "Hard Override"

    def test_unknown_override_is_adaptive(self):
        outcome = self.service.resolve_battle(self.player_id, "impossible")
        assert outcome.difficulty_tier is DifficultyTier.NOVICE

    def test_special_units_add_power_but_losses_stay_within_army(self):
        repo = InMemoryPlayerRepository()
        player_id = _seed(repo, dm.ArmyComposition(infantry=1))
        repo.add_special_units(player_id, dm.SpecialUnitHolding(name="Frost Giant", power=100, quantity=1))

        outcome = BattleService(repo).resolve_battle(player_id, attempt_id="giant")

        assert outcome.player_power == 101
        assert outcome.record.total_power == 101
        assert outcome.units_lost == 1
        assert outcome.army_after == dm.ArmyComposition()
        assert outcome.narrative_log[0] == "❄️ Winter Festival special units join the battle!"

    def test_message_reports_the_capped_losses(self):
        repo = InMemoryPlayerRepository()
        player_id = _seed(repo, dm.ArmyComposition(infantry=2))
        repo.add_special_units(player_id, dm.SpecialUnitHolding(name="Frost Giant", power=100, quantity=1))

        outcome = BattleService(repo).resolve_battle(player_id)

        assert outcome.units_lost == 2
        assert re.findall(r"\d+", outcome.message) == ["2"]
        for line in outcome.narrative_log:
            if line.startswith("⚔️ Victory cost:"):
                assert re.findall(r"\d+", line) == ["2"]

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError, match="max_attempts"):
            BattleService(self.repo, max_attempts=0)


class TestConcurrency:
    def test_stale_commit_is_recomputed(self):
        repo = FlakyRepository(stale_commits=1)
        player_id = _seed(repo)
        outcome = BattleService(repo).resolve_battle(player_id, attempt_id="retry")

        assert repo.commit_calls == 2
        # The retry saw the unit granted in between.
        assert outcome.army_before.infantry == ARMY.infantry + 1
        assert len(repo.get_battle_history(player_id)) == 1

    def test_gives_up_after_max_attempts(self):
        repo = AlwaysStaleRepository()
        player_id = _seed(repo)
        with pytest.raises(BattleConflictError):
            BattleService(repo, max_attempts=2).resolve_battle(player_id)
        assert repo.get_battle_history(player_id) == []
        assert repo.get_army(player_id).army == ARMY

    def test_persistence_failure_leaves_state_untouched(self):
        repo = BrokenCommitRepository()
        player_id = _seed(repo)
        with pytest.raises(PersistenceError):
            BattleService(repo).resolve_battle(player_id)
        assert repo.get_army(player_id).army == ARMY
        assert repo.get_battle_history(player_id) == []

    def test_lock_registry_reuses_locks(self):
        locks = PlayerLockRegistry()
        assert locks.lock_for(dm.PlayerID(1)) is locks.lock_for(dm.PlayerID(1))
        assert locks.lock_for(dm.PlayerID(1)) is not locks.lock_for(dm.PlayerID(2))

    def test_lock_registry_drops_unused_locks(self):
        locks = PlayerLockRegistry()
        with locks.hold(dm.PlayerID(1)):
            assert len(locks) == 1
        gc.collect()
        assert len(locks) == 0

    def test_battles_and_recruits_on_threads_keep_army_consistent(self):
        repo = InMemoryPlayerRepository()
        player_id = _seed(repo)
        locks = PlayerLockRegistry()
        battles = BattleService(repo, locks=locks)
        armies = ArmyService(repo, locks=locks)
        recruits = 40

        def fight() -> None:
            for _ in range(6):
                battles.resolve_battle(player_id)

        def recruit() -> None:
            for _ in range(recruits):
                armies.add_unit(player_id, UnitType.INFANTRY)

        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [pool.submit(fight), pool.submit(recruit), pool.submit(fight)]
            for future in futures:
                future.result()

        history = repo.get_battle_history(player_id)
        lost = sum(record.units_lost for record in history)
        assert len(history) == 12
        assert repo.get_army(player_id).army.total == ARMY.total + recruits - lost


class TestAchievements:
    def test_unlocked_achievements_are_returned(self):
        repo = InMemoryPlayerRepository()
        player_id = _seed(repo)
        badge = dm.Achievement(key="first_battle", name="First Battle", icon="⚔️")
        evaluator = StaticAchievements([badge])

        outcome = BattleService(repo, evaluator).resolve_battle(player_id)

        assert outcome.new_achievements == [badge]
        assert evaluator.calls == [player_id]

    def test_evaluator_failure_does_not_fail_battle(self):
        repo = InMemoryPlayerRepository()
        player_id = _seed(repo)

        outcome = BattleService(repo, FailingAchievements()).resolve_battle(player_id)

        assert outcome.new_achievements == []
        assert len(repo.get_battle_history(player_id)) == 1
