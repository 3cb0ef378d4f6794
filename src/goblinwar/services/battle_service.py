"""Battle Service for Goblin War.

This module orchestrates one battle for one player:

1. Read the army (fail before any write if it is missing)
2. Read special units and battle history
3. Pick the Goblin strength (progression) and build their army
4. Run the tactical phases and decide the outcome
5. Remove the player's losses
6. Commit the new army and the battle record together
7. Ask the achievement system what was unlocked (best effort)

Battles for the same player are serialized in-process by a per-player lock;
across processes the army version guards the commit and a conflicting battle
is recomputed from fresh state.
"""

from __future__ import annotations

import logging
import random
import threading
import weakref
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from goblinwar.domain import models as dm
from goblinwar.domain.casualties import apply_casualties
from goblinwar.domain.enums import DifficultyOverride
from goblinwar.domain.generator import generate_opposing_army
from goblinwar.domain.outcome import calculate_outcome
from goblinwar.domain.progression import compute_progression, normalize_override
from goblinwar.domain.rules_config import DEFAULT_RULES, RulesConfig
from goblinwar.domain.tactics import resolve_tactics
from goblinwar.errors import (
    ArmyNotFoundError,
    BattleConflictError,
    DuplicateAttemptError,
    StaleArmyError,
)
from goblinwar.interfaces.achievements import IAchievementEvaluator
from goblinwar.interfaces.repository import IPlayerRepository
from goblinwar.models.base import utc_now
from goblinwar.utils.rng import create_rng, generate_seed, new_attempt_id, new_battle_seed

logger = logging.getLogger(__name__)


class PlayerLockRegistry:
    """Hand out one lock per player so a player's battles run one at a time.

    Locks are held weakly: an entry lives only while some caller holds or
    waits on it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[dm.PlayerID, threading.Lock] = (
            weakref.WeakValueDictionary()
        )

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def lock_for(self, player_id: dm.PlayerID) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(player_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[player_id] = lock
            return lock

    @contextmanager
    def hold(self, player_id: dm.PlayerID) -> Iterator[None]:
        with self.lock_for(player_id):
            yield


class BattleService:
    """Service for resolving battles against the Goblins.

    Example:
        ```python
        service = BattleService(repository, achievements)
        outcome = service.resolve_battle(dm.PlayerID(3), "hard")
        print(outcome.message)
        ```
    """

    def __init__(
        self,
        repository: IPlayerRepository,
        achievements: IAchievementEvaluator | None = None,
        *,
        rules: RulesConfig = DEFAULT_RULES,
        locks: PlayerLockRegistry | None = None,
        max_attempts: int = 3,
        seed_factory: Callable[[], str] = new_battle_seed,
    ) -> None:
        """Initialize the battle service.

        Args:
            repository: Player storage (armies, history, special units)
            achievements: External achievement evaluator, optional
            rules: Rule constants
            locks: Lock registry, shared when several services use one store
            max_attempts: Resolutions tried before giving up on version conflicts
            seed_factory: Source of the per-battle random seed
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self._repository = repository
        self._achievements = achievements
        self._rules = rules
        self._locks = locks or PlayerLockRegistry()
        self._max_attempts = max_attempts
        self._seed_factory = seed_factory

    def resolve_battle(
        self,
        player_id: dm.PlayerID,
        difficulty_override: DifficultyOverride | str | None = None,
        *,
        attempt_id: str | None = None,
    ) -> dm.BattleOutcome:
        """Fight one battle and persist its consequences.

        Args:
            player_id: Player whose army fights
            difficulty_override: easy/moderate/hard; other values mean adaptive
            attempt_id: Identifier of this attempt; a fresh one is generated when
                omitted.  It is an idempotency key only: an id can be committed
                once per player, and the random draws come from a fresh seed.

        Returns:
            BattleOutcome describing the battle and the persisted record

        Raises:
            ArmyNotFoundError: The player has no army
            DuplicateAttemptError: The attempt was already committed
            BattleConflictError: The army kept changing underneath the battle
            PersistenceError: Storage failed; nothing was written
        """
        override = normalize_override(difficulty_override)
        attempt = attempt_id or new_attempt_id()
        seed = self._seed_factory()

        with self._locks.hold(player_id):
            existing = self._repository.find_battle(player_id, attempt)
            if existing is not None:
                raise DuplicateAttemptError(existing)

            for attempt_number in range(1, self._max_attempts + 1):
                try:
                    outcome = self._resolve_once(player_id, override, attempt, seed)
                    break
                except StaleArmyError as exc:
                    logger.warning(
                        "army for player %s changed during battle %s (try %d/%d): %s",
                        player_id,
                        attempt,
                        attempt_number,
                        self._max_attempts,
                        exc,
                    )
            else:
                raise BattleConflictError(
                    f"battle {attempt} for player {player_id} conflicted "
                    f"{self._max_attempts} times"
                )

        outcome.new_achievements = self._evaluate_achievements(player_id)
        logger.info(
            "player %s battle %s: tier=%s power=%d vs %d victory=%s lost=%d",
            player_id,
            attempt,
            outcome.difficulty_tier,
            outcome.player_power,
            outcome.ai_power,
            outcome.victory,
            outcome.units_lost,
        )
        return outcome

    def _resolve_once(
        self,
        player_id: dm.PlayerID,
        override: DifficultyOverride | None,
        attempt: str,
        seed: str,
    ) -> dm.BattleOutcome:
        stored = self._repository.get_army(player_id)
        if stored is None:
            raise ArmyNotFoundError(player_id)
        army = stored.army

        special_units = [
            unit for unit in self._repository.get_special_units(player_id) if unit.quantity > 0
        ]
        bonus_power = sum(unit.total_power for unit in special_units)
        player_total = army.total + bonus_power
        history = self._repository.get_battle_history(player_id)

        progression = compute_progression(
            player_total,
            history,
            rng=self._rng(player_id, seed, "progression"),
            override=override,
            has_special_units=bool(special_units),
            rules=self._rules,
        )
        opposing = generate_opposing_army(
            progression.target,
            rng=self._rng(player_id, seed, "generator"),
            rules=self._rules.generator,
        )
        report = resolve_tactics(army, opposing, special_units)
        result = calculate_outcome(
            player_total,
            opposing.total,
            army.castle,
            rng=self._rng(player_id, seed, "outcome"),
            archer_count=army.archer,
            army_size=army.total,
            rules=self._rules.outcome,
        )
        units_lost = result.units_lost
        army_after = apply_casualties(
            army, units_lost, rng=self._rng(player_id, seed, "casualties")
        )

        record = dm.BattleHistoryRecord(
            victory=result.victory,
            total_power=player_total,
            created_at=utc_now(),
            attempt_id=attempt,
            ai_power=opposing.total,
            difficulty_tier=progression.tier.value,
            units_lost=units_lost,
            seed=seed,
        )
        _, saved = self._repository.commit_battle(
            player_id, army=army_after, expected_version=stored.version, record=record
        )

        return dm.BattleOutcome(
            attempt_id=attempt,
            seed=seed,
            victory=result.victory,
            classification=result.classification,
            player_power=player_total,
            ai_power=opposing.total,
            opposing_army=opposing,
            difficulty_tier=progression.tier,
            narrative_log=[*report.narrative_log, *result.narrative],
            units_lost=units_lost,
            casualty_rate=result.casualty_rate,
            message=result.message,
            army_before=army,
            army_after=army_after,
            record=saved,
        )

    def _evaluate_achievements(self, player_id: dm.PlayerID) -> list[dm.Achievement]:
        if self._achievements is None:
            return []
        try:
            return list(self._achievements.evaluate(player_id))
        except Exception:
            logger.exception("achievement evaluation failed for player %s", player_id)
            return []

    @staticmethod
    def _rng(player_id: dm.PlayerID, seed: str, context: str) -> random.Random:
        return create_rng(generate_seed(int(player_id), seed, context))
