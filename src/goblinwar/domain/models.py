"""Dataclasses describing the Goblin War battle entities.

The rules layer works exclusively with these in-memory types.  Persistence
adapters (see :mod:`goblinwar.repository`) translate between them and the
underlying storage, so every rule function can be exercised without a
database.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import NewType

from .enums import BattleClassification, DifficultyTier, UnitType

# --- Strongly typed identifiers -------------------------------------------------

PlayerID = NewType("PlayerID", int)
BattleID = NewType("BattleID", int)

# Canonical ordering of unit types for serialization and iteration.
UNIT_TYPES: tuple[UnitType, ...] = (
    UnitType.CASTLE,
    UnitType.CANNON,
    UnitType.KNIGHT,
    UnitType.INFANTRY,
    UnitType.ARCHER,
)


# --- Core dataclasses -----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ArmyComposition:
    """Counts of each unit type owned by one side.

    The sum of the counts is the side's base power.  Counts are never
    negative; construction fails loudly instead of clamping.
    """

    castle: int = 0
    cannon: int = 0
    knight: int = 0
    infantry: int = 0
    archer: int = 0

    def __post_init__(self) -> None:
        for unit in UNIT_TYPES:
            value = getattr(self, unit)
            if value < 0:
                raise ValueError(f"{unit} count cannot be negative, got {value}")

    @property
    def total(self) -> int:
        return self.castle + self.cannon + self.knight + self.infantry + self.archer

    def count(self, unit: UnitType | str) -> int:
        return getattr(self, UnitType(unit))

    def with_count(self, unit: UnitType | str, value: int) -> ArmyComposition:
        return replace(self, **{UnitType(unit).value: value})

    def to_dict(self) -> dict[str, int]:
        return {unit.value: getattr(self, unit) for unit in UNIT_TYPES}

    @classmethod
    def from_counts(cls, counts: Mapping[str, int]) -> ArmyComposition:
        """Build a composition from a mapping; missing unit types count as zero."""

        return cls(**{unit.value: int(counts.get(unit.value, 0) or 0) for unit in UNIT_TYPES})


@dataclass(frozen=True, slots=True)
class StoredArmy:
    """An army as read from storage, with its optimistic-concurrency version."""

    player_id: PlayerID
    army: ArmyComposition
    version: int


@dataclass(frozen=True, slots=True)
class SpecialUnitHolding:
    """Bonus-power units (festival rewards) owned by a player."""

    name: str
    power: int
    quantity: int
    icon: str = "✨"

    @property
    def total_power(self) -> int:
        return self.power * self.quantity


@dataclass(frozen=True, slots=True)
class BattleHistoryRecord:
    """One persisted battle result.

    ``victory`` and ``total_power`` are the contractual fields; the rest is
    kept so a battle can be audited and replayed from its stored seed.
    """

    victory: bool
    total_power: int
    created_at: datetime
    attempt_id: str | None = None
    ai_power: int | None = None
    difficulty_tier: str | None = None
    units_lost: int | None = None
    id: BattleID | None = None
    seed: str | None = None


@dataclass(frozen=True, slots=True)
class Player:
    """A student taking part in battles."""

    id: PlayerID
    name: str


@dataclass(frozen=True, slots=True)
class Achievement:
    """Achievement unlocked by a player, as returned by the evaluator."""

    key: str
    name: str
    description: str = ""
    icon: str | None = None


@dataclass(slots=True)
class BattleOutcome:
    """Everything produced by one battle resolution."""

    attempt_id: str
    seed: str
    victory: bool
    classification: BattleClassification
    player_power: int
    ai_power: int
    opposing_army: ArmyComposition
    difficulty_tier: DifficultyTier
    narrative_log: list[str]
    units_lost: int
    casualty_rate: float
    message: str
    army_before: ArmyComposition
    army_after: ArmyComposition
    record: BattleHistoryRecord
    new_achievements: list[Achievement] = field(default_factory=list)
