"""Declarative rule configuration for the battle engine.

These constants are tuned gameplay values.  Keep them exactly as they are
unless the balance of the game is meant to change.
"""

from __future__ import annotations

from dataclasses import dataclass

from .enums import DifficultyOverride, DifficultyTier, UnitType


@dataclass(frozen=True, slots=True)
class TierBand:
    """Adaptive difficulty bracket keyed by the player's victory count.

    The multiplier band for ``v`` victories is
    ``[base + per_victory * (v - min_victories), ... + spread]``.
    """

    tier: DifficultyTier
    min_victories: int
    max_victories: int | None  # inclusive, None means open ended
    base: float
    spread: float
    floor: int
    per_victory: float = 0.0

    def contains(self, victories: int) -> bool:
        if victories < self.min_victories:
            return False
        return self.max_victories is None or victories <= self.max_victories

    def bounds(self, victories: int) -> tuple[float, float]:
        low = self.base + self.per_victory * (victories - self.min_victories)
        return low, low + self.spread


@dataclass(frozen=True, slots=True)
class OverrideBand:
    """Fixed multiplier band used when a player picks the difficulty."""

    tier: DifficultyTier
    low: float
    high: float
    floor: int


@dataclass(frozen=True, slots=True)
class ProgressionRules:
    """Opposing strength targets, per tier and per manual override."""

    tiers: tuple[TierBand, ...] = (
        TierBand(DifficultyTier.NOVICE, 0, 2, base=0.60, spread=0.15, floor=2),
        TierBand(DifficultyTier.APPRENTICE, 3, 8, base=0.65, spread=0.1, floor=3, per_victory=0.025),
        TierBand(DifficultyTier.VETERAN, 9, 15, base=0.75, spread=0.1, floor=5, per_victory=0.02),
        TierBand(DifficultyTier.ELITE, 16, 25, base=0.85, spread=0.1, floor=8, per_victory=0.02),
        TierBand(DifficultyTier.MASTER, 26, 50, base=1.05, spread=0.1, floor=10, per_victory=0.008),
    )
    # Special units are rare rewards; holding one tempers the late game.
    champion_with_special_units: TierBand = TierBand(
        DifficultyTier.CHAMPION, 51, None, base=1.00, spread=0.30, floor=12
    )
    champion: TierBand = TierBand(DifficultyTier.CHAMPION, 51, None, base=1.50, spread=0.50, floor=15)
    easy: OverrideBand = OverrideBand(DifficultyTier.EASY_OVERRIDE, 0.50, 0.70, floor=2)
    moderate: OverrideBand = OverrideBand(DifficultyTier.MODERATE_OVERRIDE, 0.75, 0.95, floor=5)
    hard: OverrideBand = OverrideBand(DifficultyTier.HARD_OVERRIDE, 1.00, 1.25, floor=8)

    def override_band(self, override: DifficultyOverride) -> OverrideBand:
        if override is DifficultyOverride.EASY:
            return self.easy
        if override is DifficultyOverride.MODERATE:
            return self.moderate
        return self.hard


@dataclass(frozen=True, slots=True)
class GeneratorRules:
    """Share of the target strength each Goblin unit type may roll up to."""

    shares: tuple[tuple[UnitType, float], ...] = (
        (UnitType.CASTLE, 0.25),
        (UnitType.CANNON, 0.20),
        (UnitType.KNIGHT, 0.20),
        (UnitType.INFANTRY, 0.25),
        (UnitType.ARCHER, 0.20),
    )


@dataclass(frozen=True, slots=True)
class OutcomeRules:
    """Victory classification and casualty-rate constants."""

    castle_bonus_per_castle: float = 0.15
    castle_bonus_cap: float = 0.5
    decisive_ratio: float = 1.5
    decisive_rate_low: float = 0.05
    decisive_rate_high: float = 0.15
    decisive_rate_floor: float = 0.05
    close_rate_low: float = 0.10
    close_rate_high: float = 0.25
    close_rate_floor: float = 0.08
    major_defeat_ratio: float = 1.5
    major_defeat_rate: float = 0.40
    minor_defeat_rate: float = 0.25
    defeat_rate_floor: float = 0.10
    retreat_archers_per_castle: float = 0.5
    retreat_castles_per_castle: float = 0.3


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all battle subsystems."""

    progression: ProgressionRules = ProgressionRules()
    generator: GeneratorRules = GeneratorRules()
    outcome: OutcomeRules = OutcomeRules()


DEFAULT_RULES = RulesConfig()
