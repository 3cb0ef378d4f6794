"""Adaptive difficulty: how strong the Goblins should be for this player."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass

from .enums import DifficultyOverride, DifficultyTier
from .models import BattleHistoryRecord
from .rules_config import DEFAULT_RULES, ProgressionRules, RulesConfig, TierBand

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProgressionResult:
    """Target opposing strength and the tier that produced it."""

    target: int
    tier: DifficultyTier
    multiplier: float
    victories: int
    override: DifficultyOverride | None = None


def normalize_override(value: DifficultyOverride | str | None) -> DifficultyOverride | None:
    """Map a raw override to a known value; anything unrecognised means adaptive."""

    if value is None or isinstance(value, DifficultyOverride):
        return value
    try:
        return DifficultyOverride(str(value).strip().lower())
    except ValueError:
        logger.debug("ignoring unknown difficulty override %r", value)
        return None


def count_victories(history: Iterable[BattleHistoryRecord]) -> int:
    return sum(1 for record in history if record.victory)


def select_band(
    victories: int, *, has_special_units: bool, rules: ProgressionRules
) -> TierBand:
    """Return the adaptive bracket for a victory count."""

    for band in rules.tiers:
        if band.contains(victories):
            return band
    if has_special_units:
        return rules.champion_with_special_units
    return rules.champion


def scaled_target(player_total: int, multiplier: float, floor: int) -> int:
    return max(floor, round(player_total * multiplier))


def compute_progression(
    player_total: int,
    history: Iterable[BattleHistoryRecord],
    *,
    rng: random.Random,
    override: DifficultyOverride | str | None = None,
    has_special_units: bool = False,
    rules: RulesConfig = DEFAULT_RULES,
) -> ProgressionResult:
    """Compute the Goblin army's target strength.

    A manual override always wins over the battle history.  Otherwise the
    number of *victories* (not battles fought) selects a tier whose band is
    applied to ``player_total``.  Every band has a floor so a very weak
    player still faces a real opponent.

    Args:
        player_total: Player base power plus special-unit bonus power
        history: Past battle results for the player
        rng: Random source for the multiplier draw
        override: Optional manual difficulty; invalid values are ignored
        has_special_units: Whether the player holds any special unit
        rules: Rule constants

    Returns:
        ProgressionResult with the target strength and tier
    """
    if player_total < 0:
        raise ValueError(f"player_total must be non-negative, got {player_total}")

    victories = count_victories(history)
    chosen = normalize_override(override)
    progression = rules.progression

    if chosen is not None:
        band = progression.override_band(chosen)
        multiplier = rng.uniform(band.low, band.high)
        return ProgressionResult(
            target=scaled_target(player_total, multiplier, band.floor),
            tier=band.tier,
            multiplier=multiplier,
            victories=victories,
            override=chosen,
        )

    tier_band = select_band(victories, has_special_units=has_special_units, rules=progression)
    low, high = tier_band.bounds(victories)
    multiplier = rng.uniform(low, high)
    return ProgressionResult(
        target=scaled_target(player_total, multiplier, tier_band.floor),
        tier=tier_band.tier,
        multiplier=multiplier,
        victories=victories,
    )
