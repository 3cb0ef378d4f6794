"""Goblin army generation."""

from __future__ import annotations

import math
import random

from .models import UNIT_TYPES, ArmyComposition
from .rules_config import DEFAULT_RULES, GeneratorRules


def generate_opposing_army(
    target: int,
    *,
    rng: random.Random,
    rules: GeneratorRules = DEFAULT_RULES.generator,
) -> ArmyComposition:
    """Distribute ``target`` strength across the five unit types.

    Each type first rolls ``max(1, randint(0, floor(target * share)))``.  The
    provisional total rarely matches, so random types are then topped up (or
    trimmed, never below one unit) until the counts sum to ``target`` exactly.

    A target of zero yields an empty army.  A target below five cannot give
    every type a unit, so that many distinct types receive one unit each.
    """
    if target < 0:
        raise ValueError(f"target must be non-negative, got {target}")
    if target == 0:
        return ArmyComposition()
    if target < len(UNIT_TYPES):
        chosen = rng.sample(UNIT_TYPES, target)
        return ArmyComposition.from_counts({unit.value: 1 for unit in chosen})

    counts = {
        unit.value: max(1, rng.randint(0, math.floor(target * share)))
        for unit, share in rules.shares
    }
    total = sum(counts.values())

    while total < target:
        unit = rng.choice(UNIT_TYPES)
        counts[unit.value] += 1
        total += 1

    # Shares add up to more than 1, so the first pass can overshoot.
    while total > target:
        reducible = [unit for unit in UNIT_TYPES if counts[unit.value] > 1]
        unit = rng.choice(reducible)
        counts[unit.value] -= 1
        total -= 1

    return ArmyComposition.from_counts(counts)
