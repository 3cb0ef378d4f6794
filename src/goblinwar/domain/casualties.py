"""Removing battle losses from a player's roster."""

from __future__ import annotations

import math
import random

from .enums import UnitType
from .models import ArmyComposition

# Order in which unit types absorb proportional losses.
REMOVAL_ORDER: tuple[UnitType, ...] = (
    UnitType.INFANTRY,
    UnitType.ARCHER,
    UnitType.KNIGHT,
    UnitType.CANNON,
    UnitType.CASTLE,
)


def apply_casualties(
    army: ArmyComposition, units_lost: int, *, rng: random.Random
) -> ArmyComposition:
    """Return ``army`` with exactly ``min(units_lost, army.total)`` units removed.

    Each type first loses ``floor(units_lost * share + U[0, 1))`` units, where
    ``share`` is its fraction of the pre-battle total (stochastic rounding),
    capped by its own count and by what is still owed.  Any shortfall is then
    taken one unit at a time from randomly chosen non-empty types.
    """
    if units_lost < 0:
        raise ValueError(f"units_lost must be non-negative, got {units_lost}")

    total = army.total
    budget = min(units_lost, total)
    if budget == 0:
        return army

    counts = army.to_dict()
    remaining = budget
    for unit in REMOVAL_ORDER:
        if remaining <= 0:
            break
        current = counts[unit.value]
        if current == 0:
            continue
        share = current / total
        losses = min(math.floor(budget * share + rng.random()), current, remaining)
        counts[unit.value] = current - losses
        remaining -= losses

    while remaining > 0:
        available = [unit for unit in REMOVAL_ORDER if counts[unit.value] > 0]
        unit = rng.choice(available)
        counts[unit.value] -= 1
        remaining -= 1

    return ArmyComposition.from_counts(counts)
