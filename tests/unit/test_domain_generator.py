"""Tests for Goblin army generation."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from goblinwar.domain.generator import generate_opposing_army
from goblinwar.domain.models import UNIT_TYPES, ArmyComposition
from goblinwar.utils.rng import create_rng


def test_zero_target_is_empty_army():
    assert generate_opposing_army(0, rng=create_rng(1)) == ArmyComposition()


def test_negative_target_raises():
    with pytest.raises(ValueError, match="target"):
        generate_opposing_army(-3, rng=create_rng(1))


@pytest.mark.parametrize("target", [1, 2, 3, 4])
def test_small_targets_spread_single_units(target):
    army = generate_opposing_army(target, rng=create_rng(target))
    counts = [army.count(unit) for unit in UNIT_TYPES]
    assert army.total == target
    assert counts.count(1) == target
    assert max(counts) == 1


def test_same_seed_same_army():
    assert generate_opposing_army(40, rng=create_rng("goblins")) == generate_opposing_army(
        40, rng=create_rng("goblins")
    )


@given(target=st.integers(min_value=5, max_value=500), seed=st.integers(min_value=0))
def test_total_matches_target_and_every_type_present(target, seed):
    army = generate_opposing_army(target, rng=create_rng(seed))
    assert army.total == target
    assert all(army.count(unit) >= 1 for unit in UNIT_TYPES)
