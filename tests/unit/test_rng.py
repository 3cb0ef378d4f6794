"""Tests for the deterministic RNG helpers.

Tests cover:
- Seed format and validation
- Determinism (same seed -> same stream)
- Variety (different contexts -> different streams)
- Attempt identifiers and battle seeds
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from goblinwar.utils.rng import create_rng, generate_seed, new_attempt_id, new_battle_seed


class TestGenerateSeed:
    """Tests for generate_seed function."""

    def test_seed_format(self):
        assert generate_seed(7, "abc", "generator") == "7:abc:generator"

    def test_different_parameters_produce_different_seeds(self):
        seeds = {
            generate_seed(1, "a", "outcome"),
            generate_seed(2, "a", "outcome"),
            generate_seed(1, "b", "outcome"),
            generate_seed(1, "a", "casualties"),
        }
        assert len(seeds) == 4

    def test_negative_player_id_raises_error(self):
        with pytest.raises(ValueError, match="player_id must be non-negative"):
            generate_seed(-1, "a", "outcome")

    def test_empty_battle_seed_raises_error(self):
        with pytest.raises(ValueError, match="battle_seed must not be empty"):
            generate_seed(1, "", "outcome")


class TestCreateRng:
    """Tests for create_rng function."""

    def test_same_seed_same_stream(self):
        first = create_rng("1:a:progression")
        second = create_rng("1:a:progression")
        assert [first.random() for _ in range(10)] == [second.random() for _ in range(10)]

    def test_contexts_are_independent(self):
        first = create_rng("1:a:progression")
        second = create_rng("1:a:generator")
        assert [first.random() for _ in range(5)] != [second.random() for _ in range(5)]

    def test_integer_seed(self):
        assert create_rng(42).randint(0, 1000) == create_rng(42).randint(0, 1000)

    def test_unseeded_generator(self):
        value = create_rng().random()
        assert 0.0 <= value < 1.0

    @given(st.text(min_size=1, max_size=40))
    def test_string_seeds_are_reproducible(self, seed):
        assert create_rng(seed).random() == create_rng(seed).random()


def test_new_attempt_id_is_unique_hex():
    first, second = new_attempt_id(), new_attempt_id()
    assert first != second
    assert len(first) == 32
    int(first, 16)


def test_new_battle_seed_is_fresh_entropy():
    seeds = {new_battle_seed() for _ in range(20)}
    assert len(seeds) == 20
    assert all(len(seed) == 32 for seed in seeds)
