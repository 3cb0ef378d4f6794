"""Utility functions for the Goblin War battle engine."""

from goblinwar.utils.rng import create_rng, generate_seed, new_attempt_id, new_battle_seed

__all__ = [
    "create_rng",
    "generate_seed",
    "new_attempt_id",
    "new_battle_seed",
]
