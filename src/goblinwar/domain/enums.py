"""Enumerations used across the Goblin War rules layer."""

from __future__ import annotations

from enum import StrEnum


class UnitType(StrEnum):
    """The five unit types a player (or the Goblins) can field."""

    CASTLE = "castle"
    CANNON = "cannon"
    KNIGHT = "knight"
    INFANTRY = "infantry"
    ARCHER = "archer"


class DifficultyOverride(StrEnum):
    """Manual difficulty a player may pick instead of adaptive progression."""

    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


class DifficultyTier(StrEnum):
    """Named progression brackets reported back with every battle."""

    NOVICE = "Novice"
    APPRENTICE = "Apprentice"
    VETERAN = "Veteran"
    ELITE = "Elite"
    MASTER = "Master"
    CHAMPION = "Champion"
    EASY_OVERRIDE = "Easy Override"
    MODERATE_OVERRIDE = "Moderate Override"
    HARD_OVERRIDE = "Hard Override"


class BattleClassification(StrEnum):
    """Outcome class derived from the power ratio of the two sides."""

    DECISIVE_VICTORY = "decisive_victory"
    CLOSE_VICTORY = "close_victory"
    MINOR_DEFEAT = "minor_defeat"
    MAJOR_DEFEAT = "major_defeat"

    @property
    def is_victory(self) -> bool:
        return self in (BattleClassification.DECISIVE_VICTORY, BattleClassification.CLOSE_VICTORY)


class BattlePhase(StrEnum):
    """Tactical phases, in the order they are resolved."""

    SPECIAL_UNITS = "special_units"
    RANGED = "ranged"
    SIEGE = "siege"
    ANTI_RANGED = "anti_ranged"
    CAVALRY = "cavalry"
    MELEE = "melee"
