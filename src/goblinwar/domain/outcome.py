"""Victory decision and casualty rates."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

from .enums import BattleClassification
from .rules_config import DEFAULT_RULES, OutcomeRules


@dataclass(frozen=True, slots=True)
class OutcomeResult:
    """Final verdict for the player side."""

    victory: bool
    classification: BattleClassification
    castle_bonus: float
    raw_rate: float
    casualty_rate: float
    units_lost: int
    message: str
    narrative: tuple[str, ...]


_MESSAGES: dict[tuple[BattleClassification, bool], str] = {
    (BattleClassification.DECISIVE_VICTORY, False): (
        "🏆 Decisive victory! You captured the Goblin stronghold but lost {lost} units in the assault."
    ),
    (BattleClassification.DECISIVE_VICTORY, True): (
        "🏆 Decisive victory! Your castles covered the assault on the Goblin stronghold"
        " and only {lost} units were lost."
    ),
    (BattleClassification.CLOSE_VICTORY, False): (
        "🎉 Hard-fought victory! You defeated the Goblins but lost {lost} units in the fierce battle."
    ),
    (BattleClassification.CLOSE_VICTORY, True): (
        "🎉 Hard-fought victory! Your castles held the line against the Goblins"
        " but {lost} units were lost in the fierce battle."
    ),
    (BattleClassification.MAJOR_DEFEAT, False): (
        "💔 Without castle coordination, {lost} units disappeared in puffs of smoke"
        " during the retreat from the Goblins!"
    ),
    (BattleClassification.MAJOR_DEFEAT, True): (
        "💔 Your army retreated with minimal losses thanks to castle coordination!"
        " Only {lost} units disappeared in smoke against the Goblins."
    ),
    (BattleClassification.MINOR_DEFEAT, False): (
        "⚔️ A hard-fought battle against the Goblins! {lost} units disappeared in smoke"
        " during withdrawal."
    ),
    (BattleClassification.MINOR_DEFEAT, True): (
        "⚔️ Close battle against the Goblins! Your castles minimized retreat losses"
        " - only {lost} units vanished in gentle puffs."
    ),
}


def castle_defense_bonus(castle_count: int, rules: OutcomeRules = DEFAULT_RULES.outcome) -> float:
    """Casualty-rate reduction granted by the player's castles, capped."""

    return min(max(castle_count, 0) * rules.castle_bonus_per_castle, rules.castle_bonus_cap)


def classify(
    player_total: int, ai_total: int, rules: OutcomeRules = DEFAULT_RULES.outcome
) -> BattleClassification:
    """Victory iff the player is strictly stronger; the margin picks the band."""

    if player_total > ai_total:
        if player_total > ai_total * rules.decisive_ratio:
            return BattleClassification.DECISIVE_VICTORY
        return BattleClassification.CLOSE_VICTORY
    if ai_total > player_total * rules.major_defeat_ratio:
        return BattleClassification.MAJOR_DEFEAT
    return BattleClassification.MINOR_DEFEAT


def casualty_rate(
    classification: BattleClassification,
    castle_count: int,
    *,
    rng: random.Random,
    rules: OutcomeRules = DEFAULT_RULES.outcome,
) -> tuple[float, float]:
    """Return ``(raw_rate, protected_rate)`` for the player side.

    Victories draw their raw rate from a band; defeats use a fixed raw rate.
    Castles then shave the rate down to the band's floor.
    """
    bonus = castle_defense_bonus(castle_count, rules)
    if classification is BattleClassification.DECISIVE_VICTORY:
        raw = rng.uniform(rules.decisive_rate_low, rules.decisive_rate_high)
        floor = rules.decisive_rate_floor
    elif classification is BattleClassification.CLOSE_VICTORY:
        raw = rng.uniform(rules.close_rate_low, rules.close_rate_high)
        floor = rules.close_rate_floor
    elif classification is BattleClassification.MAJOR_DEFEAT:
        raw = rules.major_defeat_rate
        floor = rules.defeat_rate_floor
    else:
        raw = rules.minor_defeat_rate
        floor = rules.defeat_rate_floor
    return raw, max(floor, raw - bonus)


def calculate_outcome(
    player_total: int,
    ai_total: int,
    castle_count: int,
    *,
    rng: random.Random,
    archer_count: int = 0,
    army_size: int | None = None,
    rules: OutcomeRules = DEFAULT_RULES.outcome,
) -> OutcomeResult:
    """Decide the battle and how many player units it costs.

    Args:
        player_total: Player base power plus special-unit bonus power
        ai_total: Goblin army strength
        castle_count: Player castles (drives the defensive bonus)
        rng: Random source for the victory casualty band
        archer_count: Player archers, only used for the retreat narrative
        army_size: Units the player actually owns; losses never exceed it
        rules: Rule constants

    Returns:
        OutcomeResult; ``units_lost`` is ``floor(player_total * rate)``, capped at
        ``army_size`` when given
    """
    classification = classify(player_total, ai_total, rules)
    bonus = castle_defense_bonus(castle_count, rules)
    raw, rate = casualty_rate(classification, castle_count, rng=rng, rules=rules)
    units_lost = math.floor(player_total * rate)
    if army_size is not None:
        # Bonus power can push the loss past the units actually owned.
        units_lost = min(units_lost, army_size)
    has_castles = castle_count > 0

    if classification.is_victory:
        narrative = _victory_narrative(classification, units_lost, castle_count, bonus)
    else:
        narrative = _defeat_narrative(classification, castle_count, archer_count, rules)

    return OutcomeResult(
        victory=classification.is_victory,
        classification=classification,
        castle_bonus=bonus,
        raw_rate=raw,
        casualty_rate=rate,
        units_lost=units_lost,
        message=_MESSAGES[(classification, has_castles)].format(lost=units_lost),
        narrative=tuple(narrative),
    )


def _victory_narrative(
    classification: BattleClassification, units_lost: int, castle_count: int, bonus: float
) -> list[str]:
    lines: list[str] = []
    if classification is BattleClassification.DECISIVE_VICTORY:
        lines.append("🏰 You captured the Goblin stronghold as their forces disappeared!")
        lines.append("💨 Goblin units vanished in clouds of smoke!")
        if units_lost <= 1:
            cost = "Almost no casualties!"
        else:
            cost = f"{units_lost} units vanished in combat smoke during the final assault."
    else:
        lines.append("🏃 The remaining Goblin army retreated to fight another day!")
        lines.append("💨 Several Goblin units vanished in harmless smoke clouds!")
        cost = f"{units_lost} of your units disappeared in combat smoke during the intense fighting."

    if castle_count > 0:
        saved = math.floor(units_lost * bonus)
        if saved > 0:
            lines.append(
                f"🏰 Your {castle_count} castle(s) provided protection - "
                f"saved {saved} units from being lost!"
            )
        else:
            lines.append(f"🏰 Your {castle_count} castle(s) provided strategic command advantage!")

    lines.append(f"⚔️ Victory cost: {cost}")
    return lines


def _defeat_narrative(
    classification: BattleClassification,
    castle_count: int,
    archer_count: int,
    rules: OutcomeRules,
) -> list[str]:
    lines: list[str] = []
    major = classification is BattleClassification.MAJOR_DEFEAT

    if castle_count > 0:
        archers_saved = min(archer_count, math.floor(castle_count * rules.retreat_archers_per_castle))
        castles_saved = min(castle_count, math.floor(castle_count * rules.retreat_castles_per_castle))
        if archers_saved > 0:
            lines.append(
                f"🏹 Your castles coordinated the retreat - {archers_saved} archer(s) safely withdrew!"
            )
        if castles_saved > 0:
            lines.append(f"🏰 {castles_saved} castle(s) provided secure fallback positions!")
        if major:
            lines.append(
                "🏃 Your castles enabled an organized tactical withdrawal from the Goblin assault!"
            )
        else:
            lines.append(
                "🛡️ Castle defenses allowed most units to retreat safely from the Goblin attack!"
            )
    elif major:
        lines.append("🏃 Your forces retreated but lacked defensive coordination against the Goblins!")
    else:
        lines.append(
            "🛡️ Your army fought bravely but needed better defensive positions against the Goblins!"
        )

    lines.append("💨 Lost units simply vanished in harmless puffs of smoke!")
    return lines
