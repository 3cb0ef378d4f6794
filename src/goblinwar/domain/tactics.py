"""Tactical battle resolution.

The resolver walks a fixed sequence of counter phases (ranged, siege,
anti-ranged, cavalry) followed by a melee comparison.  Every phase reads the
*original* unit counts; casualties only accumulate, each increment capped at
what the side has left.  A unit may therefore be counted by more than one
phase: the tallies measure pressure on each side, they are not a per-unit
ledger, and the balance constants are tuned against this behaviour.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .enums import BattlePhase
from .models import ArmyComposition, SpecialUnitHolding


@dataclass(slots=True)
class SideTally:
    """Running casualty count for one side."""

    power: int
    casualties: int = 0

    @property
    def remaining(self) -> int:
        return self.power - self.casualties

    def inflict(self, amount: int) -> int:
        """Add casualties, capped so the tally never exceeds the side's power."""

        applied = max(0, min(amount, self.remaining))
        self.casualties += applied
        return applied


@dataclass(slots=True)
class PhaseRecord:
    """What a single phase contributed."""

    phase: BattlePhase
    player_casualties: int = 0
    ai_casualties: int = 0
    lines: list[str] = field(default_factory=list)


@dataclass(slots=True)
class TacticalReport:
    """Narrative log and casualty pressure for both sides."""

    player_power: int
    ai_power: int
    player_casualties: int
    ai_casualties: int
    narrative_log: list[str]
    phases: list[PhaseRecord]

    @property
    def player_remaining(self) -> int:
        return self.player_power - self.player_casualties

    @property
    def ai_remaining(self) -> int:
        return self.ai_power - self.ai_casualties


def resolve_tactics(
    player: ArmyComposition,
    opposing: ArmyComposition,
    special_units: Sequence[SpecialUnitHolding] = (),
) -> TacticalReport:
    """Run every tactical phase and collect the narrative.

    Args:
        player: The player's roster
        opposing: The Goblin roster
        special_units: Player holdings; their power is added to the player side

    Returns:
        TacticalReport with casualty tallies bounded by each side's power
    """
    fielded = [unit for unit in special_units if unit.quantity > 0]
    bonus_power = sum(unit.total_power for unit in fielded)
    player_side = SideTally(power=player.total + bonus_power)
    ai_side = SideTally(power=opposing.total)

    phases: list[PhaseRecord] = []
    if fielded:
        phases.append(_special_units_phase(fielded))
    phases.append(_ranged_phase(player, opposing, player_side, ai_side))
    phases.append(_siege_phase(player, opposing, player_side, ai_side))
    phases.append(_anti_ranged_phase(player, opposing, player_side, ai_side))
    phases.append(_cavalry_phase(player, opposing, player_side, ai_side))
    phases.append(_melee_phase(player_side, ai_side))

    narrative = [line for record in phases for line in record.lines]
    return TacticalReport(
        player_power=player_side.power,
        ai_power=ai_side.power,
        player_casualties=player_side.casualties,
        ai_casualties=ai_side.casualties,
        narrative_log=narrative,
        phases=phases,
    )


def _special_units_phase(fielded: Sequence[SpecialUnitHolding]) -> PhaseRecord:
    record = PhaseRecord(BattlePhase.SPECIAL_UNITS)
    record.lines.append("❄️ Winter Festival special units join the battle!")
    for unit in fielded:
        record.lines.append(
            f"{unit.icon} {unit.quantity}x {unit.name} ({unit.total_power} power) "
            "unleashes magical attacks!"
        )
    record.lines.append("✨ Magical frost energy overwhelms enemy positions!")
    return record


def _ranged_phase(
    player: ArmyComposition,
    opposing: ArmyComposition,
    player_side: SideTally,
    ai_side: SideTally,
) -> PhaseRecord:
    record = PhaseRecord(BattlePhase.RANGED)
    if player.archer == 0 and opposing.archer == 0:
        return record

    difference = player.archer - opposing.archer
    if difference > 0:
        record.ai_casualties = ai_side.inflict(difference)
        record.lines.append(
            "🏹 Your archers gained ranged superiority! Enemy units vanished in smoke puffs!"
        )
    elif difference < 0:
        record.player_casualties = player_side.inflict(-difference)
        record.lines.append(
            "🏹 Enemy archers dominated the ranged battle! "
            "Some of your units disappeared in gentle smoke!"
        )
    else:
        record.lines.append("🏹 Archers exchanged volleys with equal effect!")
    return record


def _siege_phase(
    player: ArmyComposition,
    opposing: ArmyComposition,
    player_side: SideTally,
    ai_side: SideTally,
) -> PhaseRecord:
    record = PhaseRecord(BattlePhase.SIEGE)

    if player.cannon > opposing.castle:
        record.ai_casualties = ai_side.inflict(player.cannon - opposing.castle)
        record.lines.append(
            "🔫 Your cannons breached the enemy fortifications! "
            "Enemy units vanished in puffs of fire!"
        )
    elif opposing.castle > player.cannon > 0:
        record.lines.append("🏰 Enemy walls withstood your siege!")

    if opposing.cannon > player.castle:
        record.player_casualties = player_side.inflict(opposing.cannon - player.castle)
        record.lines.append(
            "💥 Enemy cannons breached your defenses! Some units disappeared in harmless smoke!"
        )
    elif player.castle > opposing.cannon > 0:
        record.lines.append("🏰 Your castle walls held strong!")
    return record


def _anti_ranged_phase(
    player: ArmyComposition,
    opposing: ArmyComposition,
    player_side: SideTally,
    ai_side: SideTally,
) -> PhaseRecord:
    record = PhaseRecord(BattlePhase.ANTI_RANGED)

    advantage = min(player.infantry, opposing.archer)
    if advantage > 0:
        record.ai_casualties = ai_side.inflict(advantage)
        record.lines.append(
            "🛡️ Your infantry formed shield walls and charged the enemy archers! "
            "Enemy units vanished in defensive smoke!"
        )

    advantage = min(opposing.infantry, player.archer)
    if advantage > 0:
        record.player_casualties = player_side.inflict(advantage)
        record.lines.append(
            "⚔️ Enemy infantry overwhelmed your archer positions! "
            "Some units disappeared in tactical smoke!"
        )
    return record


def _cavalry_phase(
    player: ArmyComposition,
    opposing: ArmyComposition,
    player_side: SideTally,
    ai_side: SideTally,
) -> PhaseRecord:
    record = PhaseRecord(BattlePhase.CAVALRY)

    advantage = min(player.knight, opposing.infantry)
    if advantage > 0:
        record.ai_casualties = ai_side.inflict(advantage)
        record.lines.append(
            "🏇 Your knights charged through enemy infantry formations! "
            "Enemy units vanished in sparkly clouds!"
        )

    advantage = min(opposing.knight, player.infantry)
    if advantage > 0:
        record.player_casualties = player_side.inflict(advantage)
        record.lines.append(
            "🐎 Enemy cavalry broke through your infantry lines! "
            "Some units disappeared in gentle puffs!"
        )
    return record


def _melee_phase(player_side: SideTally, ai_side: SideTally) -> PhaseRecord:
    record = PhaseRecord(BattlePhase.MELEE)
    if player_side.remaining > ai_side.remaining:
        record.lines.append("⚔️ Your forces overwhelmed the enemy in melee!")
    elif ai_side.remaining > player_side.remaining:
        record.lines.append("⚔️ Enemy forces pushed back your army!")
    else:
        record.lines.append("⚔️ Forces clashed with equal determination!")
    return record
