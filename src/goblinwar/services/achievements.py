"""Achievement evaluator used when no achievement system is wired in."""

from __future__ import annotations

from goblinwar.domain import models as dm


class NullAchievementEvaluator:
    """Never unlocks anything."""

    def evaluate(self, player_id: dm.PlayerID) -> list[dm.Achievement]:  # noqa: ARG002
        return []
