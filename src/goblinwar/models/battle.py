"""Battle result model for the Goblin War engine.

This module contains the model for battles, which record the outcome of a
player's fight against a Goblin army.  Rows are append-only.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampCreatedMixin

if TYPE_CHECKING:
    from .player import Player


class BattleResult(Base, TimestampCreatedMixin):
    """Represents one resolved battle.

    Attributes:
        id: Primary key
        player_id: Foreign key to player
        attempt_id: Battle attempt identifier, unique per player (makes commits idempotent)
        seed: Random seed the battle was resolved with
        victory: Whether the player won
        total_power: Player power (base + special units) going into battle
        ai_power: Goblin army strength
        difficulty_tier: Tier or override label used for the Goblin army
        units_lost: Player units removed by the battle
    """

    __tablename__ = "battle_results"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Foreign keys
    player_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), nullable=False)

    # Battle attributes
    attempt_id: Mapped[str | None] = mapped_column(String, nullable=True)
    seed: Mapped[str | None] = mapped_column(String(64), nullable=True)
    victory: Mapped[bool] = mapped_column(Boolean, nullable=False)
    total_power: Mapped[int] = mapped_column(Integer, nullable=False)
    ai_power: Mapped[int | None] = mapped_column(Integer, nullable=True)
    difficulty_tier: Mapped[str | None] = mapped_column(String, nullable=True)
    units_lost: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    player: Mapped["Player"] = relationship("Player", back_populates="battles")

    # Table constraints
    __table_args__ = (
        Index("idx_battle_results_player", "player_id"),
        UniqueConstraint("player_id", "attempt_id", name="uq_battle_results_player_attempt"),
    )

    def __repr__(self) -> str:
        return (
            f"<BattleResult(id={self.id}, player_id={self.player_id}, "
            f"victory={self.victory}, total_power={self.total_power})>"
        )
