"""Army model for the Goblin War engine.

This module contains the model for a player's unit counts.  The row carries
a ``version`` column used for optimistic concurrency: every write bumps it,
and battle commits only succeed against the version they read.
"""

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, VersionedMixin

if TYPE_CHECKING:
    from .player import Player


class PlayerArmy(Base, TimestampMixin, VersionedMixin):
    """Represents the five unit counts owned by one player.

    Attributes:
        player_id: Primary key and foreign key to the owning player
        castle: Castle count
        cannon: Cannon count
        knight: Knight count
        infantry: Infantry count
        archer: Archer count
        version: Optimistic-concurrency counter, incremented on every write
    """

    __tablename__ = "player_armies"

    # Primary key
    player_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), primary_key=True)

    # Unit counts
    castle: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cannon: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    knight: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    infantry: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    archer: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    player: Mapped["Player"] = relationship("Player", back_populates="army")

    # Table constraints
    __table_args__ = (
        CheckConstraint("castle >= 0", name="castle_non_negative"),
        CheckConstraint("cannon >= 0", name="cannon_non_negative"),
        CheckConstraint("knight >= 0", name="knight_non_negative"),
        CheckConstraint("infantry >= 0", name="infantry_non_negative"),
        CheckConstraint("archer >= 0", name="archer_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerArmy(player_id={self.player_id}, castle={self.castle}, "
            f"cannon={self.cannon}, knight={self.knight}, infantry={self.infantry}, "
            f"archer={self.archer}, version={self.version})>"
        )
