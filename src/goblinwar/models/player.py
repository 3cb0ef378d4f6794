"""Player model for the Goblin War engine.

This module contains the model for players (students taking part in
battles).
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampCreatedMixin

if TYPE_CHECKING:
    from .army import PlayerArmy
    from .battle import BattleResult
    from .special_unit import PlayerSpecialUnit


class Player(Base, TimestampCreatedMixin):
    """Represents a student who earns units and fights the Goblins.

    Attributes:
        id: Primary key
        name: Display name
        army: The player's unit counts (absent until the first reward)
        battles: Append-only battle history
        special_units: Festival reward holdings
    """

    __tablename__ = "players"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(String, nullable=False)

    # Relationships
    army: Mapped[Optional["PlayerArmy"]] = relationship("PlayerArmy", back_populates="player")
    battles: Mapped[list["BattleResult"]] = relationship("BattleResult", back_populates="player")
    special_units: Mapped[list["PlayerSpecialUnit"]] = relationship(
        "PlayerSpecialUnit", back_populates="player"
    )

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, name='{self.name}')>"
