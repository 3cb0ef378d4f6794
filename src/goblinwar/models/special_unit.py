"""Special unit models for the Goblin War engine.

This module contains models for:
- SpecialUnits (catalog of festival reward units and their power)
- PlayerSpecialUnits (how many of each special unit a player holds)
"""

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .player import Player


class SpecialUnit(Base):
    """Catalog entry for a special unit.

    Attributes:
        id: Primary key
        name: Unique unit name
        icon: Emoji shown in the battle narrative
        power: Power contributed per unit held
    """

    __tablename__ = "special_units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    icon: Mapped[str] = mapped_column(String, nullable=False, default="✨")
    power: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (CheckConstraint("power >= 0", name="power_non_negative"),)

    def __repr__(self) -> str:
        return f"<SpecialUnit(id={self.id}, name='{self.name}', power={self.power})>"


class PlayerSpecialUnit(Base):
    """Quantity of one special unit held by one player.

    Attributes:
        id: Primary key
        player_id: Foreign key to player
        special_unit_id: Foreign key to the special unit catalog
        quantity: Number of units held
    """

    __tablename__ = "player_special_units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), nullable=False)
    special_unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("special_units.id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    player: Mapped["Player"] = relationship("Player", back_populates="special_units")
    special_unit: Mapped["SpecialUnit"] = relationship("SpecialUnit")

    __table_args__ = (
        UniqueConstraint("player_id", "special_unit_id", name="uq_player_special_unit"),
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerSpecialUnit(player_id={self.player_id}, "
            f"special_unit_id={self.special_unit_id}, quantity={self.quantity})>"
        )
