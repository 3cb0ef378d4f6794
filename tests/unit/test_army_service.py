"""Tests for ArmyService rewards and reads."""

import pytest

from fakes import AlwaysStaleRepository
from goblinwar.domain import models as dm
from goblinwar.domain.enums import UnitType
from goblinwar.errors import BattleConflictError
from goblinwar.repository import InMemoryPlayerRepository
from goblinwar.services.army_service import ArmyService


class TestArmyService:
    def setup_method(self):
        self.repo = InMemoryPlayerRepository()
        self.service = ArmyService(self.repo)
        self.player = self.service.create_player("  Ada  ")

    def test_create_player_strips_name(self):
        assert self.player.name == "Ada"
        assert self.service.list_players() == [self.player]

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            self.service.create_player("   ")

    def test_missing_army_reads_as_empty(self):
        assert self.service.get_army(self.player.id) == dm.ArmyComposition()
        assert self.service.get_army(self.player.id) == self.service.get_army(self.player.id)

    def test_add_unit_creates_and_grows_army(self):
        self.service.add_unit(self.player.id, "infantry")
        army = self.service.add_unit(self.player.id, UnitType.INFANTRY, amount=2)
        assert army == dm.ArmyComposition(infantry=3)
        assert self.repo.get_army(self.player.id).version == 2

    def test_add_unit_validates_input(self):
        with pytest.raises(ValueError, match="Invalid unit type"):
            self.service.add_unit(self.player.id, "dragon")
        with pytest.raises(ValueError, match="positive"):
            self.service.add_unit(self.player.id, "knight", amount=0)

    def test_add_unit_gives_up_on_conflicts(self):
        repo = AlwaysStaleRepository()
        player = repo.create_player("Ada")
        repo.replace_army(player.id, dm.ArmyComposition(knight=1))
        with pytest.raises(BattleConflictError):
            ArmyService(repo, max_attempts=2).add_unit(player.id, "knight")

    def test_set_army_overwrites(self):
        self.service.add_unit(self.player.id, "castle")
        army = dm.ArmyComposition(cannon=2, archer=1)
        assert self.service.set_army(self.player.id, army) == army
        assert self.service.get_army(self.player.id) == army

    def test_grant_special_units(self):
        holding = dm.SpecialUnitHolding(name="Snow Owl", power=2, quantity=3, icon="🦉")
        granted = self.service.grant_special_units(self.player.id, holding)
        assert granted == holding
        assert self.service.get_special_units(self.player.id) == [holding]

    def test_grant_special_units_validates(self):
        with pytest.raises(ValueError, match="Quantity"):
            self.service.grant_special_units(
                self.player.id, dm.SpecialUnitHolding(name="Owl", power=2, quantity=0)
            )
        with pytest.raises(ValueError, match="Power"):
            self.service.grant_special_units(
                self.player.id, dm.SpecialUnitHolding(name="Owl", power=-1, quantity=1)
            )

    def test_battle_history_passthrough(self):
        assert self.service.battle_history(self.player.id) == []
