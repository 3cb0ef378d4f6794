"""HTTP routes for the Goblin War API."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from goblinwar.api.runtime import ApiState
from goblinwar.domain import models as dm
from goblinwar.domain.enums import UnitType

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlayerSummary(CamelModel):
    id: int
    name: str


class CreatePlayerRequest(CamelModel):
    name: str = Field(min_length=1)


class ArmyPayload(CamelModel):
    castle: int = Field(default=0, ge=0)
    cannon: int = Field(default=0, ge=0)
    knight: int = Field(default=0, ge=0)
    infantry: int = Field(default=0, ge=0)
    archer: int = Field(default=0, ge=0)

    @classmethod
    def from_army(cls, army: dm.ArmyComposition) -> ArmyPayload:
        return cls(**army.to_dict())

    def to_army(self) -> dm.ArmyComposition:
        return dm.ArmyComposition(**self.model_dump())


class AddPointRequest(CamelModel):
    unit_type: UnitType
    amount: int = Field(default=1, ge=1, le=100)


class SpecialUnitPayload(CamelModel):
    name: str = Field(min_length=1)
    icon: str = "✨"
    power: int = Field(ge=0)
    quantity: int = Field(ge=1)


class BattleRecordPayload(CamelModel):
    id: int | None
    victory: bool
    total_power: int
    ai_power: int | None
    difficulty_tier: str | None
    units_lost: int | None
    attempt_id: str | None
    created_at: datetime

    @classmethod
    def from_record(cls, record: dm.BattleHistoryRecord) -> BattleRecordPayload:
        return cls(
            id=record.id,
            victory=record.victory,
            total_power=record.total_power,
            ai_power=record.ai_power,
            difficulty_tier=record.difficulty_tier,
            units_lost=record.units_lost,
            attempt_id=record.attempt_id,
            created_at=record.created_at,
        )


class AchievementPayload(CamelModel):
    key: str
    name: str
    description: str
    icon: str | None


class BattleRequest(CamelModel):
    # Free-form on purpose: unknown values fall back to adaptive difficulty.
    difficulty: str | None = None
    attempt_id: str | None = Field(default=None, min_length=1, max_length=64)


class BattleResponse(CamelModel):
    victory: bool
    total_power: int
    ai_power: int
    message: str
    battle_details: list[str]
    ai_army: ArmyPayload
    difficulty_tier: str
    units_lost: int
    army: ArmyPayload
    battle_result: BattleRecordPayload
    new_achievements: list[AchievementPayload]


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    healthy = await asyncio.to_thread(state.database_healthy)
    return {"status": "ok" if healthy else "degraded", "database": healthy}


@router.get("/players", response_model=list[PlayerSummary])
async def list_players(state: ApiStateDep) -> list[PlayerSummary]:
    players = await asyncio.to_thread(state.armies.list_players)
    return [PlayerSummary(id=player.id, name=player.name) for player in players]


@router.post("/players", response_model=PlayerSummary, status_code=status.HTTP_201_CREATED)
async def create_player(request: CreatePlayerRequest, state: ApiStateDep) -> PlayerSummary:
    player = await asyncio.to_thread(state.armies.create_player, request.name)
    return PlayerSummary(id=player.id, name=player.name)


@router.get("/players/{player_id}/army", response_model=ArmyPayload)
async def get_army(player_id: int, state: ApiStateDep) -> ArmyPayload:
    army = await asyncio.to_thread(state.armies.get_army, dm.PlayerID(player_id))
    return ArmyPayload.from_army(army)


@router.put("/players/{player_id}/army", response_model=ArmyPayload)
async def replace_army(player_id: int, request: ArmyPayload, state: ApiStateDep) -> ArmyPayload:
    army = await asyncio.to_thread(
        state.armies.set_army, dm.PlayerID(player_id), request.to_army()
    )
    return ArmyPayload.from_army(army)


@router.post("/players/{player_id}/army/add-point", response_model=ArmyPayload)
async def add_point(player_id: int, request: AddPointRequest, state: ApiStateDep) -> ArmyPayload:
    army = await asyncio.to_thread(
        state.armies.add_unit, dm.PlayerID(player_id), request.unit_type, request.amount
    )
    return ArmyPayload.from_army(army)


@router.get("/players/{player_id}/special-units", response_model=list[SpecialUnitPayload])
async def list_special_units(player_id: int, state: ApiStateDep) -> list[SpecialUnitPayload]:
    holdings = await asyncio.to_thread(state.armies.get_special_units, dm.PlayerID(player_id))
    return [
        SpecialUnitPayload(name=h.name, icon=h.icon, power=h.power, quantity=h.quantity)
        for h in holdings
        if h.quantity > 0
    ]


@router.post(
    "/players/{player_id}/special-units",
    response_model=SpecialUnitPayload,
    status_code=status.HTTP_201_CREATED,
)
async def grant_special_units(
    player_id: int, request: SpecialUnitPayload, state: ApiStateDep
) -> SpecialUnitPayload:
    holding = dm.SpecialUnitHolding(
        name=request.name, power=request.power, quantity=request.quantity, icon=request.icon
    )
    granted = await asyncio.to_thread(
        state.armies.grant_special_units, dm.PlayerID(player_id), holding
    )
    return SpecialUnitPayload(
        name=granted.name, icon=granted.icon, power=granted.power, quantity=granted.quantity
    )


@router.get("/players/{player_id}/battles", response_model=list[BattleRecordPayload])
async def list_battles(player_id: int, state: ApiStateDep) -> list[BattleRecordPayload]:
    records = await asyncio.to_thread(state.armies.battle_history, dm.PlayerID(player_id))
    return [BattleRecordPayload.from_record(record) for record in records]


@router.post("/players/{player_id}/battle", response_model=BattleResponse)
async def resolve_battle(
    player_id: int, state: ApiStateDep, request: BattleRequest | None = None
) -> BattleResponse:
    request = request or BattleRequest()
    outcome = await asyncio.to_thread(
        state.battles.resolve_battle,
        dm.PlayerID(player_id),
        request.difficulty,
        attempt_id=request.attempt_id,
    )
    return BattleResponse(
        victory=outcome.victory,
        total_power=outcome.player_power,
        ai_power=outcome.ai_power,
        message=outcome.message,
        battle_details=outcome.narrative_log,
        ai_army=ArmyPayload.from_army(outcome.opposing_army),
        difficulty_tier=outcome.difficulty_tier.value,
        units_lost=outcome.units_lost,
        army=ArmyPayload.from_army(outcome.army_after),
        battle_result=BattleRecordPayload.from_record(outcome.record),
        new_achievements=[
            AchievementPayload(
                key=item.key, name=item.name, description=item.description, icon=item.icon
            )
            for item in outcome.new_achievements
        ],
    )
