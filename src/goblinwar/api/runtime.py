"""Runtime primitives backing the Goblin War HTTP API."""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine

from goblinwar.config import Settings, get_settings
from goblinwar.database import check_database_health, create_db_engine, create_session_factory, init_db
from goblinwar.factory import build_army_service, build_battle_service, create_repository
from goblinwar.interfaces.achievements import IAchievementEvaluator
from goblinwar.interfaces.battle import IBattleService
from goblinwar.services.army_service import ArmyService
from goblinwar.services.battle_service import PlayerLockRegistry

logger = logging.getLogger(__name__)


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        achievements: IAchievementEvaluator | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.engine: Engine = create_db_engine(
            self.settings.database_url, echo=self.settings.database_echo
        )
        init_db(self.engine)
        self.repository = create_repository(create_session_factory(self.engine))
        # One registry so rewards and battles for a player never interleave.
        self.locks = PlayerLockRegistry()
        self.armies: ArmyService = build_army_service(self.repository, locks=self.locks)
        self.battles: IBattleService = build_battle_service(
            self.repository, achievements=achievements, locks=self.locks
        )
        logger.info("api state ready (database=%s)", self.engine.url.render_as_string())

    def database_healthy(self) -> bool:
        return check_database_health(self.engine)

    async def shutdown(self) -> None:
        self.engine.dispose()


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
