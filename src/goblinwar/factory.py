"""Service Factory for Goblin War.

This module provides factory functions for creating service instances with
proper dependency wiring.  Use these functions in production code to ensure
all service dependencies are correctly initialized.

For testing, inject an in-memory repository or protocol-based fakes instead
of using these factories.

Example:
    # Production usage
    from goblinwar.database import create_db_engine, create_session_factory, init_db
    from goblinwar.factory import build_battle_service, create_repository

    engine = create_db_engine()
    init_db(engine)
    repository = create_repository(create_session_factory(engine))
    battles = build_battle_service(repository)

    # Testing usage
    from goblinwar.repository import InMemoryPlayerRepository
    from goblinwar.services.battle_service import BattleService

    battles = BattleService(InMemoryPlayerRepository())
"""

from sqlalchemy.orm import Session, sessionmaker

from goblinwar.config import get_settings
from goblinwar.interfaces.achievements import IAchievementEvaluator
from goblinwar.interfaces.repository import IPlayerRepository
from goblinwar.repository.sql_store import SqlPlayerRepository
from goblinwar.services.achievements import NullAchievementEvaluator
from goblinwar.services.army_service import ArmyService
from goblinwar.services.battle_service import BattleService, PlayerLockRegistry


def create_repository(session_factory: sessionmaker[Session]) -> SqlPlayerRepository:
    """Create the SQL-backed player repository.

    Args:
        session_factory: Session factory bound to the application database

    Returns:
        SqlPlayerRepository
    """
    return SqlPlayerRepository(session_factory)


def build_battle_service(
    repository: IPlayerRepository,
    *,
    achievements: IAchievementEvaluator | None = None,
    locks: PlayerLockRegistry | None = None,
) -> BattleService:
    """Create a BattleService over an existing repository."""

    settings = get_settings()
    return BattleService(
        repository,
        achievements or NullAchievementEvaluator(),
        locks=locks,
        max_attempts=settings.battle_commit_retries,
    )


def build_army_service(
    repository: IPlayerRepository, *, locks: PlayerLockRegistry | None = None
) -> ArmyService:
    """Create an ArmyService over an existing repository."""

    settings = get_settings()
    return ArmyService(repository, locks=locks, max_attempts=settings.battle_commit_retries)
