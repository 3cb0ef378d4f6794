"""Storage adapters implementing :class:`goblinwar.interfaces.IPlayerRepository`."""

from goblinwar.repository.memory_store import InMemoryPlayerRepository
from goblinwar.repository.sql_store import SqlPlayerRepository

__all__ = ["InMemoryPlayerRepository", "SqlPlayerRepository"]
