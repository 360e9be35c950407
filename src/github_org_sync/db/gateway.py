"""Persistence gateway used by the sync.

Every operation checks out its own session from the factory, so concurrent
workers never share a connection, and every write commits under the shared
write lock. Sessions are closed on every exit path.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from github_org_sync.logging import get_logger

from .models import Base, PullRequest, Repository
from .repositories import (
    BaseRepository,
    PullRequestRepository,
    RepositoryRepository,
    ReviewRepository,
    UserRepository,
)

if TYPE_CHECKING:
    from github_org_sync.github.concurrency import LockLike

logger = get_logger(__name__)


class EntityKind(StrEnum):
    """Kinds of records the sync writes."""

    REPOSITORY = "repository"
    PULL_REQUEST = "pull_request"
    REVIEW = "review"
    USER = "user"


_REPOSITORIES: dict[EntityKind, type[BaseRepository[Any]]] = {
    EntityKind.REPOSITORY: RepositoryRepository,
    EntityKind.PULL_REQUEST: PullRequestRepository,
    EntityKind.REVIEW: ReviewRepository,
    EntityKind.USER: UserRepository,
}


class PersistenceGateway:
    """Keyed upserts, lookups and cursor updates against the store.

    Usage:
        gateway = PersistenceGateway(session_factory, write_lock=controller.write_lock)
        repo, created = await gateway.upsert(EntityKind.REPOSITORY, 123, fields)
        await gateway.advance_repository_cursor(123, datetime.now(UTC))
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        write_lock: LockLike | None = None,
    ) -> None:
        from github_org_sync.github.concurrency import NoOpLock

        self._session_factory = session_factory
        self._write_lock = write_lock if write_lock is not None else NoOpLock()

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    @staticmethod
    def _repository(kind: EntityKind, session: AsyncSession) -> BaseRepository[Any]:
        return _REPOSITORIES[kind](session)  # type: ignore[call-arg]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    async def upsert(
        self,
        kind: EntityKind,
        external_id: int,
        fields: dict[str, Any],
    ) -> tuple[Base, bool]:
        """Create or update the record of ``kind`` keyed by ``external_id``.

        Returns:
            Tuple of (record, created)
        """
        async with self._write_lock:
            async with self._session() as session:
                record, created = await self._repository(kind, session).upsert(
                    external_id, fields
                )
                await session.commit()

        logger.debug(
            "{} {} {}", "Created" if created else "Updated", kind.value, external_id
        )
        return record, created

    async def advance_repository_cursor(self, github_id: int, synced_at: datetime) -> bool:
        """Set a repository's ``last_synced_at``; False if it isn't stored."""
        async with self._write_lock:
            async with self._session() as session:
                repo = await RepositoryRepository(session).update_last_synced(
                    github_id, synced_at
                )
                await session.commit()
        return repo is not None

    async def advance_pull_request_cursor(self, github_id: int, synced_at: datetime) -> bool:
        """Set a pull request's ``last_synced_at``; False if it isn't stored."""
        async with self._write_lock:
            async with self._session() as session:
                pr = await PullRequestRepository(session).update_last_synced(
                    github_id, synced_at
                )
                await session.commit()
        return pr is not None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    async def find(self, kind: EntityKind, external_id: int) -> Any:
        """Get the stored record of ``kind`` keyed by ``external_id`` or None."""
        async with self._session() as session:
            return await self._repository(kind, session).get_by_github_id(external_id)

    async def earliest_repository_sync(self) -> datetime | None:
        """Oldest repository cursor; None if no repository was ever synced."""
        async with self._session() as session:
            return await RepositoryRepository(session).get_earliest_sync()

    async def counts(self) -> dict[EntityKind, int]:
        """Stored record count per entity kind."""
        async with self._session() as session:
            return {
                kind: await self._repository(kind, session).count() for kind in EntityKind
            }
