"""Repository for GitHub Repository model operations."""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from github_org_sync.db.models import Repository

from .base import BaseRepository


class RepositoryRepository(BaseRepository[Repository]):
    """Repository for GitHub Repository entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Repository)

    async def get_earliest_sync(self) -> datetime | None:
        """Oldest ``last_synced_at`` across repositories that have one.

        Returns:
            Timestamp or None if no repository was ever synced
        """
        stmt = select(func.min(Repository.last_synced_at))
        result = await self._session.execute(stmt)
        return result.scalar()

    async def update_last_synced(
        self,
        github_id: int,
        synced_at: datetime,
    ) -> Repository | None:
        """Update the last_synced_at timestamp for a repository.

        Args:
            github_id: Remote repository ID
            synced_at: Timestamp of the sync

        Returns:
            Updated repository or None if not found
        """
        repo = await self.get_by_github_id(github_id)
        if repo is None:
            return None

        repo.last_synced_at = synced_at
        await self._session.flush()
        return repo
