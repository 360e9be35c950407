"""Repository for PullRequest model operations."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from github_org_sync.db.models import PullRequest

from .base import BaseRepository


class PullRequestRepository(BaseRepository[PullRequest]):
    """Repository for PullRequest entities.

    The sync clears ``last_synced_at`` whenever it rewrites a pull request;
    the cursor is set again through ``update_last_synced`` once reviews are stored.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PullRequest)

    async def update_last_synced(
        self,
        github_id: int,
        synced_at: datetime,
    ) -> PullRequest | None:
        pr = await self.get_by_github_id(github_id)
        if pr is None:
            return None

        pr.last_synced_at = synced_at
        await self._session.flush()
        return pr
