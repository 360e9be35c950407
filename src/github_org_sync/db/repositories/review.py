"""Repository for Review model operations."""

from sqlalchemy.ext.asyncio import AsyncSession

from github_org_sync.db.models import Review

from .base import BaseRepository


class ReviewRepository(BaseRepository[Review]):
    """Repository for Review entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Review)
