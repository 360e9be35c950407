"""Repository for User model operations."""

from sqlalchemy.ext.asyncio import AsyncSession

from github_org_sync.db.models import User

from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)
