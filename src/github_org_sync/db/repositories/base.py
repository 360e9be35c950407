"""Base repository pattern implementation for async SQLAlchemy.

Provides common lookups and the keyed upsert shared by every entity kind.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from github_org_sync.db.models import Base

# Generic type variable for model classes
ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Base repository keyed by the remote ``github_id``.

    The caller owns the session lifecycle (commit, rollback, close).

    Usage:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, User)

        user, created = await UserRepository(session).upsert(7, {"login": "alice"})
    """

    def __init__(self, session: AsyncSession, model_class: type[ModelT]) -> None:
        """Initialize the repository with a session.

        Args:
            session: Async SQLAlchemy session (caller manages lifecycle)
            model_class: The SQLAlchemy model class this repository manages
        """
        self._session = session
        self._model_class = model_class

    # -------------------------------------------------------------------------
    # Common Read Operations
    # -------------------------------------------------------------------------

    async def get_by_github_id(self, github_id: int) -> ModelT | None:
        """Get an entity by its remote identifier."""
        return await self._get_by_field("github_id", github_id)

    async def _get_by_field(self, field_name: str, value: object) -> ModelT | None:
        """Get an entity by a specific field value.

        Args:
            field_name: Name of the model field
            value: Value to match

        Returns:
            First matching entity or None
        """
        stmt = select(self._model_class).where(
            getattr(self._model_class, field_name) == value
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def count(self) -> int:
        """Count total entities of this type."""
        stmt = select(func.count()).select_from(self._model_class)
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    # -------------------------------------------------------------------------
    # Common Write Operations
    # -------------------------------------------------------------------------

    async def upsert(self, github_id: int, fields: dict[str, Any]) -> tuple[ModelT, bool]:
        """Insert or update the entity keyed by ``github_id``.

        Runs as a single INSERT .. ON CONFLICT (github_id) DO UPDATE ..
        RETURNING statement, so a repeated id never adds a row and the latest
        fields win. Columns not in ``fields`` keep their stored values.

        Args:
            github_id: Remote identifier
            fields: Column values to write

        Returns:
            Tuple of (entity, created) where created is True if new
        """
        model = self._model_class
        existing = await self._session.scalar(
            select(model.id).where(model.github_id == github_id)  # type: ignore[attr-defined]
        )

        stmt = sqlite_insert(model).values(github_id=github_id, **fields)
        update_set: dict[str, Any] = {name: stmt.excluded[name] for name in fields}
        if "updated_at" in model.__table__.columns and "updated_at" not in fields:
            update_set["updated_at"] = func.now()
        if not update_set:
            update_set["github_id"] = stmt.excluded.github_id

        stmt = stmt.on_conflict_do_update(
            index_elements=[model.github_id],  # type: ignore[attr-defined]
            set_=update_set,
        ).returning(model)

        result = await self._session.scalars(
            stmt, execution_options={"populate_existing": True}
        )
        return result.one(), existing is None
