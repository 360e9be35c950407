"""Database module for GitHub Org Sync."""

from github_org_sync.db.engine import (
    create_engine,
    create_engine_from_settings,
    create_session_factory,
    create_tables,
    drop_tables,
)
from github_org_sync.db.gateway import EntityKind, PersistenceGateway
from github_org_sync.db.models import (
    Base,
    PullRequest,
    Repository,
    Review,
    User,
    as_utc,
)
from github_org_sync.db.repositories import (
    BaseRepository,
    PullRequestRepository,
    RepositoryRepository,
    ReviewRepository,
    UserRepository,
)

__all__ = [
    # Models
    "Base",
    "PullRequest",
    "Repository",
    "Review",
    "User",
    "as_utc",
    # Engine
    "create_engine",
    "create_engine_from_settings",
    "create_session_factory",
    "create_tables",
    "drop_tables",
    # Gateway
    "EntityKind",
    "PersistenceGateway",
    # Repositories
    "BaseRepository",
    "PullRequestRepository",
    "RepositoryRepository",
    "ReviewRepository",
    "UserRepository",
]
