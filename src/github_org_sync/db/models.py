"""SQLAlchemy ORM models for GitHub Org Sync.

Every synced record carries the remote entity's ``github_id`` as a unique
natural key; upserts target it. Repositories and pull requests also carry a
``last_synced_at`` cursor that is only advanced once the entity and its
children have been processed.

SQLite stores datetimes without an offset; all values written are UTC and
``as_utc`` restores the offset on read.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to a naive datetime read back from SQLite."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# ------------------------------------------------------------------------------
# Repository model
# ------------------------------------------------------------------------------
class Repository(Base):
    """Public repository of the synced organization."""

    __tablename__ = "repositories"

    id: Mapped[int] = mapped_column(primary_key=True)
    github_id: Mapped[int] = mapped_column(unique=True)
    name: Mapped[str] = mapped_column(String(100))  # e.g., "next.js"
    full_name: Mapped[str] = mapped_column(String(200), index=True)  # "vercel/next.js"
    url: Mapped[str] = mapped_column(String(500))
    private: Mapped[bool] = mapped_column(default=False)
    archived: Mapped[bool] = mapped_column(default=False)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    pull_requests: Mapped[list["PullRequest"]] = relationship(
        back_populates="repository",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Repository(id={self.id}, full_name='{self.full_name}')>"


# ------------------------------------------------------------------------------
# PullRequest model
# ------------------------------------------------------------------------------
class PullRequest(Base):
    """GitHub pull request with detail stats."""

    __tablename__ = "pull_requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    github_id: Mapped[int] = mapped_column(unique=True)
    repository_id: Mapped[int] = mapped_column(ForeignKey("repositories.id", ondelete="CASCADE"))

    number: Mapped[int] = mapped_column()
    title: Mapped[str] = mapped_column(String(500))
    state: Mapped[str] = mapped_column(String(20))  # open, closed
    author_login: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Remote timestamps
    pr_updated_at: Mapped[datetime] = mapped_column(DateTime)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    merged_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Numeric stats (detail endpoint only)
    additions: Mapped[int] = mapped_column(default=0)
    deletions: Mapped[int] = mapped_column(default=0)
    changed_files: Mapped[int] = mapped_column(default=0)
    commits_count: Mapped[int] = mapped_column(default=0)

    # Null until the PR and its reviews were fully processed once
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    repository: Mapped["Repository"] = relationship(back_populates="pull_requests")
    reviews: Mapped[list["Review"]] = relationship(
        back_populates="pull_request",
        cascade="all, delete-orphan",
    )

    # Unique constraint: one PR number per repo
    __table_args__ = (UniqueConstraint("repository_id", "number", name="uq_repo_pr_number"),)

    def __repr__(self) -> str:
        return f"<PullRequest(id={self.id}, repo='{self.repository_id}', number={self.number})>"

    @property
    def is_merged(self) -> bool:
        return self.merged_at is not None


# ------------------------------------------------------------------------------
# Review model
# ------------------------------------------------------------------------------
class Review(Base):
    """Review left on a pull request."""

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(primary_key=True)
    github_id: Mapped[int] = mapped_column(unique=True)
    pull_request_id: Mapped[int] = mapped_column(
        ForeignKey("pull_requests.id", ondelete="CASCADE")
    )
    author_login: Mapped[str] = mapped_column(String(100))
    state: Mapped[str] = mapped_column(String(30))  # APPROVED, CHANGES_REQUESTED, ...
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    pull_request: Mapped["PullRequest"] = relationship(back_populates="reviews")

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, pr='{self.pull_request_id}', state='{self.state}')>"


# ------------------------------------------------------------------------------
# User model
# ------------------------------------------------------------------------------
class User(Base):
    """PR author or reviewer."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    github_id: Mapped[int] = mapped_column(unique=True)
    login: Mapped[str] = mapped_column(String(100), index=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    html_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    user_type: Mapped[str] = mapped_column(String(20), default="User")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<User(id={self.id}, login='{self.login}')>"
