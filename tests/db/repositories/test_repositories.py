"""Tests for the keyed-upsert repositories."""

from github_org_sync.db.repositories import (
    PullRequestRepository,
    RepositoryRepository,
    ReviewRepository,
    UserRepository,
)
from tests.conftest import NOW, T1, T2, T3


def repo_fields(name: str = "next.js", **overrides):
    fields = {
        "name": name,
        "full_name": f"vercel/{name}",
        "url": f"https://github.com/vercel/{name}",
        "private": False,
        "archived": False,
    }
    fields.update(overrides)
    return fields


def pr_fields(repository_id: int, number: int = 1, **overrides):
    fields = {
        "repository_id": repository_id,
        "number": number,
        "title": f"PR {number}",
        "state": "open",
        "author_login": "octocat",
        "pr_updated_at": T2,
    }
    fields.update(overrides)
    return fields


class TestBaseUpsert:
    async def test_creates_new_record(self, db_session):
        repos = RepositoryRepository(db_session)

        repo, created = await repos.upsert(101, repo_fields())

        assert created is True
        assert repo.github_id == 101
        assert repo.full_name == "vercel/next.js"
        assert await repos.count() == 1

    async def test_same_id_twice_updates_in_place(self, db_session):
        """Latest fields win and the count is unchanged."""
        repos = RepositoryRepository(db_session)
        first, _ = await repos.upsert(101, repo_fields(archived=False))

        second, created = await repos.upsert(101, repo_fields(archived=True))

        assert created is False
        assert second.id == first.id
        assert second.archived is True
        assert await repos.count() == 1

    async def test_unlisted_columns_keep_stored_values(self, db_session):
        repos = RepositoryRepository(db_session)
        await repos.upsert(101, repo_fields())
        await repos.update_last_synced(101, T3)

        repo, _ = await repos.upsert(101, repo_fields(name="renamed"))

        assert repo.name == "renamed"
        assert repo.last_synced_at == T3.replace(tzinfo=None)

    async def test_get_by_github_id(self, db_session):
        users = UserRepository(db_session)
        await users.upsert(7, {"login": "alice", "user_type": "User"})

        assert (await users.get_by_github_id(7)).login == "alice"
        assert await users.get_by_github_id(8) is None


class TestRepositoryRepository:
    async def test_earliest_sync_ignores_unsynced(self, db_session):
        repos = RepositoryRepository(db_session)
        assert await repos.get_earliest_sync() is None

        await repos.upsert(1, repo_fields("a"))
        await repos.upsert(2, repo_fields("b"))
        await repos.upsert(3, repo_fields("c"))
        await repos.update_last_synced(1, T2)
        await repos.update_last_synced(2, T1)

        assert await repos.get_earliest_sync() == T1.replace(tzinfo=None)

    async def test_update_last_synced_missing(self, db_session):
        assert await RepositoryRepository(db_session).update_last_synced(999, NOW) is None


class TestPullRequestRepository:
    async def test_upsert_starts_without_cursor(self, db_session):
        repo, _ = await RepositoryRepository(db_session).upsert(101, repo_fields())
        prs = PullRequestRepository(db_session)

        await prs.upsert(5001, pr_fields(repo.id, number=42))

        found = await prs.get_by_github_id(5001)
        assert found is not None
        assert found.number == 42
        assert found.last_synced_at is None

    async def test_upsert_keeps_cursor(self, db_session):
        repo, _ = await RepositoryRepository(db_session).upsert(101, repo_fields())
        prs = PullRequestRepository(db_session)
        await prs.upsert(5001, pr_fields(repo.id))
        await prs.update_last_synced(5001, NOW)

        pr, created = await prs.upsert(5001, pr_fields(repo.id, title="retitled"))

        assert created is False
        assert pr.title == "retitled"
        assert pr.last_synced_at == NOW.replace(tzinfo=None)

    async def test_upsert_can_clear_cursor(self, db_session):
        repo, _ = await RepositoryRepository(db_session).upsert(101, repo_fields())
        prs = PullRequestRepository(db_session)
        await prs.upsert(5001, pr_fields(repo.id))
        await prs.update_last_synced(5001, NOW)

        pr, _ = await prs.upsert(
            5001, pr_fields(repo.id, pr_updated_at=T3, last_synced_at=None)
        )

        assert pr.pr_updated_at == T3.replace(tzinfo=None)
        assert pr.last_synced_at is None


class TestReviewRepository:
    async def test_review_state_follows_latest_upsert(self, db_session):
        repo, _ = await RepositoryRepository(db_session).upsert(101, repo_fields())
        pr, _ = await PullRequestRepository(db_session).upsert(5001, pr_fields(repo.id))
        reviews = ReviewRepository(db_session)
        fields = {"pull_request_id": pr.id, "author_login": "a", "submitted_at": T1}

        await reviews.upsert(1, {**fields, "state": "COMMENTED"})
        review, created = await reviews.upsert(1, {**fields, "state": "APPROVED"})

        assert created is False
        assert review.state == "APPROVED"
        assert await reviews.count() == 1
