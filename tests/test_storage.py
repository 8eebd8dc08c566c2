"""Tests for the SQL repositories."""

import asyncio

import pytest

from skillgate.models import Attempt, AttemptStatus, Challenge
from skillgate.ranking import RatingState, update_ratings
from skillgate.services.storage import (
    AttemptRepository,
    RatingRepository,
    SQLChallengeCatalog,
)


class TestRatingRepository:
    """Tests for atomic rating upserts."""

    @pytest.mark.asyncio
    async def test_first_update_creates_rows(self, db_engine):
        """Test the first outcome inserts both rating rows."""
        repo = RatingRepository(db_engine)
        user, challenge = RatingState(1200), RatingState(1400)
        update = update_ratings(user, challenge, passed=True)

        await repo.apply_update("alice", "python", "py-hard", user, challenge, update)

        skill = await repo.get_skill_rating("alice", "python")
        rated = await repo.get_challenge_rating("py-hard")
        assert (skill.rating, skill.attempts) == (1224, 1)
        assert (rated.rating, rated.attempts, rated.pass_count) == (1376, 1, 1)

    @pytest.mark.asyncio
    async def test_fail_does_not_count_pass(self, db_engine):
        """Test a failed outcome leaves pass_count unchanged."""
        repo = RatingRepository(db_engine)
        user, challenge = RatingState(1200), RatingState(1200)
        await repo.apply_update(
            "alice", "python", "py-med", user, challenge, update_ratings(user, challenge, False)
        )

        rated = await repo.get_challenge_rating("py-med")
        assert rated.attempts == 1
        assert rated.pass_count == 0

    @pytest.mark.asyncio
    async def test_concurrent_updates_are_not_lost(self, db_engine):
        """Test updates computed from the same stale read all land."""
        repo = RatingRepository(db_engine)
        user, challenge = RatingState(1200), RatingState(1400)
        update = update_ratings(user, challenge, passed=True)
        n = 10

        await asyncio.gather(
            *[
                repo.apply_update("alice", "python", "py-hard", user, challenge, update)
                for _ in range(n)
            ]
        )

        skill = await repo.get_skill_rating("alice", "python")
        rated = await repo.get_challenge_rating("py-hard")
        assert skill.attempts == n
        assert skill.rating == 1200 + n * 24
        assert rated.attempts == n
        assert rated.pass_count == n
        assert rated.rating == 1400 - n * 24

    @pytest.mark.asyncio
    async def test_list_and_bulk_lookup(self, db_engine):
        """Test listing a user's ratings and looking up challenge ratings."""
        repo = RatingRepository(db_engine)
        for language, challenge_id in (("python", "py-1"), ("go", "go-1")):
            user, challenge = RatingState(1200), RatingState(1200)
            await repo.apply_update(
                "alice", language, challenge_id, user, challenge,
                update_ratings(user, challenge, language == "python"),
            )  # fmt: skip

        ratings = await repo.list_skill_ratings("alice")
        assert [r.language for r in ratings] == ["python", "go"]
        assert await repo.get_challenge_ratings(["py-1", "missing"]) == {"py-1": 1184}
        assert await repo.get_challenge_ratings([]) == {}


class TestAttemptRepository:
    """Tests for attempt persistence."""

    @pytest.mark.asyncio
    async def test_finalize_only_once(self, db_engine):
        """Test a terminal attempt cannot transition again."""
        repo = AttemptRepository(db_engine)
        attempt = await repo.create(Attempt(user_id="alice", content="print('hello')"))

        first = await repo.finalize(attempt.id, AttemptStatus.PASSED, 90, "good", "primary")
        second = await repo.finalize(attempt.id, AttemptStatus.FAILED, 0, "bad", "fallback")

        assert first is not None
        assert first.status == AttemptStatus.PASSED
        assert first.completed_at is not None
        assert second is None
        stored = await repo.get(attempt.id)
        assert stored.score == 90

    @pytest.mark.asyncio
    async def test_mark_failed(self, db_engine):
        """Test an evaluating attempt can be closed as failed, a terminal one cannot."""
        repo = AttemptRepository(db_engine)
        open_attempt = await repo.create(Attempt(user_id="alice", content="print('hello')"))
        done = await repo.create(Attempt(user_id="alice", content="print('hello')"))
        await repo.finalize(done.id, AttemptStatus.PASSED, 90, "good", "primary")

        failed = await repo.mark_failed(open_attempt.id, "not recorded")

        assert failed is not None
        assert failed.status == AttemptStatus.FAILED
        assert (failed.score, failed.feedback) == (0, "not recorded")
        assert failed.completed_at is not None
        assert await repo.mark_failed(done.id, "not recorded") is None
        assert (await repo.get(done.id)).status == AttemptStatus.PASSED

    @pytest.mark.asyncio
    async def test_counts_and_stats(self, db_engine):
        """Test failed counts, passed challenges and stats."""
        repo = AttemptRepository(db_engine)
        outcomes = [
            ("c1", AttemptStatus.FAILED, 20),
            ("c1", AttemptStatus.PASSED, 80),
            ("c2", AttemptStatus.FAILED, 30),
        ]
        for challenge_id, status, score in outcomes:
            attempt = await repo.create(
                Attempt(
                    user_id="alice", challenge_id=challenge_id, project_id="p1", content="x" * 20
                )
            )
            await repo.finalize(attempt.id, status, score, "", "primary")
        await repo.create(Attempt(user_id="alice", content="still running"))

        assert await repo.count_failed("alice", "p1") == 2
        assert await repo.count_failed("alice", "p2") == 0
        assert await repo.passed_challenge_ids("alice", "p1") == {"c1"}

        stats = await repo.user_stats("alice")
        assert stats == {
            "total_attempts": 4,
            "passed": 1,
            "failed": 2,
            "evaluating": 1,
            "average_score": 32,
        }

    @pytest.mark.asyncio
    async def test_stats_for_unknown_user(self, db_engine):
        """Test stats for a user without attempts are zero."""
        stats = await AttemptRepository(db_engine).user_stats("nobody")
        assert stats["total_attempts"] == 0
        assert stats["average_score"] == 0


class TestSQLChallengeCatalog:
    """Tests for the challenge catalog."""

    @pytest.mark.asyncio
    async def test_list_active_scopes(self, db_engine):
        """Test generic challenges are always in scope, project ones only for that project."""
        catalog = SQLChallengeCatalog(db_engine)
        await catalog.upsert_many(
            [
                Challenge(id="g1", language="Python", difficulty="easy"),
                Challenge(id="p1-only", language="python", project_id="p1"),
                Challenge(id="p2-only", language="python", project_id="p2"),
                Challenge(id="retired", language="python", is_active=False),
                Challenge(id="js", language="javascript"),
            ]
        )

        generic = await catalog.list_active("python")
        scoped = await catalog.list_active("python", "p1")

        assert [c.id for c in generic] == ["g1"]
        assert [c.id for c in scoped] == ["g1", "p1-only"]
        assert (await catalog.get("g1")).language == "python"
        assert await catalog.get("nope") is None
