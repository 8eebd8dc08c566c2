"""Tests for idempotent admission and exactly-once awards."""

import asyncio

import pytest

from skillgate.models import CHALLENGE_CHAMPION, Attempt, AttemptStatus, Challenge
from skillgate.services.admission import AdmissionService
from skillgate.services.awards import AwardLedger, ChampionCheck
from skillgate.services.storage import (
    AttemptRepository,
    AwardRepository,
    MembershipRepository,
    SQLChallengeCatalog,
)


class TestAdmissionService:
    """Tests for AdmissionService."""

    @pytest.mark.asyncio
    async def test_second_admission_is_absorbed(self, db_engine, admission_rows):
        """Test admitting twice succeeds and leaves one row."""
        memberships = MembershipRepository(db_engine)
        service = AdmissionService(memberships)

        first = await service.admit("p1", "alice")
        second = await service.admit("p1", "alice")

        assert first.admitted and first.created
        assert second.admitted and not second.created
        assert admission_rows(db_engine, "p1", "alice") == 1

    @pytest.mark.asyncio
    async def test_concurrent_admissions(self, db_engine, admission_rows):
        """Test concurrent admissions all succeed with exactly one row."""
        memberships = MembershipRepository(db_engine)
        service = AdmissionService(memberships)

        results = await asyncio.gather(*[service.admit("p1", "alice") for _ in range(8)])

        assert all(r.admitted for r in results)
        assert sum(r.created for r in results) == 1
        assert admission_rows(db_engine, "p1", "alice") == 1
        assert await service.is_member("p1", "alice")
        assert not await service.is_member("p1", "bob")


class TestAwardLedger:
    """Tests for AwardLedger."""

    @pytest.mark.asyncio
    async def test_grant_once(self, db_engine):
        """Test a second grant for the same key is a no-op."""
        awards = AwardRepository(db_engine)
        ledger = AwardLedger(awards)

        first = await ledger.grant("alice", "p1", CHALLENGE_CHAMPION, title="Champion")
        second = await ledger.grant("alice", "p1", CHALLENGE_CHAMPION, title="Champion")

        assert first.granted
        assert not second.granted
        assert second.award.id == first.award.id

    @pytest.mark.asyncio
    async def test_different_keys_are_independent(self, db_engine):
        """Test different projects and award types each get a row."""
        ledger = AwardLedger(AwardRepository(db_engine))

        results = [
            await ledger.grant("alice", "p1", CHALLENGE_CHAMPION),
            await ledger.grant("alice", "p2", CHALLENGE_CHAMPION),
            await ledger.grant("alice", "p1", "first_pass"),
        ]

        assert all(r.granted for r in results)

    @pytest.mark.asyncio
    async def test_concurrent_grants_leave_one_row(self, db_engine):
        """Test N concurrent grants produce exactly one award row."""
        awards = AwardRepository(db_engine)
        ledger = AwardLedger(awards)

        results = await asyncio.gather(
            *[
                ledger.grant("alice", "p1", CHALLENGE_CHAMPION, metadata={"n": i})
                for i in range(10)
            ]
        )

        assert sum(r.granted for r in results) == 1
        assert all(r.award is not None for r in results)
        assert len(await awards.list_for_user("alice")) == 1


class TestChampionCheck:
    """Tests for the all-required-challenges award check."""

    async def _setup(self, db_engine):
        catalog = SQLChallengeCatalog(db_engine)
        await catalog.upsert_many(
            [
                Challenge(id="generic", language="python"),
                Challenge(id="scoped", language="python", project_id="p1"),
                Challenge(id="other-project", language="python", project_id="p2"),
            ]
        )
        attempts = AttemptRepository(db_engine)
        check = ChampionCheck(catalog, attempts, AwardLedger(AwardRepository(db_engine)))
        return attempts, check

    async def _pass(self, attempts, challenge_id):
        attempt = await attempts.create(
            Attempt(user_id="alice", challenge_id=challenge_id, project_id="p1", content="x" * 20)
        )
        await attempts.finalize(attempt.id, AttemptStatus.PASSED, 90, "", "primary")

    @pytest.mark.asyncio
    async def test_not_granted_until_all_passed(self, db_engine):
        """Test the award waits for every generic and project challenge."""
        attempts, check = await self._setup(db_engine)

        await self._pass(attempts, "generic")
        assert await check.progress("alice", "p1", "python") == (1, 2)
        assert await check.check_and_grant("alice", "p1", "python") is None

        await self._pass(attempts, "scoped")
        result = await check.check_and_grant("alice", "p1", "python")

        assert result is not None
        assert result.granted
        assert result.award.award_type == CHALLENGE_CHAMPION
        assert result.award.details == {"language": "python", "completed": 2, "total": 2}

    @pytest.mark.asyncio
    async def test_no_required_challenges(self, db_engine):
        """Test an empty required set never grants."""
        _, check = await self._setup(db_engine)
        assert await check.check_and_grant("alice", "p1", "rust") is None
