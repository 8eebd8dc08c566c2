"""Database persistence for challenge attempts."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import distinct, func, update
from sqlmodel import Session, col, select

from skillgate.models import Attempt, AttemptStatus

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class AttemptRepository(AsyncRepository):
    """Persist attempts and answer aggregate questions about them."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def create(self, attempt: Attempt) -> Attempt:
        """Insert a new attempt in the evaluating state."""

        def _save(session: Session) -> Attempt:
            session.add(attempt)
            session.commit()
            session.refresh(attempt)
            return attempt

        return await self._run_session(_save)

    async def finalize(
        self,
        attempt_id: str,
        status: AttemptStatus,
        score: int,
        feedback: str,
        evaluator_used: str,
    ) -> Attempt | None:
        """Move an evaluating attempt to its terminal state.

        The update only matches rows still in ``evaluating``, so a second
        call for the same id changes nothing.

        Returns:
            The updated attempt, or None if no evaluating attempt matched.
        """
        return await self._close(
            attempt_id,
            status=status,
            score=score,
            feedback=feedback,
            evaluator_used=evaluator_used,
        )

    async def mark_failed(self, attempt_id: str, feedback: str) -> Attempt | None:
        """Close an evaluating attempt as failed with a zero score.

        Used when the real outcome could not be written.
        """
        return await self._close(
            attempt_id,
            status=AttemptStatus.FAILED,
            score=0,
            feedback=feedback,
        )

    async def _close(self, attempt_id: str, **values: Any) -> Attempt | None:
        def _save(session: Session) -> Attempt | None:
            statement = (
                update(Attempt)
                .where(
                    col(Attempt.id) == attempt_id,
                    col(Attempt.status) == AttemptStatus.EVALUATING,
                )
                .values(completed_at=datetime.now(UTC), **values)
            )
            result = session.connection().execute(statement)
            if result.rowcount != 1:
                session.rollback()
                return None
            session.commit()
            return session.get(Attempt, attempt_id)

        return await self._run_session(_save)

    async def get(self, attempt_id: str) -> Attempt | None:
        """Get an attempt by id."""

        def _get(session: Session) -> Attempt | None:
            return session.get(Attempt, attempt_id)

        return await self._run_session(_get)

    async def count_failed(self, user_id: str, project_id: str) -> int:
        """Count failed attempts by a user for a project."""

        def _count(session: Session) -> int:
            statement = select(func.count()).where(
                Attempt.user_id == user_id,
                Attempt.project_id == project_id,
                Attempt.status == AttemptStatus.FAILED,
            )
            return int(session.exec(statement).one())

        return await self._run_session(_count)

    async def passed_challenge_ids(self, user_id: str, project_id: str) -> set[str]:
        """Distinct challenges a user has passed within a project."""

        def _get(session: Session) -> set[str]:
            statement = select(distinct(Attempt.challenge_id)).where(
                Attempt.user_id == user_id,
                Attempt.project_id == project_id,
                Attempt.status == AttemptStatus.PASSED,
                col(Attempt.challenge_id).is_not(None),
            )
            return {cid for cid in session.exec(statement).all() if cid is not None}

        return await self._run_session(_get)

    async def user_stats(self, user_id: str) -> dict[str, Any]:
        """Summarize a user's attempts by status plus average score."""

        def _get(session: Session) -> dict[str, Any]:
            statement = (
                select(Attempt.status, func.count(), func.coalesce(func.sum(Attempt.score), 0))
                .where(Attempt.user_id == user_id)
                .group_by(Attempt.status)
            )
            counts = {status.value: 0 for status in AttemptStatus}
            total = 0
            score_sum = 0
            for status, count, summed in session.exec(statement).all():
                counts[status] = count
                total += count
                score_sum += summed
            return {
                "total_attempts": total,
                "passed": counts[AttemptStatus.PASSED],
                "failed": counts[AttemptStatus.FAILED],
                "evaluating": counts[AttemptStatus.EVALUATING],
                "average_score": round(score_sum / total) if total else 0,
            }

        return await self._run_session(_get)
