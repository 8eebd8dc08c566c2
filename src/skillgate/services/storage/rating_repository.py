"""Database persistence for skill and challenge ratings."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlmodel import Session, col, select

from skillgate.models import ChallengeRating, SkillRating
from skillgate.ranking import RatingState, RatingUpdate

from .database import upsert_insert
from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class RatingRepository(AsyncRepository):
    """Read and atomically update rating rows.

    Writes never replace a rating with a value computed from a stale
    read. Each write applies the *change* computed by the rating engine
    with ``INSERT .. ON CONFLICT DO UPDATE SET rating = rating + delta``,
    so two outcomes resolved at the same time both land.
    """

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def get_skill_rating(self, user_id: str, language: str) -> SkillRating | None:
        """Get the rating row for a user and language, if any."""

        def _get(session: Session) -> SkillRating | None:
            return session.get(SkillRating, (user_id, language))

        return await self._run_session(_get)

    async def list_skill_ratings(self, user_id: str) -> list[SkillRating]:
        """Get all of a user's ratings, highest first."""

        def _get(session: Session) -> list[SkillRating]:
            statement = (
                select(SkillRating)
                .where(SkillRating.user_id == user_id)
                .order_by(col(SkillRating.rating).desc())
            )
            return list(session.exec(statement).all())

        return await self._run_session(_get)

    async def get_challenge_rating(self, challenge_id: str) -> ChallengeRating | None:
        """Get the rating row for a challenge, if any."""

        def _get(session: Session) -> ChallengeRating | None:
            return session.get(ChallengeRating, challenge_id)

        return await self._run_session(_get)

    async def get_challenge_ratings(self, challenge_ids: Sequence[str]) -> dict[str, int]:
        """Map challenge id to stored rating for the ids that have one."""
        if not challenge_ids:
            return {}

        def _get(session: Session) -> dict[str, int]:
            statement = select(ChallengeRating).where(
                col(ChallengeRating.challenge_id).in_(list(challenge_ids))
            )
            return {r.challenge_id: r.rating for r in session.exec(statement).all()}

        return await self._run_session(_get)

    async def apply_update(
        self,
        user_id: str,
        language: str,
        challenge_id: str,
        user_before: RatingState,
        challenge_before: RatingState,
        update: RatingUpdate,
    ) -> None:
        """Persist both sides of a rating update in one transaction.

        Args:
            user_id: User the update belongs to.
            language: Language of the user's rating.
            challenge_id: Challenge the update belongs to.
            user_before: User state the update was computed from.
            challenge_before: Challenge state the update was computed from.
            update: Output of the rating engine.
        """
        user_delta = update.user_rating - user_before.rating
        challenge_delta = update.challenge_rating - challenge_before.rating
        now = datetime.now(UTC)

        skill_table = SkillRating.__table__
        challenge_table = ChallengeRating.__table__

        skill_stmt = upsert_insert(self._engine, skill_table).values(
            user_id=user_id,
            language=language,
            rating=update.user_rating,
            attempts=1,
            last_updated=now,
        )
        skill_stmt = skill_stmt.on_conflict_do_update(
            index_elements=[skill_table.c.user_id, skill_table.c.language],
            set_={
                "rating": skill_table.c.rating + user_delta,
                "attempts": skill_table.c.attempts + 1,
                "last_updated": now,
            },
        )

        challenge_stmt = upsert_insert(self._engine, challenge_table).values(
            challenge_id=challenge_id,
            rating=update.challenge_rating,
            attempts=1,
            pass_count=update.pass_increment,
            last_updated=now,
        )
        challenge_stmt = challenge_stmt.on_conflict_do_update(
            index_elements=[challenge_table.c.challenge_id],
            set_={
                "rating": challenge_table.c.rating + challenge_delta,
                "attempts": challenge_table.c.attempts + 1,
                "pass_count": challenge_table.c.pass_count + update.pass_increment,
                "last_updated": now,
            },
        )

        def _save(session: Session) -> None:
            connection = session.connection()
            connection.execute(skill_stmt)
            connection.execute(challenge_stmt)
            session.commit()

        await self._run_session(_save)
