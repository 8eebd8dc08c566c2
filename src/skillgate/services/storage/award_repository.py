"""Database persistence for awards."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlmodel import Session, col, select

from skillgate.models import Award

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class AwardRepository(AsyncRepository):
    """Persist and query award rows."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def get(self, user_id: str, project_id: str, award_type: str) -> Award | None:
        """Get the award row for a key, if it exists."""

        def _get(session: Session) -> Award | None:
            statement = select(Award).where(
                Award.user_id == user_id,
                Award.project_id == project_id,
                Award.award_type == award_type,
            )
            return session.exec(statement).first()

        return await self._run_session(_get)

    async def insert(self, award: Award) -> Award:
        """Insert an award.

        Raises:
            sqlalchemy.exc.IntegrityError: If the key already exists.
        """

        def _save(session: Session) -> Award:
            session.add(award)
            session.commit()
            session.refresh(award)
            return award

        return await self._run_session(_save)

    async def list_for_user(self, user_id: str) -> list[Award]:
        """Get all awards for a user, newest first."""

        def _get(session: Session) -> list[Award]:
            statement = (
                select(Award)
                .where(Award.user_id == user_id)
                .order_by(col(Award.granted_at).desc())
            )
            return list(session.exec(statement).all())

        return await self._run_session(_get)
