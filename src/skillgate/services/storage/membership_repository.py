"""Database persistence for project membership admissions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlmodel import Session, select

from skillgate.models import MembershipAdmission

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class MembershipRepository(AsyncRepository):
    """Persist and query membership admissions."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def get_active(self, project_id: str, user_id: str) -> MembershipAdmission | None:
        """Get the active admission for a user in a project, if any."""

        def _get(session: Session) -> MembershipAdmission | None:
            statement = select(MembershipAdmission).where(
                MembershipAdmission.project_id == project_id,
                MembershipAdmission.user_id == user_id,
                MembershipAdmission.status == "active",
            )
            return session.exec(statement).first()

        return await self._run_session(_get)

    async def insert(self, admission: MembershipAdmission) -> MembershipAdmission:
        """Insert an admission.

        Raises:
            sqlalchemy.exc.IntegrityError: If the user already has a row
                for this project.
        """

        def _save(session: Session) -> MembershipAdmission:
            session.add(admission)
            session.commit()
            session.refresh(admission)
            return admission

        return await self._run_session(_save)
