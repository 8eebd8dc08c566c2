"""Read access to the challenge catalog."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sqlmodel import Session, col, or_, select

from skillgate.models import Challenge
from skillgate.services.evaluation.languages import normalize_language

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


@runtime_checkable
class ChallengeCatalog(Protocol):
    """Source of challenge records. The engine never writes through it."""

    async def get(self, challenge_id: str) -> Challenge | None:
        """Get a challenge by id."""
        ...

    async def list_active(self, language: str, project_id: str | None = None) -> list[Challenge]:
        """Active challenges in a language.

        Args:
            language: Normalized language name.
            project_id: When given, generic challenges plus those scoped to
                this project. Otherwise generic challenges only.
        """
        ...


class SQLChallengeCatalog(AsyncRepository):
    """Challenge catalog backed by the ``challenges`` table."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def get(self, challenge_id: str) -> Challenge | None:
        def _get(session: Session) -> Challenge | None:
            return session.get(Challenge, challenge_id)

        return await self._run_session(_get)

    async def list_active(self, language: str, project_id: str | None = None) -> list[Challenge]:
        def _get(session: Session) -> list[Challenge]:
            if project_id:
                scope = or_(
                    col(Challenge.project_id).is_(None),
                    col(Challenge.project_id) == project_id,
                )
            else:
                scope = col(Challenge.project_id).is_(None)
            statement = (
                select(Challenge)
                .where(Challenge.language == language, col(Challenge.is_active).is_(True), scope)
                .order_by(col(Challenge.id))
            )
            return list(session.exec(statement).all())

        return await self._run_session(_get)

    async def upsert_many(self, challenges: Iterable[Challenge]) -> int:
        """Load challenges into the catalog, replacing rows with the same id.

        Used by local tooling. The engine itself only reads.
        """
        items = list(challenges)

        def _save(session: Session) -> int:
            for challenge in items:
                challenge.language = normalize_language(challenge.language)
                session.merge(challenge)
            session.commit()
            return len(items)

        return await self._run_session(_save)
