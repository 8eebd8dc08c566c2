"""Exactly-once award issuance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError

from skillgate.models import CHALLENGE_CHAMPION, Award
from skillgate.services.storage import AttemptRepository, AwardRepository, ChallengeCatalog

logger = structlog.get_logger()

CHAMPION_TITLE = "Challenge Champion"


@dataclass(frozen=True)
class GrantResult:
    """Outcome of a grant request.

    Attributes:
        granted: This call created the award row.
        award: The award row, whether created now or earlier.
    """

    granted: bool
    award: Award | None


class AwardLedger:
    """Grant each (user, project, award_type) at most once.

    The existence check is only a shortcut. Two concurrent grants can both
    pass it, and the unique constraint on the table settles the race: the
    loser's insert raises ``IntegrityError``, which is reported as
    ``granted=False``.
    """

    def __init__(self, awards: AwardRepository) -> None:
        self.awards = awards

    async def grant(
        self,
        user_id: str,
        project_id: str,
        award_type: str,
        title: str = "",
        description: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> GrantResult:
        """Grant an award unless one already exists for the key.

        Args:
            user_id: Recipient.
            project_id: Project the award belongs to.
            award_type: Award kind, part of the unique key.
            title: Display title.
            description: Display description.
            metadata: Extra details stored with the award.

        Returns:
            GrantResult telling whether this call created the row.
        """
        existing = await self.awards.get(user_id, project_id, award_type)
        if existing is not None:
            return GrantResult(granted=False, award=existing)

        award = Award(
            user_id=user_id,
            project_id=project_id,
            award_type=award_type,
            title=title,
            description=description,
            details=metadata or {},
        )
        try:
            created = await self.awards.insert(award)
        except IntegrityError:
            logger.info(
                "award_exists",
                user_id=user_id,
                project_id=project_id,
                award_type=award_type,
            )
            return GrantResult(
                granted=False,
                award=await self.awards.get(user_id, project_id, award_type),
            )

        logger.info("award_granted", user_id=user_id, project_id=project_id, award_type=award_type)
        return GrantResult(granted=True, award=created)


class ChampionCheck:
    """Grant ``challenge_champion`` once a user has passed every required challenge.

    Required challenges are the active ones in the attempt's language that
    are generic or scoped to the project.
    """

    def __init__(
        self,
        catalog: ChallengeCatalog,
        attempts: AttemptRepository,
        ledger: AwardLedger,
    ) -> None:
        self.catalog = catalog
        self.attempts = attempts
        self.ledger = ledger

    async def progress(self, user_id: str, project_id: str, language: str) -> tuple[int, int]:
        """Return (completed, total) required challenges for the user."""
        required = {c.id for c in await self.catalog.list_active(language, project_id)}
        passed = await self.attempts.passed_challenge_ids(user_id, project_id)
        return len(required & passed), len(required)

    async def check_and_grant(
        self,
        user_id: str,
        project_id: str,
        language: str,
    ) -> GrantResult | None:
        """Grant the champion award if every required challenge is passed.

        Returns:
            The grant result, or None if the user does not yet qualify.
        """
        completed, total = await self.progress(user_id, project_id, language)
        if total == 0 or completed < total:
            logger.debug(
                "champion_not_yet",
                user_id=user_id,
                project_id=project_id,
                completed=completed,
                total=total,
            )
            return None

        return await self.ledger.grant(
            user_id,
            project_id,
            CHALLENGE_CHAMPION,
            title=CHAMPION_TITLE,
            description=f"Completed all {total} {language} challenges for this project.",
            metadata={"language": language, "completed": completed, "total": total},
        )
