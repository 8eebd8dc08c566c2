"""Idempotent project admission."""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy.exc import IntegrityError

from skillgate.models import MembershipAdmission
from skillgate.services.storage import MembershipRepository

logger = structlog.get_logger()


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of an admission request.

    Attributes:
        admitted: The user is a member after the call.
        created: This call inserted the membership row.
    """

    admitted: bool
    created: bool


class AdmissionService:
    """Admit users to projects, absorbing duplicate admissions."""

    def __init__(self, memberships: MembershipRepository) -> None:
        self.memberships = memberships

    async def admit(
        self,
        project_id: str,
        user_id: str,
        attempt_id: str | None = None,
    ) -> AdmissionResult:
        """Insert the membership row, treating a duplicate as success."""
        admission = MembershipAdmission(
            project_id=project_id, user_id=user_id, attempt_id=attempt_id
        )
        try:
            await self.memberships.insert(admission)
        except IntegrityError:
            logger.info("admission_exists", project_id=project_id, user_id=user_id)
            return AdmissionResult(admitted=True, created=False)

        logger.info(
            "member_admitted", project_id=project_id, user_id=user_id, attempt_id=attempt_id
        )
        return AdmissionResult(admitted=True, created=True)

    async def is_member(self, project_id: str, user_id: str) -> bool:
        return await self.memberships.get_active(project_id, user_id) is not None
