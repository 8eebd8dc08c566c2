import uuid
from datetime import UTC, datetime
from enum import StrEnum

from sqlalchemy import Column, Index, Text
from sqlmodel import Field, SQLModel


class AttemptStatus(StrEnum):
    EVALUATING = "evaluating"
    PASSED = "passed"
    FAILED = "failed"


class Attempt(SQLModel, table=True):
    """One submission of code against a challenge.

    Created in ``evaluating`` and moved exactly once to ``passed`` or
    ``failed``. Immutable afterwards.
    """

    __tablename__ = "attempts"
    __table_args__ = (Index("ix_attempts_user_project_status", "user_id", "project_id", "status"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    challenge_id: str | None = Field(default=None, index=True)
    project_id: str | None = Field(default=None)
    language: str | None = None
    content: str = Field(sa_column=Column(Text, nullable=False))
    score: int | None = None
    status: str = Field(default=AttemptStatus.EVALUATING)
    feedback: str | None = Field(default=None, sa_column=Column(Text))
    evaluator_used: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    @property
    def passed(self) -> bool:
        return self.status == AttemptStatus.PASSED
