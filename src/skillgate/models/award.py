import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Column, UniqueConstraint
from sqlmodel import JSON, Field, SQLModel

CHALLENGE_CHAMPION = "challenge_champion"


class Award(SQLModel, table=True):
    """An achievement granted at most once per (user, project, award_type)."""

    __tablename__ = "awards"
    __table_args__ = (
        UniqueConstraint("user_id", "project_id", "award_type", name="uq_award_user_project_type"),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    project_id: str = Field(index=True)
    award_type: str
    title: str = ""
    description: str = ""
    details: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    granted_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
