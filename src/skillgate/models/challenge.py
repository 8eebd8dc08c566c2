from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import Column
from sqlmodel import JSON, Field, SQLModel

SYNTHETIC_CHALLENGE_PREFIX = "temp_"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class Challenge(SQLModel, table=True):
    """A coding challenge from the catalog.

    ``project_id`` is None for generic challenges usable by any project.
    """

    __tablename__ = "challenges"

    id: str = Field(primary_key=True)
    title: str = ""
    language: str = Field(index=True)
    difficulty: str = Difficulty.MEDIUM
    project_id: str | None = Field(default=None, index=True)
    is_active: bool = True
    test_spec: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


def is_synthetic_challenge_id(challenge_id: str | None) -> bool:
    """Transient challenges carry a ``temp_`` id and have no catalog row."""
    return bool(challenge_id) and challenge_id.startswith(SYNTHETIC_CHALLENGE_PREFIX)
