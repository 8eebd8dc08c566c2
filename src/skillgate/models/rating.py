from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class SkillRating(SQLModel, table=True):
    """Skill rating for a user in one programming language."""

    __tablename__ = "skill_ratings"

    user_id: str = Field(primary_key=True)
    language: str = Field(primary_key=True)
    rating: int = 1200
    attempts: int = 0
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ChallengeRating(SQLModel, table=True):
    """Difficulty rating for a challenge, learned from attempts."""

    __tablename__ = "challenge_ratings"

    challenge_id: str = Field(primary_key=True)
    rating: int = 1200
    attempts: int = 0
    pass_count: int = 0
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))
