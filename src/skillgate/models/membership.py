import uuid
from datetime import UTC, datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class MembershipAdmission(SQLModel, table=True):
    """Project membership granted by a passed recruitment attempt."""

    __tablename__ = "membership_admissions"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_admission_project_user"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    project_id: str = Field(index=True)
    user_id: str = Field(index=True)
    role: str = "member"
    status: str = "active"
    attempt_id: str | None = None
    joined_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
