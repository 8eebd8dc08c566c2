"""Configuration schemas and loading for SkillGate."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

DATABASE_URL_ENV = "SKILLGATE_DATABASE_URL"
DEFAULT_DATABASE_URL = "sqlite:///./data/skillgate.db"


def _default_difficulty_seeds() -> dict[str, int]:
    return {"easy": 1000, "medium": 1200, "hard": 1400, "expert": 1600}


class RatingConfig(BaseModel):
    """Rating engine parameters.

    Attributes:
        default_rating: Seed rating for a user with no history, and for
            challenges with an unknown difficulty tier.
        k_base: Starting K-factor for both sides.
        user_k_floor: Smallest K-factor a user can decay to.
        user_k_step: User attempts needed to shave one point off K.
        challenge_k_floor: Smallest K-factor a challenge can decay to.
        challenge_k_step: Challenge attempts needed to shave one point off K.
        difficulty_seeds: Initial challenge rating per difficulty tier.
    """

    default_rating: int = 1200
    k_base: int = Field(default=32, ge=1)
    user_k_floor: int = Field(default=16, ge=1)
    user_k_step: int = Field(default=5, ge=1)
    challenge_k_floor: int = Field(default=12, ge=1)
    challenge_k_step: int = Field(default=10, ge=1)
    difficulty_seeds: dict[str, int] = Field(default_factory=_default_difficulty_seeds)

    @field_validator("difficulty_seeds")
    @classmethod
    def normalize_tiers(cls, v: dict[str, int]) -> dict[str, int]:
        """Store tier names lowercase so lookups are case-insensitive."""
        return {tier.strip().lower(): rating for tier, rating in v.items()}

    @model_validator(mode="after")
    def validate_floors(self) -> RatingConfig:
        if self.user_k_floor > self.k_base or self.challenge_k_floor > self.k_base:
            msg = "K-factor floors cannot exceed k_base"
            raise ValueError(msg)
        return self

    def seed_for(self, difficulty: str | None) -> int:
        """Initial rating for a challenge of the given difficulty tier."""
        if not difficulty:
            return self.default_rating
        return self.difficulty_seeds.get(difficulty.strip().lower(), self.default_rating)


class EvaluationConfig(BaseModel):
    """Submission evaluation settings."""

    pass_threshold: int = Field(default=70, ge=0, le=100)
    min_content_length: int = Field(default=10, ge=1)


class SandboxConfig(BaseModel):
    """Optional external test runner.

    The sandbox is disabled when ``url`` is unset.
    """

    url: str | None = None
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=1)

    @property
    def enabled(self) -> bool:
        return bool(self.url)


class EngineConfig(BaseModel):
    """Complete engine configuration."""

    database_url: str | None = None
    rating: RatingConfig = Field(default_factory=RatingConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    sandbox: SandboxConfig = Field(default_factory=SandboxConfig)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {v}"
            raise ValueError(msg)
        return level

    def get_database_url(self) -> str:
        """Get database URL from config, then environment, then the default."""
        return self.database_url or os.environ.get(DATABASE_URL_ENV) or DEFAULT_DATABASE_URL


def load_config(path: str | Path) -> EngineConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file.

    Returns:
        Validated EngineConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValidationError: If config is invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data: dict[str, Any] | None = yaml.safe_load(f)

    return EngineConfig.model_validate(data or {})
