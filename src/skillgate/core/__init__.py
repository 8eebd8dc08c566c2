"""Core configuration and errors for SkillGate."""

from skillgate.core.config import (
    EngineConfig,
    EvaluationConfig,
    RatingConfig,
    SandboxConfig,
    load_config,
)
from skillgate.core.errors import (
    AttemptPersistenceError,
    ChallengeNotFoundError,
    ConfigurationError,
    EvaluationError,
    InvalidSubmissionError,
    NoCandidatesError,
    PreconditionError,
    SandboxError,
    SkillGateError,
)

__all__ = [
    "EngineConfig",
    "EvaluationConfig",
    "RatingConfig",
    "SandboxConfig",
    "load_config",
    "AttemptPersistenceError",
    "ChallengeNotFoundError",
    "ConfigurationError",
    "EvaluationError",
    "InvalidSubmissionError",
    "NoCandidatesError",
    "PreconditionError",
    "SandboxError",
    "SkillGateError",
]
