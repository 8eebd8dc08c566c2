"""Exception hierarchy for SkillGate."""

from __future__ import annotations


class SkillGateError(Exception):
    """Base exception with optional suggestion text."""

    label = "Error"

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[{self.label}] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class ConfigurationError(SkillGateError):
    """Base exception for configuration errors."""

    label = "Configuration Error"


class PreconditionError(SkillGateError):
    """Request rejected before any state change."""

    label = "Precondition Failed"


class InvalidSubmissionError(PreconditionError):
    """Submitted content is missing, too short, or the request is malformed."""


class ChallengeNotFoundError(PreconditionError):
    """Error when a challenge id is unknown to the catalog."""

    def __init__(self, challenge_id: str) -> None:
        self.challenge_id = challenge_id
        super().__init__(
            f"Challenge not found: {challenge_id}",
            "Check the challenge id or use a 'temp_' id for a transient challenge.",
        )


class NoCandidatesError(PreconditionError):
    """Error when the selector has no challenge to choose from."""

    def __init__(self, language: str, project_id: str | None = None) -> None:
        self.language = language
        self.project_id = project_id
        scope = f" (project {project_id})" if project_id else ""
        super().__init__(
            f"No active challenges for language '{language}'{scope}",
            "Broaden the scope or add challenges for this language.",
        )


class AttemptPersistenceError(SkillGateError):
    """Fatal error: the attempt record could not be written."""

    label = "Persistence Error"

    def __init__(self, message: str, attempt_id: str | None = None) -> None:
        self.attempt_id = attempt_id
        super().__init__(message)


class EvaluationError(SkillGateError):
    """Raised by an evaluator that cannot produce a verdict."""

    label = "Evaluation Error"


class SandboxError(EvaluationError):
    """Error when the external test runner fails or returns garbage."""
