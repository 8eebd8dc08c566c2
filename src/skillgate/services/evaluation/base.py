"""Evaluator interface and verdict types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

PRIMARY = "primary"
FALLBACK = "fallback"
SANDBOX = "sandbox"


@dataclass(frozen=True)
class EvaluationContext:
    """What an evaluator knows about the challenge being answered."""

    language: str | None = None
    difficulty: str | None = None
    title: str | None = None
    test_spec: dict[str, Any] | None = None
    project_id: str | None = None


@dataclass(frozen=True)
class Verdict:
    """Judgment on one submission.

    Attributes:
        score: Score from 0 to 100.
        passed: Whether the score meets the pass threshold.
        feedback: Human-readable explanation.
        evaluator_used: Tag of the evaluator that produced the verdict.
        details: Evaluator-specific diagnostics.
    """

    score: int
    passed: bool
    feedback: str
    evaluator_used: str
    details: dict[str, Any] = field(default_factory=dict)


class Evaluator(ABC):
    """Abstract base class for code evaluators."""

    name: str = PRIMARY

    @abstractmethod
    async def evaluate(self, content: str, context: EvaluationContext) -> Verdict:
        """Score a submission.

        Args:
            content: Submitted source code.
            context: Challenge information.

        Returns:
            Verdict tagged with this evaluator's name.

        Raises:
            EvaluationError: If the evaluator cannot judge this submission.
        """

    async def close(self) -> None:  # noqa: B027
        """Close any resources. Override if needed."""
