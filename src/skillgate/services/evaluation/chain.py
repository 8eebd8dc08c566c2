"""Evaluator chain that always produces a verdict."""

from __future__ import annotations

import structlog

from .base import FALLBACK, EvaluationContext, Evaluator, Verdict
from .fallback import HeuristicEvaluator
from .primary import LanguageFeatureEvaluator
from .sandbox import SandboxEvaluator

logger = structlog.get_logger()

UNAVAILABLE_FEEDBACK = (
    "Your code was submitted but could not be evaluated. Please try again later."
)


class EvaluatorChain:
    """Try the sandbox, then the primary evaluator, then the fallback.

    A low score is a result, not a failure: the next evaluator only runs
    when the previous one raised. If every evaluator raises, the chain
    returns a zero-score failed verdict tagged ``fallback``.
    """

    def __init__(
        self,
        primary: Evaluator | None = None,
        fallback: Evaluator | None = None,
        sandbox: SandboxEvaluator | None = None,
        pass_threshold: int = 70,
    ) -> None:
        self.primary = primary or LanguageFeatureEvaluator(pass_threshold)
        self.fallback = fallback or HeuristicEvaluator(pass_threshold)
        self.sandbox = sandbox

    def _evaluators(self, context: EvaluationContext) -> list[Evaluator]:
        chain: list[Evaluator] = []
        if self.sandbox is not None and self.sandbox.accepts(context):
            chain.append(self.sandbox)
        chain.extend([self.primary, self.fallback])
        return chain

    async def evaluate(self, content: str, context: EvaluationContext) -> Verdict:
        """Evaluate content, degrading past any evaluator that raises.

        Args:
            content: Submitted source code.
            context: Challenge information.

        Returns:
            Verdict from the first evaluator that succeeded.
        """
        errors: list[str] = []
        for evaluator in self._evaluators(context):
            try:
                verdict = await evaluator.evaluate(content, context)
            except Exception as e:
                logger.warning(
                    "evaluator_failed",
                    evaluator=evaluator.name,
                    error=str(e),
                )
                errors.append(f"{evaluator.name}: {e}")
                continue
            if errors:
                verdict.details.setdefault("degraded_from", errors)
            return verdict

        logger.error("all_evaluators_failed", errors=errors)
        return Verdict(
            score=0,
            passed=False,
            feedback=UNAVAILABLE_FEEDBACK,
            evaluator_used=FALLBACK,
            details={"degraded_from": errors},
        )

    async def close(self) -> None:
        """Close evaluators that hold resources."""
        for evaluator in (self.sandbox, self.primary, self.fallback):
            if evaluator is not None:
                await evaluator.close()
