"""Tests for evaluator chain degradation."""

import pytest

from skillgate.core.config import SandboxConfig
from skillgate.core.errors import EvaluationError, SandboxError
from skillgate.services.evaluation import (
    EvaluationContext,
    Evaluator,
    EvaluatorChain,
    SandboxEvaluator,
    Verdict,
)


class _RaisingEvaluator(Evaluator):
    def __init__(self, name: str = "primary") -> None:
        self.name = name
        self.calls = 0

    async def evaluate(self, content: str, context: EvaluationContext) -> Verdict:
        self.calls += 1
        raise EvaluationError(f"{self.name} is down")


class _FixedEvaluator(Evaluator):
    def __init__(self, name: str, score: int) -> None:
        self.name = name
        self.score = score
        self.calls = 0

    async def evaluate(self, content: str, context: EvaluationContext) -> Verdict:
        self.calls += 1
        return Verdict(self.score, self.score >= 70, "fixed", self.name)


class _SandboxStub(SandboxEvaluator):
    def __init__(self, verdict: Verdict | None = None) -> None:
        super().__init__(SandboxConfig(url="http://sandbox.invalid"))
        self.verdict = verdict
        self.calls = 0

    async def evaluate(self, content: str, context: EvaluationContext) -> Verdict:
        self.calls += 1
        if self.verdict is None:
            raise SandboxError("runner unavailable")
        return self.verdict


CONTEXT = EvaluationContext(language="python")
TESTED_CONTEXT = EvaluationContext(language="python", test_spec={"cases": [[1, 1]]})


class TestEvaluatorChain:
    """Tests for EvaluatorChain."""

    @pytest.mark.asyncio
    async def test_primary_failure_degrades_to_fallback(self, good_python):
        """Test a raising primary evaluator yields a fallback verdict."""
        chain = EvaluatorChain(primary=_RaisingEvaluator())
        verdict = await chain.evaluate(good_python, CONTEXT)

        assert verdict.evaluator_used == "fallback"
        assert verdict.score is not None
        assert verdict.details["degraded_from"] == ["primary: [Evaluation Error] primary is down"]

    @pytest.mark.asyncio
    async def test_low_primary_score_does_not_degrade(self):
        """Test a low score is returned as-is without calling the fallback."""
        fallback = _FixedEvaluator("fallback", 95)
        chain = EvaluatorChain(primary=_FixedEvaluator("primary", 10), fallback=fallback)
        verdict = await chain.evaluate("some code here", CONTEXT)

        assert verdict.evaluator_used == "primary"
        assert verdict.score == 10
        assert not verdict.passed
        assert fallback.calls == 0

    @pytest.mark.asyncio
    async def test_all_evaluators_failing_returns_zero(self):
        """Test the chain reports a zero-score failure instead of raising."""
        chain = EvaluatorChain(
            primary=_RaisingEvaluator("primary"),
            fallback=_RaisingEvaluator("fallback"),
        )
        verdict = await chain.evaluate("some code here", CONTEXT)

        assert verdict.score == 0
        assert not verdict.passed
        assert verdict.evaluator_used == "fallback"
        assert verdict.feedback
        assert len(verdict.details["degraded_from"]) == 2

    @pytest.mark.asyncio
    async def test_sandbox_supersedes_heuristics(self):
        """Test a sandbox verdict is used when the challenge has tests."""
        primary = _FixedEvaluator("primary", 90)
        sandbox = _SandboxStub(Verdict(50, False, "1/2 tests passed.", "sandbox"))
        chain = EvaluatorChain(primary=primary, sandbox=sandbox)

        verdict = await chain.evaluate("some code here", TESTED_CONTEXT)

        assert verdict.evaluator_used == "sandbox"
        assert primary.calls == 0

    @pytest.mark.asyncio
    async def test_sandbox_skipped_without_tests(self):
        """Test challenges without a test spec never reach the sandbox."""
        sandbox = _SandboxStub(Verdict(100, True, "ok", "sandbox"))
        chain = EvaluatorChain(primary=_FixedEvaluator("primary", 80), sandbox=sandbox)

        verdict = await chain.evaluate("some code here", CONTEXT)

        assert verdict.evaluator_used == "primary"
        assert sandbox.calls == 0

    @pytest.mark.asyncio
    async def test_sandbox_failure_falls_through(self):
        """Test a sandbox error falls through to the primary evaluator."""
        chain = EvaluatorChain(primary=_FixedEvaluator("primary", 80), sandbox=_SandboxStub())
        verdict = await chain.evaluate("some code here", TESTED_CONTEXT)

        assert verdict.evaluator_used == "primary"
        assert verdict.details["degraded_from"]
