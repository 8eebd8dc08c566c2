"""HTTP client for an external test-runner sandbox."""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from skillgate.core.config import SandboxConfig
from skillgate.core.errors import SandboxError

from .base import SANDBOX, EvaluationContext, Evaluator, Verdict

logger = structlog.get_logger()


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, httpx.TransportError)


class SandboxEvaluator(Evaluator):
    """Runs a challenge's tests remotely and scores by the fraction passed.

    The runner receives ``POST {url}/run`` with the language, code and the
    challenge's test specification, and answers with
    ``{"passed": int, "total": int, "output": str}``.
    """

    name = SANDBOX

    def __init__(
        self,
        config: SandboxConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the sandbox client.

        Args:
            config: Sandbox endpoint and retry settings.
            client: Optional preconfigured HTTP client (tests pass a mock transport).
        """
        if not config.url:
            msg = "Sandbox URL is not configured"
            raise SandboxError(msg, "Set sandbox.url in the config file.")
        self.config = config
        self.client = client or httpx.AsyncClient(timeout=config.timeout_seconds)

    def accepts(self, context: EvaluationContext) -> bool:
        """Only challenges that ship a test specification can be run."""
        return bool(context.test_spec)

    async def evaluate(self, content: str, context: EvaluationContext) -> Verdict:
        if not self.accepts(context):
            raise SandboxError("Challenge has no test specification")

        try:
            data = await self._run(content, context)
        except httpx.HTTPError as e:
            raise SandboxError(f"Sandbox request failed: {e}") from e
        except ValueError as e:
            raise SandboxError(f"Sandbox returned invalid JSON: {e}") from e

        passed_tests, total = _parse_counts(data)
        score = round(passed_tests / total * 100)
        passed = passed_tests == total
        feedback = f"{passed_tests}/{total} tests passed."
        if output := data.get("output"):
            feedback += f"\n\n{output}"

        logger.info("sandbox_evaluated", passed_tests=passed_tests, total=total)
        return Verdict(
            score=score,
            passed=passed,
            feedback=feedback,
            evaluator_used=self.name,
            details={"passed_tests": passed_tests, "total_tests": total},
        )

    async def _run(self, content: str, context: EvaluationContext) -> dict[str, Any]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        ):
            with attempt:
                logger.debug("sandbox_call", language=context.language)
                response = await self.client.post(
                    f"{self.config.url.rstrip('/')}/run",
                    json={
                        "language": context.language,
                        "code": content,
                        "tests": context.test_spec,
                    },
                )
                response.raise_for_status()
                return response.json()
        raise SandboxError("Sandbox retries exhausted")  # pragma: no cover

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()


def _parse_counts(data: Any) -> tuple[int, int]:
    if not isinstance(data, dict):
        raise SandboxError("Sandbox response is not a JSON object")
    try:
        passed_tests = int(data["passed"])
        total = int(data["total"])
    except (KeyError, TypeError, ValueError) as e:
        raise SandboxError(f"Malformed sandbox response: {data!r}") from e
    if total <= 0 or not 0 <= passed_tests <= total:
        raise SandboxError(f"Inconsistent sandbox counts: {passed_tests}/{total}")
    return passed_tests, total
