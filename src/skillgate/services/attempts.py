"""Attempt lifecycle: evaluate, record, rate, admit, award."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

import structlog
from sqlalchemy.exc import SQLAlchemyError

from skillgate.core.config import EngineConfig
from skillgate.core.errors import (
    AttemptPersistenceError,
    ChallengeNotFoundError,
    InvalidSubmissionError,
)
from skillgate.models import Attempt, AttemptStatus, Award, Challenge, is_synthetic_challenge_id
from skillgate.ranking import RatingState, update_ratings
from skillgate.services.admission import AdmissionService
from skillgate.services.awards import ChampionCheck
from skillgate.services.encouragement import encouragement_message
from skillgate.services.evaluation import (
    EvaluationContext,
    EvaluatorChain,
    Verdict,
    normalize_language,
)
from skillgate.services.notifications import NotificationDispatcher
from skillgate.services.storage import AttemptRepository, ChallengeCatalog, RatingRepository

logger = structlog.get_logger()

UNRECORDED_FEEDBACK = "Your submission was evaluated but the result could not be recorded."


class AttemptKind(StrEnum):
    """Why the user is submitting."""

    RECRUITMENT = "recruitment"
    PRACTICE = "practice"


@dataclass(frozen=True)
class SubmissionRequest:
    """One code submission.

    Attributes:
        user_id: Authenticated submitter.
        content: Submitted source code.
        challenge_id: Catalog id, a ``temp_`` id for a transient challenge, or None.
        project_id: Project the attempt is for, if any.
        language: Language for transient challenges. Catalog challenges use their own.
        kind: Recruitment attempts admit the user on pass.
        project_title: Project name used in supportive messages.
    """

    user_id: str
    content: str
    challenge_id: str | None = None
    project_id: str | None = None
    language: str | None = None
    kind: AttemptKind = AttemptKind.PRACTICE
    project_title: str | None = None


@dataclass
class AttemptOutcome:
    """Everything that happened while processing one submission."""

    attempt: Attempt
    verdict: Verdict
    admitted: bool = False
    award: Award | None = None
    rating_updated: bool = False
    warnings: list[str] = field(default_factory=list)
    encouragement: str | None = None

    @property
    def passed(self) -> bool:
        return self.attempt.passed


class AttemptLifecycleController:
    """Run a submission from ``evaluating`` to a terminal state.

    Only preconditions and a failure to record the attempt itself reach
    the caller. Rating, admission, award and messaging problems are logged
    and reported in ``AttemptOutcome.warnings``.
    """

    def __init__(
        self,
        config: EngineConfig,
        catalog: ChallengeCatalog,
        attempts: AttemptRepository,
        ratings: RatingRepository,
        chain: EvaluatorChain,
        admission: AdmissionService,
        champion: ChampionCheck,
        notifications: NotificationDispatcher,
    ) -> None:
        self.config = config
        self.catalog = catalog
        self.attempts = attempts
        self.ratings = ratings
        self.chain = chain
        self.admission = admission
        self.champion = champion
        self.notifications = notifications

    async def _validate(self, request: SubmissionRequest) -> Challenge | None:
        min_length = self.config.evaluation.min_content_length
        if not request.content or len(request.content.strip()) < min_length:
            raise InvalidSubmissionError(
                "Submission content is missing or too short",
                f"Submit at least {min_length} characters of code.",
            )
        if request.kind is AttemptKind.RECRUITMENT and not request.project_id:
            raise InvalidSubmissionError("Recruitment attempts require a project")

        if not request.challenge_id or is_synthetic_challenge_id(request.challenge_id):
            return None
        challenge = await self.catalog.get(request.challenge_id)
        if challenge is None:
            raise ChallengeNotFoundError(request.challenge_id)
        return challenge

    async def submit(self, request: SubmissionRequest) -> AttemptOutcome:
        """Process a submission end to end.

        Args:
            request: The submission.

        Returns:
            AttemptOutcome with the terminal attempt and side effects.

        Raises:
            InvalidSubmissionError: If content or scope is invalid.
            ChallengeNotFoundError: If the challenge id is unknown.
            AttemptPersistenceError: If the attempt could not be recorded.
        """
        challenge = await self._validate(request)
        raw_language = challenge.language if challenge else request.language
        language = normalize_language(raw_language) if raw_language else None

        attempt = await self._create(request, challenge, language)
        log = logger.bind(attempt_id=attempt.id, user_id=request.user_id)
        log.info(
            "attempt_started", challenge_id=attempt.challenge_id, project_id=request.project_id
        )

        verdict = await self.chain.evaluate(
            request.content,
            EvaluationContext(
                language=language,
                difficulty=challenge.difficulty if challenge else None,
                title=challenge.title if challenge else None,
                test_spec=challenge.test_spec if challenge else None,
                project_id=request.project_id,
            ),
        )

        attempt = await self._finalize(attempt.id, verdict)
        log.info(
            "attempt_finished",
            status=attempt.status,
            score=verdict.score,
            evaluator=verdict.evaluator_used,
        )
        outcome = AttemptOutcome(attempt=attempt, verdict=verdict)

        if challenge is not None and language:
            await self._update_ratings(outcome, request.user_id, language, challenge)

        if verdict.passed and request.project_id:
            if request.kind is AttemptKind.RECRUITMENT:
                await self._admit(outcome, request)
            if language:
                await self._check_award(outcome, request, language)

        if not verdict.passed and request.project_id:
            await self._encourage(outcome, request)

        return outcome

    async def _create(
        self,
        request: SubmissionRequest,
        challenge: Challenge | None,
        language: str | None,
    ) -> Attempt:
        attempt = Attempt(
            user_id=request.user_id,
            challenge_id=challenge.id if challenge else None,
            project_id=request.project_id,
            language=language,
            content=request.content,
            status=AttemptStatus.EVALUATING,
        )
        try:
            return await self.attempts.create(attempt)
        except SQLAlchemyError as e:
            logger.error("attempt_create_failed", user_id=request.user_id, error=str(e))
            raise AttemptPersistenceError(f"Could not record attempt: {e}") from e

    async def _finalize(self, attempt_id: str, verdict: Verdict) -> Attempt:
        status = AttemptStatus.PASSED if verdict.passed else AttemptStatus.FAILED
        try:
            attempt = await self.attempts.finalize(
                attempt_id,
                status,
                verdict.score,
                verdict.feedback,
                verdict.evaluator_used,
            )
        except SQLAlchemyError as e:
            logger.error("attempt_finalize_failed", attempt_id=attempt_id, error=str(e))
            await self._abandon(attempt_id)
            raise AttemptPersistenceError(
                f"Could not record attempt outcome: {e}", attempt_id=attempt_id
            ) from e
        if attempt is None:
            logger.error("attempt_already_terminal", attempt_id=attempt_id)
            raise AttemptPersistenceError(
                "Attempt is no longer evaluating", attempt_id=attempt_id
            )
        return attempt

    async def _abandon(self, attempt_id: str) -> None:
        """Leave the attempt failed rather than stuck in ``evaluating``."""
        try:
            await self.attempts.mark_failed(attempt_id, UNRECORDED_FEEDBACK)
        except SQLAlchemyError as e:
            logger.error("attempt_abandon_failed", attempt_id=attempt_id, error=str(e))

    async def _update_ratings(
        self,
        outcome: AttemptOutcome,
        user_id: str,
        language: str,
        challenge: Challenge,
    ) -> None:
        rating_config = self.config.rating
        try:
            user_row = await self.ratings.get_skill_rating(user_id, language)
            challenge_row = await self.ratings.get_challenge_rating(challenge.id)
            user_before = (
                RatingState(user_row.rating, user_row.attempts)
                if user_row
                else RatingState(rating_config.default_rating)
            )
            challenge_before = (
                RatingState(challenge_row.rating, challenge_row.attempts)
                if challenge_row
                else RatingState(rating_config.seed_for(challenge.difficulty))
            )
            update = update_ratings(
                user_before, challenge_before, outcome.verdict.passed, rating_config
            )
            await self.ratings.apply_update(
                user_id, language, challenge.id, user_before, challenge_before, update
            )
        except Exception as e:
            logger.warning("rating_update_failed", attempt_id=outcome.attempt.id, error=str(e))
            outcome.warnings.append(f"Rating update failed: {e}")
            return

        outcome.rating_updated = True
        logger.debug(
            "ratings_updated",
            attempt_id=outcome.attempt.id,
            user_rating=update.user_rating,
            challenge_rating=update.challenge_rating,
            expected=round(update.expected, 3),
        )

    async def _admit(self, outcome: AttemptOutcome, request: SubmissionRequest) -> None:
        project_id = request.project_id
        if project_id is None:  # pragma: no cover
            return
        try:
            result = await self.admission.admit(project_id, request.user_id, outcome.attempt.id)
        except Exception as e:
            logger.warning("admission_failed", attempt_id=outcome.attempt.id, error=str(e))
            outcome.warnings.append(f"Admission failed: {e}")
            return
        outcome.admitted = result.admitted
        if result.created:
            self.notifications.member_admitted(project_id, request.user_id)

    async def _check_award(
        self,
        outcome: AttemptOutcome,
        request: SubmissionRequest,
        language: str,
    ) -> None:
        project_id = request.project_id
        if project_id is None:  # pragma: no cover
            return
        try:
            result = await self.champion.check_and_grant(request.user_id, project_id, language)
        except Exception as e:
            logger.warning("award_check_failed", attempt_id=outcome.attempt.id, error=str(e))
            outcome.warnings.append(f"Award check failed: {e}")
            return
        if result is not None and result.granted and result.award is not None:
            outcome.award = result.award
            self.notifications.award_granted(result.award)

    async def _encourage(self, outcome: AttemptOutcome, request: SubmissionRequest) -> None:
        project_id = request.project_id
        if project_id is None:  # pragma: no cover
            return
        try:
            failed = await self.attempts.count_failed(request.user_id, project_id)
        except SQLAlchemyError as e:
            logger.warning("failed_count_unavailable", attempt_id=outcome.attempt.id, error=str(e))
            outcome.warnings.append(f"Failed-attempt count unavailable: {e}")
            return
        outcome.encouragement = encouragement_message(failed, request.project_title)
