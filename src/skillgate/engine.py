"""SkillEngine: the public entry point for submissions, selection and ratings."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from skillgate.core.config import EngineConfig
from skillgate.core.errors import ChallengeNotFoundError
from skillgate.models import Attempt, Award, Challenge, ChallengeRating, SkillRating
from skillgate.services.admission import AdmissionService
from skillgate.services.attempts import (
    AttemptKind,
    AttemptLifecycleController,
    AttemptOutcome,
    SubmissionRequest,
)
from skillgate.services.awards import AwardLedger, ChampionCheck
from skillgate.services.encouragement import encouragement_message
from skillgate.services.evaluation import (
    Evaluator,
    EvaluatorChain,
    SandboxEvaluator,
    normalize_language,
)
from skillgate.services.notifications import NotificationDispatcher, Notifier
from skillgate.services.selection import ChallengeSelector
from skillgate.services.storage import (
    AttemptRepository,
    AwardRepository,
    ChallengeCatalog,
    MembershipRepository,
    RatingRepository,
    SQLChallengeCatalog,
    create_db_engine,
    init_db,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine


ALREADY_MEMBER = "already_member"


@dataclass(frozen=True)
class AttemptEligibility:
    """Whether a user may attempt a project's challenge."""

    can_attempt: bool
    reason: str | None
    failed_attempts: int
    encouragement: str | None


class SkillEngine:
    """Wires storage, evaluators and services into the public operations.

    Example:
        engine = SkillEngine(EngineConfig(database_url="sqlite:///skills.db"))
        await engine.init_db()
        outcome = await engine.submit_attempt("u1", code, challenge_id="c1")
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        db_engine: Engine | None = None,
        catalog: ChallengeCatalog | None = None,
        notifier: Notifier | None = None,
        primary: Evaluator | None = None,
        fallback: Evaluator | None = None,
    ) -> None:
        """Build the engine.

        Args:
            config: Engine configuration (defaults when omitted).
            db_engine: SQLAlchemy engine. Created from the config when omitted.
            catalog: Challenge source. Defaults to the ``challenges`` table.
            notifier: Receiver for award and admission events.
            primary: Override for the primary evaluator.
            fallback: Override for the fallback evaluator.
        """
        self.config = config or EngineConfig()
        self.db_engine = db_engine or create_db_engine(self.config.get_database_url())

        self.challenges = SQLChallengeCatalog(self.db_engine)
        self.catalog: ChallengeCatalog = catalog or self.challenges
        self.ratings = RatingRepository(self.db_engine)
        self.attempts = AttemptRepository(self.db_engine)
        self.memberships = MembershipRepository(self.db_engine)
        self.awards = AwardRepository(self.db_engine)

        threshold = self.config.evaluation.pass_threshold
        sandbox = SandboxEvaluator(self.config.sandbox) if self.config.sandbox.enabled else None
        self.chain = EvaluatorChain(primary, fallback, sandbox, pass_threshold=threshold)

        self.selector = ChallengeSelector(self.catalog, self.ratings, self.config.rating)
        self.admission = AdmissionService(self.memberships)
        self.ledger = AwardLedger(self.awards)
        self.champion = ChampionCheck(self.catalog, self.attempts, self.ledger)
        self.notifications = NotificationDispatcher(notifier)
        self.controller = AttemptLifecycleController(
            self.config,
            self.catalog,
            self.attempts,
            self.ratings,
            self.chain,
            self.admission,
            self.champion,
            self.notifications,
        )

    async def init_db(self) -> None:
        """Create tables if they don't exist."""
        await asyncio.to_thread(init_db, self.db_engine)

    async def close(self) -> None:
        """Flush notifications and release HTTP and database resources."""
        await self.notifications.drain()
        await self.chain.close()
        self.db_engine.dispose()

    async def submit_attempt(
        self,
        user_id: str,
        content: str,
        challenge_id: str | None = None,
        project_id: str | None = None,
        language: str | None = None,
        kind: AttemptKind = AttemptKind.PRACTICE,
        project_title: str | None = None,
    ) -> AttemptOutcome:
        """Submit code for a challenge. See ``AttemptLifecycleController.submit``."""
        request = SubmissionRequest(
            user_id=user_id,
            content=content,
            challenge_id=challenge_id,
            project_id=project_id,
            language=language,
            kind=kind,
            project_title=project_title,
        )
        return await self.controller.submit(request)

    async def next_challenge(
        self,
        user_id: str,
        language: str,
        project_id: str | None = None,
    ) -> Challenge:
        """Recommend the active challenge closest to the user's rating.

        Raises:
            NoCandidatesError: If no active challenge is in scope.
        """
        match = await self.selector.next_challenge(user_id, language, project_id)
        return match.challenge

    async def get_skill_rating(self, user_id: str, language: str) -> SkillRating:
        """User's rating in a language. Unrated users get an unsaved default row."""
        language = normalize_language(language)
        row = await self.ratings.get_skill_rating(user_id, language)
        if row is not None:
            return row
        return SkillRating(
            user_id=user_id,
            language=language,
            rating=self.config.rating.default_rating,
            attempts=0,
        )

    async def get_challenge_rating(self, challenge_id: str) -> ChallengeRating:
        """Challenge rating, or its difficulty seed when it has never been rated.

        Raises:
            ChallengeNotFoundError: If the challenge is neither rated nor in the catalog.
        """
        row = await self.ratings.get_challenge_rating(challenge_id)
        if row is not None:
            return row
        challenge = await self.catalog.get(challenge_id)
        if challenge is None:
            raise ChallengeNotFoundError(challenge_id)
        return ChallengeRating(
            challenge_id=challenge_id,
            rating=self.config.rating.seed_for(challenge.difficulty),
            attempts=0,
            pass_count=0,
        )

    async def list_skill_ratings(self, user_id: str) -> list[SkillRating]:
        return await self.ratings.list_skill_ratings(user_id)

    async def failed_attempt_count(self, user_id: str, project_id: str) -> int:
        return await self.attempts.count_failed(user_id, project_id)

    async def encouragement(
        self,
        user_id: str,
        project_id: str,
        project_title: str | None = None,
    ) -> str | None:
        """Supportive message for a user's failed-attempt count, if any."""
        failed = await self.failed_attempt_count(user_id, project_id)
        return encouragement_message(failed, project_title)

    async def can_attempt(
        self,
        user_id: str,
        project_id: str,
        project_title: str | None = None,
    ) -> AttemptEligibility:
        """Check whether the user may attempt the project's recruitment challenge."""
        failed = await self.failed_attempt_count(user_id, project_id)
        if await self.admission.is_member(project_id, user_id):
            return AttemptEligibility(
                can_attempt=False,
                reason=ALREADY_MEMBER,
                failed_attempts=failed,
                encouragement=None,
            )
        return AttemptEligibility(
            can_attempt=True,
            reason=None,
            failed_attempts=failed,
            encouragement=encouragement_message(failed, project_title),
        )

    async def user_stats(self, user_id: str) -> dict[str, Any]:
        return await self.attempts.user_stats(user_id)

    async def get_attempt(self, attempt_id: str, user_id: str) -> Attempt | None:
        """Get an attempt owned by the user. Other users' attempts read as missing."""
        attempt = await self.attempts.get(attempt_id)
        if attempt is None or attempt.user_id != user_id:
            return None
        return attempt

    async def list_awards(self, user_id: str) -> list[Award]:
        return await self.awards.list_for_user(user_id)
