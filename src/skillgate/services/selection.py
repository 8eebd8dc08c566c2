"""Adaptive challenge selection."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import structlog

from skillgate.core.config import RatingConfig
from skillgate.core.errors import NoCandidatesError
from skillgate.models import Challenge
from skillgate.services.evaluation import normalize_language
from skillgate.services.storage import ChallengeCatalog, RatingRepository

logger = structlog.get_logger()


@dataclass(frozen=True)
class ChallengeMatch:
    """Selected challenge with the numbers that picked it."""

    challenge: Challenge
    effective_rating: int
    user_rating: int

    @property
    def distance(self) -> int:
        return abs(self.effective_rating - self.user_rating)


def effective_rating(
    challenge: Challenge,
    stored: Mapping[str, int],
    config: RatingConfig,
) -> int:
    """Stored rating for a challenge, else the seed for its difficulty tier."""
    rating = stored.get(challenge.id)
    if rating is not None:
        return rating
    return config.seed_for(challenge.difficulty)


def select_best_match(
    candidates: Sequence[Challenge],
    user_rating: int,
    stored: Mapping[str, int],
    config: RatingConfig | None = None,
) -> ChallengeMatch | None:
    """Pick the candidate whose effective rating is closest to the user's.

    Ties keep the first candidate in iteration order.

    Args:
        candidates: Challenges to choose from.
        user_rating: User's current rating in the language.
        stored: Challenge id to persisted rating, for rated challenges.
        config: Rating parameters used for difficulty seeds.

    Returns:
        The best match, or None if there are no candidates.
    """
    cfg = config or RatingConfig()
    best: ChallengeMatch | None = None
    for challenge in candidates:
        match = ChallengeMatch(challenge, effective_rating(challenge, stored, cfg), user_rating)
        if best is None or match.distance < best.distance:
            best = match
    return best


class ChallengeSelector:
    """Recommend the next challenge for a user in a language."""

    def __init__(
        self,
        catalog: ChallengeCatalog,
        ratings: RatingRepository,
        config: RatingConfig | None = None,
    ) -> None:
        self.catalog = catalog
        self.ratings = ratings
        self.config = config or RatingConfig()

    async def user_rating(self, user_id: str, language: str) -> int:
        row = await self.ratings.get_skill_rating(user_id, language)
        return row.rating if row else self.config.default_rating

    async def next_challenge(
        self,
        user_id: str,
        language: str,
        project_id: str | None = None,
    ) -> ChallengeMatch:
        """Select the active challenge best matched to the user's rating.

        Args:
            user_id: User to select for.
            language: Language of the challenge.
            project_id: Restrict to generic challenges plus this project's.

        Returns:
            The selected challenge and its ratings.

        Raises:
            NoCandidatesError: If no active challenge is in scope.
        """
        language = normalize_language(language)
        candidates = await self.catalog.list_active(language, project_id)
        if not candidates:
            raise NoCandidatesError(language, project_id)

        user_rating = await self.user_rating(user_id, language)
        stored = await self.ratings.get_challenge_ratings([c.id for c in candidates])
        match = select_best_match(candidates, user_rating, stored, self.config)
        if match is None:  # pragma: no cover
            raise NoCandidatesError(language, project_id)

        logger.debug(
            "challenge_selected",
            user_id=user_id,
            language=language,
            challenge_id=match.challenge.id,
            user_rating=user_rating,
            challenge_rating=match.effective_rating,
            candidates=len(candidates),
        )
        return match
