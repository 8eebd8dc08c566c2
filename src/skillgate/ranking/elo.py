"""Elo-style rating updates between users and challenges.

A submission is treated as a match between the user and the challenge.
Both sides move after every outcome, each with its own K-factor:

- users start at K=32 and lose one point every 5 attempts (floor 16)
- challenges start at K=32 and lose one point every 10 attempts (floor 12)

The exchange is deliberately not zero-sum. Challenge difficulty settles
more slowly than user skill.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from skillgate.core.config import RatingConfig

# Ratings are stored in 32-bit signed integer columns.
MIN_RATING = -(2**31)
MAX_RATING = 2**31 - 1

# Beyond this gap the expected score is 0 or 1 to double precision.
_MAX_RATING_GAP = 4000


@dataclass(frozen=True)
class RatingState:
    """Current rating and attempt count for one side of a match."""

    rating: int
    attempts: int = 0


@dataclass(frozen=True)
class RatingUpdate:
    """Result of applying one outcome.

    Attributes:
        expected: Expected score for the user before the outcome.
        user_rating: New user rating.
        user_attempts: New user attempt count.
        user_k: K-factor applied to the user.
        challenge_rating: New challenge rating.
        challenge_attempts: New challenge attempt count.
        challenge_k: K-factor applied to the challenge.
        passed: Outcome that produced this update.
    """

    expected: float
    user_rating: int
    user_attempts: int
    user_k: int
    challenge_rating: int
    challenge_attempts: int
    challenge_k: int
    passed: bool

    @property
    def pass_increment(self) -> int:
        return 1 if self.passed else 0


def calculate_expected_score(user_rating: float, challenge_rating: float) -> float:
    """Calculate the probability that the user beats the challenge.

    Uses the standard Elo formula:
    E = 1 / (1 + 10^((R_challenge - R_user) / 400))

    Args:
        user_rating: Rating of the user.
        challenge_rating: Rating of the challenge.

    Returns:
        Expected score (0.0 to 1.0).
    """
    gap = max(-_MAX_RATING_GAP, min(_MAX_RATING_GAP, challenge_rating - user_rating))
    return 1.0 / (1.0 + 10 ** (gap / 400))


def user_k_factor(attempts: int, config: RatingConfig | None = None) -> int:
    """K-factor for a user with the given number of rated attempts."""
    cfg = config or RatingConfig()
    return max(cfg.user_k_floor, cfg.k_base - max(0, attempts) // cfg.user_k_step)


def challenge_k_factor(attempts: int, config: RatingConfig | None = None) -> int:
    """K-factor for a challenge with the given number of rated attempts."""
    cfg = config or RatingConfig()
    return max(cfg.challenge_k_floor, cfg.k_base - max(0, attempts) // cfg.challenge_k_step)


def _clamp_rating(value: float) -> int:
    if not math.isfinite(value):
        msg = f"Rating is not finite: {value}"
        raise ValueError(msg)
    # Halves round up: 1184.5 -> 1185, -0.5 -> 0.
    return int(max(MIN_RATING, min(MAX_RATING, math.floor(value + 0.5))))


def update_ratings(
    user: RatingState,
    challenge: RatingState,
    passed: bool,
    config: RatingConfig | None = None,
) -> RatingUpdate:
    """Compute new ratings for a user and a challenge after one outcome.

    Args:
        user: Current user rating and attempt count.
        challenge: Current challenge rating and attempt count.
        passed: Whether the user passed the challenge.
        config: Rating parameters (defaults when omitted).

    Returns:
        RatingUpdate with both new ratings and incremented counters.
    """
    cfg = config or RatingConfig()
    expected = calculate_expected_score(user.rating, challenge.rating)
    actual = 1.0 if passed else 0.0

    k_user = user_k_factor(user.attempts, cfg)
    k_challenge = challenge_k_factor(challenge.attempts, cfg)

    new_user = _clamp_rating(user.rating + k_user * (actual - expected))
    new_challenge = _clamp_rating(
        challenge.rating + k_challenge * ((1.0 - actual) - (1.0 - expected))
    )

    return RatingUpdate(
        expected=expected,
        user_rating=new_user,
        user_attempts=user.attempts + 1,
        user_k=k_user,
        challenge_rating=new_challenge,
        challenge_attempts=challenge.attempts + 1,
        challenge_k=k_challenge,
        passed=passed,
    )
