"""Rating computations for SkillGate."""

from __future__ import annotations

from skillgate.ranking.elo import (
    MAX_RATING,
    MIN_RATING,
    RatingState,
    RatingUpdate,
    calculate_expected_score,
    challenge_k_factor,
    update_ratings,
    user_k_factor,
)

__all__ = [
    "MAX_RATING",
    "MIN_RATING",
    "RatingState",
    "RatingUpdate",
    "calculate_expected_score",
    "challenge_k_factor",
    "update_ratings",
    "user_k_factor",
]
