from .attempt import Attempt, AttemptStatus
from .award import CHALLENGE_CHAMPION, Award
from .challenge import Challenge, Difficulty, is_synthetic_challenge_id
from .membership import MembershipAdmission
from .rating import ChallengeRating, SkillRating

__all__ = [
    "CHALLENGE_CHAMPION",
    "Attempt",
    "AttemptStatus",
    "Award",
    "Challenge",
    "ChallengeRating",
    "Difficulty",
    "MembershipAdmission",
    "SkillRating",
    "is_synthetic_challenge_id",
]
