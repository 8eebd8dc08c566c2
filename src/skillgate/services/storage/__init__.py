from .attempt_repository import AttemptRepository
from .award_repository import AwardRepository
from .challenge_catalog import ChallengeCatalog, SQLChallengeCatalog
from .database import create_db_engine, init_db
from .membership_repository import MembershipRepository
from .rating_repository import RatingRepository

__all__ = [
    "AttemptRepository",
    "AwardRepository",
    "ChallengeCatalog",
    "MembershipRepository",
    "RatingRepository",
    "SQLChallengeCatalog",
    "create_db_engine",
    "init_db",
]
