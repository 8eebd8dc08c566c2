"""Tests for user/challenge rating calculations."""

import pytest

from skillgate.core.config import RatingConfig
from skillgate.ranking.elo import (
    MAX_RATING,
    MIN_RATING,
    RatingState,
    calculate_expected_score,
    challenge_k_factor,
    update_ratings,
    user_k_factor,
)


class TestCalculateExpectedScore:
    """Tests for expected score calculation."""

    def test_equal_ratings(self):
        """Test equal ratings produce 0.5 expected."""
        assert calculate_expected_score(1200, 1200) == pytest.approx(0.5, abs=0.001)

    def test_harder_challenge_lowers_expected(self):
        """Test a higher-rated challenge is less likely to be beaten."""
        expected = calculate_expected_score(1200, 1400)
        # 1 / (1 + 10^(200/400)) ≈ 0.240
        assert expected == pytest.approx(0.240, abs=0.001)

    def test_400_point_difference(self):
        """Test 400 point difference produces ~91% expected."""
        assert calculate_expected_score(1900, 1500) == pytest.approx(0.909, abs=0.01)

    def test_extreme_gap_stays_in_range(self):
        """Test huge rating gaps do not overflow."""
        high = calculate_expected_score(MAX_RATING, MIN_RATING)
        low = calculate_expected_score(MIN_RATING, MAX_RATING)
        assert 0.0 <= low < 0.5 < high <= 1.0


class TestKFactors:
    """Tests for attempt-based K-factor decay."""

    @pytest.mark.parametrize(
        ("attempts", "expected"),
        [(0, 32), (4, 32), (5, 31), (50, 22), (80, 16), (1000, 16)],
    )
    def test_user_k_factor(self, attempts, expected):
        """Test user K drops one point every 5 attempts down to 16."""
        assert user_k_factor(attempts) == expected

    @pytest.mark.parametrize(
        ("attempts", "expected"),
        [(0, 32), (9, 32), (10, 31), (199, 13), (200, 12), (5000, 12)],
    )
    def test_challenge_k_factor(self, attempts, expected):
        """Test challenge K drops one point every 10 attempts down to 12."""
        assert challenge_k_factor(attempts) == expected

    def test_custom_config(self):
        """Test K-factor parameters come from config."""
        config = RatingConfig(k_base=40, user_k_floor=20, user_k_step=2)
        assert user_k_factor(0, config) == 40
        assert user_k_factor(10, config) == 35
        assert user_k_factor(100, config) == 20


class TestUpdateRatings:
    """Tests for the paired user/challenge update."""

    def test_pass_against_hard_challenge(self):
        """Test a new user passing a hard challenge."""
        update = update_ratings(RatingState(1200), RatingState(1400), passed=True)

        assert update.user_rating == 1224
        assert update.challenge_rating == 1376
        assert update.user_k == 32
        assert update.challenge_k == 32

    def test_fail_moves_ratings_the_other_way(self):
        """Test failing lowers the user and raises the challenge."""
        update = update_ratings(RatingState(1200), RatingState(1200), passed=False)

        assert update.user_rating == 1184
        assert update.challenge_rating == 1216

    def test_counters_always_advance(self):
        """Test both attempt counters increase by one on pass and fail."""
        for passed in (True, False):
            update = update_ratings(RatingState(1300, 7), RatingState(1250, 3), passed)
            assert update.user_attempts == 8
            assert update.challenge_attempts == 4

    def test_pass_increment(self):
        """Test pass_count only grows on a pass."""
        assert update_ratings(RatingState(1200), RatingState(1200), True).pass_increment == 1
        assert update_ratings(RatingState(1200), RatingState(1200), False).pass_increment == 0

    def test_half_points_round_up(self):
        """Test a rating landing on .5 rounds up, not to the even neighbour."""
        user_fails = update_ratings(RatingState(1200, 5), RatingState(1200), passed=False)
        assert user_fails.user_k == 31
        assert user_fails.user_rating == 1185  # 1184.5

        challenge_beaten = update_ratings(RatingState(1200), RatingState(1200, 10), passed=True)
        assert challenge_beaten.challenge_k == 31
        assert challenge_beaten.challenge_rating == 1185  # 1184.5

    def test_not_zero_sum(self):
        """Test sides with different K move by different amounts."""
        user = RatingState(1200, attempts=100)  # K=16
        challenge = RatingState(1200, attempts=0)  # K=32
        update = update_ratings(user, challenge, passed=True)

        assert update.user_rating - 1200 == 8
        assert update.challenge_rating - 1200 == -16

    def test_deterministic(self):
        """Test the same inputs give the same outputs."""
        a = update_ratings(RatingState(1234, 12), RatingState(1456, 40), True)
        b = update_ratings(RatingState(1234, 12), RatingState(1456, 40), True)
        assert a == b

    @pytest.mark.parametrize("passed", [True, False])
    @pytest.mark.parametrize(
        ("user_rating", "challenge_rating"),
        [(MAX_RATING, MIN_RATING), (MIN_RATING, MAX_RATING), (MAX_RATING, MAX_RATING)],
    )
    def test_extreme_ratings_stay_representable(self, user_rating, challenge_rating, passed):
        """Test outputs are integers within the stored range."""
        update = update_ratings(RatingState(user_rating), RatingState(challenge_rating), passed)

        for value in (update.user_rating, update.challenge_rating):
            assert isinstance(value, int)
            assert MIN_RATING <= value <= MAX_RATING
