"""Tests for supportive messaging thresholds."""

import pytest

from skillgate.services.encouragement import encouragement_message


class TestEncouragementMessage:
    """Tests for encouragement_message."""

    @pytest.mark.parametrize("failed", [0, 1, 6])
    def test_below_threshold(self, failed):
        """Test no message below seven failures."""
        assert encouragement_message(failed, "Chess Engine") is None

    @pytest.mark.parametrize("failed", [7, 8, 9])
    def test_first_threshold(self, failed):
        """Test the first message from seven failures."""
        message = encouragement_message(failed, "Chess Engine")
        assert message.startswith(
            'It seems like you\'re having a hard time entering the "Chess Engine"'
        )

    @pytest.mark.parametrize("failed", [10, 25])
    def test_second_threshold(self, failed):
        """Test the stronger message from ten failures."""
        message = encouragement_message(failed, "Chess Engine")
        assert message.startswith(f'You\'ve tried {failed} times to join "Chess Engine".')
        assert "take a break and come back stronger" in message

    def test_default_title(self):
        """Test a missing title reads as "this project"."""
        assert '"this project"' in encouragement_message(7)
