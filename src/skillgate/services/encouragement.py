"""Supportive messages for users who keep failing a project's challenge."""

from __future__ import annotations

FIRST_THRESHOLD = 7
SECOND_THRESHOLD = 10


def encouragement_message(failed_attempts: int, project_title: str | None = None) -> str | None:
    """Message for a failed-attempt count, or None below the first threshold.

    Args:
        failed_attempts: Failed attempts by the user for the project.
        project_title: Name shown in the message. Defaults to "this project".
    """
    title = project_title or "this project"
    if failed_attempts >= SECOND_THRESHOLD:
        return (
            f'You\'ve tried {failed_attempts} times to join "{title}". '
            "It's completely okay to take a break and come back stronger! "
            "Consider exploring beginner-friendly resources or trying a different "
            "project that matches your current skill level. "
            "Remember, every expert was once a beginner!"
        )
    if failed_attempts >= FIRST_THRESHOLD:
        return (
            f'It seems like you\'re having a hard time entering the "{title}" project '
            "and answering the challenge. Don't worry, coding challenges can be tricky! "
            "Consider reviewing the requirements again, or perhaps this project might be "
            "more advanced than your current skill level. Keep practicing and you'll get there!"
        )
    return None
