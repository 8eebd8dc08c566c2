"""Language-agnostic heuristic evaluator used when the primary one fails."""

from __future__ import annotations

import re
from typing import Any

from .base import FALLBACK, EvaluationContext, Evaluator, Verdict
from .languages import LANGUAGES, has_programming_features, matches_language, normalize_language

PLACEHOLDER_MARKERS = ("todo", "placeholder", "your code here", "implement", "hello world")
FUNCTION_CLUES = ("function ", "def ", "=>", "class ", "static void main", "fn ")
LOGIC_CLUES = ("if(", "for(", "while(", "switch(", "elif:", "else:", "return ")
_OPERATORS = ("=", "+", "-", "*", "/", "%")
_LEADING_WHITESPACE = re.compile(r"^\s+")


class HeuristicEvaluator(Evaluator):
    """Scores code from surface structure alone.

    The result is tagged ``fallback`` so callers can tell a degraded
    verdict from a primary one.
    """

    name = FALLBACK

    def __init__(self, pass_threshold: int = 70) -> None:
        self.pass_threshold = pass_threshold

    async def evaluate(self, content: str, context: EvaluationContext) -> Verdict:
        score, feedback, details = heuristic_score(content, context.language)
        return Verdict(
            score=score,
            passed=score >= self.pass_threshold,
            feedback=feedback,
            evaluator_used=self.name,
            details=details,
        )


def _has_comments(src: str) -> bool:
    return (
        "//" in src
        or ("/*" in src and "*/" in src)
        or "#" in src
        or src.count('"""') >= 2
        or src.count("'''") >= 2
    )


def _complexity(src: str, lower: str) -> int:
    indicators = (
        "{" in src and "}" in src,
        "[" in src and "]" in src,
        any(op in src for op in _OPERATORS),
        "&&" in src or "||" in src or " and " in lower or " or " in lower,
    )
    return sum(indicators)


def heuristic_score(content: str, language: str | None = None) -> tuple[int, str, dict[str, Any]]:
    """Score code by length, placeholders, clues, and layout.

    Args:
        content: Submitted source code.
        language: Expected language, if known.

    Returns:
        Tuple of (score, feedback, details).
    """
    details: dict[str, Any] = {
        "has_function": False,
        "has_logic": False,
        "has_comments": False,
        "proper_structure": False,
        "language_match": False,
        "complexity": 0,
    }
    trimmed = content.strip()
    if len(trimmed) < 20:
        return (
            0,
            "Your solution is too short. Please provide a more complete implementation.",
            details,
        )

    lower = trimmed.lower()
    if len(trimmed) < 100 and any(marker in lower for marker in PLACEHOLDER_MARKERS):
        return (
            15,
            "Your solution appears to contain placeholder code. "
            "Please implement a proper solution.",
            details,
        )

    score = 0
    if language:
        details["language_match"] = matches_language(trimmed, language)
        if details["language_match"]:
            score += 20
    elif has_programming_features(trimmed):
        score += 15

    details["has_function"] = any(clue in lower for clue in FUNCTION_CLUES)
    if details["has_function"]:
        score += 25

    details["has_logic"] = any(clue in lower for clue in LOGIC_CLUES)
    if details["has_logic"]:
        score += 20

    details["has_comments"] = _has_comments(content)
    if details["has_comments"]:
        score += 10

    details["complexity"] = _complexity(content, lower)
    score += min(details["complexity"] * 3, 15)

    lines = content.split("\n")
    non_empty = [line for line in lines if line.strip()]
    indented = [line for line in lines if _LEADING_WHITESPACE.match(line)]
    details["proper_structure"] = (
        len(non_empty) >= 3 and len(indented) / max(1, len(non_empty)) > 0.3
    )
    if details["proper_structure"]:
        score += 10

    if len(trimmed) < 50:
        score = min(score, 40)

    score = max(0, min(100, score))
    return score, _feedback(score, details, _display_name(language)), details


def _display_name(language: str | None) -> str | None:
    if not language:
        return None
    features = LANGUAGES.get(normalize_language(language))
    return features.name if features else language


def _feedback(score: int, details: dict[str, Any], language: str | None) -> str:
    if score >= 80:
        return (
            "Excellent work! Your solution demonstrates strong programming skills "
            "with proper structure and logic."
        )
    if score >= 70:
        return (
            "Good job! Your solution meets the requirements and shows solid "
            "programming understanding."
        )
    if score >= 50:
        suggestions = []
        if not details["has_function"]:
            suggestions.append("define proper functions or methods")
        if not details["has_logic"]:
            suggestions.append("add conditional logic and control structures")
        if language and not details["language_match"]:
            suggestions.append(f"use {language} syntax and features")
        if not details["proper_structure"]:
            suggestions.append("improve code formatting and structure")
        feedback = "Your solution shows some programming knowledge but needs improvement."
        if suggestions:
            feedback += " Try to: " + ", ".join(suggestions[:2]) + "."
        return feedback
    if score >= 25:
        return (
            "Your solution needs significant improvement. Write a complete, functional "
            "solution that addresses the problem requirements."
        )
    return (
        "Your solution appears incomplete or incorrect. Review the challenge "
        "requirements and implement a proper solution."
    )
