"""Language-aware structural evaluator.

Scores a submission by the language features it uses:

- 5 points for at least 20 characters
- up to 20 for definition keywords (4 each)
- up to 25 for control-flow keywords (3 each)
- up to 15 for built-in methods (3 each)
- up to 20 for larger constructs (3 per matched pattern)
- 5 for comments
- up to 10 for complexity indicators
- 5 for a well-organized body of 11 to 499 non-empty lines
"""

from __future__ import annotations

import re
from typing import Any

import structlog

from skillgate.core.errors import EvaluationError

from .base import PRIMARY, EvaluationContext, Evaluator, Verdict
from .languages import LanguageFeatures, get_language_features

logger = structlog.get_logger()

_COMMENT_PATTERNS = (
    re.compile(r"//.*"),
    re.compile(r"/\*[\s\S]*?\*/"),
    re.compile(r"#.*"),
    re.compile(r'""".+?"""', re.DOTALL),
    re.compile(r"'''.+?'''", re.DOTALL),
    re.compile(r"<!--[\s\S]*?-->"),
)

# (pattern, weight)
_COMPLEXITY_INDICATORS = (
    (re.compile(r"\bclass\b", re.IGNORECASE), 3),
    (re.compile(r"\binterface\b", re.IGNORECASE), 2),
    (re.compile(r"\basync\b", re.IGNORECASE), 2),
    (re.compile(r"\btry\b", re.IGNORECASE), 2),
    (re.compile(r"\bimport\b|\brequire\b|\buse\b", re.IGNORECASE), 1),
    (re.compile(r"\breturn\b", re.IGNORECASE), 1),
)

_CHALLENGING_DIFFICULTIES = frozenset({"hard", "expert"})


def _token_regex(token: str) -> re.Pattern[str]:
    """Case-insensitive regex for a keyword, bounded only where it is a word."""
    escaped = re.escape(token)
    if token[:1].isalnum() or token[:1] == "_":
        escaped = r"\b" + escaped
    if token[-1:].isalnum() or token[-1:] == "_":
        escaped = escaped + r"\b"
    return re.compile(escaped, re.IGNORECASE)


class LanguageFeatureEvaluator(Evaluator):
    """Primary evaluator: weights language-specific features into a score."""

    name = PRIMARY

    def __init__(self, pass_threshold: int = 70) -> None:
        self.pass_threshold = pass_threshold

    async def evaluate(self, content: str, context: EvaluationContext) -> Verdict:
        if not context.language:
            raise EvaluationError("No language given for language-feature evaluation")
        features = get_language_features(context.language)
        if features is None:
            raise EvaluationError(f"Unsupported language: {context.language}")

        score, details = score_code(content.strip(), features)
        passed = score >= self.pass_threshold
        feedback = generate_feedback(score, details, features.name)
        if (context.difficulty or "").lower() in _CHALLENGING_DIFFICULTIES:
            feedback += " This is a challenging problem - great effort tackling it!"

        logger.debug(
            "primary_evaluated",
            language=features.name,
            score=score,
            passed=passed,
        )
        return Verdict(
            score=score,
            passed=passed,
            feedback=feedback,
            evaluator_used=self.name,
            details=details,
        )


def score_code(code: str, features: LanguageFeatures) -> tuple[int, dict[str, Any]]:
    """Score stripped code against a language's feature table.

    Args:
        code: Submitted code, already stripped.
        features: Feature table for the target language.

    Returns:
        Tuple of (score 0-100, details dict with found and missing features).
    """
    score = 0
    found: list[str] = []
    missing: list[str] = []
    pattern_matches: dict[str, int] = {}

    if len(code) >= 20:
        score += 5
        found.append("Adequate code length")
    else:
        missing.append("Code is too short")

    function_hits = [f for f in features.functions if _token_regex(f).search(code)]
    found.extend(f"Uses '{f}'" for f in function_hits)
    if function_hits:
        score += min(20, len(function_hits) * 4)
    else:
        missing.append("No language-specific functions found")

    keyword_count = sum(1 for k in features.keywords if _token_regex(k).search(code))
    if keyword_count:
        score += min(25, keyword_count * 3)
        found.append(f"Uses {keyword_count} control structure(s)")
    else:
        missing.append("No control structures (if/for/while)")

    method_count = sum(
        1 for m in features.methods if re.search(re.escape(m), code, re.IGNORECASE)
    )
    if method_count:
        score += min(15, method_count * 3)
        found.append(f"Uses {method_count} built-in method(s)")

    pattern_score = 0
    for pattern_name, pattern in features.patterns.items():
        matches = pattern.findall(code)
        if matches:
            pattern_score += 3
            pattern_matches[pattern_name] = len(matches)
            found.append(f"Uses {pattern_name} ({len(matches)}x)")
    score += min(20, pattern_score)

    has_comments = any(p.search(code) for p in _COMMENT_PATTERNS)
    if has_comments:
        score += 5
        found.append("Includes comments")

    complexity = 0
    complexity_score = 0
    for pattern, weight in _COMPLEXITY_INDICATORS:
        hits = len(pattern.findall(code))
        complexity += hits
        complexity_score += hits * weight
    score += min(10, complexity_score // 2)

    lines = [line for line in code.split("\n") if line.strip()]
    if 10 < len(lines) < 500:
        score += 5
        found.append("Well-organized code structure")

    details = {
        "language": features.name,
        "has_function": bool(function_hits),
        "has_logic": keyword_count > 0,
        "has_comments": has_comments,
        "proper_structure": pattern_score > 0,
        "complexity": complexity,
        "found_features": found,
        "missing_features": missing,
        "pattern_matches": pattern_matches,
    }
    return min(100, score), details


def generate_feedback(score: int, details: dict[str, Any], language_name: str) -> str:
    """Build tiered feedback with suggestions and strengths."""
    if score >= 90:
        feedback = (
            f"Excellent work! Your {language_name} code demonstrates exceptional "
            "programming skills and best practices."
        )
    elif score >= 80:
        feedback = (
            f"Great job! Your {language_name} code shows strong understanding "
            "and good structure."
        )
    elif score >= 70:
        feedback = (
            f"Good effort! Your {language_name} code demonstrates solid programming fundamentals."
        )
    elif score >= 60:
        feedback = f"Nice try! Your {language_name} solution shows promise."
    elif score >= 40:
        feedback = f"Keep practicing! Your {language_name} code needs more structure."
    else:
        feedback = f"Good start! Focus on using {language_name} functions and control structures."

    missing = details.get("missing_features", [])
    if missing:
        feedback += "\n\nSuggestions:" + "".join(f"\n- {m}" for m in missing[:3])

    found = details.get("found_features", [])
    if len(found) > 3:
        feedback += "\n\nStrengths:" + "".join(f"\n- {f}" for f in found[:3])

    return feedback
