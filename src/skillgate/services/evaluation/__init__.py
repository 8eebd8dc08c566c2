"""Submission evaluators."""

from __future__ import annotations

from skillgate.services.evaluation.base import (
    FALLBACK,
    PRIMARY,
    SANDBOX,
    EvaluationContext,
    Evaluator,
    Verdict,
)
from skillgate.services.evaluation.chain import EvaluatorChain
from skillgate.services.evaluation.fallback import HeuristicEvaluator, heuristic_score
from skillgate.services.evaluation.languages import (
    LANGUAGES,
    get_language_features,
    normalize_language,
)
from skillgate.services.evaluation.primary import LanguageFeatureEvaluator, score_code
from skillgate.services.evaluation.sandbox import SandboxEvaluator

__all__ = [
    "FALLBACK",
    "LANGUAGES",
    "PRIMARY",
    "SANDBOX",
    "EvaluationContext",
    "Evaluator",
    "EvaluatorChain",
    "HeuristicEvaluator",
    "LanguageFeatureEvaluator",
    "SandboxEvaluator",
    "Verdict",
    "get_language_features",
    "heuristic_score",
    "normalize_language",
    "score_code",
]
