"""Filter evaluation, DSL parsing and slot search."""

from .evaluator import EvaluationContext, is_satisfied, until_invalid, until_valid
from .parser import FilterSyntaxError, parse_filter
from .scheduler import FALLBACK_STEP, MAX_ITERATIONS, SEARCH_HORIZON, find_optimal_time
from .validity import Validity

__all__ = [
    "EvaluationContext",
    "FALLBACK_STEP",
    "FilterSyntaxError",
    "MAX_ITERATIONS",
    "SEARCH_HORIZON",
    "Validity",
    "find_optimal_time",
    "is_satisfied",
    "parse_filter",
    "until_invalid",
    "until_valid",
]
