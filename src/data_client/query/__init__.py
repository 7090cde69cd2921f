"""In-process evaluation of filters, sorts, cursors and aggregation pipelines.

Used by InMemoryDataClient to behave like a conforming backing server.
"""

from .fields import MISSING, get_value, collect_values
from .matcher import compile_filter, matches
from .sorting import compare_values, compare_keys, sort_documents, sort_key_values
from .cursor import CursorInfo, sort_signature
from .aggregation import run_pipeline, evaluate_expression

__all__ = [
    "MISSING",
    "get_value",
    "collect_values",
    "compile_filter",
    "matches",
    "compare_values",
    "compare_keys",
    "sort_documents",
    "sort_key_values",
    "CursorInfo",
    "sort_signature",
    "run_pipeline",
    "evaluate_expression",
]
