"""Query submission and result page validation."""

from .errors import ContentAnalysisWarning, InteractionError, ValidationError
from .models import CheckResult, PageSnapshot, Query, ValidationVerdict
from .page import SearchPage
from .submitter import QuerySubmitter
from .validator import ResultValidator

__all__ = [
    "CheckResult",
    "ContentAnalysisWarning",
    "InteractionError",
    "PageSnapshot",
    "Query",
    "QuerySubmitter",
    "ResultValidator",
    "SearchPage",
    "ValidationError",
    "ValidationVerdict",
]
