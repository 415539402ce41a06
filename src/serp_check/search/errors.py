"""Error taxonomy for submitting searches and validating result pages."""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from serp_check.search.models import CheckResult


class InteractionError(RuntimeError):
    """Raised when the query cannot be typed or submitted.

    The submitter logs these and carries on; validation reports the real
    problem through its structural checks.
    """


class ValidationError(AssertionError):
    """Raised when a mandatory structural check fails."""

    def __init__(self, check: str, observed: object, checks: Sequence[CheckResult] = ()) -> None:
        super().__init__(f"{check} check failed: observed {observed!r}")
        self.check = check
        self.observed = observed
        self.checks = tuple(checks)


class ContentAnalysisWarning(UserWarning):
    """Advisory problem found while analysing page content.

    Instances are attached to the verdict and logged; they are never raised
    or passed to ``warnings.warn``.
    """

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.args == self.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))
