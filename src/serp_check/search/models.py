"""Dataclasses describing queries, page snapshots and validation verdicts."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from serp_check.search.errors import ContentAnalysisWarning

_SLUG_UNSAFE = re.compile(r"[\s/\\]+")


@dataclass(frozen=True, slots=True)
class Query:
    """A search phrase plus the keywords its results are expected to mention."""

    term: str
    expected_keywords: tuple[str, ...] = ()
    description: Optional[str] = None

    @property
    def slug(self) -> str:
        return _SLUG_UNSAFE.sub("_", self.term.strip())

    def to_dict(self) -> dict[str, object]:
        return {
            "term": self.term,
            "expected_keywords": list(self.expected_keywords),
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class PageSnapshot:
    """Page state read once per validation so every check sees the same values."""

    title: str
    url: str
    result_heading_count: int
    body_text: Optional[str] = None
    body_error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class CheckResult:
    name: str
    passed: bool
    detail: str = ""

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "passed": self.passed, "detail": self.detail}


@dataclass(frozen=True, slots=True)
class ValidationVerdict:
    """Outcome of validating one results page.

    ``passed`` only reflects the structural checks; keyword checks are
    advisory and are reported through ``checks`` and ``found_keywords``.
    """

    passed: bool
    checks: tuple[CheckResult, ...] = ()
    found_keywords: frozenset[str] = field(default_factory=frozenset)
    term_found: Optional[bool] = None
    warnings: tuple[ContentAnalysisWarning, ...] = ()

    def check(self, name: str) -> Optional[CheckResult]:
        return next((item for item in self.checks if item.name == name), None)

    def to_dict(self) -> dict[str, object]:
        return {
            "passed": self.passed,
            "checks": [item.to_dict() for item in self.checks],
            "found_keywords": sorted(self.found_keywords),
            "term_found": self.term_found,
            "warnings": [str(item) for item in self.warnings],
        }
