"""Decide whether a rendered results page is acceptable for a query.

Validation runs in two phases against a single ``PageSnapshot``:

1. Structural checks (identity, population, url) are mandatory and
   short-circuit: the first failure raises ``ValidationError``.
2. Content analysis looks for the configured keywords and the raw term in
   the body text. It is advisory: results are recorded on the verdict and
   logged, but never fail the query.
"""
from __future__ import annotations

import logging
from typing import Iterable, NoReturn, Sequence

from serp_check.config.settings import Settings
from serp_check.core.page import PageHandle
from serp_check.search.errors import ContentAnalysisWarning, ValidationError
from serp_check.search.models import CheckResult, PageSnapshot, ValidationVerdict
from serp_check.selectors.search_page import SearchSelectors

logger = logging.getLogger(__name__)

IDENTITY_CHECK = "identity"
POPULATION_CHECK = "population"
URL_CHECK = "url"
KEYWORDS_CHECK = "keywords"
GENERIC_CONTENT_CHECK = "generic-content"
TERM_PRESENCE_CHECK = "term-presence"
CONTENT_CHECK = "content"


class ResultValidator:
    def __init__(
        self,
        *,
        identity_token: str = "google",
        host_token: str = "google.com",
        heading_selectors: Sequence[str] = SearchSelectors.result_headings,
    ) -> None:
        self.identity_token = identity_token.casefold()
        self.host_token = host_token.casefold()
        self.heading_selectors = tuple(heading_selectors)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResultValidator":
        return cls(identity_token=settings.identity_token, host_token=settings.host_token)

    async def validate(
        self, page: PageHandle, term: str, expected_keywords: Iterable[str] = ()
    ) -> ValidationVerdict:
        logger.info("Validating search results for: %s", term)
        snapshot = await self.capture(page)
        return self.validate_snapshot(snapshot, term, expected_keywords)

    async def capture(self, page: PageHandle) -> PageSnapshot:
        """Read the page once; body text failures are kept on the snapshot."""
        title = await page.title()
        url = await page.url()
        count = await page.locator_count(self.heading_selectors)
        try:
            body_text = await page.body_text()
        except Exception as exc:
            return PageSnapshot(title=title, url=url, result_heading_count=count, body_error=str(exc))
        return PageSnapshot(title=title, url=url, result_heading_count=count, body_text=body_text)

    def validate_snapshot(
        self, snapshot: PageSnapshot, term: str, expected_keywords: Iterable[str] = ()
    ) -> ValidationVerdict:
        checks = self._structural_checks(snapshot)
        found, term_found, content_checks = self._analyse_content(snapshot, term, tuple(expected_keywords))
        checks.extend(content_checks)
        advisories: tuple[ContentAnalysisWarning, ...] = ()
        if snapshot.body_text is None:
            advisories = (ContentAnalysisWarning(content_checks[0].detail),)
        logger.info("All validations completed for '%s'", term)
        return ValidationVerdict(
            passed=True,
            checks=tuple(checks),
            found_keywords=found,
            term_found=term_found,
            warnings=advisories,
        )

    def _structural_checks(self, snapshot: PageSnapshot) -> list[CheckResult]:
        checks: list[CheckResult] = []

        logger.info("Page title: %s", snapshot.title)
        if self.identity_token not in snapshot.title.casefold():
            self._fail(checks, IDENTITY_CHECK, snapshot.title, f"title lacks '{self.identity_token}'")
        checks.append(CheckResult(IDENTITY_CHECK, True, f"title contains '{self.identity_token}'"))

        logger.info("Found %s result headings on page", snapshot.result_heading_count)
        if snapshot.result_heading_count <= 0:
            self._fail(checks, POPULATION_CHECK, snapshot.result_heading_count, "no result headings")
        checks.append(
            CheckResult(POPULATION_CHECK, True, f"{snapshot.result_heading_count} result headings")
        )

        logger.info("Current URL: %s", snapshot.url)
        if self.host_token not in snapshot.url.casefold():
            self._fail(checks, URL_CHECK, snapshot.url, f"url lacks '{self.host_token}'")
        checks.append(CheckResult(URL_CHECK, True, f"url contains '{self.host_token}'"))
        return checks

    @staticmethod
    def _fail(checks: list[CheckResult], name: str, observed: object, detail: str) -> NoReturn:
        checks.append(CheckResult(name, False, detail))
        logger.error("Validation error: %s check failed (observed %r)", name, observed)
        raise ValidationError(name, observed, checks)

    def _analyse_content(
        self, snapshot: PageSnapshot, term: str, expected_keywords: tuple[str, ...]
    ) -> tuple[frozenset[str], bool | None, list[CheckResult]]:
        logger.info("Analyzing search results content for: %s", term)
        if snapshot.body_text is None:
            message = f"Content analysis completed with warnings: {snapshot.body_error}"
            logger.warning(message)
            return frozenset(), None, [CheckResult(CONTENT_CHECK, False, message)]

        body = snapshot.body_text.casefold()
        checks: list[CheckResult] = []
        found: frozenset[str] = frozenset()

        if expected_keywords:
            found = frozenset(keyword for keyword in expected_keywords if keyword.casefold() in body)
            missing = sorted({keyword for keyword in expected_keywords if keyword not in found})
            if missing:
                logger.info("Keywords not found in results for '%s': %s", term, ", ".join(missing))
                detail = f"found {sorted(found)}, missing {missing}"
            else:
                logger.info("Verified expected content for '%s': %s", term, ", ".join(sorted(found)))
                detail = f"found {sorted(found)}"
            checks.append(CheckResult(KEYWORDS_CHECK, not missing, detail))
        else:
            logger.info("Generic content validation completed for: %s", term)
            checks.append(CheckResult(GENERIC_CONTENT_CHECK, True, "no expected keywords configured"))

        term_found = bool(term.strip()) and term.casefold() in body
        checks.append(
            CheckResult(
                TERM_PRESENCE_CHECK,
                term_found,
                "term appears in results" if term_found else "term not found in results",
            )
        )
        return found, term_found, checks
