"""Run configured queries end to end: navigate, submit, validate."""
from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from serp_check.config.settings import Settings
from serp_check.core.page import PageHandle
from serp_check.search.errors import ValidationError
from serp_check.search.models import Query, ValidationVerdict
from serp_check.search.page import SearchPage
from serp_check.search.submitter import QuerySubmitter
from serp_check.search.validator import ResultValidator

logger = logging.getLogger(__name__)

PageFactory = Callable[[], AbstractAsyncContextManager[PageHandle]]


@dataclass(frozen=True)
class QueryOutcome:
    query: Query
    verdict: Optional[ValidationVerdict] = None
    error: Optional[str] = None
    failed_check: Optional[str] = None
    attempts: int = 1

    @property
    def passed(self) -> bool:
        return self.verdict is not None and self.verdict.passed

    def to_dict(self) -> dict[str, object]:
        return {
            "query": self.query.to_dict(),
            "passed": self.passed,
            "attempts": self.attempts,
            "failed_check": self.failed_check,
            "error": self.error,
            "verdict": self.verdict.to_dict() if self.verdict else None,
        }


class SearchCheckTask:
    """Drive one page per query through the submit/validate pipeline."""

    def __init__(
        self,
        settings: Settings,
        *,
        submitter: Optional[QuerySubmitter] = None,
        validator: Optional[ResultValidator] = None,
    ) -> None:
        self.settings = settings
        self.submitter = submitter or QuerySubmitter.from_settings(settings)
        self.validator = validator or ResultValidator.from_settings(settings)

    async def run_all(self, queries: Iterable[Query], page_factory: PageFactory) -> list[QueryOutcome]:
        """Check every query; results keep the input order."""
        queries = list(queries)
        if self.settings.max_concurrency <= 1:
            return [await self.check(query, page_factory) for query in queries]

        semaphore = asyncio.Semaphore(self.settings.max_concurrency)

        async def _bounded(query: Query) -> QueryOutcome:
            async with semaphore:
                return await self.check(query, page_factory)

        return list(await asyncio.gather(*(_bounded(query) for query in queries)))

    async def check(self, query: Query, page_factory: PageFactory) -> QueryOutcome:
        """Check one query, retrying the whole flow on failure."""
        max_attempts = self.settings.retries + 1
        last_error: Optional[Exception] = None
        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                logger.info("Retrying '%s' (attempt %s of %s)", query.term, attempt, max_attempts)
            try:
                async with page_factory() as page:
                    verdict = await self.run_query(page, query)
            except Exception as exc:
                last_error = exc
                continue
            logger.info("Test completed successfully for '%s'", query.term)
            return QueryOutcome(query=query, verdict=verdict, attempts=attempt)

        assert last_error is not None
        return QueryOutcome(
            query=query,
            error=str(last_error),
            failed_check=last_error.check if isinstance(last_error, ValidationError) else None,
            attempts=max_attempts,
        )

    async def run_query(self, page: PageHandle, query: Query) -> ValidationVerdict:
        """Navigate, submit and validate once. ``ValidationError`` propagates."""
        logger.info("Starting test for: '%s'", query.term)
        search_page = SearchPage(page, consent_timeout_ms=self.settings.consent_timeout_ms)
        try:
            await search_page.navigate(self.settings.base_url)
            await self._screenshot(page, "01_navigation", query)

            await self.submitter.submit(page, query.term)
            await self._screenshot(page, "02_search_results", query)

            verdict = await self.validator.validate(page, query.term, query.expected_keywords)
            await self._screenshot(page, "03_validation_success", query)
        except Exception as exc:
            logger.error("Test failed for '%s': %s", query.term, exc)
            if not page.is_closed():
                logger.info("Page diagnostics: %s", await search_page.describe())
                await self._screenshot(page, "99_error", query)
            raise
        return verdict

    async def _screenshot(self, page: PageHandle, step: str, query: Query) -> None:
        if not self.settings.screenshots_enabled:
            return
        path = self.settings.screenshot_dir / f"{step}_{query.slug}.png"
        try:
            await page.screenshot(path)
        except Exception as exc:
            logger.warning("Could not capture %s screenshot: %s", step, exc)
            return
        logger.debug("Captured screenshot %s", path)
