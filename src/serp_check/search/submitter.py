"""Type a query into the search box and wait for the results to settle."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from serp_check.config.settings import Settings
from serp_check.core.page import PageHandle
from serp_check.search.errors import InteractionError
from serp_check.selectors.search_page import SearchSelectors

logger = logging.getLogger(__name__)


class QuerySubmitter:
    """Best-effort query submission.

    Failures are logged and swallowed: a page that never reached the results
    will fail the validator's structural checks, which is where the
    authoritative error is reported.
    """

    def __init__(
        self,
        *,
        load_timeout_ms: int = 10000,
        settle_timeout_ms: int = 3000,
        settle_poll_interval_ms: int = 250,
        settle_stable_polls: int = 2,
        settle_strategy: str = "stable",
        input_selectors: Sequence[str] = SearchSelectors.query_inputs,
        heading_selectors: Sequence[str] = SearchSelectors.result_headings,
    ) -> None:
        self.load_timeout_ms = load_timeout_ms
        self.settle_timeout_ms = settle_timeout_ms
        self.settle_poll_interval_ms = max(1, settle_poll_interval_ms)
        self.settle_stable_polls = settle_stable_polls
        self.settle_strategy = settle_strategy
        self.input_selectors = tuple(input_selectors)
        self.heading_selectors = tuple(heading_selectors)

    @classmethod
    def from_settings(cls, settings: Settings) -> "QuerySubmitter":
        return cls(
            load_timeout_ms=settings.load_timeout_ms,
            settle_timeout_ms=settings.settle_timeout_ms,
            settle_poll_interval_ms=settings.settle_poll_interval_ms,
            settle_stable_polls=settings.settle_stable_polls,
            settle_strategy=settings.settle_strategy,
        )

    async def submit(self, page: PageHandle, term: str) -> None:
        if not term.strip():
            logger.warning("Refusing to submit a blank search term")
            return
        logger.info("Searching for: %s", term)
        try:
            await self._submit(page, term)
        except InteractionError as exc:
            logger.warning("Search interaction failed for '%s': %s", term, exc)
            return
        logger.info("Search completed for '%s'", term)

    async def _submit(self, page: PageHandle, term: str) -> None:
        try:
            selector = await page.fill(self.input_selectors, term)
        except Exception as exc:
            raise InteractionError(f"search input not found or not editable: {exc}") from exc
        logger.debug("Filled search input %s", selector)

        try:
            await page.press_enter()
        except Exception as exc:
            raise InteractionError(f"could not dispatch Enter: {exc}") from exc

        try:
            await page.wait_for_load(self.load_timeout_ms)
        except Exception as exc:
            raise InteractionError(
                f"results did not load within {self.load_timeout_ms}ms: {exc}"
            ) from exc

        try:
            await self._settle(page)
        except Exception as exc:
            raise InteractionError(f"settle wait aborted: {exc}") from exc

    async def _settle(self, page: PageHandle) -> None:
        if self.settle_strategy == "fixed":
            await page.sleep(self.settle_timeout_ms)
            return

        deadline = asyncio.get_running_loop().time() + self.settle_timeout_ms / 1000
        last_count: Optional[int] = None
        stable_polls = 0
        while True:
            count: Optional[int]
            try:
                count = await page.locator_count(self.heading_selectors)
            except Exception as exc:
                # page may still be navigating after Enter; count is unknown this poll
                logger.debug("Result count unavailable while settling: %s", exc)
                count = None
            if count and count == last_count:
                stable_polls += 1
                if stable_polls >= self.settle_stable_polls:
                    logger.debug("Result count settled at %s", count)
                    return
            else:
                stable_polls = 0
            last_count = count
            remaining_ms = (deadline - asyncio.get_running_loop().time()) * 1000
            if remaining_ms <= 0:
                logger.debug("Settle timeout reached with %s result headings", count)
                return
            await page.sleep(int(min(self.settle_poll_interval_ms, remaining_ms)))
