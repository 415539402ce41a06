"""Page object for the search engine homepage."""
from __future__ import annotations

import logging
from typing import Optional

from serp_check.core.page import PageHandle
from serp_check.selectors.search_page import SearchSelectors

logger = logging.getLogger(__name__)


class SearchPage:
    """Navigation and diagnostics around a single page handle."""

    def __init__(self, handle: PageHandle, *, consent_timeout_ms: int = 3000) -> None:
        self.handle = handle
        self.consent_timeout_ms = consent_timeout_ms

    async def navigate(self, url: str) -> PageHandle:
        logger.info("Navigating to %s", url)
        await self.handle.goto(url)
        await self._dismiss_consent()
        return self.handle

    async def _dismiss_consent(self) -> None:
        try:
            clicked = await self.handle.click_if_visible(
                SearchSelectors.consent_buttons, self.consent_timeout_ms
            )
        except Exception as exc:
            logger.warning("Cookie consent handling failed: %s", exc)
            return
        if clicked:
            logger.info("Dismissed cookie consent dialog")

    async def describe(self) -> dict[str, object]:
        """Collect diagnostics for troubleshooting a failed query."""
        details: dict[str, object] = {}
        try:
            details["title"] = await self.handle.title()
            details["url"] = await self.handle.url()
            viewport: Optional[dict[str, int]] = self.handle.viewport()
            details["viewport"] = (
                f"{viewport['width']}x{viewport['height']}" if viewport else "default"
            )
            details["result_titles"] = await self.handle.locator_count(SearchSelectors.result_titles)
            details["result_snippets"] = await self.handle.locator_count(SearchSelectors.result_snippets)
        except Exception as exc:
            logger.warning("Page diagnostics failed: %s", exc)
            details["error"] = str(exc)
        return details
