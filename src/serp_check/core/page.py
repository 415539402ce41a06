"""Page handle abstraction used by the search components.

The submitter and validator never touch Playwright directly; they talk to a
``PageHandle``. ``PlaywrightPageHandle`` is the production adapter, tests
provide in-memory fakes.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, Sequence

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)


class PageHandle(Protocol):
    async def goto(self, url: str) -> None: ...

    async def fill(self, selectors: Sequence[str], text: str) -> str: ...

    async def press_enter(self) -> None: ...

    async def wait_for_load(self, timeout_ms: int) -> None: ...

    async def sleep(self, ms: int) -> None: ...

    async def locator_count(self, selectors: Sequence[str]) -> int: ...

    async def click_if_visible(self, selectors: Sequence[str], timeout_ms: int) -> bool: ...

    async def title(self) -> str: ...

    async def url(self) -> str: ...

    async def body_text(self) -> str: ...

    async def screenshot(self, path: Path) -> None: ...

    def is_closed(self) -> bool: ...

    def viewport(self) -> Optional[dict[str, int]]: ...


class PlaywrightPageHandle:
    """Adapts a Playwright ``Page`` to the ``PageHandle`` protocol."""

    def __init__(self, page: Page) -> None:
        self.page = page

    async def goto(self, url: str) -> None:
        await self.page.goto(url, wait_until="domcontentloaded")

    async def fill(self, selectors: Sequence[str], text: str) -> str:
        """Fill the first element matched by ``selectors`` and return the selector used."""
        selector, locator = await self._first_match(selectors)
        if locator is None:
            raise RuntimeError(f"No element matched any of {list(selectors)}")
        # fill() clears the existing value before typing
        await locator.first.fill(text)
        return selector

    async def press_enter(self) -> None:
        await self.page.keyboard.press("Enter")

    async def wait_for_load(self, timeout_ms: int) -> None:
        await self.page.wait_for_load_state("domcontentloaded", timeout=timeout_ms)

    async def sleep(self, ms: int) -> None:
        await self.page.wait_for_timeout(ms)

    async def locator_count(self, selectors: Sequence[str]) -> int:
        """Count matches for the first selector that matches anything."""
        _, locator = await self._first_match(selectors)
        if locator is None:
            return 0
        return await locator.count()

    async def click_if_visible(self, selectors: Sequence[str], timeout_ms: int) -> bool:
        if not selectors:
            return False
        locator = self.page.locator(selectors[0])
        for selector in selectors[1:]:
            locator = locator.or_(self.page.locator(selector))
        try:
            await locator.first.wait_for(state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return False
        await locator.first.click()
        return True

    async def title(self) -> str:
        return await self.page.title()

    async def url(self) -> str:
        return self.page.url

    async def body_text(self) -> str:
        return await self.page.text_content("body") or ""

    async def screenshot(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        await self.page.screenshot(path=str(path), full_page=True)

    def is_closed(self) -> bool:
        return self.page.is_closed()

    def viewport(self) -> Optional[dict[str, int]]:
        size = self.page.viewport_size
        if size is None:
            return None
        return {"width": size["width"], "height": size["height"]}

    async def _first_match(self, selectors: Sequence[str]) -> tuple[Optional[str], Optional[Locator]]:
        for selector in selectors:
            locator = self.page.locator(selector)
            if await locator.count():
                return selector, locator
        logger.debug("No element matched selectors %s", list(selectors))
        return None, None
