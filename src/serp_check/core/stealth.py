"""Stealth helpers built on top of playwright-stealth.

Search engines answer automated traffic with interstitial captcha pages,
which fail the identity check. See: https://github.com/mattwmaster58/playwright_stealth
"""
from __future__ import annotations

from contextlib import AbstractAsyncContextManager

from playwright.async_api import BrowserContext, async_playwright
from playwright_stealth import ALL_EVASIONS_DISABLED_KWARGS, Stealth


class StealthManager:
    """Wraps the Stealth helper so sessions can toggle it from settings."""

    def __init__(self, enabled: bool, **overrides: object) -> None:
        self.enabled = enabled
        self._stealth = Stealth(**{**({} if enabled else ALL_EVASIONS_DISABLED_KWARGS), **overrides})

    def wrap_playwright(self) -> AbstractAsyncContextManager:
        """Return the context manager to acquire Playwright."""
        if not self.enabled:
            return async_playwright()
        return self._stealth.use_async(async_playwright())

    async def apply(self, context: BrowserContext) -> None:
        if not self.enabled:
            return
        await self._stealth.apply_stealth_async(context)
