from __future__ import annotations

import pytest

from serp_check.config.settings import Settings
from serp_check.core import browser as browser_module
from serp_check.core.browser import BrowserSession


class _DummyChromium:
    def __init__(self, outcomes: list[object]) -> None:
        self._outcomes = list(outcomes)
        self.launches: list[dict[str, object]] = []

    async def launch(self, **kwargs: object) -> object:
        self.launches.append(kwargs)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class _DummyPlaywright:
    def __init__(self, chromium: _DummyChromium) -> None:
        self.chromium = chromium


class _DummyPlaywrightCM:
    def __init__(self, playwright: _DummyPlaywright) -> None:
        self._playwright = playwright
        self.exits: list[object] = []

    async def __aenter__(self) -> _DummyPlaywright:
        return self._playwright

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.exits.append(exc_type)


class _DummyBrowser:
    def __init__(self) -> None:
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def _install(monkeypatch: pytest.MonkeyPatch, chromium: _DummyChromium) -> _DummyPlaywrightCM:
    cm = _DummyPlaywrightCM(_DummyPlaywright(chromium))

    class _DummyStealthManager:
        def __init__(self, enabled: bool, **_overrides: object) -> None:
            self.enabled = enabled

        def wrap_playwright(self) -> _DummyPlaywrightCM:
            return cm

    monkeypatch.setattr(browser_module, "StealthManager", _DummyStealthManager)
    return cm


def _settings(tmp_path, **overrides: object) -> Settings:
    return Settings(
        results_dir=tmp_path / "results",
        screenshot_dir=tmp_path / "shots",
        **overrides,
    )


@pytest.mark.asyncio
async def test_channel_fallback_failure_releases_playwright(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    chromium = _DummyChromium([RuntimeError("chrome not installed"), RuntimeError("chromium missing")])
    cm = _install(monkeypatch, chromium)
    session = BrowserSession(_settings(tmp_path, chromium_channel="chrome"))

    with pytest.raises(RuntimeError, match="chromium missing"):
        async with session:
            pass

    assert [launch.get("channel") for launch in chromium.launches] == ["chrome", None]
    assert cm.exits == [RuntimeError]
    assert session._playwright_cm is None


@pytest.mark.asyncio
async def test_launch_failure_without_channel_releases_playwright(
    monkeypatch: pytest.MonkeyPatch, tmp_path
) -> None:
    chromium = _DummyChromium([RuntimeError("chromium missing")])
    cm = _install(monkeypatch, chromium)

    with pytest.raises(RuntimeError, match="chromium missing"):
        async with BrowserSession(_settings(tmp_path)):
            pass

    assert len(chromium.launches) == 1
    assert cm.exits == [RuntimeError]


@pytest.mark.asyncio
async def test_channel_fallback_keeps_session_usable(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    dummy_browser = _DummyBrowser()
    chromium = _DummyChromium([RuntimeError("chrome not installed"), dummy_browser])
    cm = _install(monkeypatch, chromium)

    async with BrowserSession(_settings(tmp_path, chromium_channel="chrome")) as session:
        assert session.browser is dummy_browser
        assert cm.exits == []

    assert dummy_browser.closed is True
    assert cm.exits == [None]
