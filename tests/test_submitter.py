from __future__ import annotations

import logging

import pytest

from serp_check.search.submitter import QuerySubmitter
from serp_check.selectors.search_page import SearchSelectors


class _DummyPage:
    def __init__(
        self,
        *,
        counts: list[int | Exception] | None = None,
        fill_error: Exception | None = None,
        load_error: Exception | None = None,
    ) -> None:
        self._counts = list(counts or [])
        self._fill_error = fill_error
        self._load_error = load_error
        self.calls: list[tuple[str, object]] = []

    async def fill(self, selectors, text: str) -> str:
        self.calls.append(("fill", text))
        if self._fill_error:
            raise self._fill_error
        return selectors[0]

    async def press_enter(self) -> None:
        self.calls.append(("enter", None))

    async def wait_for_load(self, timeout_ms: int) -> None:
        self.calls.append(("load", timeout_ms))
        if self._load_error:
            raise self._load_error

    async def sleep(self, ms: int) -> None:
        self.calls.append(("sleep", ms))

    async def locator_count(self, _selectors) -> int:
        self.calls.append(("count", None))
        if len(self._counts) > 1:
            value = self._counts.pop(0)
        else:
            value = self._counts[0] if self._counts else 0
        if isinstance(value, Exception):
            raise value
        return value


@pytest.mark.asyncio
async def test_submit_runs_steps_in_order() -> None:
    page = _DummyPage(counts=[3])
    submitter = QuerySubmitter(settle_timeout_ms=5000, settle_stable_polls=2)

    await submitter.submit(page, "valletta")  # type: ignore[arg-type]

    names = [name for name, _ in page.calls]
    assert names[:3] == ["fill", "enter", "load"]
    assert page.calls[0] == ("fill", "valletta")
    assert page.calls[2] == ("load", 10000)
    # first read seeds the count, two unchanged reads settle it
    assert names[3:] == ["count", "sleep", "count", "sleep", "count"]


@pytest.mark.asyncio
async def test_settle_waits_for_count_to_stop_changing() -> None:
    page = _DummyPage(counts=[0, 2, 5, 5, 5])
    submitter = QuerySubmitter(settle_timeout_ms=5000, settle_stable_polls=2)

    await submitter.submit(page, "valletta")  # type: ignore[arg-type]

    assert [name for name, _ in page.calls].count("count") == 5


@pytest.mark.asyncio
async def test_settle_is_bounded_when_results_never_appear() -> None:
    page = _DummyPage(counts=[0])
    submitter = QuerySubmitter(settle_timeout_ms=0)

    await submitter.submit(page, "valletta")  # type: ignore[arg-type]

    assert [name for name, _ in page.calls][-1] == "count"


@pytest.mark.asyncio
async def test_settle_keeps_polling_when_count_read_fails(caplog: pytest.LogCaptureFixture) -> None:
    destroyed = RuntimeError("Execution context was destroyed, most likely because of a navigation")
    page = _DummyPage(counts=[destroyed, 4, 4, 4])
    submitter = QuerySubmitter(settle_timeout_ms=5000, settle_stable_polls=2)

    with caplog.at_level(logging.DEBUG, logger="serp_check.search.submitter"):
        await submitter.submit(page, "valletta")  # type: ignore[arg-type]

    assert [name for name, _ in page.calls].count("count") == 4
    assert "settle wait aborted" not in caplog.text
    assert "Result count settled at 4" in caplog.text
    assert "Search completed for 'valletta'" in caplog.text


@pytest.mark.asyncio
async def test_fixed_settle_sleeps_for_the_full_delay() -> None:
    page = _DummyPage()
    submitter = QuerySubmitter(settle_strategy="fixed", settle_timeout_ms=3000)

    await submitter.submit(page, "valletta")  # type: ignore[arg-type]

    assert page.calls[-1] == ("sleep", 3000)
    assert ("count", None) not in page.calls


@pytest.mark.asyncio
async def test_missing_input_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    page = _DummyPage(fill_error=RuntimeError("no element matched"))

    with caplog.at_level(logging.WARNING, logger="serp_check.search.submitter"):
        await QuerySubmitter().submit(page, "valletta")  # type: ignore[arg-type]

    assert page.calls == [("fill", "valletta")]
    assert "search input not found" in caplog.text


@pytest.mark.asyncio
async def test_load_timeout_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    page = _DummyPage(load_error=TimeoutError("Timeout 10000ms exceeded"))

    with caplog.at_level(logging.WARNING, logger="serp_check.search.submitter"):
        await QuerySubmitter().submit(page, "valletta")  # type: ignore[arg-type]

    assert ("sleep", 3000) not in page.calls
    assert "did not load within 10000ms" in caplog.text


@pytest.mark.asyncio
async def test_blank_term_is_skipped() -> None:
    page = _DummyPage()

    await QuerySubmitter().submit(page, "   ")  # type: ignore[arg-type]

    assert page.calls == []


def test_default_selectors_prefer_textarea() -> None:
    submitter = QuerySubmitter()

    assert submitter.input_selectors == SearchSelectors.query_inputs
    assert submitter.input_selectors[0] == "textarea[name='q']"
