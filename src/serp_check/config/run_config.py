"""User-friendly run configuration loader.

Two layouts are accepted:

* TOML (preferred)::

    profile = "malta"
    base_url = "https://www.google.com"
    screenshots = true
    queries = [
        "the multiple",
        { term = "valletta", expected_keywords = ["malta", "capital"] },
    ]

* The legacy JSON ``settings.json`` layout with ``baseUrl``,
  ``searchPhrases`` and ``screenshots`` keys.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from serp_check.search.models import Query

try:  # pragma: no cover - Python 3.11+ ships tomllib
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

if TYPE_CHECKING:  # pragma: no cover
    from serp_check.config.settings import Settings


def _coerce_string_list(value: object) -> list[str]:
    if value in (None, "", ()):
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, Iterable):
        result: list[str] = []
        for item in value:
            text = str(item).strip()
            if text:
                result.append(text)
        return result
    raise TypeError("Expected string or list of strings")


class QuerySection(BaseModel):
    """A single configured search phrase."""

    model_config = ConfigDict(frozen=True)

    term: str
    expected_keywords: list[str] = Field(default_factory=list)
    description: Optional[str] = None

    @field_validator("term")
    @classmethod
    def _require_term(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query term must not be blank")
        return value.strip()

    @field_validator("expected_keywords", mode="before")
    @classmethod
    def _coerce_keywords(cls, value: object) -> list[str]:
        return _coerce_string_list(value)

    def to_query(self) -> Query:
        return Query(
            term=self.term,
            expected_keywords=tuple(self.expected_keywords),
            description=self.description,
        )


class BrowserSection(BaseModel):
    """Browser/runtime overrides decoded from the run config."""

    headless: Optional[bool] = None
    slow_mo_ms: Optional[int] = Field(default=None, ge=0)
    viewport_width: Optional[int] = Field(default=None, ge=0)
    viewport_height: Optional[int] = Field(default=None, ge=0)
    chromium_channel: Optional[str] = None
    log_level: Optional[str] = None


class RunConfig(BaseModel):
    """Top-level configuration decoded from TOML or legacy JSON."""

    profile: str = Field(default="default", description="Human label used for logging")
    title: Optional[str] = None
    base_url: Optional[str] = None
    screenshots: Optional[bool] = None
    retries: Optional[int] = Field(default=None, ge=0)
    max_concurrency: Optional[int] = Field(default=None, ge=1)
    queries: list[QuerySection] = Field(default_factory=list)
    browser: BrowserSection = Field(default_factory=BrowserSection)

    @field_validator("queries", mode="before")
    @classmethod
    def _coerce_queries(cls, value: object) -> list[object]:
        if value in (None, ""):
            return []
        if not isinstance(value, list):
            raise TypeError("queries must be a list of strings or tables")
        return [{"term": item} if isinstance(item, str) else item for item in value]

    @model_validator(mode="after")
    def _reject_duplicate_terms(self) -> "RunConfig":
        seen: set[str] = set()
        for section in self.queries:
            key = section.term.casefold()
            if key in seen:
                raise ValueError(f"duplicate query term '{section.term}'")
            seen.add(key)
        return self

    @classmethod
    def load(cls, path: Path) -> "RunConfig":
        """Load a config from a TOML file or a legacy JSON settings file."""
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            return cls.model_validate(_from_legacy_json(json.loads(text)))
        return cls.model_validate(tomllib.loads(text))

    # Public API -----------------------------------------------------------------

    def query_list(self) -> tuple[Query, ...]:
        return tuple(section.to_query() for section in self.queries)

    def apply_to(self, settings: "Settings") -> None:
        """Apply overrides to an existing Settings instance."""
        if self.base_url:
            settings.base_url = self.base_url
        if self.screenshots is not None:
            settings.screenshots_enabled = self.screenshots
        if self.retries is not None:
            settings.retries = self.retries
        if self.max_concurrency is not None:
            settings.max_concurrency = self.max_concurrency
        self._apply_browser(settings)

    # Internal helpers -----------------------------------------------------------

    def _apply_browser(self, settings: "Settings") -> None:
        browser = self.browser
        if browser.headless is not None:
            settings.headless = browser.headless
        if browser.slow_mo_ms is not None:
            settings.slow_mo_ms = browser.slow_mo_ms
        if browser.viewport_width is not None:
            settings.viewport_width = browser.viewport_width
        if browser.viewport_height is not None:
            settings.viewport_height = browser.viewport_height
        if browser.chromium_channel:
            settings.chromium_channel = browser.chromium_channel
        if browser.log_level:
            settings.log_level = browser.log_level


def _from_legacy_json(data: dict[str, object]) -> dict[str, object]:
    converted: dict[str, object] = {
        key: value for key, value in data.items() if key not in {"baseUrl", "searchPhrases"}
    }
    if "baseUrl" in data:
        converted["base_url"] = data["baseUrl"]
    if "searchPhrases" in data:
        converted["queries"] = data["searchPhrases"]
    return converted


__all__ = ["QuerySection", "RunConfig"]
