"""Runtime configuration for search checks.

Relies on pydantic-settings so that environment variables (prefixed with
``SERPCHECK_``) can override defaults. See `.env.example` for common values.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Literal, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from serp_check.core.logging import resolve_level


class Settings(BaseSettings):
    """Captures runtime configuration for search checks."""

    base_url: str = Field(
        default="https://www.google.com",
        description="Search engine homepage each query starts from",
    )
    identity_token: str = Field(
        default="google",
        description="Token the case-folded page title must contain (brand name)",
    )
    host_token: str = Field(
        default="google.com",
        description="Token the results page URL must contain",
    )

    load_timeout_ms: int = Field(default=10000, description="Post-submit load state timeout")
    settle_strategy: Literal["stable", "fixed"] = Field(
        default="stable",
        description="'stable' polls the result count until it settles, 'fixed' sleeps",
    )
    settle_timeout_ms: int = Field(
        default=3000, description="Upper bound for the post-submit settle wait"
    )
    settle_poll_interval_ms: int = Field(default=250)
    settle_stable_polls: int = Field(
        default=2, description="Consecutive unchanged result counts that mark the page as settled"
    )
    consent_timeout_ms: int = Field(
        default=3000, description="How long to wait for a cookie consent dialog after navigation"
    )

    headless: bool = True
    slow_mo_ms: int = Field(default=0, description="Slow-mo delay in milliseconds")
    viewport_width: int = 1280
    viewport_height: int = 800
    user_agent: Optional[str] = None
    locale: Optional[str] = Field(default="en-US")
    default_timeout_ms: int = Field(default=15000)
    navigation_timeout_ms: int = Field(default=30000)
    chromium_channel: Optional[str] = Field(
        default=None,
        description="Browser channel passed to Playwright (e.g. 'chrome'); use None for bundled Chromium",
    )
    chromium_args: Tuple[str, ...] = Field(
        default=("--disable-blink-features=AutomationControlled",),
        description="Extra Chromium args passed during launch",
    )

    stealth_enabled: bool = Field(default=True, description="Apply playwright-stealth evasions")
    stealth_init_scripts_only: bool = False
    stealth_languages: Optional[Tuple[str, str]] = None
    stealth_platform: Optional[str] = None

    screenshots_enabled: bool = Field(default=True, description="Capture per-step screenshots")
    screenshot_dir: Path = Field(default=Path("data/screenshots"))
    results_dir: Path = Field(default=Path("data/results"))
    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("data/logs"))

    retries: int = Field(default=1, description="Extra attempts per query after a failure")
    max_concurrency: int = Field(
        default=1, description="Queries run in parallel, each in its own browser context"
    )

    model_config = SettingsConfigDict(
        env_prefix="SERPCHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    @field_validator("screenshot_dir", "results_dir", "log_dir", mode="before")
    def _expand_dir(cls, value: str | Path) -> Path:  # noqa: D401
        if isinstance(value, Path):
            return value
        return Path(value).expanduser()

    @field_validator("identity_token", "host_token")
    def _require_token(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("identity_token and host_token must not be blank")
        return value.strip()

    @field_validator(
        "load_timeout_ms", "settle_timeout_ms", "settle_poll_interval_ms", "consent_timeout_ms"
    )
    def _validate_timeout(cls, value: int) -> int:
        if value < 0:
            raise ValueError("timeouts must not be negative")
        return value

    @field_validator("settle_stable_polls", "max_concurrency")
    def _validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("value must be positive")
        return value

    @field_validator("log_level")
    def _validate_log_level(cls, value: str) -> str:
        resolve_level(value)
        return value.strip().upper()

    @field_validator("retries")
    def _validate_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("retries must not be negative")
        return value

    @field_validator("chromium_args", mode="before")
    def _parse_chromium_args(cls, value: object) -> Tuple[str, ...]:
        if value is None or value == "":
            return ()
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value if str(item))
        if isinstance(value, str):
            parts: Iterable[str] = (part.strip() for part in value.split(","))
            return tuple(part for part in parts if part)
        raise TypeError("chromium_args must be provided as a comma-separated string or list")

    def ensure_directories(self) -> None:
        """Create directories that must exist at runtime."""
        self.results_dir.mkdir(parents=True, exist_ok=True)
        if self.screenshots_enabled:
            self.screenshot_dir.mkdir(parents=True, exist_ok=True)

    def viewport(self) -> dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}

    def chromium_launch_args(self) -> dict[str, object]:
        launch_args: dict[str, object] = {
            "headless": self.headless,
        }
        if self.slow_mo_ms:
            launch_args["slow_mo"] = self.slow_mo_ms
        if self.chromium_channel:
            launch_args["channel"] = self.chromium_channel
        if self.chromium_args:
            launch_args["args"] = list(self.chromium_args)
        return launch_args

    def context_options(self) -> dict[str, object]:
        options: dict[str, object] = {
            "viewport": self.viewport(),
        }
        if self.user_agent:
            options["user_agent"] = self.user_agent
        if self.locale:
            options["locale"] = self.locale
        return options

    def stealth_kwargs(self) -> dict[str, object]:
        if not self.stealth_enabled:
            return {}
        kwargs: dict[str, object] = {
            "init_scripts_only": self.stealth_init_scripts_only,
        }
        if self.stealth_languages:
            kwargs["navigator_languages_override"] = self.stealth_languages
        if self.stealth_platform:
            kwargs["navigator_platform_override"] = self.stealth_platform
        if self.user_agent:
            kwargs["navigator_user_agent_override"] = self.user_agent
        return kwargs
