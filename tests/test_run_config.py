from __future__ import annotations

import json
import textwrap

import pytest
from pydantic import ValidationError as PydanticValidationError

from serp_check.config.run_config import RunConfig
from serp_check.config.settings import Settings
from serp_check.search.models import Query


def test_toml_config_accepts_strings_and_tables(tmp_path) -> None:
    path = tmp_path / "run_config.toml"
    path.write_text(
        textwrap.dedent(
            """
            profile = "malta"
            base_url = "https://www.example.com"
            screenshots = false
            queries = [
                "the multiple",
                { term = "valletta", expected_keywords = ["malta", "capital"], description = "Capital" },
                { term = "ftira", expected_keywords = "malta, bread" },
            ]

            [browser]
            headless = false
            viewport_width = 1440
            """
        )
    )

    config = RunConfig.load(path)

    assert config.profile == "malta"
    assert config.query_list() == (
        Query(term="the multiple"),
        Query(term="valletta", expected_keywords=("malta", "capital"), description="Capital"),
        Query(term="ftira", expected_keywords=("malta", "bread")),
    )

    settings = Settings(screenshots_enabled=True, headless=True)
    config.apply_to(settings)
    assert settings.base_url == "https://www.example.com"
    assert settings.screenshots_enabled is False
    assert settings.headless is False
    assert settings.viewport_width == 1440


def test_legacy_json_settings_layout(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "baseUrl": "https://www.google.com",
                "searchPhrases": ["Valletta", "The Multiple", "Ftira"],
                "screenshots": True,
            }
        )
    )

    config = RunConfig.load(path)

    assert config.base_url == "https://www.google.com"
    assert config.screenshots is True
    assert [query.term for query in config.query_list()] == ["Valletta", "The Multiple", "Ftira"]
    assert all(query.expected_keywords == () for query in config.query_list())


def test_blank_term_is_rejected() -> None:
    with pytest.raises(PydanticValidationError, match="query term must not be blank"):
        RunConfig.model_validate({"queries": ["  "]})


def test_duplicate_terms_are_rejected() -> None:
    with pytest.raises(PydanticValidationError, match="duplicate query term"):
        RunConfig.model_validate({"queries": ["Valletta", {"term": "valletta"}]})


def test_apply_to_leaves_unset_fields_alone() -> None:
    settings = Settings(base_url="https://keep.example", retries=3)

    RunConfig().apply_to(settings)

    assert settings.base_url == "https://keep.example"
    assert settings.retries == 3
