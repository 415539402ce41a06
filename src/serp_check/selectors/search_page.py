"""Centralised selectors for the search engine pages.

Each tuple is an ordered list of alternatives; callers evaluate them in order
and use the first one that matches anything on the page.
"""
from __future__ import annotations


class SearchSelectors:
    query_inputs = (
        "textarea[name='q']",
        "input[name='q']",
    )
    result_headings = (
        "[data-ved] h3",
        ".g h3",
        ".yuRUbf h3",
        ".tF2Cxc",
        "h3",
    )
    result_titles = (
        "[data-ved] h3",
        ".g h3",
        ".yuRUbf h3",
        ".LC20lb",
    )
    result_snippets = (
        ".VwiC3b",
        "[data-sncf]",
        ".s",
        ".lEBKkf",
    )
    consent_buttons = (
        "button:has-text('Accept all')",
        "div[role='button']:has-text('Accept all')",
        "button:has-text('I agree')",
    )
