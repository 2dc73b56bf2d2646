"""Shared test fixtures for catalog tests.

Catalog sources are in-memory (``MemoryCatSource``) unless a test needs
real files, in which case it writes them under ``tmp_path``.
"""

from __future__ import annotations

import logging

import pytest

from lingocat.i18n.context import Context
from lingocat.i18n.sources import MemoryCatSource

TEST_LOGGER = "lingocat.tests"


def make_cat(
    entries: dict[str, str] | None = None,
    *,
    code: str | None = None,
    name: str | None = None,
    name_en: str | None = None,
    fallback: str | None = None,
) -> str:
    """Build catalog text with the given headers and ``key -> value`` entries."""
    lines: list[str] = []
    if code is not None:
        lines.append(f"Language-Code: {code}")
    if name is not None:
        lines.append(f"Language-Name: {name}")
    if name_en is not None:
        lines.append(f"Language-Name-en: {name_en}")
    if fallback is not None:
        lines.append(f"Fallback: {fallback}")
    lines.append("")
    for key, value in (entries or {}).items():
        lines.append(key)
        if value:
            lines.append(value)
        lines.append(".")
        lines.append("")
    return "\n".join(lines) + "\n"


@pytest.fixture
def log() -> logging.Logger:
    """Dedicated diagnostic logger so ``caplog`` can filter on it."""
    return logging.getLogger(TEST_LOGGER)


@pytest.fixture
def ctx(log: logging.Logger) -> Context:
    """A context with no sources."""
    return Context(log=log)


@pytest.fixture
def english_source() -> MemoryCatSource:
    """A source with a complete en-US catalog and a bare en catalog."""
    return MemoryCatSource(
        {
            "en": make_cat(
                {"greeting": "Hello, $1!", "farewell": "Goodbye."},
                code="en",
                name="English",
            ),
            "en-US": make_cat(
                {"greeting": "Howdy, $1!", "app_name": "Catalog Demo"},
                code="en-US",
                name="American English",
                fallback="en",
            ),
        }
    )
