"""Localization catalogs: fallback-chain loading and template rendering.

Provides the ``Context`` catalog resolver and a process-wide ``t(key,
*args)`` helper backed by a context built from ``Settings``.

Fallback behaviour:
- Unknown language → BCP-47 truncation (``fr-CA`` → ``fr``), or an
  explicit ``Fallback:`` catalog header.
- Unknown key → ``__MISSING_KEY__`` template, else ``<No such key: KEY>``.

Usage::

    from lingocat.i18n import t

    text = t("greeting", "World")   # → "Hello, World!"
    text = t("nonexistent_key")     # → "<No such key: nonexistent_key>"
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lingocat.core.logging import setup_logging
from lingocat.i18n.bcp47 import fold_case, is_valid_language_code, simple_fallback
from lingocat.i18n.catalog import CatalogReader, LangInfo
from lingocat.i18n.context import DEFAULT_LANGUAGE, MISSING_KEY, Context
from lingocat.i18n.key import Key, KeyArena, StaleKeyError, calculate_hash
from lingocat.i18n.sources import CatSource, FileCatSource, MemoryCatSource
from lingocat.i18n.template import NO_SUCH_KEY, SubstitutableString

if TYPE_CHECKING:
    from lingocat.core.config import Settings

__all__ = [
    "DEFAULT_LANGUAGE",
    "MISSING_KEY",
    "NO_SUCH_KEY",
    "CatSource",
    "CatalogReader",
    "Context",
    "FileCatSource",
    "Key",
    "KeyArena",
    "LangInfo",
    "MemoryCatSource",
    "StaleKeyError",
    "SubstitutableString",
    "calculate_hash",
    "create_context",
    "fold_case",
    "get_context",
    "is_valid_language_code",
    "reset_context",
    "simple_fallback",
    "supported_languages",
    "t",
]

logger = logging.getLogger(__name__)

_context: Context | None = None


def create_context(settings: Settings, log: logging.Logger | None = None) -> Context:
    """Build a ``Context`` wired from *settings* (no language loaded yet).

    Args:
        settings: Library settings; ``CATALOG_DIR`` adds a ``FileCatSource``.
        log: Optional diagnostic sink passed to the context.

    Returns:
        A ``Context`` with its sources registered.
    """
    ctx = Context(log=log, max_render_depth=settings.MAX_RENDER_DEPTH)
    if settings.use_catalog_dir:
        ctx.add_cat_source(FileCatSource(settings.CATALOG_DIR, suffix=settings.CATALOG_SUFFIX))
    return ctx


def get_context() -> Context:
    """Return the process-wide context, creating it on first use.

    The context uses ``get_settings()`` and is set to the system language
    (``DEFAULT_LANGUAGE`` when the environment names nothing available).
    Building it also installs JSON logging at ``LOG_LEVEL``.
    """
    global _context
    if _context is None:
        from lingocat.core.config import get_settings

        settings = get_settings()
        setup_logging(settings.LOG_LEVEL)
        ctx = create_context(settings)
        language = ctx.get_system_language(settings.DEFAULT_LANGUAGE)
        logger.info("Loading catalogs for %s", language, extra={"event": "context_init", "language": language})
        _context = ctx.set_language(language)
    return _context


def reset_context() -> None:
    """Drop the process-wide context so the next ``get_context()`` rebuilds it."""
    global _context
    _context = None


def t(key: Key | str, *args: str) -> str:
    """Return the localised text for *key* with positional *args*.

    Never raises for unknown keys; see the module docstring.
    """
    return get_context().get(key, args)


def supported_languages() -> list[str]:
    """Return the sorted canonical (lower-case) codes with catalogs available."""
    return [fold_case(info.code) for info in get_context().languages()]
