"""Catalog resolution and rendering (``Context``).

A ``Context`` owns an ordered list of ``CatSource`` objects.  On
``set_language`` it walks the fallback chain of the requested language,
reads every relevant catalog (fallbacks first, so the language's own
entries win; later sources override earlier ones), compiles each value
into a ``SubstitutableString`` and interns the keys into a single arena.

Nothing here raises on bad catalog data or unknown keys: problems are
reported to the diagnostic logger and a degraded result is produced.

Usage::

    ctx = Context().add_cat_source(FileCatSource("locale/"))
    ctx.set_language(ctx.get_system_language())
    print(ctx.get("greeting", ["World"]))
"""

from __future__ import annotations

import io
import logging
import os
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import TextIO

from lingocat.i18n.bcp47 import fold_case, is_valid_language_code, simple_fallback
from lingocat.i18n.catalog import (
    HEADER_FALLBACK,
    HEADER_LANGUAGE_CODE,
    HEADER_LANGUAGE_NAME,
    HEADER_LANGUAGE_NAME_EN,
    CatalogReader,
    LangInfo,
)
from lingocat.i18n.key import Key, KeyArena
from lingocat.i18n.sources import CatSource
from lingocat.i18n.template import NO_SUCH_KEY, RECURSION_TOO_DEEP, SubstitutableString

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en-US"

# Looked up (with the missing key's name as $1) when a key is not found.
MISSING_KEY = Key("__MISSING_KEY__")

# Environment variables consulted by ``get_system_language``, in order.
LOCALE_VARS = ("LANG", "LANGSPEC", "LANGUAGE", "LC_MESSAGES", "LC_ALL")

DEFAULT_MAX_RENDER_DEPTH = 64


def _as_key(key: Key | str) -> Key:
    return key if isinstance(key, Key) else Key(key)


class Context:
    """Loaded catalogs for one language, plus the sources they come from.

    Args:
        log: Diagnostic sink for catalog warnings and missing keys.
            Defaults to this module's logger.
        max_render_depth: Maximum nesting of ``$(key)`` references rendered
            from one top-level call.
    """

    def __init__(
        self,
        log: logging.Logger | None = None,
        *,
        max_render_depth: int = DEFAULT_MAX_RENDER_DEPTH,
    ) -> None:
        if max_render_depth < 1:
            raise ValueError("max_render_depth must be at least 1")
        self._log = log or logger
        self._max_render_depth = max_render_depth
        self._cat_sources: list[CatSource] = []
        self._langinfo: dict[str, LangInfo] = {}
        self._langinfo_dirty = True
        self._arena = KeyArena()
        self._loaded_keys: dict[Key, SubstitutableString] = {}
        self._language: str | None = None

    # -----------------------------------------------------------------------
    # Sources
    # -----------------------------------------------------------------------

    def clear_cat_sources(self) -> Context:
        """Forget every source (loaded keys stay until the next ``set_language``)."""
        self._cat_sources.clear()
        self._langinfo_dirty = True
        return self

    def add_cat_source(self, source: CatSource) -> Context:
        """Append *source*; its catalogs override those of earlier sources.

        Nothing is read until ``set_language`` is called.
        """
        self._cat_sources.append(source)
        self._langinfo_dirty = True
        return self

    @property
    def cat_sources(self) -> tuple[CatSource, ...]:
        return tuple(self._cat_sources)

    @property
    def max_render_depth(self) -> int:
        return self._max_render_depth

    # -----------------------------------------------------------------------
    # Language table
    # -----------------------------------------------------------------------

    def _maybe_get_language_list(self) -> None:
        """Rebuild the canonical-code → LangInfo table if sources changed."""
        if not self._langinfo_dirty:
            return
        table: dict[str, LangInfo] = {}
        for source in self._cat_sources:
            for code in source.get_available_cats():
                canonical = fold_case(code)
                existing = table.get(canonical)
                if existing is None:
                    table[canonical] = LangInfo(code=code)
                elif existing.code != code:
                    self._log.warning(
                        "Multiple cases for %s: %s and %s are both present. "
                        "Only the first one seen will be used!",
                        canonical,
                        existing.code,
                        code,
                        extra={"event": "language_case_conflict", "language": canonical},
                    )
        self._langinfo = table
        self._langinfo_dirty = False

    def _warn_lang(self, info: LangInfo, event: str, msg: str, *args: object) -> None:
        self._log.warning("%s: " + msg, info.code, *args, extra={"event": event, "language": info.code})

    def _maybe_load_lang_info(self, info: LangInfo) -> None:
        """Fill *info* from the headers of every catalog for its code, once."""
        if info.loaded:
            return
        info.loaded = True
        got_some = got_code = got_name = got_enname = got_fallback = False
        for source in self._cat_sources:
            if got_code and got_name and got_enname and got_fallback:
                break
            stream = source.open_cat(info.code)
            if stream is None:
                continue
            got_some = True
            with stream:
                headers = CatalogReader(stream, info.code, self._log, source=repr(source)).read_headers()
            for header in headers:
                if header.name == HEADER_LANGUAGE_CODE:
                    got_code = True
                    if header.value != info.code:
                        self._warn_lang(
                            info, "language_code_mismatch", "Code in file doesn't match code in filename"
                        )
                elif header.name == HEADER_LANGUAGE_NAME:
                    if not got_name:
                        got_name = True
                        info.native_name = header.value
                        if not got_enname and info.is_english:
                            # An English language names itself in English.
                            got_enname = True
                            info.english_name = info.native_name
                    elif header.value != info.native_name:
                        self._warn_lang(
                            info, "conflicting_native_name", "Different files give different native names"
                        )
                elif header.name == HEADER_LANGUAGE_NAME_EN:
                    if not got_enname:
                        got_enname = True
                        info.english_name = header.value
                    elif header.value != info.english_name:
                        self._warn_lang(
                            info, "conflicting_english_name", "Different files give different English names"
                        )
                elif header.name == HEADER_FALLBACK:
                    if not got_fallback:
                        got_fallback = True
                        info.fallback = header.value
                    elif header.value != info.fallback:
                        self._warn_lang(
                            info,
                            "conflicting_fallback",
                            "Different files give different fallback languages",
                        )
        if not got_some:
            self._log.warning(
                "Thought we could handle %s, but we couldn't actually load any cats for it!",
                info.code,
                extra={"event": "unloadable_language", "language": info.code},
            )
            return
        for present, header_name in (
            (got_code, "Language-Code"),
            (got_name, "Language-Name"),
            (got_enname, "Language-Name-en"),
        ):
            if not present:
                self._warn_lang(info, "missing_header", "No cat provided a %s header.", header_name)

    def languages(self) -> list[LangInfo]:
        """Every available language, sorted by canonical code, headers loaded."""
        self._maybe_get_language_list()
        infos = [self._langinfo[code] for code in sorted(self._langinfo)]
        for info in infos:
            self._maybe_load_lang_info(info)
        return infos

    def get_lang_info(self, code: str) -> LangInfo | None:
        """Return the populated ``LangInfo`` for *code* (any case), if available."""
        self._maybe_get_language_list()
        info = self._langinfo.get(fold_case(code))
        if info is not None:
            self._maybe_load_lang_info(info)
        return info

    def acceptable_language(self, code: str) -> bool:
        """``True`` if *code*, or a simple fallback of it, has catalogs."""
        self._maybe_get_language_list()
        code = fold_case(code)
        while code not in self._langinfo:
            fallback = simple_fallback(code)
            if fallback is None:
                return False
            code = fallback
        return True

    def get_system_language(
        self,
        default_choice: str = DEFAULT_LANGUAGE,
        environ: Mapping[str, str] | None = None,
    ) -> str:
        """Guess the user's language from the locale environment variables.

        ``fr_CA.UTF-8`` is read as ``fr-ca``.  The first value that is a
        valid code and ``acceptable_language`` wins; otherwise
        *default_choice* is returned.
        """
        env = os.environ if environ is None else environ
        for var in LOCALE_VARS:
            value = env.get(var)
            if not value:
                continue
            code = fold_case(value.split(".", 1)[0].replace("_", "-"))
            if is_valid_language_code(code) and self.acceptable_language(code):
                return code
        return default_choice

    # -----------------------------------------------------------------------
    # Loading
    # -----------------------------------------------------------------------

    def _load_language(
        self,
        code: str,
        intermap: dict[str, SubstitutableString],
        chain: frozenset[str],
    ) -> None:
        """Load *code* (already case-folded) and its fallbacks into *intermap*."""
        info = self._langinfo.get(code)
        if info is None:
            fallback = simple_fallback(code)
            if fallback is not None:
                self._load_language(fallback, intermap, chain)
            return
        if code in chain:
            self._warn_lang(info, "fallback_cycle", "Fallback chain loops back to this language; stopping")
            return
        chain = chain | {code}
        self._maybe_load_lang_info(info)
        if info.fallback:
            self._load_language(fold_case(info.fallback), intermap, chain)
        for source in self._cat_sources:
            stream = source.open_cat(info.code)
            if stream is None:
                continue
            with stream:
                reader = CatalogReader(stream, info.code, self._log, source=repr(source))
                for key, template in reader.read_entries():
                    intermap[key] = template

    def set_language(self, language: str = DEFAULT_LANGUAGE) -> Context:
        """Drop all loaded keys and load every catalog relevant to *language*.

        When nothing can be loaded the context is left empty (``bool(ctx)``
        is ``False``) and every lookup falls through to missing-key text.
        """
        self._maybe_get_language_list()
        self._loaded_keys = {}
        self._language = language
        intermap: dict[str, SubstitutableString] = {}
        self._load_language(fold_case(language), intermap, frozenset())

        encoded = [(name.encode("utf-8"), template) for name, template in intermap.items()]
        self._arena.reset(sum(len(name) for name, _ in encoded))
        self._loaded_keys = {self._arena.intern(name): template for name, template in encoded}
        if not self._loaded_keys:
            self._log.warning(
                "No catalogs could be loaded for %s",
                language,
                extra={"event": "no_catalogs", "language": language},
            )
        return self

    @property
    def language(self) -> str | None:
        """The code last passed to ``set_language`` (``None`` before that)."""
        return self._language

    @property
    def loaded_keys(self) -> Mapping[Key, SubstitutableString]:
        return MappingProxyType(self._loaded_keys)

    def __bool__(self) -> bool:
        return bool(self._loaded_keys)

    def __len__(self) -> int:
        return len(self._loaded_keys)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (Key, str)):
            return False
        return _as_key(key) in self._loaded_keys

    # -----------------------------------------------------------------------
    # Lookup and rendering
    # -----------------------------------------------------------------------

    def lookup(self, key: Key | str) -> SubstitutableString | None:
        """Return the compiled template for *key*, or ``None``.

        You probably want :meth:`get` instead.
        """
        return self._loaded_keys.get(_as_key(key))

    def out(self, out: TextIO, key: Key | str, args: Sequence[str] = (), *, depth: int = 0) -> None:
        """Render *key* with positional *args* into *out*.

        Unknown keys render ``__MISSING_KEY__`` (or the built-in
        ``<No such key: $1>``) with the key name as ``$1``.  *depth* counts the
        enclosing templates; nested ``$(key)`` references pass it down.
        """
        key = _as_key(key)
        if depth >= self._max_render_depth:
            self._log.warning(
                "Key reference nesting deeper than %d at %s",
                self._max_render_depth,
                key.name,
                extra={"event": "render_depth_exceeded", "key": key.name, "language": self._language},
            )
            RECURSION_TOO_DEEP.render(self, out, [key.name])
            return
        template = self.lookup(key)
        if template is None:
            name = key.name
            self._log.warning(
                "Missing key: %s",
                name,
                extra={"event": "missing_key", "key": name, "language": self._language},
            )
            args = [name]
            template = self.lookup(MISSING_KEY) or NO_SUCH_KEY
        template.render(self, out, args, depth + 1)

    def get(self, key: Key | str, args: Sequence[str] = ()) -> str:
        """Return the rendered text for *key* with positional *args*."""
        buf = io.StringIO()
        self.out(buf, key, args)
        return buf.getvalue()
