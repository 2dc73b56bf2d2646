"""Catalog text format reader and per-language metadata.

A catalog ("cat") is line-oriented UTF-8 text::

    : comment lines start with a colon and are ignored everywhere
    Language-Code: fr-CA
    Language-Name: français canadien
    Language-Name-en: Canadian French
    Fallback: fr

    greeting
    Bonjour, $1!
    .

The header block runs from the first non-blank line to the first blank
line.  Each entry is a key line followed by its value lines, terminated by
a line holding a single ``.``.  Malformed input is reported through the
given logger and never aborts the read.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import IO

from pydantic import BaseModel

from lingocat.i18n.template import SubstitutableString

_SAFE_KEY = re.compile(r"[A-Za-z0-9_]+")

HEADER_LANGUAGE_CODE = "language-code"
HEADER_LANGUAGE_NAME = "language-name"
HEADER_LANGUAGE_NAME_EN = "language-name-en"
HEADER_FALLBACK = "fallback"


class LangInfo(BaseModel):
    """Metadata for one available language.

    Populated lazily from catalog headers; any field no catalog provided
    stays empty.
    """

    # Code as spelled by the first source that reported it.
    code: str
    # Language name in the language itself.
    native_name: str = ""
    # Language name in English.
    english_name: str = ""
    # Code to load before this one; empty means no explicit fallback.
    fallback: str = ""
    loaded: bool = False

    @property
    def is_english(self) -> bool:
        """``en`` or ``en-*`` (case-insensitive)."""
        code = self.code
        return len(code) >= 2 and code[:2].lower() == "en" and (len(code) == 2 or code[2] == "-")


@dataclass(frozen=True, slots=True)
class Header:
    """One ``Name: value`` header line; *name* is lower-cased."""

    name: str
    value: str
    line: int


def read_lines(stream: IO[bytes] | IO[str] | Iterable[bytes | str]) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, text)`` for every non-comment line of *stream*.

    Line numbers count comment lines too.  Trailing ``\\r\\n`` / ``\\n`` are
    removed; bytes are decoded as UTF-8 with replacement.
    """
    for lineno, raw in enumerate(stream, start=1):
        line = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        if line.endswith("\n"):
            line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
        if line.startswith(":"):
            continue
        yield lineno, line


class CatalogReader:
    """Reads one opened catalog stream.

    Call :meth:`read_headers` and/or :meth:`read_entries`; the latter skips
    the header block silently when the headers were not read first.

    Args:
        stream: Readable binary (or text) stream.
        code: Language code the catalog was opened for, used in warnings.
        log: Diagnostic sink.
        source: Optional source label included in log records.
    """

    def __init__(
        self,
        stream: IO[bytes] | IO[str] | Iterable[bytes | str],
        code: str,
        log: logging.Logger,
        source: str | None = None,
    ) -> None:
        self._lines = read_lines(stream)
        self.code = code
        self._log = log
        self._source = source
        self._lineno = 0
        self._headers_done = False

    def _warn(self, event: str, msg: str, *args: object, line: int | None = None) -> None:
        self._log.warning(
            "%s: " + msg,
            self.code,
            *args,
            extra={"event": event, "language": self.code, "line": line, "source": self._source},
        )

    def _next(self) -> str | None:
        item = next(self._lines, None)
        if item is None:
            return None
        self._lineno, line = item
        return line

    def _skip_blank(self) -> str | None:
        """Return the next non-blank line, or ``None`` at end of stream."""
        while True:
            line = self._next()
            if line is None or line != "":
                return line

    # --- Headers ----------------------------------------------------------

    def read_headers(self) -> list[Header]:
        """Parse the header block up to (and including) its blank line."""
        headers: list[Header] = []
        if self._headers_done:
            return headers
        self._headers_done = True
        line = self._skip_blank()
        while line:
            name, sep, value = line.partition(":")
            if not sep:
                self._warn("invalid_header", "line %d gives an invalid header", self._lineno, line=self._lineno)
            else:
                headers.append(Header(name.lower(), value.lstrip(" \t"), self._lineno))
            line = self._next()
        return headers

    def skip_headers(self) -> None:
        """Consume the header block without parsing or reporting it."""
        if self._headers_done:
            return
        self._headers_done = True
        line = self._skip_blank()
        while line:
            line = self._next()

    # --- Entries ----------------------------------------------------------

    def _read_value(self) -> str:
        parts: list[str] = []
        terminated = False
        line = self._next()
        if line == ".":
            self._warn("blank_string", "line %d gives a blank string", self._lineno, line=self._lineno)
            terminated = True
        elif line is not None:
            parts.append(line)
            while True:
                line = self._next()
                if line is None:
                    break
                if line == ".":
                    terminated = True
                    break
                parts.append(line)
        if not terminated:
            self._warn("unterminated_string", "unterminated string", line=self._lineno)
        return "\n".join(parts)

    def read_raw_entries(self) -> Iterator[tuple[str, str]]:
        """Yield ``(key, raw_value)`` pairs in file order."""
        self.skip_headers()
        while True:
            key = self._skip_blank()
            if key is None:
                return
            if not _SAFE_KEY.fullmatch(key):
                self._warn(
                    "unsafe_key",
                    "line %d designates an unsafely-named key "
                    "(safe keys contain only letters, numbers, and underscores)",
                    self._lineno,
                    line=self._lineno,
                )
            yield key, self._read_value()

    def read_entries(self) -> Iterator[tuple[str, SubstitutableString]]:
        """Yield ``(key, template)`` pairs, compiling each value as it is read."""
        for key, raw in self.read_raw_entries():
            yield key, SubstitutableString(raw)
