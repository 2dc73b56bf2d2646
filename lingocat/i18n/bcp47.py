"""BCP-47 language tag shape checks and truncation fallback.

Only the *shape* of a tag is validated (subtag lengths and character
classes, in the order the grammar allows them); subtags are never checked
against the IANA registry.  Matching is ASCII and case-insensitive.

Grammar handled::

    langtag   = language ["-" extlang{0,3}] ["-" script] ["-" region]
                *("-" variant) *("-" extension) ["-" privateuse]
    language  = 2*8ALPHA            extlang = 3ALPHA (after a 2-3 letter language)
    script    = 4ALPHA              region  = 2ALPHA / 3DIGIT
    variant   = 5*8alphanum / (DIGIT 3alphanum)
    extension = singleton 1*("-" 2*8alphanum)      singleton = alphanum except x
    privateuse = "x" 1*("-" 1*8alphanum)

Grandfathered ``i-`` tags are always rejected.
"""

from __future__ import annotations

import string

_ALPHA = frozenset(string.ascii_letters)
_DIGIT = frozenset(string.digits)
_ALNUM = _ALPHA | _DIGIT
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def fold_case(code: str) -> str:
    """ASCII-only lower-casing; the canonical form of a language code."""
    return code.translate(_ASCII_LOWER)


class _Cursor:
    """Position in a tag; every ``match_*`` method advances only on success."""

    __slots__ = ("text", "pos")

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _run(self, chars: frozenset[str], low: int, high: int) -> int | None:
        """Length of the run of *chars* at the cursor if within ``[low, high]``."""
        text = self.text
        end = self.pos
        while end < len(text) and end - self.pos <= high and text[end] in chars:
            end += 1
        count = end - self.pos
        if count < low or count > high:
            return None
        return count

    def match_hyphen(self) -> bool:
        if not self.at_end and self.text[self.pos] == "-":
            self.pos += 1
            return True
        return False

    def match_hyphen_or_end(self) -> bool:
        """End of input, or a hyphen that is followed by something."""
        if self.at_end:
            return True
        if self.text[self.pos] == "-" and self.pos + 1 < len(self.text):
            self.pos += 1
            return True
        return False

    def match_alpha(self, low: int, high: int) -> int | None:
        count = self._run(_ALPHA, low, high)
        if count is not None:
            self.pos += count
        return count

    def match_digit(self, low: int, high: int) -> bool:
        count = self._run(_DIGIT, low, high)
        if count is None:
            return False
        self.pos += count
        return True

    def match_alphanum(self, low: int, high: int) -> bool:
        count = self._run(_ALNUM, low, high)
        if count is None:
            return False
        self.pos += count
        return True

    def match_digit_prefixed(self, length: int) -> bool:
        """A subtag of exactly *length* alphanumerics starting with a digit."""
        if self.at_end or self.text[self.pos] not in _DIGIT:
            return False
        rest = _Cursor(self.text, self.pos + 1)
        if not rest.match_alphanum(length - 1, length - 1):
            return False
        self.pos = rest.pos
        return True

    def match_singleton(self) -> bool:
        """An extension singleton and its hyphen (``x`` is reserved)."""
        text = self.text
        if self.pos + 1 >= len(text):
            return False
        ch = text[self.pos]
        if ch in _ALNUM and ch not in "xX" and text[self.pos + 1] == "-":
            self.pos += 2
            return True
        return False

    def match_private_use_marker(self) -> bool:
        """``x`` followed by a hyphen; the hyphen is left for the caller."""
        text = self.text
        if self.pos + 1 < len(text) and text[self.pos] in "xX" and text[self.pos + 1] == "-":
            self.pos += 1
            return True
        return False

    def match_private_use_subtags(self) -> bool:
        """One or more ``-alphanum{1,8}`` groups running to the end."""
        while True:
            if not self.match_hyphen() or not self.match_alphanum(1, 8):
                return False
            if self.at_end:
                return True

    def match_optional(self, matcher) -> bool:
        """Run *matcher*; if it matched, require a hyphen or the end after it.

        Returns ``False`` only when the subtag matched but is not properly
        delimited.
        """
        if matcher():
            return self.match_hyphen_or_end()
        return True


def _is_grandfathered(code: str) -> bool:
    return len(code) >= 2 and code[0] in "iI" and code[1] == "-"


def _is_private_use(code: str) -> bool:
    return len(code) >= 2 and code[0] in "xX" and code[1] == "-"


def _match_language(cur: _Cursor) -> bool:
    """Primary language plus up to three extlang subtags."""
    count = cur.match_alpha(2, 8)
    if count is None or not cur.match_hyphen_or_end():
        return False
    if count in (2, 3) and not cur.at_end:
        for _ in range(3):
            if not cur.match_optional(lambda: cur.match_alpha(3, 3) is not None):
                return False
    return True


def _match_script(cur: _Cursor) -> bool:
    return cur.match_optional(lambda: cur.match_alpha(4, 4) is not None)


def _match_region(cur: _Cursor) -> bool:
    return cur.match_optional(lambda: cur.match_alpha(2, 2) is not None or cur.match_digit(3, 3))


def is_valid_language_code(code: str) -> bool:
    """Return ``True`` if *code* has the shape of a supported BCP-47 tag.

    >>> is_valid_language_code("zh-Hans-CN")
    True
    >>> is_valid_language_code("en--US")
    False
    """
    if len(code) < 2 or _is_grandfathered(code):
        return False
    cur = _Cursor(code)
    if _is_private_use(code):
        cur.pos = 1
        return cur.match_private_use_subtags()

    if not (_match_language(cur) and _match_script(cur) and _match_region(cur)):
        return False
    # Variants
    while cur.match_alphanum(5, 8) or cur.match_digit_prefixed(4):
        if not cur.match_hyphen_or_end():
            return False
    # Extensions
    while cur.match_singleton():
        if not cur.match_alphanum(2, 8) or not cur.match_hyphen_or_end():
            return False
        while cur.match_alphanum(2, 8):
            if not cur.match_hyphen_or_end():
                return False
    # Private use section
    if cur.match_private_use_marker() and not cur.match_private_use_subtags():
        return False
    return cur.at_end


def _subtag_before(cur: _Cursor, start: int) -> str:
    """Text consumed since *start*, without the trailing hyphen."""
    if cur.pos == start or cur.at_end:
        return cur.text[start : cur.pos]
    return cur.text[start : cur.pos - 1]


def simple_fallback(code: str) -> str | None:
    """Return the obvious less specific code for *code*, if there is one.

    In priority order:

    1. anything after ``language[-script][-region]`` is stripped;
    2. otherwise a script subtag is dropped (``zh-Hant-TW`` → ``zh-TW``);
    3. otherwise a region subtag is dropped (``en-US`` → ``en``).

    Private-use and grandfathered codes never fall back.

    >>> simple_fallback("en-Latn-US-variant")
    'en-Latn-US'
    >>> simple_fallback("en") is None
    True
    """
    if len(code) < 2 or _is_grandfathered(code) or _is_private_use(code):
        return None
    cur = _Cursor(code)
    if not _match_language(cur):
        return None
    language = _subtag_before(cur, 0)

    start = cur.pos
    if not _match_script(cur):
        return None
    script = _subtag_before(cur, start)

    start = cur.pos
    if not _match_region(cur):
        return None
    region = _subtag_before(cur, start)

    if not cur.at_end:
        return "-".join(part for part in (language, script, region) if part)
    if script:
        return "-".join(part for part in (language, region) if part)
    if region:
        return language
    return None
