"""Compiled translation templates (``SubstitutableString``).

Source text grammar:

- ``\\c`` — literal *c* when *c* is printable ASCII (33–126); any other
  character after the backslash is dropped together with the backslash.
- ``$1`` … ``$99`` — positional argument (1-based).
- ``$(name)`` — the rendered text of another key, *name* made of
  ``[A-Za-z0-9_]``.  An empty or unterminated group is plain text.
- Everything else is literal.  A ``$`` that does not start a reference is
  copied together with the character that follows it.

Compilation produces a byte ``storage`` buffer plus an instruction list.
Templates without any placeholder keep an empty instruction list and
render ``storage`` verbatim.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

from lingocat.i18n.key import Key, calculate_hash

if TYPE_CHECKING:
    from lingocat.i18n.context import Context

_NAME_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_")


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Literal:
    """Copy ``storage[start:start + length]`` to the output."""

    start: int
    length: int


@dataclass(frozen=True, slots=True)
class Positional:
    """Emit argument *index* (1-based), or ``$index`` when it was not supplied."""

    index: int


@dataclass(frozen=True, slots=True)
class KeyRef:
    """Render the key named by ``storage[start:start + length]``."""

    start: int
    length: int
    hash_code: int


Instruction = Literal | Positional | KeyRef


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------


class _Compiler:
    """Single pass over the raw text, filling storage and instructions."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        self.pos = 0
        self.storage = bytearray()
        self.code: list[Instruction] = []
        self.run_start = 0

    def _emit_char(self, ch: str) -> None:
        self.storage += ch.encode("utf-8")

    def _close_run(self, end: int) -> None:
        if self.run_start != end:
            self.code.append(Literal(self.run_start, end - self.run_start))

    def _key_ref(self) -> bool:
        """Try ``(name)`` at the cursor (just past ``$``).

        Returns ``True`` and advances past ``)`` on success; otherwise the
        cursor and storage are left untouched.
        """
        raw = self.raw
        i = self.pos + 1
        name_start = len(self.storage)
        while i < len(raw) and raw[i] in _NAME_CHARS:
            i += 1
        if i >= len(raw) or raw[i] != ")" or i == self.pos + 1:
            return False
        self.storage += raw[self.pos + 1 : i].encode("ascii")
        name_end = len(self.storage)
        self._close_run(name_start)
        self.code.append(
            KeyRef(name_start, name_end - name_start, calculate_hash(self.storage, name_start, name_end))
        )
        self.run_start = name_end
        self.pos = i + 1
        return True

    def _positional(self) -> bool:
        raw = self.raw
        if self.pos >= len(raw) or not "1" <= raw[self.pos] <= "9":
            return False
        index = ord(raw[self.pos]) - ord("0")
        self.pos += 1
        if self.pos < len(raw) and "0" <= raw[self.pos] <= "9":
            index = index * 10 + ord(raw[self.pos]) - ord("0")
            self.pos += 1
        self._close_run(len(self.storage))
        self.code.append(Positional(index))
        self.run_start = len(self.storage)
        return True

    def run(self) -> tuple[bytes, list[Instruction]]:
        raw = self.raw
        while self.pos < len(raw):
            ch = raw[self.pos]
            self.pos += 1
            if ch == "\\":
                if self.pos < len(raw):
                    nxt = raw[self.pos]
                    if 33 <= ord(nxt) <= 126:
                        self._emit_char(nxt)
                    self.pos += 1
            elif ch == "$":
                if self._positional():
                    continue
                if self.pos < len(raw) and raw[self.pos] == "(" and self._key_ref():
                    continue
                self._emit_char("$")
                if self.pos < len(raw):
                    self._emit_char(raw[self.pos])
                    self.pos += 1
            else:
                self._emit_char(ch)
        if self.code:
            self._close_run(len(self.storage))
        return bytes(self.storage), self.code


# ---------------------------------------------------------------------------
# Public type
# ---------------------------------------------------------------------------


class SubstitutableString:
    """A translation template compiled once and rendered many times.

    Args:
        raw: Source text in the template grammar (see module docstring).
    """

    __slots__ = ("_storage", "_code", "_text")

    def __init__(self, raw: str = "") -> None:
        self._storage, self._code = _Compiler(raw).run()
        self._text = self._storage.decode("utf-8")

    @property
    def storage(self) -> bytes:
        return self._storage

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        return tuple(self._code)

    @property
    def is_plain(self) -> bool:
        """``True`` when the template has no placeholders at all."""
        return not self._code

    def render(self, ctx: Context, out: TextIO, args: Sequence[str] = (), depth: int = 0) -> None:
        """Write the template to *out*, substituting *args* and nested keys.

        Key references are rendered through ``ctx.out`` with no arguments,
        at the *depth* of this template.
        """
        if not self._code:
            out.write(self._text)
            return
        storage = self._storage
        for op in self._code:
            if isinstance(op, Literal):
                out.write(storage[op.start : op.start + op.length].decode("utf-8"))
            elif isinstance(op, Positional):
                if op.index <= len(args):
                    out.write(args[op.index - 1])
                else:
                    out.write(f"${op.index}")
            else:
                ctx.out(out, Key.borrow(storage, op.start, op.length, op.hash_code), depth=depth)

    __call__ = render

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SubstitutableString):
            return NotImplemented
        return self._storage == other._storage and self._code == other._code

    def __hash__(self) -> int:
        return hash((self._storage, tuple(self._code)))

    def __repr__(self) -> str:
        return f"SubstitutableString({self._text!r}, instructions={len(self._code)})"


NO_SUCH_KEY = SubstitutableString("<No such key: $1>")
RECURSION_TOO_DEEP = SubstitutableString("<Key recursion too deep: $1>")
