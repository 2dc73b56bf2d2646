"""Interned, hashed identifiers for translatable strings.

A ``Key`` addresses one template in a loaded catalog.  It comes in two
flavours sharing one hashing/equality implementation:

- **owned** — holds a private ``bytes`` copy of its name;
- **borrowed** — a view (offset + length) into someone else's buffer,
  typically the ``KeyArena`` owned by a ``Context`` or the storage of a
  compiled template.

Both flavours hash to the same value for the same name and compare equal
to each other, so a dict populated with borrowed keys can be queried
with owned ones (and vice versa).
"""

from __future__ import annotations

from functools import total_ordering

# Fractional hex digits of pi; more of them serve as the scrambler.
HASH_SEED = 0x243F6A88
_SCRAMBLER = 0x85A308D3
_MASK = 0xFFFFFFFF


class StaleKeyError(RuntimeError):
    """Raised when a borrowed key outlives the arena generation it came from."""


def calculate_hash(data: bytes | bytearray | memoryview, start: int = 0, end: int | None = None) -> int:
    """Return the 32-bit roll-and-scramble hash of ``data[start:end]``.

    ``h("") == HASH_SEED``; ``h(s + c) == rol(h(s), 5) + c * 0x85A308D3``.
    """
    if end is None:
        end = len(data)
    h = HASH_SEED
    for i in range(start, end):
        h = (((h << 5) | (h >> 27)) + data[i] * _SCRAMBLER) & _MASK
    return h


def _as_bytes(name: str | bytes | bytearray | memoryview) -> bytes:
    if isinstance(name, str):
        return name.encode("utf-8")
    if isinstance(name, (bytes, bytearray, memoryview)):
        return bytes(name)
    raise TypeError(f"Key name must be str or bytes-like, not {type(name).__name__}")


@total_ordering
class Key:
    """Identifier of a translatable string.

    ``Key("greeting")`` builds an owned key.  Use :meth:`borrow` for a view
    into an existing buffer.
    """

    __slots__ = ("_buffer", "_offset", "_length", "_hash", "_arena", "_generation", "_owned")

    def __init__(self, name: str | bytes | bytearray | memoryview, hash_code: int | None = None) -> None:
        data = _as_bytes(name)
        self._buffer: bytes | bytearray = data
        self._offset = 0
        self._length = len(data)
        self._hash = calculate_hash(data) if hash_code is None else hash_code & _MASK
        self._arena: KeyArena | None = None
        self._generation = 0
        self._owned = True

    @classmethod
    def borrow(
        cls,
        buffer: bytes | bytearray,
        offset: int,
        length: int,
        hash_code: int | None = None,
        *,
        arena: KeyArena | None = None,
    ) -> Key:
        """Build a key viewing ``buffer[offset:offset + length]`` without copying.

        When *arena* is given the key is tagged with the arena's current
        generation and becomes unreadable once the arena is reset.
        """
        key = cls.__new__(cls)
        key._buffer = buffer
        key._offset = offset
        key._length = length
        key._hash = calculate_hash(buffer, offset, offset + length) if hash_code is None else hash_code & _MASK
        key._arena = arena
        key._generation = arena.generation if arena is not None else 0
        key._owned = False
        return key

    # --- Accessors --------------------------------------------------------

    @property
    def is_owned(self) -> bool:
        return self._owned

    @property
    def hash_code(self) -> int:
        return self._hash

    @property
    def name_bytes(self) -> bytes:
        """The raw name bytes.

        Raises:
            StaleKeyError: If the key was borrowed from an arena that has
                since moved on to a new generation.
        """
        if self._arena is not None and self._arena.generation != self._generation:
            raise StaleKeyError(
                f"key borrowed from arena generation {self._generation}, "
                f"arena is now at generation {self._arena.generation}"
            )
        if self._owned:
            return self._buffer
        return bytes(self._buffer[self._offset : self._offset + self._length])

    @property
    def name(self) -> str:
        return self.name_bytes.decode("utf-8", errors="replace")

    def owned(self) -> Key:
        """Return an owned copy of this key (``self`` if already owned)."""
        if self.is_owned:
            return self
        return Key(self.name_bytes, self._hash)

    def __len__(self) -> int:
        return self._length

    # --- Hashing / comparison --------------------------------------------

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return (
            self._hash == other._hash
            and self._length == other._length
            and self.name_bytes == other.name_bytes
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self.name_bytes < other.name_bytes

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        kind = "owned" if self.is_owned else "borrowed"
        return f"Key({self.name!r}, hash=0x{self._hash:08x}, {kind})"


class KeyArena:
    """Single buffer owning the name bytes of every currently loaded key.

    ``reset(size)`` drops the previous generation as a whole and
    preallocates room for the next one; ``intern(name)`` copies a name in
    and hands back a borrowed :class:`Key` tagged with the generation.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._used = 0
        self.generation = 0

    def reset(self, size: int = 0) -> None:
        self.generation += 1
        self._buffer = bytearray(size)
        self._used = 0

    def intern(self, name: str | bytes) -> Key:
        data = _as_bytes(name)
        start = self._used
        end = start + len(data)
        if end > len(self._buffer):
            self._buffer.extend(bytes(end - len(self._buffer)))
        self._buffer[start:end] = data
        self._used = end
        return Key.borrow(self._buffer, start, len(data), arena=self)

    @property
    def size(self) -> int:
        return self._used
