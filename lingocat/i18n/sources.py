"""Catalog providers (``CatSource``).

A source knows which language codes it has catalogs for and opens the
catalog stream for one code.  ``Context`` consults its sources in the
order they were added.
"""

from __future__ import annotations

import io
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import IO

from lingocat.i18n.bcp47 import is_valid_language_code

logger = logging.getLogger(__name__)


class CatSource(ABC):
    """Provider of catalogs for one or more languages."""

    @abstractmethod
    def get_available_cats(self) -> Iterable[str]:
        """Return the language codes this source can open.

        Codes come in source-defined order and case and may repeat.
        """

    @abstractmethod
    def open_cat(self, code: str) -> IO[bytes] | None:
        """Open the catalog for exactly *code*, or return ``None``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FileCatSource(CatSource):
    """Catalogs stored as files named ``<prefix><code><suffix>``.

    *basepath* ending in a path separator names a directory.  Otherwise
    its last component is a filename prefix inside the parent directory,
    e.g. ``"locale/app-"`` matches ``locale/app-fr_CA.utxt``.  Hyphens in a
    code map to underscores in the filename.

    Args:
        basepath: Directory (with trailing separator) or directory + prefix.
        suffix: Filename suffix, including the dot.
    """

    def __init__(self, basepath: str | os.PathLike[str], suffix: str = ".utxt") -> None:
        self.basepath = os.fspath(basepath)
        self.suffix = suffix
        cut = max(self.basepath.rfind("/"), self.basepath.rfind(os.sep)) + 1
        self.dirpath = self.basepath[:cut] or "."
        self.prefix = self.basepath[cut:]

    def get_available_cats(self) -> Iterable[str]:
        try:
            with os.scandir(self.dirpath) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            logger.debug(
                "Cannot list catalog directory %s: %s",
                self.dirpath,
                exc,
                extra={"event": "catalog_dir_unreadable", "source": repr(self)},
            )
            return []
        codes: list[str] = []
        min_len = len(self.prefix) + len(self.suffix)
        for entry in entries:
            name = entry.name
            if name.startswith(".") or not entry.is_file(follow_symlinks=False):
                continue
            if len(name) <= min_len or not name.startswith(self.prefix) or not name.endswith(self.suffix):
                continue
            code = name[len(self.prefix) : len(name) - len(self.suffix)].replace("_", "-")
            if is_valid_language_code(code):
                codes.append(code)
        return codes

    def open_cat(self, code: str) -> IO[bytes] | None:
        path = self.basepath + code.replace("-", "_") + self.suffix
        try:
            return open(path, "rb")
        except OSError:
            return None

    def __repr__(self) -> str:
        return f"FileCatSource({self.basepath!r}, suffix={self.suffix!r})"


class MemoryCatSource(CatSource):
    """Catalogs held in memory, keyed by language code.

    Values may be ``str`` (encoded as UTF-8) or ``bytes``.
    """

    def __init__(self, cats: Mapping[str, str | bytes] | None = None) -> None:
        self._cats: dict[str, bytes] = {}
        for code, text in (cats or {}).items():
            self.add(code, text)

    def add(self, code: str, text: str | bytes) -> MemoryCatSource:
        self._cats[code] = text.encode("utf-8") if isinstance(text, str) else bytes(text)
        return self

    def get_available_cats(self) -> Iterable[str]:
        return list(self._cats)

    def open_cat(self, code: str) -> IO[bytes] | None:
        data = self._cats.get(code)
        if data is None:
            return None
        return io.BytesIO(data)

    def __repr__(self) -> str:
        return f"MemoryCatSource({sorted(self._cats)!r})"
