"""Tests for lingocat.i18n.sources — file and in-memory catalog providers."""

from __future__ import annotations

import os

import pytest

from lingocat.i18n.context import Context
from lingocat.i18n.sources import CatSource, FileCatSource, MemoryCatSource
from tests.conftest import make_cat


@pytest.fixture
def catalog_dir(tmp_path):
    """A directory with a few catalogs and some files that must be ignored."""
    (tmp_path / "en.utxt").write_text(make_cat({"greeting": "Hello"}, code="en", name="English"))
    (tmp_path / "en_US.utxt").write_text(make_cat({"greeting": "Howdy"}, code="en-US", name="US", fallback="en"))
    (tmp_path / "fr.utxt").write_text(make_cat({"greeting": "Bonjour"}, code="fr", name="français"))
    (tmp_path / "app-de.utxt").write_text(make_cat({"greeting": "Hallo"}, code="de", name="Deutsch"))
    (tmp_path / ".hidden.utxt").write_text("x")
    (tmp_path / "notes.txt").write_text("x")
    (tmp_path / "bad__code.utxt").write_text("x")
    (tmp_path / ".utxt").write_text("x")
    (tmp_path / "sub.utxt").mkdir()
    return tmp_path


# ---------------------------------------------------------------------------
# FileCatSource
# ---------------------------------------------------------------------------


class TestFileCatSource:
    def test_directory_listing(self, catalog_dir):
        src = FileCatSource(f"{catalog_dir}{os.sep}")
        # "app-de" is itself a well-formed tag; "bad--code" is not.
        assert list(src.get_available_cats()) == ["app-de", "en", "en-US", "fr"]

    def test_symlinks_not_listed(self, catalog_dir):
        try:
            (catalog_dir / "de.utxt").symlink_to(catalog_dir / "app-de.utxt")
        except OSError:
            pytest.skip("symlinks not supported here")
        src = FileCatSource(f"{catalog_dir}{os.sep}")
        assert "de" not in list(src.get_available_cats())

    def test_prefix(self, catalog_dir):
        src = FileCatSource(catalog_dir / "app-")
        assert list(src.get_available_cats()) == ["de"]
        assert src.prefix == "app-"

    def test_open_maps_hyphen_to_underscore(self, catalog_dir):
        src = FileCatSource(f"{catalog_dir}{os.sep}")
        with src.open_cat("en-US") as stream:
            assert b"Howdy" in stream.read()

    def test_open_missing_returns_none(self, catalog_dir):
        src = FileCatSource(f"{catalog_dir}{os.sep}")
        assert src.open_cat("ja") is None

    def test_missing_directory(self, tmp_path):
        src = FileCatSource(f"{tmp_path / 'nope'}{os.sep}")
        assert list(src.get_available_cats()) == []
        assert src.open_cat("en") is None

    def test_custom_suffix(self, tmp_path):
        (tmp_path / "fr.cat").write_text(make_cat({"k": "v"}, code="fr"))
        (tmp_path / "de.utxt").write_text(make_cat({"k": "w"}, code="de"))
        src = FileCatSource(f"{tmp_path}{os.sep}", suffix=".cat")
        assert list(src.get_available_cats()) == ["fr"]

    def test_bare_prefix_uses_current_directory(self, catalog_dir, monkeypatch):
        monkeypatch.chdir(catalog_dir)
        src = FileCatSource("app-")
        assert src.dirpath == "."
        assert list(src.get_available_cats()) == ["de"]
        with src.open_cat("de") as stream:
            assert b"Hallo" in stream.read()

    def test_repr(self):
        assert repr(FileCatSource("locale/", ".cat")) == "FileCatSource('locale/', suffix='.cat')"

    def test_end_to_end(self, catalog_dir):
        ctx = Context().add_cat_source(FileCatSource(f"{catalog_dir}{os.sep}"))
        ctx.set_language("en-US")
        assert ctx.get("greeting") == "Howdy"
        ctx.set_language("fr-CA")
        assert ctx.get("greeting") == "Bonjour"


# ---------------------------------------------------------------------------
# MemoryCatSource
# ---------------------------------------------------------------------------


class TestMemoryCatSource:
    def test_is_a_cat_source(self):
        assert isinstance(MemoryCatSource(), CatSource)

    def test_lists_codes_in_insertion_order(self):
        src = MemoryCatSource({"fr": "", "en": ""})
        assert list(src.get_available_cats()) == ["fr", "en"]

    def test_open_returns_fresh_stream(self):
        src = MemoryCatSource({"fr": "héllo"})
        assert src.open_cat("fr").read() == "héllo".encode("utf-8")
        assert src.open_cat("fr").read() == "héllo".encode("utf-8")

    def test_open_is_exact(self):
        src = MemoryCatSource({"fr": "x"})
        assert src.open_cat("FR") is None

    def test_add_bytes_chainable(self):
        src = MemoryCatSource().add("de", b"raw")
        assert src.open_cat("de").read() == b"raw"

    def test_abstract_methods_required(self):
        with pytest.raises(TypeError):
            CatSource()  # type: ignore[abstract]
