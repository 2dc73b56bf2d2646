"""Tests for lingocat.i18n.bcp47 — tag shape validation and simple fallback."""

from __future__ import annotations

import pytest

from lingocat.i18n.bcp47 import fold_case, is_valid_language_code, simple_fallback

# ---------------------------------------------------------------------------
# is_valid_language_code
# ---------------------------------------------------------------------------


class TestValidCodes:
    @pytest.mark.parametrize(
        "code",
        [
            "en",
            "en-US",
            "EN-us",
            "zh-Hans-CN",
            "x-private-1",
            "X-abc",
            "fra",
            "english",
            "es-419",
            "zh-yue-HK",
            "zh-cmn-Hans-CN",
            "sl-rozaj",
            "sl-rozaj-biske",
            "de-CH-1901",
            "en-Latn-US-variant",
            "en-a-bbb-ccc",
            "en-a-bbb-b-ccc",
            "en-US-x-twain",
            "en-x-private-use",
            "sr-Latn-RS",
        ],
    )
    def test_valid(self, code):
        assert is_valid_language_code(code) is True


class TestInvalidCodes:
    @pytest.mark.parametrize(
        "code",
        [
            "",
            "a",
            "i-klingon",
            "I-default",
            "en--US",
            "toolongsubtag12345",
            "en-",
            "-en",
            "en_US",
            "en-US-",
            "x-",
            "x-toolongsub",
            "e1",
            "en-a",
            "en-a-b",
            "en-x-",
            "en-US.UTF-8",
            "en-verylongvariant",
            "12-US",
        ],
    )
    def test_invalid(self, code):
        assert is_valid_language_code(code) is False


# ---------------------------------------------------------------------------
# simple_fallback
# ---------------------------------------------------------------------------


class TestSimpleFallback:
    @pytest.mark.parametrize(
        "code, expected",
        [
            ("en-Latn-US-variant", "en-Latn-US"),
            ("en-Latn-US", "en-US"),
            ("en-US", "en"),
            ("zh-Hant", "zh"),
            ("zh-Hant-TW", "zh-TW"),
            ("es-419", "es"),
            ("de-CH-1901", "de-CH"),
            ("en-US-x-twain", "en-US"),
            ("en-a-bbb", "en"),
            ("zh-yue-HK", "zh-yue"),
            ("fr-ca", "fr"),
        ],
    )
    def test_fallback(self, code, expected):
        assert simple_fallback(code) == expected

    @pytest.mark.parametrize("code", ["en", "fra", "x-foo", "i-klingon", "a", "", "en-"])
    def test_no_fallback(self, code):
        assert simple_fallback(code) is None

    def test_chain_terminates(self):
        code = "en-Latn-US-variant"
        chain = [code]
        while (code := simple_fallback(code)) is not None:
            chain.append(code)
        assert chain == ["en-Latn-US-variant", "en-Latn-US", "en-US", "en"]


class TestFoldCase:
    def test_ascii_lowered(self):
        assert fold_case("EN-Latn-US") == "en-latn-us"

    def test_non_ascii_untouched(self):
        assert fold_case("ÉN") == "Én"
