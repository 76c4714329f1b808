"""Tests for LocaleContext creation, caching and Babel formatting."""

import logging
from datetime import date, datetime, time

import pytest

from bundlechain.constants import MAX_LOCALE_CACHE_SIZE
from bundlechain.diagnostics import TemplateFormatError
from bundlechain.locale_utils import ROOT_LOCALE, LocaleDescriptor
from bundlechain.runtime.locale_context import LocaleContext


class TestCreate:
    """Construction and the class-level cache."""

    def test_known_locale(self) -> None:
        """Known locales use their own rules."""
        ctx = LocaleContext.create(LocaleDescriptor("it", "it"))
        assert not ctx.is_fallback
        assert str(ctx.babel_locale) == "it_IT"
        assert ctx.currency_code == "EUR"

    def test_instances_are_cached(self) -> None:
        """Equal locales share one context."""
        first = LocaleContext.create(LocaleDescriptor("en", "us"))
        assert LocaleContext.create(LocaleDescriptor("EN", "US")) is first
        assert LocaleContext.cache_size() == 1

    def test_unknown_locale_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        """Unknown locales warn and use en_US rules."""
        with caplog.at_level(logging.WARNING, logger="bundlechain.runtime.locale_context"):
            ctx = LocaleContext.create(LocaleDescriptor("xx", "zz"))
        assert ctx.is_fallback
        assert str(ctx.babel_locale) == "en_US"
        assert ctx.locale == LocaleDescriptor("xx", "zz")
        assert "Unknown locale xx_zz" in caplog.text

    def test_language_only_has_no_currency(self) -> None:
        """Without a region the currency is unknown."""
        assert LocaleContext.create(LocaleDescriptor("it")).currency_code == "XXX"

    def test_root_locale(self) -> None:
        """Root formats with CLDR root data."""
        ctx = LocaleContext.create(ROOT_LOCALE)
        assert not ctx.is_fallback
        assert ctx.currency_code == "XXX"

    def test_cache_is_bounded(self) -> None:
        """The oldest contexts are evicted first."""
        for i in range(MAX_LOCALE_CACHE_SIZE + 5):
            LocaleContext.create(LocaleDescriptor(f"q{i}"))
        assert LocaleContext.cache_size() == MAX_LOCALE_CACHE_SIZE

    def test_clear_cache(self) -> None:
        """clear_cache() empties the cache."""
        LocaleContext.create(LocaleDescriptor("de", "de"))
        LocaleContext.clear_cache()
        assert LocaleContext.cache_size() == 0


class TestFormatting:
    """Babel-backed formatting."""

    @pytest.fixture
    def ctx(self) -> LocaleContext:
        """US English."""
        return LocaleContext.create(LocaleDescriptor("en", "us"))

    def test_decimal(self, ctx: LocaleContext) -> None:
        """Locale decimal format."""
        assert ctx.format_number(1234.5) == "1,234.5"

    def test_currency(self, ctx: LocaleContext) -> None:
        """Currency uses the region's currency digits."""
        assert ctx.format_number(1.06, "currency") == "$1.06"
        assert ctx.format_number(2, "currency") == "$2.00"

    def test_bad_pattern(self, ctx: LocaleContext) -> None:
        """Babel failures surface as TemplateFormatError."""
        with pytest.raises(TemplateFormatError, match="Number formatting failed"):
            ctx.format_number("abc", "#,##0")  # type: ignore[arg-type]

    def test_date_time(self, ctx: LocaleContext) -> None:
        """Date, time and datetime helpers."""
        assert ctx.format_date(date(2024, 3, 1), "yyyy/MM/dd") == "2024/03/01"
        assert ctx.format_time(time(9, 41), "HH:mm") == "09:41"
        assert ctx.format_datetime(datetime(2024, 3, 1, 9, 41)).startswith("3/1/24")
