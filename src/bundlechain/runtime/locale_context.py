"""Locale context for locale-aware template formatting.

Wraps a Babel Locale and exposes the formatting operations the template
compiler needs: decimal, integer, currency and percent numbers, dates and
times by style or pattern. No dependency on Python's locale module, so
formatting never touches process-global state.

Architecture:
    - LocaleContext: Immutable, cached per canonical locale string
    - Formatters use Babel (thread-safe, CLDR-based)
    - Unknown locales fall back to en_US rules with a warning

Python 3.13+. Uses Babel for i18n.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from threading import RLock
from typing import ClassVar, TypeAlias

from babel import Locale, UnknownLocaleError
from babel import dates as babel_dates
from babel import numbers as babel_numbers

from bundlechain.constants import (
    FALLBACK_BABEL_LOCALE,
    MAX_LOCALE_CACHE_SIZE,
    UNKNOWN_CURRENCY_CODE,
)
from bundlechain.diagnostics import TemplateFormatError
from bundlechain.locale_utils import (
    LocaleDescriptor,
    encode_locale,
    locale_display_name,
    to_babel_identifier,
)

__all__ = ["DATE_STYLES", "LocaleContext"]

logger = logging.getLogger(__name__)

Number: TypeAlias = int | float | Decimal

DATE_STYLES: frozenset[str] = frozenset({"short", "medium", "long", "full"})
"""Named date/time styles; any other style text is a CLDR pattern."""


@dataclass(frozen=True, slots=True)
class LocaleContext:
    """Immutable locale configuration for formatting operations.

    Use LocaleContext.create() to construct instances; it validates the
    locale against CLDR and reuses cached instances.

    Examples:
        >>> ctx = LocaleContext.create(LocaleDescriptor("en", "us"))
        >>> ctx.format_number(1234.5)
        '1,234.5'
        >>> ctx.format_number(1.06, "currency")
        '$1.06'

        >>> ctx = LocaleContext.create(LocaleDescriptor("it", "it"))
        >>> ctx.format_number(1234.5)
        '1.234,5'

        >>> ctx = LocaleContext.create(LocaleDescriptor("xx", "zz"))
        >>> ctx.is_fallback
        True

    Attributes:
        locale: Locale this context was requested for
        currency_code: ISO 4217 code used by the "currency" number style
        is_fallback: True if Babel did not know the locale and en_US rules
            are used instead
    """

    _cache: ClassVar[OrderedDict[str, LocaleContext]] = OrderedDict()
    _cache_lock: ClassVar[RLock] = RLock()

    locale: LocaleDescriptor
    _babel_locale: Locale
    currency_code: str = UNKNOWN_CURRENCY_CODE
    is_fallback: bool = False

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the locale context cache."""
        with cls._cache_lock:
            cls._cache.clear()

    @classmethod
    def cache_size(cls) -> int:
        """Get current number of cached LocaleContext instances."""
        with cls._cache_lock:
            return len(cls._cache)

    @classmethod
    def create(cls, locale: LocaleDescriptor) -> LocaleContext:
        """Create (or reuse) the context for a locale.

        Always succeeds: unknown locales log a warning and format with
        en_US rules.

        Args:
            locale: Locale to format for

        Returns:
            Cached LocaleContext instance
        """
        cache_key = encode_locale(locale)
        with cls._cache_lock:
            if cache_key in cls._cache:
                cls._cache.move_to_end(cache_key)
                return cls._cache[cache_key]

        used_fallback = False
        try:
            babel_locale = Locale.parse(to_babel_identifier(locale))
        except (UnknownLocaleError, ValueError) as e:
            logger.warning(
                "Unknown locale %s: %s. Falling back to %s formatting rules",
                locale_display_name(locale),
                e,
                FALLBACK_BABEL_LOCALE,
            )
            babel_locale = Locale.parse(FALLBACK_BABEL_LOCALE)
            used_fallback = True

        ctx = cls(
            locale=locale,
            _babel_locale=babel_locale,
            currency_code=_currency_for(locale.region),
            is_fallback=used_fallback,
        )

        with cls._cache_lock:
            if cache_key in cls._cache:
                return cls._cache[cache_key]
            if len(cls._cache) >= MAX_LOCALE_CACHE_SIZE:
                cls._cache.popitem(last=False)
            cls._cache[cache_key] = ctx
            return ctx

    @property
    def babel_locale(self) -> Locale:
        """Babel Locale used for all formatting."""
        return self._babel_locale

    def format_number(self, value: Number, style: str | None = None) -> str:
        """Format a number.

        Args:
            value: Number to format
            style: None (locale decimal format), "integer", "currency",
                "percent", or a CLDR decimal pattern

        Returns:
            Formatted number

        Raises:
            TemplateFormatError: If Babel rejects the value or pattern
        """
        try:
            match style:
                case None:
                    return babel_numbers.format_decimal(value, locale=self._babel_locale)
                case "integer":
                    return babel_numbers.format_decimal(
                        value, format="#,##0", locale=self._babel_locale
                    )
                case "currency":
                    return babel_numbers.format_currency(
                        value,
                        self.currency_code,
                        locale=self._babel_locale,
                        currency_digits=True,
                    )
                case "percent":
                    return babel_numbers.format_percent(value, locale=self._babel_locale)
                case _:
                    return babel_numbers.format_decimal(
                        value, format=style, locale=self._babel_locale
                    )
        except (ValueError, TypeError, InvalidOperation, ArithmeticError) as e:
            msg = f"Number formatting failed for {value!r}: {e}"
            raise TemplateFormatError(msg) from e

    def format_date(self, value: date, style: str = "medium") -> str:
        """Format the date part of a date or datetime by style or pattern.

        Raises:
            TemplateFormatError: If Babel rejects the value or pattern
        """
        try:
            return babel_dates.format_date(value, format=style, locale=self._babel_locale)
        except (ValueError, TypeError, OverflowError, KeyError) as e:
            msg = f"Date formatting failed for {value!r}: {e}"
            raise TemplateFormatError(msg) from e

    def format_time(self, value: datetime | time, style: str = "medium") -> str:
        """Format the time part of a datetime or time by style or pattern.

        Raises:
            TemplateFormatError: If Babel rejects the value or pattern
        """
        try:
            return babel_dates.format_time(value, format=style, locale=self._babel_locale)
        except (ValueError, TypeError, OverflowError, KeyError) as e:
            msg = f"Time formatting failed for {value!r}: {e}"
            raise TemplateFormatError(msg) from e

    def format_datetime(self, value: datetime, style: str = "short") -> str:
        """Format date and time together using the locale's combining pattern.

        Raises:
            TemplateFormatError: If Babel rejects the value
        """
        try:
            return babel_dates.format_datetime(
                value, format=style, locale=self._babel_locale
            )
        except (ValueError, TypeError, OverflowError, KeyError) as e:
            msg = f"DateTime formatting failed for {value!r}: {e}"
            raise TemplateFormatError(msg) from e


def _currency_for(region: str) -> str:
    """First tender currency of a territory, or XXX without one."""
    if not region:
        return UNKNOWN_CURRENCY_CODE
    currencies = babel_numbers.get_territory_currencies(region.upper(), tender=True)
    return currencies[0] if currencies else UNKNOWN_CURRENCY_CODE
