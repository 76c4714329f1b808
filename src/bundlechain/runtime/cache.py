"""Thread-safe, per-locale cache of compiled templates.

Architecture:
    - One LRU table (OrderedDict) per canonical locale string; compiled
      templates are never shared across locales
    - Tables are keyed by template text, not message key, so identical
      text from different keys or tiers compiles once
    - Templates that cannot be compiled even after recovery are stored as
      an invalid sentinel so they are not recompiled on every call
    - Thread-safe using threading.RLock

Recovery:
    1. A template that fails to compile is retried once with every
       placeholder whose content has no digits rewritten to ``[content]``
       ("Hello {name}" -> "Hello [name]").
    2. If the retry fails too, the caller's fallback is returned unchanged.
    3. A compiled template whose arguments do not fit (e.g. text for a
       currency placeholder) renders with its placeholders shown as
       ``[index]``.

Python 3.13+.
"""

import logging
import re
from collections import OrderedDict
from collections.abc import Sequence
from threading import RLock
from typing import Final, TypeAlias

from bundlechain.constants import DEFAULT_CACHE_SIZE
from bundlechain.diagnostics import TemplateFormatError, TemplateSyntaxError
from bundlechain.locale_utils import LocaleDescriptor, encode_locale, locale_display_name
from bundlechain.runtime.locale_context import LocaleContext
from bundlechain.runtime.message_format import MessageFormat

__all__ = ["FormatterCache", "recover_template", "unescape_quotes"]

logger = logging.getLogger(__name__)

_NON_NUMERIC_PLACEHOLDER = re.compile(r"\{(\D*?)\}")


class _Invalid:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<invalid template>"


_INVALID: Final = _Invalid()

_Entry: TypeAlias = MessageFormat | _Invalid


def unescape_quotes(template: str) -> str:
    """Collapse doubled apostrophes; used when there is nothing to substitute.

    Example:
        >>> unescape_quotes("it''s fine")
        "it's fine"
    """
    return template.replace("''", "'")


def recover_template(template: str) -> str:
    """Rewrite placeholders without digits into bracketed literal text.

    Example:
        >>> recover_template("failed test {a} {b}")
        'failed test [a] [b]'
    """
    return _NON_NUMERIC_PLACEHOLDER.sub(r"[\1]", template)


class FormatterCache:
    """Thread-safe LRU cache of compiled templates, partitioned by locale.

    Attributes:
        maxsize: Maximum compiled templates per locale table
        hits: Number of cache hits (for metrics)
        misses: Number of cache misses (for metrics)
    """

    __slots__ = ("_hits", "_invalid", "_lock", "_maxsize", "_misses", "_tables")

    def __init__(self, maxsize: int = DEFAULT_CACHE_SIZE) -> None:
        """Initialize formatter cache.

        Args:
            maxsize: Maximum entries per locale table (default: 1000)

        Raises:
            ValueError: If maxsize is not positive
        """
        if maxsize <= 0:
            msg = "maxsize must be positive"
            raise ValueError(msg)

        self._tables: dict[str, OrderedDict[str, _Entry]] = {}
        self._maxsize = maxsize
        self._lock = RLock()
        self._hits = 0
        self._misses = 0
        self._invalid = 0

    def format_or_fallback(
        self,
        locale: LocaleDescriptor,
        template: str,
        args: Sequence[object] | None,
        fallback: str,
        *,
        key: str | None = None,
    ) -> str:
        """Format a template, degrading instead of raising.

        Args:
            locale: Locale to format for
            template: Template text resolved from the bundle chain (or the
                caller's fallback when the key was missing)
            args: Positional arguments; None or empty skips compilation
            fallback: Returned when the template cannot be compiled
            key: Message key, for log messages only

        Returns:
            Formatted text, a defanged rendering, or ``fallback``
        """
        if not args:
            return unescape_quotes(template)

        formatter = self.get(locale, template, key=key)
        if formatter is None:
            return fallback
        try:
            return formatter.format(args)
        except TemplateFormatError as e:
            logger.debug(
                "Arguments do not fit template%s for locale %s: %s",
                _describe(key),
                locale_display_name(locale),
                e,
            )
            return formatter.defang()

    def get(
        self, locale: LocaleDescriptor, template: str, *, key: str | None = None
    ) -> MessageFormat | None:
        """Look up or compile the formatter for (locale, template).

        Thread-safe. Compiles outside the lock; when two threads race on the
        same template, the first stored entry wins.

        Returns:
            Compiled formatter, or None if the template cannot be compiled
        """
        code = encode_locale(locale)
        with self._lock:
            table = self._tables.get(code)
            if table is not None and template in table:
                table.move_to_end(template)
                self._hits += 1
                return _unwrap(table[template])
            self._misses += 1

        entry = self._compile(locale, template, key)

        with self._lock:
            table = self._tables.setdefault(code, OrderedDict())
            if template in table:
                return _unwrap(table[template])
            if len(table) >= self._maxsize:
                table.popitem(last=False)
            table[template] = entry
            if entry is _INVALID:
                self._invalid += 1
            return _unwrap(entry)

    def _compile(
        self, locale: LocaleDescriptor, template: str, key: str | None
    ) -> _Entry:
        context = LocaleContext.create(locale)
        try:
            return MessageFormat(template, context)
        except TemplateSyntaxError as e:
            logger.warning(
                "Malformed template%s for locale %s, retrying with placeholders escaped: %s",
                _describe(key),
                locale_display_name(locale),
                e,
            )
        try:
            return MessageFormat(recover_template(template), context)
        except TemplateSyntaxError as e:
            logger.warning(
                "Template%s for locale %s cannot be compiled, using fallback: %s",
                _describe(key),
                locale_display_name(locale),
                e,
            )
            return _INVALID

    def clear(self, locale: LocaleDescriptor | None = None) -> None:
        """Drop compiled templates.

        Thread-safe. Metrics are reset only when every table is cleared.

        Args:
            locale: Locale whose table to drop, or None for all tables
        """
        with self._lock:
            if locale is not None:
                self._tables.pop(encode_locale(locale), None)
                return
            self._tables.clear()
            self._hits = 0
            self._misses = 0
            self._invalid = 0

    def get_stats(self) -> dict[str, int | float | tuple[str, ...]]:
        """Get cache statistics.

        Thread-safe. Returns current metrics.

        Returns:
            Dict with keys:
            - size (int): Compiled entries across all locale tables
            - maxsize (int): Capacity of each locale table
            - locales (tuple[str, ...]): Canonical locale strings with a table
            - hits (int): Number of cache hits
            - misses (int): Number of cache misses
            - hit_rate (float): Hit rate as percentage (0.0-100.0)
            - invalid (int): Templates stored as uncompilable
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": sum(len(table) for table in self._tables.values()),
                "maxsize": self._maxsize,
                "locales": tuple(self._tables),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 2),
                "invalid": self._invalid,
            }

    def __len__(self) -> int:
        """Compiled entries across all locale tables."""
        with self._lock:
            return sum(len(table) for table in self._tables.values())

    @property
    def maxsize(self) -> int:
        """Maximum entries per locale table."""
        return self._maxsize

    @property
    def hits(self) -> int:
        """Number of cache hits."""
        with self._lock:
            return self._hits

    @property
    def misses(self) -> int:
        """Number of cache misses."""
        with self._lock:
            return self._misses


def _unwrap(entry: _Entry) -> MessageFormat | None:
    return None if entry is _INVALID else entry  # type: ignore[return-value]


def _describe(key: str | None) -> str:
    return f" '{key}'" if key is not None else ""
