"""Locale descriptors and canonical locale strings.

Centralizes locale canonicalization used throughout the codebase. Every
component names resources and keys caches by the canonical locale string
produced here, so the encoding must stay stable.

Canonical form:
    language            e.g. "it"
    language_region     e.g. "it_it" (region lowercased)
    ""                  the root locale (no language)

Python 3.13+.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterator
from dataclasses import dataclass

from babel import Locale, UnknownLocaleError

from bundlechain.constants import DEFAULT_LOCALE_CODE, FALLBACK_BABEL_LOCALE

__all__ = [
    "DEFAULT_LOCALE",
    "ROOT_LOCALE",
    "LocaleDescriptor",
    "candidate_locales",
    "decode_locale",
    "encode_locale",
    "get_babel_locale",
    "locale_display_name",
    "to_babel_identifier",
    "to_locale",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LocaleDescriptor:
    """Immutable language/region pair.

    Both parts are stored lowercased and stripped so that equal locales
    compare equal regardless of how the caller spelled them.

    Attributes:
        language: ISO 639 language code, empty for the root locale
        region: ISO 3166 region code, empty when not specified

    Example:
        >>> LocaleDescriptor("IT", "IT")
        LocaleDescriptor(language='it', region='it')
        >>> LocaleDescriptor("en").is_root
        False
        >>> LocaleDescriptor().is_root
        True
    """

    language: str = ""
    region: str = ""

    def __post_init__(self) -> None:
        """Normalize case and reject separators inside a part.

        Raises:
            TypeError: If language or region is not a string
            ValueError: If a part contains the "_" separator or whitespace
        """
        for name in ("language", "region"):
            value = getattr(self, name)
            if not isinstance(value, str):
                msg = f"Locale {name} must be a string, got {type(value).__name__}"
                raise TypeError(msg)
            normalized = value.strip().lower()
            if "_" in normalized or any(ch.isspace() for ch in normalized):
                msg = f"Invalid locale {name}: {value!r}"
                raise ValueError(msg)
            object.__setattr__(self, name, normalized)

    @property
    def is_root(self) -> bool:
        """True for the root locale (no language)."""
        return not self.language

    def __str__(self) -> str:
        """Return the canonical locale string."""
        return encode_locale(self)


ROOT_LOCALE = LocaleDescriptor()
"""The locale without a language; its resources carry no locale qualifier."""

DEFAULT_LOCALE = LocaleDescriptor(*DEFAULT_LOCALE_CODE.split("_"))
"""The fixed locale of the Default tier (US English)."""


def encode_locale(locale: LocaleDescriptor) -> str:
    """Encode a locale as its canonical string.

    Args:
        locale: Locale to encode

    Returns:
        "language" or "language_region" with the region lowercased

    Example:
        >>> encode_locale(LocaleDescriptor("en", "US"))
        'en_us'
        >>> encode_locale(LocaleDescriptor("it"))
        'it'
        >>> encode_locale(ROOT_LOCALE)
        ''
    """
    if locale.region:
        return f"{locale.language}_{locale.region}"
    return locale.language


def decode_locale(text: str | None) -> LocaleDescriptor:
    """Decode a locale string into a LocaleDescriptor.

    The string is split on "_" and blank segments are discarded. Never fails:
    input that names no language degrades to the default locale.

    Args:
        text: Locale string such as "it_it", "de", "_en__gb_", or None

    Returns:
        LocaleDescriptor built from the first two non-blank segments, or
        DEFAULT_LOCALE when there are none

    Example:
        >>> decode_locale("it_it")
        LocaleDescriptor(language='it', region='it')
        >>> decode_locale("  ")
        LocaleDescriptor(language='en', region='us')
        >>> decode_locale("pt_BR_extra")
        LocaleDescriptor(language='pt', region='br')
    """
    if text is None:
        return DEFAULT_LOCALE
    parts = [part.strip() for part in text.split("_") if part.strip()]
    match parts:
        case []:
            return DEFAULT_LOCALE
        case [language]:
            return _best_effort(language, "")
        case [language, region, *_]:
            return _best_effort(language, region)
    return DEFAULT_LOCALE  # pragma: no cover - match above is exhaustive


def _best_effort(language: str, region: str) -> LocaleDescriptor:
    """Build a descriptor, squeezing out inner whitespace instead of failing."""
    try:
        return LocaleDescriptor(language, region)
    except ValueError:
        squeeze = "".join
        return LocaleDescriptor(squeeze(language.split()), squeeze(region.split()))


def to_locale(value: LocaleDescriptor | Locale | str | None) -> LocaleDescriptor:
    """Coerce any supported locale representation into a LocaleDescriptor.

    Args:
        value: LocaleDescriptor, babel.Locale, locale string, or None
            (None and blank strings select the default locale)

    Returns:
        Equivalent LocaleDescriptor

    Raises:
        TypeError: If value is of an unsupported type
    """
    match value:
        case LocaleDescriptor():
            return value
        case None | str():
            return decode_locale(value)
        case Locale():
            return LocaleDescriptor(value.language or "", value.territory or "")
    msg = f"Unsupported locale type: {type(value).__name__}"
    raise TypeError(msg)


def candidate_locales(locale: LocaleDescriptor) -> Iterator[LocaleDescriptor]:
    """Yield the lookup candidates for a locale, most specific first.

    A tier reads every candidate resource that exists; keys from more
    specific resources shadow the same keys from their parents.

    Args:
        locale: Requested locale

    Yields:
        language_region, language, then the root locale (duplicates removed)

    Example:
        >>> [str(c) for c in candidate_locales(LocaleDescriptor("it", "ch"))]
        ['it_ch', 'it', '']
    """
    if locale.language and locale.region:
        yield locale
    if locale.language:
        yield LocaleDescriptor(locale.language)
    yield ROOT_LOCALE


def to_babel_identifier(locale: LocaleDescriptor) -> str:
    """Convert a descriptor into a POSIX identifier Babel understands.

    Example:
        >>> to_babel_identifier(LocaleDescriptor("pt", "br"))
        'pt_BR'
        >>> to_babel_identifier(ROOT_LOCALE)
        'root'
    """
    if locale.is_root:
        return "root"
    if locale.region:
        return f"{locale.language}_{locale.region.upper()}"
    return locale.language


@functools.lru_cache(maxsize=128)
def get_babel_locale(locale_code: str) -> Locale:
    """Get a Babel Locale object for a canonical locale string, with caching.

    Thread-safe via lru_cache internal locking.

    Args:
        locale_code: Canonical locale string (e.g. "en_us", "it")

    Returns:
        Babel Locale object

    Raises:
        UnknownLocaleError: If locale is not recognized
        ValueError: If locale format is invalid
    """
    locale = decode_locale(locale_code) if locale_code else ROOT_LOCALE
    return Locale.parse(to_babel_identifier(locale))


def locale_display_name(locale: LocaleDescriptor) -> str:
    """Describe a locale for log messages.

    Args:
        locale: Locale to describe

    Returns:
        Canonical string plus English display name when Babel knows the
        locale, e.g. "it_it (Italian (Italy))"; "<root>" for the root locale
    """
    code = encode_locale(locale)
    if locale.is_root:
        return "<root>"
    try:
        display = get_babel_locale(code).get_display_name(FALLBACK_BABEL_LOCALE)
    except (UnknownLocaleError, ValueError) as e:
        logger.debug("No display name for locale %s: %s", code, e)
        return code
    return f"{code} ({display})" if display else code
