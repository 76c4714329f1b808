"""Shared constants for bundlechain.

Centralized configuration constants used across the resources, runtime and
localization packages. Placing constants here avoids circular imports and
provides a single source of truth.

Constants are grouped by domain:
- Locale defaults: The last-resort locale for the Default tier
- Cache limits: Memory bounds for compiled template tables
- Input limits: Size and content constraints for resource loading
- Template limits: Placeholder constraints for the template compiler

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Locale defaults
    "DEFAULT_LOCALE_CODE",
    "FALLBACK_BABEL_LOCALE",
    # Cache limits
    "DEFAULT_CACHE_SIZE",
    "MAX_LOCALE_CACHE_SIZE",
    # Input limits
    "MAX_RESOURCE_SIZE",
    "FORBIDDEN_RESOURCE_SUFFIXES",
    "RESOURCE_ENCODING",
    # Template limits
    "MAX_ARGUMENT_INDEX",
    "MAX_CHOICE_DEPTH",
    "UNKNOWN_CURRENCY_CODE",
]

# ============================================================================
# LOCALE DEFAULTS
# ============================================================================

# Canonical string of the locale the Default tier always resolves against,
# independent of the locale currently selected by the host application.
DEFAULT_LOCALE_CODE: str = "en_us"

# Babel identifier used when a selected locale is unknown to CLDR.
FALLBACK_BABEL_LOCALE: str = "en_US"

# ============================================================================
# CACHE LIMITS
# ============================================================================

# Default maximum compiled templates per locale table.
# A typical application has far fewer parameterized messages than this.
DEFAULT_CACHE_SIZE: int = 1000

# Maximum cached LocaleContext instances (one per canonical locale string).
MAX_LOCALE_CACHE_SIZE: int = 128

# ============================================================================
# INPUT LIMITS
# ============================================================================

# Maximum resource size in bytes (10 MiB). Larger resources fail to load.
MAX_RESOURCE_SIZE: int = 10 * 1024 * 1024

# Loaders never hand out code: names with these suffixes are rejected.
FORBIDDEN_RESOURCE_SUFFIXES: frozenset[str] = frozenset({
    ".py",
    ".pyc",
    ".pyo",
    ".pyd",
    ".pyw",
    ".so",
    ".dll",
    ".dylib",
    ".class",
    ".jar",
})

# All bundle formats decode resources as UTF-8.
RESOURCE_ENCODING: str = "utf-8"

# ============================================================================
# TEMPLATE LIMITS
# ============================================================================

# Highest placeholder index accepted by the template compiler.
MAX_ARGUMENT_INDEX: int = 9999

# Maximum nesting of choice branches that carry their own placeholders.
# Deeper nesting is treated as an argument mismatch and rendered defanged.
MAX_CHOICE_DEPTH: int = 100

# ISO 4217 code for "no currency", used when a locale has no territory.
UNKNOWN_CURRENCY_CODE: str = "XXX"
