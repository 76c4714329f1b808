"""Cache configuration for the compiled-template cache.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass

from bundlechain.constants import DEFAULT_CACHE_SIZE

__all__ = ["CacheConfig"]


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Immutable configuration for FormatterCache.

    Constructing ``CacheConfig()`` with no arguments produces the defaults
    Translator uses.

    Attributes:
        size: Maximum compiled templates kept per locale table (LRU
            eviction, default: 1000).
        clear_on_locale_change: Drop the previous locale's table when the
            Translator switches locale (default: True). Disable for hosts
            that flip between a few locales and want to keep warm tables.

    Example:
        >>> from bundlechain import Translator
        >>> translator = Translator("lang", cache=CacheConfig(size=200))
        >>> translator.cache_config.size
        200
    """

    size: int = DEFAULT_CACHE_SIZE
    clear_on_locale_change: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ValueError: If size is not positive
        """
        if self.size <= 0:
            msg = "size must be positive"
            raise ValueError(msg)
