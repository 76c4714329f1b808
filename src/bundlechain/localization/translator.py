"""Translator: the public entry point for localized text.

Composes BundleChain lookup with FormatterCache formatting and owns the
mutable configuration (locale, base directory, bundle format). Every
configuration change rebuilds the chain synchronously.

Failure semantics:
    translate() and format() never raise for missing keys, unavailable
    tiers, malformed templates or arguments that do not fit. They always
    return text: the template, a recovered or defanged rendering, or the
    caller's fallback. Only invalid inputs (None key, non-string fallback,
    blank namespace, CUSTOM without a format) raise.

Thread Safety:
    A readers-writer lock guards configuration. Lookups share it; setters
    and reload() hold it exclusively. One Translator per namespace is meant
    to be created by the host and passed to the code that needs it.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from bundlechain.enums import ResourceType
from bundlechain.localization.chain import BundleChain
from bundlechain.localization.config import EngineConfig
from bundlechain.locale_utils import encode_locale, locale_display_name, to_locale
from bundlechain.runtime.cache import FormatterCache
from bundlechain.runtime.cache_config import CacheConfig
from bundlechain.runtime.rwlock import RWLock

if TYPE_CHECKING:
    from pathlib import Path

    from babel import Locale

    from bundlechain.locale_utils import LocaleDescriptor
    from bundlechain.resources.formats import BundleFormat
    from bundlechain.resources.loading import LoadSummary, ResourceLoader
    from bundlechain.resources.types import MessageKey, Namespace

__all__ = ["Translator"]

logger = logging.getLogger(__name__)


class Translator:
    """Localized message resolution for one namespace.

    Example - Packaged resources only:
        >>> translator = Translator("lang")
        >>> translator.translate("test.result")
        'successful test'
        >>> translator.translate("missing.key", "fallback should be {0}", ["formatted"])
        'fallback should be formatted'

    Example - User overrides and a different locale:
        >>> translator = Translator("lang", "/srv/overrides", locale="it_it")
        >>> translator.format("greeting", "Hello {0}", "Anna")
        'Ciao Anna'

    Attributes:
        base_name: Namespace of the bundle family
        current_locale: Locale used by the External and Internal tiers
    """

    __slots__ = ("_cache", "_cache_config", "_chain", "_lock", "_namespace")

    def __init__(
        self,
        namespace: Namespace,
        base_directory: str | Path | None = None,
        *,
        locale: LocaleDescriptor | Locale | str | None = None,
        resource_type: ResourceType = ResourceType.LANG,
        bundle_format: BundleFormat | None = None,
        loader: ResourceLoader | None = None,
        cache: CacheConfig | None = None,
    ) -> None:
        """Create a translator and load all tiers.

        Args:
            namespace: Dotted namespace (e.g. "lang", "myapp.messages")
            base_directory: Root of user override files; None or blank
                disables the External tier
            locale: Initial locale (default: en_us)
            resource_type: Bundle file type for every tier
            bundle_format: Format implementation, required for CUSTOM
            loader: Loader for packaged resources (default: search sys.path)
            cache: Compiled-template cache configuration

        Raises:
            TypeError: If namespace is not a string, or locale or
                base_directory has an unsupported type
            ValueError: If namespace is blank, or resource_type is CUSTOM
                without a bundle_format
        """
        if not isinstance(namespace, str):
            msg = f"namespace must be a string, got {type(namespace).__name__}"
            raise TypeError(msg)
        if not namespace.strip():
            msg = "namespace must not be blank"
            raise ValueError(msg)

        self._namespace = namespace
        self._cache_config = cache or CacheConfig()
        self._cache = FormatterCache(self._cache_config.size)
        self._lock = RWLock()
        config = EngineConfig.create(
            locale=to_locale(locale),
            base_directory=base_directory,
            resource_type=resource_type,
            bundle_format=bundle_format,
        )
        self._chain = BundleChain(namespace, config, loader=loader)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def base_name(self) -> Namespace:
        """Namespace of the bundle family."""
        return self._namespace

    @property
    def config(self) -> EngineConfig:
        """Current immutable configuration."""
        with self._lock.read():
            return self._chain.config

    @property
    def current_locale(self) -> LocaleDescriptor:
        """Locale used by the External and Internal tiers."""
        return self.config.locale

    @property
    def base_directory(self) -> Path | None:
        """Root of user override files, or None."""
        return self.config.base_directory

    @property
    def resource_type(self) -> ResourceType:
        """Selected bundle file type."""
        return self.config.resource_type

    @property
    def bundle_format(self) -> BundleFormat:
        """Format instance used by every tier."""
        return self.config.bundle_format

    @property
    def cache_config(self) -> CacheConfig:
        """Compiled-template cache configuration (read-only)."""
        return self._cache_config

    def set_current_locale(self, locale: LocaleDescriptor | Locale | str | None) -> None:
        """Switch locale and reload every tier.

        Strings are decoded leniently ("it_IT", "_it__it", "it"); None and
        blank strings select the default locale.

        Raises:
            TypeError: If locale has an unsupported type
        """
        new_locale = to_locale(locale)
        with self._lock.write():
            old = self._chain.config
            self._chain.reload(old.with_locale(new_locale))
            if self._cache_config.clear_on_locale_change and old.locale != new_locale:
                self._cache.clear(old.locale)
        logger.info(
            "Translator '%s' switched locale %s -> %s",
            self._namespace,
            locale_display_name(old.locale),
            locale_display_name(new_locale),
        )

    def set_base_directory(self, base_directory: str | Path | None) -> None:
        """Change the override directory and reload every tier.

        Raises:
            TypeError: If base_directory has an unsupported type
        """
        with self._lock.write():
            config = self._chain.config.with_base_directory(base_directory)
            self._chain.reload(config)
        logger.debug(
            "Translator '%s' base directory set to %s",
            self._namespace,
            config.base_directory,
        )

    def set_resource_type(
        self, resource_type: ResourceType, bundle_format: BundleFormat | None = None
    ) -> None:
        """Change the bundle format and reload every tier.

        Compiled templates stay cached: they depend on template text and
        locale, not on the file format the text came from.

        Raises:
            ValueError: If resource_type is CUSTOM and bundle_format is None
        """
        with self._lock.write():
            config = self._chain.config.with_resource_type(resource_type, bundle_format)
            self._chain.reload(config)
        logger.debug(
            "Translator '%s' resource type set to %s", self._namespace, config.resource_type
        )

    def reload(self) -> None:
        """Re-read every tier with the current configuration."""
        with self._lock.write():
            self._chain.reload()

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------

    def translate(
        self,
        key: MessageKey,
        fallback: str | None = None,
        args: Sequence[object] | None = None,
    ) -> str:
        """Resolve and format a message.

        Args:
            key: Message key
            fallback: Text used when no tier holds key (default: the key
                itself); it is formatted with args like any template
            args: Positional arguments; None or empty means no substitution,
                in which case only doubled apostrophes are collapsed

        Returns:
            Resolved text, never raising for data problems

        Raises:
            TypeError: If key is not a string, fallback is not a string or
                None, or args is a string
        """
        if not isinstance(key, str):
            msg = f"key must be a string, got {type(key).__name__}"
            raise TypeError(msg)
        if fallback is None:
            fallback = key
        elif not isinstance(fallback, str):
            msg = f"fallback must be a string, got {type(fallback).__name__}"
            raise TypeError(msg)
        if isinstance(args, str | bytes):
            msg = "args must be a sequence of arguments, not a string"
            raise TypeError(msg)

        with self._lock.read():
            locale = self._chain.config.locale
            template = self._chain.lookup(key)
            if template is None:
                logger.info(
                    "No translation for '%s' in namespace '%s' (%s), using fallback",
                    key,
                    self._namespace,
                    encode_locale(locale),
                )
                template = fallback
            return self._cache.format_or_fallback(
                locale, template, args, fallback, key=key
            )

    def format(self, key: MessageKey, fallback: str | None, *args: object) -> str:
        """Shorthand for translate(key, fallback, args)."""
        return self.translate(key, fallback, args)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def has_translation(self, key: MessageKey) -> bool:
        """True if any tier holds key."""
        with self._lock.read():
            return self._chain.contains(key)

    def get_keys(self) -> tuple[MessageKey, ...]:
        """Keys of every available tier, External first, without duplicates."""
        with self._lock.read():
            return self._chain.get_keys()

    def get_load_summary(self) -> LoadSummary:
        """Tier load results of the most recent (re)load.

        Example:
            >>> summary = translator.get_load_summary()
            >>> for result in summary.get_errors():
            ...     print(f"{result.tier}: {result.resource_name}: {result.error}")
        """
        with self._lock.read():
            return self._chain.get_load_summary()

    def get_cache_stats(self) -> dict[str, int | float | tuple[str, ...]]:
        """Compiled-template cache statistics (see FormatterCache.get_stats)."""
        return self._cache.get_stats()

    def clear_cache(self) -> None:
        """Drop every compiled template."""
        self._cache.clear()

    def __repr__(self) -> str:
        config = self.config
        return (
            f"Translator(namespace={self._namespace!r}, "
            f"locale={encode_locale(config.locale)!r}, "
            f"base_directory={config.base_directory!r}, "
            f"resource_type={config.resource_type.value!r})"
        )
