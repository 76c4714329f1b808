"""Three-tier bundle chain with fixed priority External > Internal > Default.

Tiers:
    External  user override files under the configured base directory,
              current locale (only when a base directory is configured)
    Internal  packaged resources, current locale
    Default   packaged resources, always the fixed default locale (en_us)

Each tier reads its locale and the locale's parents: for it_ch it reads
``<ns>/it_ch.<ext>``, ``<ns>/it.<ext>`` and ``<ns>.<ext>``; keys from more
specific resources shadow the same keys from their parents. A resource that
fails to load is logged and skipped; a tier is unavailable only when none
of its resources loaded. Unavailable tiers are skipped by lookups.

Building a chain produces an immutable snapshot (configuration, tiers and
load summary). reload() builds a complete new snapshot and swaps it in with
one assignment, so a concurrent lookup sees either the old chain or the
new one, never a mix.

Python 3.13+.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from bundlechain.enums import LoadStatus, Tier
from bundlechain.locale_utils import (
    DEFAULT_LOCALE,
    LocaleDescriptor,
    candidate_locales,
    encode_locale,
    locale_display_name,
)
from bundlechain.resources.loading import (
    DirectoryResourceLoader,
    LoadSummary,
    PackageResourceLoader,
    TierLoadResult,
)
from bundlechain.resources.naming import to_bundle_name, to_resource_name

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from bundlechain.localization.config import EngineConfig
    from bundlechain.resources.formats import BundleFormat
    from bundlechain.resources.loading import ResourceLoader
    from bundlechain.resources.types import MessageKey, Messages, Namespace, Template

__all__ = ["BundleChain", "BundleSource"]

logger = logging.getLogger(__name__)

# Severity of "tier could not be loaded", by tier.
_LOAD_FAILURE_LEVEL: dict[Tier, int] = {
    Tier.EXTERNAL: logging.DEBUG,
    Tier.INTERNAL: logging.WARNING,
    Tier.DEFAULT: logging.ERROR,
}

# Severity of "key not in this tier", by tier.
_MISS_LEVEL: dict[Tier, int] = {
    Tier.EXTERNAL: logging.DEBUG,
    Tier.INTERNAL: logging.DEBUG,
    Tier.DEFAULT: logging.WARNING,
}


@dataclass(frozen=True, slots=True)
class BundleSource:
    """One tier of the chain: its identity plus loaded templates, if any.

    Attributes:
        tier: Priority level
        namespace: Bundle namespace
        locale: Locale the tier was loaded for
        bundle_format: Format used to parse the resources
        messages: Read-only key-to-template mapping, or None when the tier
            is unavailable
    """

    tier: Tier
    namespace: Namespace
    locale: LocaleDescriptor
    bundle_format: BundleFormat
    messages: Mapping[MessageKey, Template] | None = None

    @property
    def is_available(self) -> bool:
        """True if the tier loaded at least one resource."""
        return self.messages is not None

    @property
    def bundle_name(self) -> str:
        """Bundle name for log messages (e.g. 'lang.it_it')."""
        return to_bundle_name(self.namespace, self.locale)

    def get(self, key: MessageKey) -> Template | None:
        """Return the template for key, or None (also when unavailable)."""
        if self.messages is None:
            return None
        return self.messages.get(key)


@dataclass(frozen=True, slots=True)
class _Snapshot:
    config: EngineConfig
    sources: tuple[BundleSource, ...]
    summary: LoadSummary


class BundleChain:
    """Ordered tiers for one namespace and one configuration.

    Thread Safety:
        Lookups read a single immutable snapshot reference. Builds are not
        serialized here; the owning Translator holds its write lock around
        reload().

    Example:
        >>> chain = BundleChain("lang", EngineConfig.create())
        >>> chain.lookup("menu.quit")
        'Quit'
    """

    __slots__ = ("_external_loader", "_namespace", "_packaged_loader", "_snapshot")

    def __init__(
        self,
        namespace: Namespace,
        config: EngineConfig,
        *,
        loader: ResourceLoader | None = None,
    ) -> None:
        """Build the chain.

        Args:
            namespace: Dotted namespace of the bundle family
            config: Initial configuration
            loader: Loader for the Internal and Default tiers (default:
                PackageResourceLoader searching sys.path)
        """
        self._namespace = namespace
        self._packaged_loader: ResourceLoader = loader or PackageResourceLoader()
        self._external_loader: DirectoryResourceLoader | None = None
        self._snapshot = self._build(config)

    @property
    def namespace(self) -> Namespace:
        """Dotted namespace of the bundle family."""
        return self._namespace

    @property
    def config(self) -> EngineConfig:
        """Configuration the current snapshot was built from."""
        return self._snapshot.config

    @property
    def sources(self) -> tuple[BundleSource, ...]:
        """Tiers in priority order: External, Internal, Default."""
        return self._snapshot.sources

    def lookup(self, key: MessageKey) -> Template | None:
        """Return the template of the highest-priority tier holding key.

        Misses are logged per tier; nothing is raised for missing keys.
        """
        snapshot = self._snapshot
        for source in snapshot.sources:
            if not source.is_available:
                continue
            template = source.get(key)
            if template is not None:
                return template
            logger.log(
                _MISS_LEVEL[source.tier],
                "Key '%s' not found in %s bundle %s",
                key,
                source.tier,
                source.bundle_name,
            )
        return None

    def contains(self, key: MessageKey) -> bool:
        """True if any available tier holds key (no miss logging)."""
        return any(source.get(key) is not None for source in self._snapshot.sources)

    def get_keys(self) -> tuple[MessageKey, ...]:
        """Union of all tier keys, ordered External first, without duplicates."""
        keys: dict[MessageKey, None] = {}
        for source in self._snapshot.sources:
            if source.messages is not None:
                keys.update(dict.fromkeys(source.messages))
        return tuple(keys)

    def get_load_summary(self) -> LoadSummary:
        """Results of the most recent build, External first."""
        return self._snapshot.summary

    def reload(self, config: EngineConfig | None = None) -> None:
        """Discard every tier and rebuild from the given (or current) configuration.

        Loader caches of the previous configuration are invalidated first,
        so edited override files are read again.
        """
        if self._external_loader is not None:
            self._external_loader.invalidate()
        self._packaged_loader.invalidate()
        self._snapshot = self._build(config or self._snapshot.config)

    def _build(self, config: EngineConfig) -> _Snapshot:
        external_loader = self._external_for(config.base_directory)
        results: list[TierLoadResult] = []
        sources: list[BundleSource] = []

        plan: tuple[tuple[Tier, ResourceLoader | None, LocaleDescriptor], ...] = (
            (Tier.EXTERNAL, external_loader, config.locale),
            (Tier.INTERNAL, self._packaged_loader, config.locale),
            (Tier.DEFAULT, self._packaged_loader, DEFAULT_LOCALE),
        )
        for tier, loader, locale in plan:
            source, result = self._load_tier(tier, loader, locale, config.bundle_format)
            sources.append(source)
            results.append(result)

        return _Snapshot(
            config=config,
            sources=tuple(sources),
            summary=LoadSummary(results=tuple(results)),
        )

    def _external_for(self, base_directory: Path | None) -> DirectoryResourceLoader | None:
        """Reuse the External loader while the directory is unchanged."""
        if base_directory is None:
            self._external_loader = None
            return None
        resolved = base_directory.expanduser().resolve()
        if self._external_loader is None or self._external_loader.root != resolved:
            self._external_loader = DirectoryResourceLoader(resolved)
        return self._external_loader

    def _load_tier(
        self,
        tier: Tier,
        loader: ResourceLoader | None,
        locale: LocaleDescriptor,
        bundle_format: BundleFormat,
    ) -> tuple[BundleSource, TierLoadResult]:
        unavailable = BundleSource(tier, self._namespace, locale, bundle_format)
        most_specific = to_resource_name(self._namespace, locale, bundle_format.file_extension)
        locale_code = encode_locale(locale)

        if loader is None:
            result = TierLoadResult(
                tier=tier,
                locale=locale_code,
                resource_name=most_specific,
                status=LoadStatus.SKIPPED,
            )
            return unavailable, result

        merged: dict[MessageKey, Template] = {}
        loaded: list[str] = []
        failed: list[str] = []
        first_error: Exception | None = None
        # Parents first so more specific resources overwrite their keys.
        for candidate in reversed(tuple(candidate_locales(locale))):
            name = to_resource_name(self._namespace, candidate, bundle_format.file_extension)
            try:
                messages = self._load_candidate(loader, name, bundle_format)
            except Exception as e:  # pylint: disable=broad-exception-caught
                self._log_unavailable(tier, locale, f"failed to load {name}", e)
                failed.append(name)
                first_error = first_error or e
                continue
            if messages is None:
                continue
            merged.update(messages)
            loaded.append(name)

        if not loaded and first_error is not None:
            result = TierLoadResult(
                tier=tier,
                locale=locale_code,
                resource_name=failed[-1],
                status=LoadStatus.ERROR,
                error=first_error,
                failed_resources=tuple(reversed(failed)),
            )
            return unavailable, result

        if not loaded:
            self._log_unavailable(tier, locale, "has no resource", None)
            result = TierLoadResult(
                tier=tier,
                locale=locale_code,
                resource_name=most_specific,
                status=LoadStatus.NOT_FOUND,
            )
            return unavailable, result

        resource_name = loaded[-1]
        logger.debug(
            "Loaded %s bundle %s from %d resource(s), %d keys",
            tier,
            to_bundle_name(self._namespace, locale),
            len(loaded),
            len(merged),
        )
        source = BundleSource(
            tier, self._namespace, locale, bundle_format, MappingProxyType(merged)
        )
        result = TierLoadResult(
            tier=tier,
            locale=locale_code,
            resource_name=resource_name,
            status=LoadStatus.SUCCESS,
            error=first_error,
            source=loader.locate(resource_name),
            resources_loaded=tuple(reversed(loaded)),
            failed_resources=tuple(reversed(failed)),
        )
        return source, result

    @staticmethod
    def _load_candidate(
        loader: ResourceLoader, name: str, bundle_format: BundleFormat
    ) -> Messages | None:
        """Parse one candidate resource, or None when it does not exist.

        Only members the format reports as keys are returned.
        """
        stream = loader.resolve(name)
        if stream is None:
            return None
        with stream:
            messages = bundle_format.load(stream)
        keys = bundle_format.keys(messages)
        return {k: v for k, v in messages.items() if k in keys}

    def _log_unavailable(
        self,
        tier: Tier,
        locale: LocaleDescriptor,
        reason: str,
        error: Exception | None,
    ) -> None:
        logger.log(
            _LOAD_FAILURE_LEVEL[tier],
            "%s bundle '%s' for locale %s %s%s",
            tier.capitalize(),
            self._namespace,
            locale_display_name(locale),
            reason,
            f": {error}" if error is not None else "",
        )

    def __repr__(self) -> str:
        available = [str(s.tier) for s in self._snapshot.sources if s.is_available]
        return (
            f"BundleChain(namespace={self._namespace!r}, "
            f"locale={encode_locale(self.config.locale)!r}, available={available})"
        )
