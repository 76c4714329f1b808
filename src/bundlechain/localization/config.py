"""Engine configuration for the Translator.

EngineConfig is immutable. Every setter on Translator builds a new
instance with one of the ``with_*`` helpers and rebuilds the bundle chain
from it, so a chain never references a half-updated configuration.

Python 3.13+.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path

from bundlechain.enums import ResourceType
from bundlechain.locale_utils import DEFAULT_LOCALE, LocaleDescriptor
from bundlechain.resources.formats import BundleFormat, format_for

__all__ = ["EngineConfig", "normalize_base_directory"]


def normalize_base_directory(value: str | Path | None) -> Path | None:
    """Coerce a base directory argument.

    Blank strings mean "no base directory", which disables the External tier.

    Raises:
        TypeError: If value is not a str, Path or None

    Example:
        >>> normalize_base_directory("   ") is None
        True
        >>> normalize_base_directory("/srv/i18n")
        PosixPath('/srv/i18n')
    """
    match value:
        case None:
            return None
        case Path():
            return value
        case str():
            return Path(value) if value.strip() else None
    msg = f"base_directory must be str, Path or None, got {type(value).__name__}"
    raise TypeError(msg)


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Immutable Translator configuration.

    Attributes:
        locale: Current locale for the External and Internal tiers
        base_directory: Root of user override files; None disables External
        resource_type: Selected bundle file type
        bundle_format: Format instance matching resource_type
    """

    locale: LocaleDescriptor = DEFAULT_LOCALE
    base_directory: Path | None = None
    resource_type: ResourceType = ResourceType.LANG
    bundle_format: BundleFormat = dataclasses.field(
        default_factory=lambda: format_for(ResourceType.LANG)
    )

    @classmethod
    def create(
        cls,
        *,
        locale: LocaleDescriptor = DEFAULT_LOCALE,
        base_directory: str | Path | None = None,
        resource_type: ResourceType = ResourceType.LANG,
        bundle_format: BundleFormat | None = None,
    ) -> EngineConfig:
        """Build a validated configuration.

        Raises:
            ValueError: If resource_type is CUSTOM and bundle_format is None
            TypeError: If base_directory has an unsupported type
        """
        resource_type = ResourceType(resource_type)
        return cls(
            locale=locale,
            base_directory=normalize_base_directory(base_directory),
            resource_type=resource_type,
            bundle_format=format_for(resource_type, bundle_format),
        )

    def with_locale(self, locale: LocaleDescriptor) -> EngineConfig:
        """Return a copy with a different locale."""
        return dataclasses.replace(self, locale=locale)

    def with_base_directory(self, base_directory: str | Path | None) -> EngineConfig:
        """Return a copy with a different (or no) base directory."""
        return dataclasses.replace(
            self, base_directory=normalize_base_directory(base_directory)
        )

    def with_resource_type(
        self, resource_type: ResourceType, bundle_format: BundleFormat | None = None
    ) -> EngineConfig:
        """Return a copy reading a different bundle format.

        Raises:
            ValueError: If resource_type is CUSTOM and bundle_format is None
        """
        resource_type = ResourceType(resource_type)
        return dataclasses.replace(
            self,
            resource_type=resource_type,
            bundle_format=format_for(resource_type, bundle_format),
        )
