"""bundlechain - layered, locale-aware message resolution.

Resolves localized message templates by key through three tiers (user
overrides, packaged resources for the current locale, packaged resources
for the default locale), formats positional arguments with CLDR rules via
Babel, and degrades to fallback text instead of raising when translations
are missing or malformed.

Public API:
    Translator - Resolve and format messages for one namespace
    ResourceType - Bundle file type (lang, properties, json, custom)
    LocaleDescriptor - Language/region pair
    CacheConfig - Compiled-template cache settings

Exceptions:
    BundleChainError - Base exception class
    ResourceFormatError - Resource could not be parsed
    TemplateSyntaxError - Template could not be compiled
    TemplateFormatError - Arguments do not fit a compiled template

Submodules:
    bundlechain.resources - Bundle formats, naming and resource loaders
    bundlechain.runtime - Template compiler, formatter cache, locale context
    bundlechain.localization - Translator, BundleChain, EngineConfig
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

from .diagnostics import (
    BundleChainError,
    ResourceFormatError,
    TemplateFormatError,
    TemplateSyntaxError,
)
from .enums import LoadStatus, ResourceType, Tier
from .locale_utils import DEFAULT_LOCALE, ROOT_LOCALE, LocaleDescriptor
from .localization import Translator
from .runtime import CacheConfig

# Version information - Auto-populated from package metadata
try:
    __version__ = _get_version("bundlechain")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "DEFAULT_LOCALE",
    "ROOT_LOCALE",
    "BundleChainError",
    "CacheConfig",
    "LoadStatus",
    "LocaleDescriptor",
    "ResourceFormatError",
    "ResourceType",
    "TemplateFormatError",
    "TemplateSyntaxError",
    "Tier",
    "Translator",
    "__version__",
]
