"""Localization package: the Translator facade and the bundle chain behind it.

Submodules:
    config     - EngineConfig (immutable locale/directory/format selection)
    chain      - BundleChain, BundleSource (three-tier lookup and reload)
    translator - Translator (public entry point)

Python 3.13+.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability

from bundlechain.enums import LoadStatus, ResourceType, Tier
from bundlechain.localization.chain import BundleChain, BundleSource
from bundlechain.localization.config import EngineConfig
from bundlechain.localization.translator import Translator
from bundlechain.resources.loading import LoadSummary, TierLoadResult

__all__ = [
    # Main entry point
    "Translator",
    # Chain internals
    "BundleChain",
    "BundleSource",
    "EngineConfig",
    # Load tracking
    "LoadStatus",
    "LoadSummary",
    "TierLoadResult",
    # Enumerations
    "ResourceType",
    "Tier",
]
