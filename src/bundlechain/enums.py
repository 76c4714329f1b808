"""Enumerations for bundlechain type-safe constants.

Uses StrEnum (Python 3.11+) for automatic string conversion.
StrEnum members are strings themselves, eliminating boilerplate __str__ methods.

Python 3.13+.
"""

from enum import StrEnum


class ResourceType(StrEnum):
    """Bundle file format selected for every tier.

    StrEnum provides automatic string conversion: str(ResourceType.JSON) == "json"
    """

    LANG = "lang"
    """Properties syntax in *.lang files (default)"""

    PROPERTIES = "properties"
    """Properties syntax in *.properties files"""

    JSON = "json"
    """Flat JSON object in *.json files"""

    CUSTOM = "custom"
    """Caller-supplied BundleFormat implementation"""


class Tier(StrEnum):
    """Priority level in the bundle chain, highest priority first.

    StrEnum provides automatic string conversion: str(Tier.EXTERNAL) == "external"
    """

    EXTERNAL = "external"
    """User override files under the configured base directory"""

    INTERNAL = "internal"
    """Packaged resources for the current locale"""

    DEFAULT = "default"
    """Packaged resources for the fixed default locale"""


class LoadStatus(StrEnum):
    """Outcome of a single tier load attempt.

    StrEnum provides automatic string conversion: str(LoadStatus.SUCCESS) == "success"
    """

    SUCCESS = "success"
    """At least one candidate resource was loaded"""

    NOT_FOUND = "not_found"
    """No candidate resource exists for the tier"""

    ERROR = "error"
    """A resource exists but could not be read or parsed"""

    SKIPPED = "skipped"
    """Tier not configured (External without a base directory)"""


__all__ = [
    "LoadStatus",
    "ResourceType",
    "Tier",
]
