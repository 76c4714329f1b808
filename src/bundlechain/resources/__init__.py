"""Resource layer: bundle naming, bundle formats and resource loaders.

Python 3.13+.
"""

from .formats import BundleFormat, JsonFormat, PropertiesFormat, format_for
from .loading import (
    DirectoryResourceLoader,
    LoadSummary,
    PackageResourceLoader,
    ResourceLoader,
    TierLoadResult,
)
from .naming import to_bundle_name, to_resource_name
from .types import BundleName, MessageKey, Messages, Namespace, ResourceName, Template

__all__ = [
    "BundleFormat",
    "BundleName",
    "DirectoryResourceLoader",
    "JsonFormat",
    "LoadSummary",
    "MessageKey",
    "Messages",
    "Namespace",
    "PackageResourceLoader",
    "PropertiesFormat",
    "ResourceLoader",
    "ResourceName",
    "Template",
    "TierLoadResult",
    "format_for",
    "to_bundle_name",
    "to_resource_name",
]
