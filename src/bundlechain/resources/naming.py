"""Bundle and resource naming.

Converts a namespace plus a locale into the bundle name and the concrete
resource path that loaders resolve:

    namespace "myapp.messages", locale it_it, extension "lang"
        bundle name:   myapp.messages.it_it
        resource name: myapp/messages/it_it.lang

The root locale (or any locale without a language) has no qualifier:

        bundle name:   myapp.messages
        resource name: myapp/messages.lang

Python 3.13+.
"""

from bundlechain.locale_utils import LocaleDescriptor, encode_locale
from bundlechain.resources.types import BundleName, Namespace, ResourceName

__all__ = ["to_bundle_name", "to_resource_name"]


def to_bundle_name(namespace: Namespace, locale: LocaleDescriptor) -> BundleName:
    """Return the bundle name for a namespace and locale.

    Args:
        namespace: Dotted namespace
        locale: Bundle locale

    Returns:
        "namespace.locale" or just "namespace" for locales without a language

    Example:
        >>> to_bundle_name("lang", LocaleDescriptor("en", "us"))
        'lang.en_us'
        >>> to_bundle_name("lang", LocaleDescriptor())
        'lang'
    """
    if locale.is_root:
        return namespace
    return f"{namespace}.{encode_locale(locale)}"


def to_resource_name(
    namespace: Namespace, locale: LocaleDescriptor, file_extension: str
) -> ResourceName:
    """Return the slash-separated resource path loaders resolve.

    Args:
        namespace: Dotted namespace ("." is the hierarchy separator)
        locale: Bundle locale
        file_extension: Format-specific suffix without the leading dot

    Returns:
        Resource path such as "lang/en_us.lang"

    Example:
        >>> to_resource_name("ui.text", LocaleDescriptor("it", "it"), "json")
        'ui/text/it_it.json'
    """
    bundle_name = to_bundle_name(namespace, locale)
    return f"{bundle_name.replace('.', '/')}.{file_extension}"
