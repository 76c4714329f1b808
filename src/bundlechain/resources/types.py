"""Type aliases for the resources domain.

Provides semantic type aliases used throughout the resources package and
by user code when annotating loader and format implementations.

Python 3.13+. Zero external dependencies.
"""

from typing import TypeAlias

__all__ = [
    "BundleName",
    "MessageKey",
    "Messages",
    "Namespace",
    "ResourceName",
    "Template",
]

Namespace: TypeAlias = str
"""Dotted base identifier of a bundle family (e.g., 'lang', 'myapp.messages')."""

BundleName: TypeAlias = str
"""Namespace plus locale qualifier (e.g., 'myapp.messages.it_it')."""

ResourceName: TypeAlias = str
"""Slash-separated resource path (e.g., 'myapp/messages/it_it.lang')."""

MessageKey: TypeAlias = str
"""Lookup key of a single template (e.g., 'menu.quit')."""

Template: TypeAlias = str
"""Raw template text as stored in a bundle (e.g., 'Hello, {0}!')."""

Messages: TypeAlias = dict[MessageKey, Template]
"""Flat key-to-template mapping produced by a bundle format."""
