"""Runtime: compiled templates, locale-aware formatting and concurrency.

Python 3.13+.
"""

from .cache import FormatterCache
from .cache_config import CacheConfig
from .locale_context import LocaleContext
from .message_format import MessageFormat
from .rwlock import RWLock

__all__ = [
    "CacheConfig",
    "FormatterCache",
    "LocaleContext",
    "MessageFormat",
    "RWLock",
]
