"""Diagnostic system for bundlechain errors.

Provides structured error diagnostics with codes, locations and hints.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode
from .errors import (
    BundleChainError,
    ResourceFormatError,
    TemplateFormatError,
    TemplateSyntaxError,
)

__all__ = [
    "BundleChainError",
    "Diagnostic",
    "DiagnosticCode",
    "ResourceFormatError",
    "TemplateFormatError",
    "TemplateSyntaxError",
]
