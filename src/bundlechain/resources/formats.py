"""Bundle formats: turn resource bytes into flat key-to-template mappings.

Components:
    BundleFormat - Protocol every format implements (structural typing)
    PropertiesFormat - java.util.Properties line syntax (*.lang, *.properties)
    JsonFormat - Single flat JSON object (*.json)
    format_for - Dispatch from ResourceType to a format instance

Formats never nest: a bundle is a flat mapping of keys to template strings.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from bundlechain.constants import MAX_RESOURCE_SIZE, RESOURCE_ENCODING
from bundlechain.diagnostics import Diagnostic, DiagnosticCode, ResourceFormatError
from bundlechain.enums import ResourceType

if TYPE_CHECKING:
    from typing import BinaryIO

    from bundlechain.resources.types import Messages

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Protocol
    "BundleFormat",
    # Concrete formats
    "PropertiesFormat",
    "JsonFormat",
    # Dispatch
    "format_for",
    "read_resource_text",
]

# Natural line terminators of the properties syntax (not str.splitlines(),
# which also splits on vertical tab, form feed and Unicode separators).
_LINE_BREAK = re.compile(r"\r\n|\r|\n")

# Whitespace as the properties syntax defines it.
_PROPERTIES_WHITESPACE = " \t\f"

_ESCAPES: dict[str, str] = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class BundleFormat(Protocol):
    """Protocol for bundle file formats.

    Implementations parse one resource into a flat key-to-template mapping.
    Custom formats can be plugged in with ResourceType.CUSTOM.

    Example:
        >>> class UpperFormat:
        ...     file_extension = "txt"
        ...     def load(self, stream):
        ...         text = read_resource_text(stream)
        ...         return dict(line.split("=", 1) for line in text.splitlines())
        ...     def keys(self, messages):
        ...         return frozenset(messages)
    """

    file_extension: str
    """Resource suffix without the leading dot (e.g., 'lang', 'json')."""

    def load(self, stream: BinaryIO) -> Messages:
        """Parse a resource.

        Args:
            stream: Binary stream positioned at the start of the resource

        Returns:
            Flat mapping of keys to template strings

        Raises:
            ResourceFormatError: If the resource cannot be read or parsed
        """

    def keys(self, messages: Mapping[str, str]) -> frozenset[str]:
        """Return the keys a loaded bundle answers for.

        Args:
            messages: Mapping previously returned by load()

        Returns:
            Frozen set of keys
        """


def read_resource_text(stream: BinaryIO) -> str:
    """Read a whole resource as UTF-8 text, enforcing MAX_RESOURCE_SIZE.

    A leading byte order mark is dropped.

    Args:
        stream: Binary stream to read

    Returns:
        Decoded text

    Raises:
        ResourceFormatError: If the stream cannot be read, or the resource
            is too large or not valid UTF-8
    """
    try:
        data = stream.read(MAX_RESOURCE_SIZE + 1)
    except OSError as e:
        diagnostic = Diagnostic(
            code=DiagnosticCode.RESOURCE_UNREADABLE,
            message=f"Resource could not be read: {e}",
        )
        raise ResourceFormatError(diagnostic) from e
    if len(data) > MAX_RESOURCE_SIZE:
        diagnostic = Diagnostic(
            code=DiagnosticCode.RESOURCE_MALFORMED,
            message=f"Resource exceeds maximum size of {MAX_RESOURCE_SIZE} bytes",
        )
        raise ResourceFormatError(diagnostic)
    try:
        return data.decode(f"{RESOURCE_ENCODING}-sig")
    except UnicodeDecodeError as e:
        diagnostic = Diagnostic(
            code=DiagnosticCode.RESOURCE_MALFORMED,
            message=f"Resource is not valid {RESOURCE_ENCODING}: {e.reason}",
            hint=f"Save bundle files as {RESOURCE_ENCODING.upper()}",
        )
        raise ResourceFormatError(diagnostic) from e


@dataclass(frozen=True, slots=True)
class PropertiesFormat:
    """Line-oriented ``key=value`` bundles in java.util.Properties syntax.

    Syntax:
        - Lines whose first non-blank character is '#' or '!' are comments
        - The key ends at the first unescaped '=', ':' or whitespace
        - A line ending in an odd number of backslashes continues on the
          next line (leading whitespace of the continuation is dropped)
        - Escapes: \\t \\n \\r \\f \\uXXXX; any other escaped character
          stands for itself
        - A later duplicate key replaces an earlier one

    Attributes:
        file_extension: Resource suffix ("lang" by default, or "properties")

    Example:
        >>> import io
        >>> PropertiesFormat().load(io.BytesIO(b"greeting = Hello, {0}!"))
        {'greeting': 'Hello, {0}!'}
    """

    file_extension: str = ResourceType.LANG.value

    def load(self, stream: BinaryIO) -> Messages:
        """Parse a properties resource.

        Raises:
            ResourceFormatError: On malformed \\uXXXX escapes, oversized or
                non-UTF-8 resources
        """
        return parse_properties(read_resource_text(stream))

    def keys(self, messages: Mapping[str, str]) -> frozenset[str]:
        """Every parsed key is a lookup key."""
        return frozenset(messages)


def parse_properties(text: str) -> Messages:
    """Parse properties text into a flat mapping.

    Args:
        text: Decoded resource text

    Returns:
        Mapping of unescaped keys to unescaped values

    Raises:
        ResourceFormatError: On a malformed \\uXXXX escape
    """
    messages: Messages = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        messages[_unescape(key)] = _unescape(value)
    return messages


def _logical_lines(text: str) -> list[str]:
    """Join continuation lines and drop blanks and comments."""
    natural = _LINE_BREAK.split(text)
    logical: list[str] = []
    index = 0
    while index < len(natural):
        line = natural[index].lstrip(_PROPERTIES_WHITESPACE)
        index += 1
        if not line or line[0] in "#!":
            continue
        while _continues(line):
            line = line[:-1]
            if index >= len(natural):
                break
            line += natural[index].lstrip(_PROPERTIES_WHITESPACE)
            index += 1
        logical.append(line)
    return logical


def _continues(line: str) -> bool:
    """True if the line ends in an odd run of backslashes."""
    run = len(line) - len(line.rstrip("\\"))
    return run % 2 == 1


def _split_entry(line: str) -> tuple[str, str]:
    """Split a logical line into raw (still escaped) key and value."""
    escaped = False
    key_end = len(line)
    value_start = len(line)
    has_separator = False
    for position, char in enumerate(line):
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if char in "=:":
            key_end, value_start, has_separator = position, position + 1, True
            break
        if char in _PROPERTIES_WHITESPACE:
            key_end, value_start = position, position + 1
            break

    while value_start < len(line):
        char = line[value_start]
        if char in _PROPERTIES_WHITESPACE:
            value_start += 1
        elif not has_separator and char in "=:":
            has_separator = True
            value_start += 1
        else:
            break
    return line[:key_end], line[value_start:]


def _unescape(raw: str) -> str:
    """Resolve backslash escapes, combining \\uXXXX surrogate pairs."""
    if "\\" not in raw:
        return raw
    out: list[str] = []
    index = 0
    while index < len(raw):
        char = raw[index]
        index += 1
        if char != "\\":
            out.append(char)
            continue
        if index >= len(raw):
            break
        char = raw[index]
        index += 1
        if char == "u":
            digits = raw[index : index + 4]
            if len(digits) < 4 or not _HEX_DIGITS.issuperset(digits):
                diagnostic = Diagnostic(
                    code=DiagnosticCode.RESOURCE_MALFORMED,
                    message="Malformed \\uxxxx encoding",
                    location=raw,
                )
                raise ResourceFormatError(diagnostic)
            out.append(chr(int(digits, 16)))
            index += 4
        else:
            out.append(_ESCAPES.get(char, char))
    result = "".join(out)
    if any("\ud800" <= ch <= "\udfff" for ch in result):
        result = result.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
    return result


@dataclass(frozen=True, slots=True)
class JsonFormat:
    """Bundles stored as a single flat JSON object.

    Each member maps to a template when its value is a scalar, or an array
    holding exactly one scalar. Nested objects, empty arrays, multi-element
    arrays and null produce no mapping for that key.

    Scalar rendering: strings verbatim, booleans "true"/"false", numbers
    as written in the document.

    Attributes:
        file_extension: Resource suffix ("json")

    Example:
        >>> import io
        >>> JsonFormat().load(io.BytesIO(b'{"a": "x", "b": [2], "c": {"d": 1}}'))
        {'a': 'x', 'b': '2'}
    """

    file_extension: str = ResourceType.JSON.value

    def load(self, stream: BinaryIO) -> Messages:
        """Parse a JSON resource.

        Raises:
            ResourceFormatError: If the document is malformed or its top
                level is not an object
        """
        text = read_resource_text(stream)
        try:
            document = json.loads(text, parse_int=str, parse_float=str)
        except json.JSONDecodeError as e:
            diagnostic = Diagnostic(
                code=DiagnosticCode.RESOURCE_MALFORMED,
                message=f"Malformed JSON at line {e.lineno}, column {e.colno}: {e.msg}",
            )
            raise ResourceFormatError(diagnostic) from e
        except RecursionError as e:
            diagnostic = Diagnostic(
                code=DiagnosticCode.RESOURCE_MALFORMED,
                message="Malformed JSON: nesting too deep",
            )
            raise ResourceFormatError(diagnostic) from e

        if not isinstance(document, dict):
            diagnostic = Diagnostic(
                code=DiagnosticCode.RESOURCE_MALFORMED,
                message=f"JSON bundle must be an object, got {type(document).__name__}",
                hint='Write bundles as {"key": "template", ...}',
            )
            raise ResourceFormatError(diagnostic)

        messages: Messages = {}
        for key, value in document.items():
            template = self._template_for(value)
            if template is not None:
                messages[key] = template
        return messages

    def keys(self, messages: Mapping[str, str]) -> frozenset[str]:
        """Only members that produced a template are lookup keys."""
        return frozenset(messages)

    @staticmethod
    def _template_for(value: object) -> str | None:
        match value:
            case [single]:
                return _render_scalar(single)
            case _:
                return _render_scalar(value)


def _render_scalar(value: object) -> str | None:
    """Render a JSON scalar as template text, or None for other shapes."""
    match value:
        case bool():
            return "true" if value else "false"
        case str():
            return value
        case _:
            return None


def format_for(
    resource_type: ResourceType, custom: BundleFormat | None = None
) -> BundleFormat:
    """Return the bundle format for a resource type.

    Args:
        resource_type: Selected resource type
        custom: Format implementation, required for ResourceType.CUSTOM

    Returns:
        BundleFormat instance

    Raises:
        ValueError: If resource_type is CUSTOM and no custom format is given
    """
    match resource_type:
        case ResourceType.LANG:
            return PropertiesFormat()
        case ResourceType.PROPERTIES:
            return PropertiesFormat(file_extension=ResourceType.PROPERTIES.value)
        case ResourceType.JSON:
            return JsonFormat()
        case ResourceType.CUSTOM:
            if custom is None:
                msg = "resource_type CUSTOM requires a bundle_format"
                raise ValueError(msg)
            return custom
    msg = f"Unknown resource type: {resource_type!r}"
    raise ValueError(msg)
