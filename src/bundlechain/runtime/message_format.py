"""Positional message templates: compile once, apply many times.

Template syntax:
    Hello, {0}!                       untyped placeholder
    {0,number} {0,number,integer}     number; styles integer, currency,
    {0,number,currency}               percent or a CLDR decimal pattern
    {0,number,#,##0.00}
    {0,date} {0,date,short}           date; styles short, medium, long,
    {0,date,yyyy-MM-dd}               full or a CLDR date pattern
    {0,time} {0,time,HH:mm}           time; same styles as date
    {0,choice,0#none|1#one|1<{0} many}
                                      choice between sub-templates by
                                      numeric limit (#: >=, <: >)

Quoting:
    ''           a literal apostrophe
    'text'       literal text, braces included; an unterminated quote runs
                 to the end of the template

Compilation produces an immutable segment tuple of literal strings and
Placeholder objects. Applying the template never mutates it, so a compiled
MessageFormat is safe to share across threads.

Python 3.13+. Uses Babel (via LocaleContext) for number and date rendering.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, TypeAlias

from babel import dates as babel_dates
from babel import numbers as babel_numbers

from bundlechain.constants import MAX_ARGUMENT_INDEX, MAX_CHOICE_DEPTH
from bundlechain.diagnostics import (
    Diagnostic,
    DiagnosticCode,
    TemplateFormatError,
    TemplateSyntaxError,
)
from bundlechain.runtime.locale_context import DATE_STYLES

if TYPE_CHECKING:
    from bundlechain.runtime.locale_context import LocaleContext

__all__ = [
    "ChoiceOption",
    "MessageFormat",
    "Placeholder",
]

_INDEX = re.compile(r"[0-9]+")

# Double.parseDouble-compatible limit syntax (no "nan"/"inf" words).
_LIMIT = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_FORMAT_TYPES = frozenset({"number", "date", "time", "choice"})
_NUMBER_STYLES = frozenset({"integer", "currency", "percent"})

_SYNTAX_HINT = "Placeholders are written {0}, {1,number}, {2,date,short} ..."


@dataclass(frozen=True, slots=True)
class ChoiceOption:
    """One branch of a choice placeholder.

    Attributes:
        limit: Lower bound; the branch is selected for values >= limit
        text: Branch text, itself a template when it contains "{"
    """

    limit: float
    text: str


@dataclass(frozen=True, slots=True)
class Placeholder:
    """Compiled ``{index[,type[,style]]}`` element.

    Attributes:
        index: Position of the argument to substitute
        format_type: "number", "date", "time", "choice" or None (untyped)
        style: Lowercased named style, raw pattern text, or None
        choices: Parsed branches, only for choice placeholders
    """

    index: int
    format_type: str | None = None
    style: str | None = None
    choices: tuple[ChoiceOption, ...] = ()


Segment: TypeAlias = str | Placeholder


class MessageFormat:
    """A template compiled for one locale.

    Example:
        >>> from bundlechain.locale_utils import LocaleDescriptor
        >>> from bundlechain.runtime.locale_context import LocaleContext
        >>> ctx = LocaleContext.create(LocaleDescriptor("en", "us"))
        >>> fmt = MessageFormat("It''s {0} for {1,number,currency}", ctx)
        >>> fmt.format(["lunch", 9.5])
        "It's lunch for $9.50"
        >>> fmt.defang()
        "It's [0] for [1]"
    """

    __slots__ = ("_context", "_segments", "_template")

    def __init__(self, template: str, context: LocaleContext) -> None:
        """Compile a template.

        Args:
            template: Template text
            context: Locale the template formats for

        Raises:
            TemplateSyntaxError: If the template cannot be compiled
        """
        self._template = template
        self._context = context
        self._segments = _compile(template)

    @property
    def template(self) -> str:
        """The template text this formatter was compiled from."""
        return self._template

    @property
    def segments(self) -> tuple[Segment, ...]:
        """Compiled literal text and placeholders, in order."""
        return self._segments

    @property
    def context(self) -> LocaleContext:
        """Locale context used for formatting."""
        return self._context

    def format(self, args: Sequence[object]) -> str:
        """Substitute arguments.

        Placeholders whose index is beyond ``args`` render as ``{index}``.

        Raises:
            TemplateFormatError: If an argument does not fit its placeholder,
                or choice branches nest deeper than MAX_CHOICE_DEPTH
        """
        return self._format(args, 0)

    def _format(self, args: Sequence[object], depth: int) -> str:
        out: list[str] = []
        for segment in self._segments:
            if isinstance(segment, str):
                out.append(segment)
            elif segment.index >= len(args):
                out.append(f"{{{segment.index}}}")
            else:
                out.append(self._render(segment, args, depth))
        return "".join(out)

    def defang(self) -> str:
        """Render literal text with every placeholder shown as ``[index]``."""
        return "".join(
            segment if isinstance(segment, str) else f"[{segment.index}]"
            for segment in self._segments
        )

    def __repr__(self) -> str:
        return f"MessageFormat({self._template!r}, locale={self._context.locale})"

    def _render(self, placeholder: Placeholder, args: Sequence[object], depth: int) -> str:
        value = args[placeholder.index]
        ctx = self._context
        match placeholder.format_type:
            case None:
                return _render_untyped(value, ctx)
            case "number":
                return ctx.format_number(_require_number(value, placeholder), placeholder.style)
            case "date":
                return ctx.format_date(
                    _require_date(value, placeholder), placeholder.style or "medium"
                )
            case "time":
                return ctx.format_time(
                    _require_time(value, placeholder), placeholder.style or "medium"
                )
            case "choice":
                text = _choose(placeholder.choices, _require_number(value, placeholder))
                if "{" not in text:
                    return text
                if depth >= MAX_CHOICE_DEPTH:
                    msg = f"Choice branches nest deeper than {MAX_CHOICE_DEPTH} levels"
                    raise TemplateFormatError(msg, argument_index=placeholder.index)
                try:
                    nested = MessageFormat(text, ctx)
                except TemplateSyntaxError as e:
                    msg = f"Choice branch for argument {placeholder.index} is invalid: {e}"
                    raise TemplateFormatError(msg, argument_index=placeholder.index) from e
                return nested._format(args, depth + 1)
        msg = f"Unknown format type {placeholder.format_type!r}"
        raise TemplateFormatError(msg, argument_index=placeholder.index)


def _render_untyped(value: object, ctx: LocaleContext) -> str:
    match value:
        case bool():
            return str(value)
        case int() | float() | Decimal():
            return ctx.format_number(value)
        case datetime():
            return ctx.format_datetime(value)
        case date():
            return ctx.format_date(value, "short")
        case _:
            return str(value)


def _mismatch(value: object, placeholder: Placeholder, expected: str) -> TemplateFormatError:
    diagnostic = Diagnostic(
        code=DiagnosticCode.TEMPLATE_ARGUMENT_MISMATCH,
        message=(
            f"Argument {placeholder.index} is {type(value).__name__}, "
            f"{placeholder.format_type} placeholder needs {expected}"
        ),
    )
    return TemplateFormatError(diagnostic, argument_index=placeholder.index)


def _require_number(value: object, placeholder: Placeholder) -> int | float | Decimal:
    if isinstance(value, bool) or not isinstance(value, int | float | Decimal):
        raise _mismatch(value, placeholder, "a number")
    return value


def _require_date(value: object, placeholder: Placeholder) -> date:
    if not isinstance(value, date):
        raise _mismatch(value, placeholder, "a date or datetime")
    return value


def _require_time(value: object, placeholder: Placeholder) -> datetime | time:
    match value:
        case datetime() | time():
            return value
        case date():
            return datetime.combine(value, time.min)
    raise _mismatch(value, placeholder, "a datetime or time")


def _choose(options: tuple[ChoiceOption, ...], value: int | float | Decimal) -> str:
    """Pick the last branch whose limit is <= value (the first one below all)."""
    number = float(value)
    selected = options[0]
    for option in options:
        if not number >= option.limit:
            break
        selected = option
    return selected.text


# ============================================================================
# COMPILER
# ============================================================================


def _syntax_error(message: str, template: str) -> TemplateSyntaxError:
    diagnostic = Diagnostic(
        code=DiagnosticCode.TEMPLATE_INVALID,
        message=message,
        hint=_SYNTAX_HINT,
        location=template,
    )
    return TemplateSyntaxError(diagnostic, template=template)


def _compile(template: str) -> tuple[Segment, ...]:
    """Split a template into literal text and placeholders.

    Inside a placeholder, quotes are kept verbatim (they belong to style
    patterns) and nested braces are balanced so choice branches can carry
    their own placeholders.

    Raises:
        TemplateSyntaxError: On unmatched braces or an invalid placeholder
    """
    segments: list[Segment] = []
    literal: list[str] = []
    parts: list[list[str]] = []
    in_quote = False
    depth = 0
    length = len(template)
    i = 0
    while i < length:
        char = template[i]
        if not parts:
            if char == "'":
                if i + 1 < length and template[i + 1] == "'":
                    literal.append(char)
                    i += 1
                else:
                    in_quote = not in_quote
            elif char == "{" and not in_quote:
                if literal:
                    segments.append("".join(literal))
                    literal = []
                parts = [[]]
            else:
                literal.append(char)
        elif in_quote:
            parts[-1].append(char)
            if char == "'":
                in_quote = False
        else:
            match char:
                case "," if len(parts) < 3:
                    parts.append([])
                case "{":
                    depth += 1
                    parts[-1].append(char)
                case "}" if depth == 0:
                    segments.append(_placeholder(["".join(p) for p in parts], template))
                    parts = []
                case "}":
                    depth -= 1
                    parts[-1].append(char)
                case " " if len(parts) == 2 and not parts[1]:
                    pass
                case "'":
                    in_quote = True
                    parts[-1].append(char)
                case _:
                    parts[-1].append(char)
        i += 1

    if parts:
        raise _syntax_error("Unmatched braces in the template", template)
    if literal:
        segments.append("".join(literal))
    return tuple(segments)


def _placeholder(parts: list[str], template: str) -> Placeholder:
    raw_index = parts[0]
    if not _INDEX.fullmatch(raw_index):
        raise _syntax_error(f"Can't parse argument number: {raw_index}", template)
    index = int(raw_index)
    if index > MAX_ARGUMENT_INDEX:
        raise _syntax_error(f"Argument number too large: {raw_index}", template)

    format_type = parts[1].strip().lower() if len(parts) > 1 else ""
    raw_style = parts[2] if len(parts) > 2 else ""
    keyword = raw_style.strip().lower()

    if not format_type:
        return Placeholder(index)
    if format_type not in _FORMAT_TYPES:
        raise _syntax_error(f"Unknown format type: {parts[1]}", template)

    match format_type:
        case "number":
            if not keyword:
                return Placeholder(index, format_type)
            if keyword in _NUMBER_STYLES:
                return Placeholder(index, format_type, keyword)
            _check_number_pattern(raw_style, template)
            return Placeholder(index, format_type, raw_style)
        case "date" | "time":
            if not keyword:
                return Placeholder(index, format_type)
            if keyword in DATE_STYLES:
                return Placeholder(index, format_type, keyword)
            _check_date_pattern(raw_style, template)
            return Placeholder(index, format_type, raw_style)
        case _:
            choices = _parse_choice(raw_style, template)
            return Placeholder(index, format_type, raw_style, choices)


def _check_number_pattern(pattern: str, template: str) -> None:
    try:
        babel_numbers.parse_pattern(pattern)
    except (ValueError, TypeError) as e:
        raise _syntax_error(f"Invalid number pattern {pattern!r}: {e}", template) from e


def _check_date_pattern(pattern: str, template: str) -> None:
    try:
        babel_dates.parse_pattern(pattern)
    except (ValueError, TypeError, KeyError) as e:
        raise _syntax_error(f"Invalid date pattern {pattern!r}: {e}", template) from e


def _parse_choice(pattern: str, template: str) -> tuple[ChoiceOption, ...]:
    """Parse ``limit#text|limit<text|...`` into ordered branches."""
    options: list[ChoiceOption] = []
    limit_text: list[str] = []
    branch_text: list[str] = []
    in_branch = False
    in_quote = False
    limit = previous = -math.inf
    length = len(pattern)
    i = 0
    while i < length:
        char = pattern[i]
        current = branch_text if in_branch else limit_text
        if char == "'":
            if i + 1 < length and pattern[i + 1] == "'":
                current.append(char)
                i += 1
            else:
                in_quote = not in_quote
        elif in_quote:
            current.append(char)
        elif char in "#<≤" and not in_branch:
            limit = _parse_limit("".join(limit_text), template)
            if char == "<" and math.isfinite(limit):
                limit = math.nextafter(limit, math.inf)
            if options and limit <= previous:
                raise _syntax_error(
                    "Choice limits must be in ascending order", template
                )
            limit_text = []
            in_branch = True
        elif char == "|" and in_branch:
            options.append(ChoiceOption(limit, "".join(branch_text)))
            previous = limit
            branch_text = []
            in_branch = False
        else:
            current.append(char)
        i += 1

    if in_branch:
        options.append(ChoiceOption(limit, "".join(branch_text)))
    if not options:
        raise _syntax_error("Choice pattern has no branches", template)
    return tuple(options)


def _parse_limit(text: str, template: str) -> float:
    stripped = text.strip()
    match stripped:
        case "∞" | "+∞":
            return math.inf
        case "-∞":
            return -math.inf
        case "":
            raise _syntax_error(
                "Each choice branch must start with a limit", template
            )
    if not _LIMIT.fullmatch(stripped):
        raise _syntax_error(f"Invalid choice limit: {stripped}", template)
    return float(stripped)
