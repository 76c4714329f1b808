"""Tests for the positional template compiler and formatter."""

import math
from datetime import date, datetime, time
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from bundlechain.constants import MAX_CHOICE_DEPTH
from bundlechain.diagnostics import DiagnosticCode, TemplateFormatError, TemplateSyntaxError
from bundlechain.locale_utils import LocaleDescriptor
from bundlechain.runtime.locale_context import LocaleContext
from bundlechain.runtime.message_format import ChoiceOption, MessageFormat, Placeholder


@pytest.fixture
def en_us() -> LocaleContext:
    """US English formatting context."""
    return LocaleContext.create(LocaleDescriptor("en", "us"))


def _fmt(template: str, ctx: LocaleContext, *args: object) -> str:
    return MessageFormat(template, ctx).format(args)


class TestCompile:
    """Segment structure."""

    def test_literal_and_placeholders(self, en_us: LocaleContext) -> None:
        """Literals and placeholders alternate in order."""
        fmt = MessageFormat("a {0} b {1,number,currency}", en_us)
        assert fmt.segments == (
            "a ",
            Placeholder(0),
            " b ",
            Placeholder(1, "number", "currency"),
        )

    def test_type_and_style_are_trimmed_and_lowercased(self, en_us: LocaleContext) -> None:
        """Spacing and case of type and named style are ignored."""
        fmt = MessageFormat("{0, Number, Currency }", en_us)
        assert fmt.segments == (Placeholder(0, "number", "currency"),)

    def test_pattern_style_keeps_commas(self, en_us: LocaleContext) -> None:
        """Only the first two commas split a placeholder."""
        fmt = MessageFormat("{0,number,#,##0.00}", en_us)
        assert fmt.segments == (Placeholder(0, "number", "#,##0.00"),)

    def test_choice_branches(self, en_us: LocaleContext) -> None:
        """Choice patterns compile into ordered branches."""
        (placeholder,) = MessageFormat("{0,choice,0#none|1#one|1<many}", en_us).segments
        assert isinstance(placeholder, Placeholder)
        assert placeholder.choices == (
            ChoiceOption(0.0, "none"),
            ChoiceOption(1.0, "one"),
            ChoiceOption(math.nextafter(1.0, math.inf), "many"),
        )

    def test_template_property(self, en_us: LocaleContext) -> None:
        """The source text is kept."""
        assert MessageFormat("x {0}", en_us).template == "x {0}"

    def test_repr(self, en_us: LocaleContext) -> None:
        """repr names template and locale."""
        assert repr(MessageFormat("x", en_us)) == "MessageFormat('x', locale=en_us)"


class TestCompileErrors:
    """Templates the compiler rejects."""

    @pytest.mark.parametrize(
        ("template", "message"),
        [
            ("Hello {name}", "Can't parse argument number: name"),
            ("Hello {}", "Can't parse argument number"),
            ("{-1}", "Can't parse argument number"),
            ("{10000}", "Argument number too large"),
            ("Hello {0", "Unmatched braces"),
            ("{0,money}", "Unknown format type: money"),
            ("{0,choice,}", "no branches"),
            ("{0,choice,1#a|0#b}", "ascending order"),
            ("{0,choice,#a}", "must start with a limit"),
            ("{0,choice,x#a}", "Invalid choice limit"),
        ],
    )
    def test_rejected(self, en_us: LocaleContext, template: str, message: str) -> None:
        """Each malformed form raises TemplateSyntaxError."""
        with pytest.raises(TemplateSyntaxError, match=message) as exc_info:
            MessageFormat(template, en_us)
        assert exc_info.value.template == template
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code is DiagnosticCode.TEMPLATE_INVALID

    def test_highest_index_accepted(self, en_us: LocaleContext) -> None:
        """The last valid index compiles."""
        assert MessageFormat("{9999}", en_us).segments == (Placeholder(9999),)

    def test_control_characters_escaped_in_message(self, en_us: LocaleContext) -> None:
        """The template shown in the error cannot inject log lines."""
        with pytest.raises(TemplateSyntaxError) as exc_info:
            MessageFormat("line\n{x}", en_us)
        assert "line\\n{x}" in str(exc_info.value)


class TestQuoting:
    """Apostrophes."""

    def test_doubled_apostrophe(self, en_us: LocaleContext) -> None:
        """'' is one apostrophe."""
        assert _fmt("It''s {0}", en_us, "x") == "It's x"

    def test_quoted_braces_are_literal(self, en_us: LocaleContext) -> None:
        """Quoted text is not parsed."""
        assert _fmt("'{0}' is {0}", en_us, "x") == "{0} is x"

    def test_unterminated_quote_runs_to_end(self, en_us: LocaleContext) -> None:
        """An open quote swallows the rest of the template."""
        assert _fmt("abc '{0}", en_us, "x") == "abc {0}"

    def test_lone_closing_brace_is_literal(self, en_us: LocaleContext) -> None:
        """A stray } outside placeholders is text."""
        assert _fmt("a } {0}", en_us, "b") == "a } b"

    @given(st.text(alphabet=st.characters(exclude_characters="{}'"), max_size=50))
    def test_plain_text_is_unchanged(self, text: str) -> None:
        """Text without braces or quotes formats to itself."""
        ctx = LocaleContext.create(LocaleDescriptor("en", "us"))
        assert MessageFormat(text, ctx).format(["unused"]) == text


class TestUntypedPlaceholders:
    """Rendering by argument type."""

    def test_string(self, en_us: LocaleContext) -> None:
        """Strings are inserted as-is."""
        assert _fmt("{0}", en_us, "text") == "text"

    def test_bool(self, en_us: LocaleContext) -> None:
        """Booleans use their Python text."""
        assert _fmt("{0}", en_us, True) == "True"

    def test_none(self, en_us: LocaleContext) -> None:
        """None uses its Python text."""
        assert _fmt("{0}", en_us, None) == "None"

    def test_number_uses_locale(self, en_us: LocaleContext) -> None:
        """Numbers get locale grouping."""
        assert _fmt("{0}", en_us, 1234.5) == "1,234.5"
        assert _fmt("{0}", LocaleContext.create(LocaleDescriptor("it", "it")), 1234.5) == (
            "1.234,5"
        )

    def test_decimal(self, en_us: LocaleContext) -> None:
        """Decimals are numbers too."""
        assert _fmt("{0}", en_us, Decimal("1234.25")) == "1,234.25"

    def test_date(self, en_us: LocaleContext) -> None:
        """Dates use the short style."""
        assert _fmt("{0}", en_us, date(2024, 1, 15)) == "1/15/24"

    def test_datetime(self, en_us: LocaleContext) -> None:
        """Datetimes show date and time."""
        assert _fmt("{0}", en_us, datetime(2024, 1, 15, 15, 30)).startswith("1/15/24")

    def test_repeated_index(self, en_us: LocaleContext) -> None:
        """One argument may fill several placeholders."""
        assert _fmt("{0}-{0}-{1}", en_us, "a", "b") == "a-a-b"

    def test_missing_arguments_render_braced(self, en_us: LocaleContext) -> None:
        """Indexes beyond the arguments stay visible."""
        assert _fmt("{0} and {1}", en_us, "a") == "a and {1}"


class TestTypedPlaceholders:
    """number, date and time placeholders."""

    @pytest.mark.parametrize(
        ("template", "value", "expected"),
        [
            ("{0,number}", 1234.5, "1,234.5"),
            ("{0,number,integer}", 1234.7, "1,235"),
            ("{0,number,currency}", 9.5, "$9.50"),
            ("{0,number,percent}", 0.25, "25%"),
            ("{0,number,#,##0.00}", 1234.5, "1,234.50"),
        ],
    )
    def test_numbers(
        self, en_us: LocaleContext, template: str, value: float, expected: str
    ) -> None:
        """Number styles and patterns."""
        assert _fmt(template, en_us, value) == expected

    def test_currency_follows_locale_region(self) -> None:
        """Currency comes from the region."""
        ctx = LocaleContext.create(LocaleDescriptor("it", "it"))
        assert "€" in _fmt("{0,number,currency}", ctx, 3)

    @pytest.mark.parametrize(
        ("template", "expected"),
        [
            ("{0,date,short}", "1/15/24"),
            ("{0,date}", "Jan 15, 2024"),
            ("{0,date,yyyy-MM-dd}", "2024-01-15"),
            ("{0,time,HH:mm}", "15:30"),
        ],
    )
    def test_dates_and_times(self, en_us: LocaleContext, template: str, expected: str) -> None:
        """Date and time styles and patterns."""
        assert _fmt(template, en_us, datetime(2024, 1, 15, 15, 30)) == expected

    def test_time_of_plain_time(self, en_us: LocaleContext) -> None:
        """time objects fill time placeholders."""
        assert _fmt("{0,time,HH:mm}", en_us, time(7, 5)) == "07:05"

    def test_time_of_date_is_midnight(self, en_us: LocaleContext) -> None:
        """A date fills a time placeholder at midnight."""
        assert _fmt("{0,time,HH:mm}", en_us, date(2024, 1, 15)) == "00:00"

    @pytest.mark.parametrize(
        ("template", "value"),
        [
            ("{0,number,currency}", "abc"),
            ("{0,number}", True),
            ("{0,date}", 5),
            ("{0,time}", "noon"),
            ("{0,choice,0#a|1#b}", "1"),
        ],
    )
    def test_mismatch(self, en_us: LocaleContext, template: str, value: object) -> None:
        """Arguments of the wrong type raise TemplateFormatError."""
        with pytest.raises(TemplateFormatError) as exc_info:
            _fmt(template, en_us, value)
        assert exc_info.value.argument_index == 0
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code is DiagnosticCode.TEMPLATE_ARGUMENT_MISMATCH


class TestChoice:
    """Choice placeholders."""

    TEMPLATE = "{0,choice,0#no files|1#one file|1<{0,number,integer} files}"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(-3, "no files"), (0, "no files"), (1, "one file"), (1234, "1,234 files")],
    )
    def test_selection(self, en_us: LocaleContext, value: int, expected: str) -> None:
        """The last branch whose limit is <= value wins; below all, the first."""
        assert _fmt(self.TEMPLATE, en_us, value) == expected

    def test_less_or_equal_sign(self, en_us: LocaleContext) -> None:
        """≤ is the same as #."""
        assert _fmt("{0,choice,0≤zero|1≤more}", en_us, 1) == "more"

    def test_infinity_limit(self, en_us: LocaleContext) -> None:
        """∞ limits are accepted."""
        assert _fmt("{0,choice,-∞#low|0#mid|∞#inf}", en_us, math.inf) == "inf"

    def test_sub_template_uses_all_arguments(self, en_us: LocaleContext) -> None:
        """Branches see every argument."""
        template = "{0,choice,0#nobody|1#{1} alone|2#{1} and others}"
        assert _fmt(template, en_us, 2, "Ann") == "Ann and others"

    def test_broken_sub_template_is_format_error(self, en_us: LocaleContext) -> None:
        """A branch that does not compile fails at apply time."""
        fmt = MessageFormat("{0,choice,0#{x}}", en_us)
        with pytest.raises(TemplateFormatError, match="Choice branch"):
            fmt.format([0])

    @staticmethod
    def _nested(levels: int) -> str:
        template = "end"
        for _ in range(levels):
            template = "{0,choice,0#" + template + "}"
        return template

    def test_nested_branches_within_limit(self, en_us: LocaleContext) -> None:
        """Branches may nest choices of their own."""
        assert _fmt(self._nested(MAX_CHOICE_DEPTH), en_us, 0) == "end"

    def test_nesting_beyond_limit_is_format_error(self, en_us: LocaleContext) -> None:
        """Runaway nesting fails as an argument mismatch, not a RecursionError."""
        fmt = MessageFormat(self._nested(500), en_us)
        with pytest.raises(TemplateFormatError, match="nest deeper"):
            fmt.format([0])
        assert fmt.defang() == "[0]"


class TestDefang:
    """Placeholder-free rendering."""

    def test_placeholders_become_indexes(self, en_us: LocaleContext) -> None:
        """Each placeholder shows as [index]."""
        fmt = MessageFormat("It''s {0} for {1,number,currency}", en_us)
        assert fmt.defang() == "It's [0] for [1]"

    def test_no_placeholders(self, en_us: LocaleContext) -> None:
        """Plain templates are unchanged."""
        assert MessageFormat("plain", en_us).defang() == "plain"
