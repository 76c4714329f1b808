"""Tests for bundle formats: properties syntax, flat JSON, format dispatch."""

import io

import pytest
from hypothesis import given
from hypothesis import strategies as st

from bundlechain.diagnostics import DiagnosticCode, ResourceFormatError
from bundlechain.enums import ResourceType
from bundlechain.resources import formats
from bundlechain.resources.formats import (
    JsonFormat,
    PropertiesFormat,
    format_for,
    parse_properties,
)


def _load(fmt: PropertiesFormat | JsonFormat, data: bytes) -> dict[str, str]:
    return fmt.load(io.BytesIO(data))


class TestPropertiesSeparators:
    """Key/value splitting."""

    @pytest.mark.parametrize(
        "line",
        ["key=value", "key = value", "key:value", "key : value", "key value", "key  =  value"],
    )
    def test_separator_forms(self, line: str) -> None:
        """'=', ':' and whitespace all separate key from value."""
        assert parse_properties(line) == {"key": "value"}

    def test_key_without_value(self) -> None:
        """A lone key maps to the empty string."""
        assert parse_properties("lonely") == {"lonely": ""}

    def test_separator_inside_value_is_kept(self) -> None:
        """Only the first separator splits."""
        assert parse_properties("url=http://x?a=b") == {"url": "http://x?a=b"}

    def test_trailing_whitespace_is_kept(self) -> None:
        """Values are used verbatim after the leading whitespace."""
        assert parse_properties("a=b  ") == {"a": "b  "}

    def test_escaped_separators_in_key(self) -> None:
        """Backslash-escaped separators belong to the key."""
        assert parse_properties("k\\=x\\:y=v") == {"k=x:y": "v"}

    def test_placeholders_pass_through(self) -> None:
        """Template braces and apostrophes are not touched by the parser."""
        assert parse_properties("msg=it''s {0,number,currency}") == {
            "msg": "it''s {0,number,currency}"
        }


class TestPropertiesLines:
    """Comments, blank lines, continuations, duplicates."""

    def test_comments_and_blank_lines(self) -> None:
        """'#' and '!' start comments; blank lines are ignored."""
        text = "# comment\n\n   ! also a comment\na=1\n"
        assert parse_properties(text) == {"a": "1"}

    def test_line_endings(self) -> None:
        """LF, CRLF and CR all end lines."""
        assert parse_properties("a=1\r\nb=2\rc=3\n") == {"a": "1", "b": "2", "c": "3"}

    def test_continuation_strips_leading_whitespace(self) -> None:
        """A trailing backslash joins the next line."""
        assert parse_properties("a=first \\\n     second") == {"a": "first second"}

    def test_escaped_backslash_is_not_continuation(self) -> None:
        """An even run of trailing backslashes ends the line."""
        assert parse_properties("a=x\\\\\nb=y") == {"a": "x\\", "b": "y"}

    def test_continuation_at_end_of_text(self) -> None:
        """A dangling continuation is dropped."""
        assert parse_properties("a=x\\") == {"a": "x"}

    def test_comment_marker_inside_continuation_is_text(self) -> None:
        """Only logical lines can be comments."""
        assert parse_properties("a=x\\\n#y") == {"a": "x#y"}

    def test_last_duplicate_wins(self) -> None:
        """Later definitions replace earlier ones."""
        assert parse_properties("a=1\na=2") == {"a": "2"}


class TestPropertiesEscapes:
    """Backslash escapes."""

    def test_control_escapes(self) -> None:
        """\\t \\n \\r \\f map to control characters."""
        assert parse_properties("a=\\t\\n\\r\\f") == {"a": "\t\n\r\f"}

    def test_unicode_escape(self) -> None:
        """\\uXXXX decodes a code unit."""
        assert parse_properties("a=caf\\u00e9") == {"a": "café"}

    def test_surrogate_pair(self) -> None:
        """Escaped surrogate pairs combine into one character."""
        assert parse_properties("a=\\ud83d\\ude00") == {"a": "\U0001f600"}

    def test_other_escapes_stand_for_themselves(self) -> None:
        """Unknown escapes drop the backslash."""
        assert parse_properties("a=\\q\\#") == {"a": "q#"}

    @pytest.mark.parametrize("value", ["\\u12", "\\uZZZZ", "\\u"])
    def test_malformed_unicode_escape(self, value: str) -> None:
        """Bad \\u escapes are format errors."""
        with pytest.raises(ResourceFormatError, match="Malformed") as exc_info:
            parse_properties(f"a={value}")
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code is DiagnosticCode.RESOURCE_MALFORMED

    @given(st.text(max_size=200))
    def test_arbitrary_text_parses_or_reports(self, text: str) -> None:
        """Any text either parses or raises ResourceFormatError."""
        try:
            result = parse_properties(text)
        except ResourceFormatError:
            return
        assert all(isinstance(k, str) and isinstance(v, str) for k, v in result.items())


class TestPropertiesFormat:
    """PropertiesFormat byte handling."""

    def test_default_extension(self) -> None:
        """*.lang by default."""
        assert PropertiesFormat().file_extension == "lang"

    def test_utf8_with_bom(self) -> None:
        """A leading BOM is ignored."""
        assert _load(PropertiesFormat(), "\ufeffa=\u00e8".encode()) == {"a": "\u00e8"}

    def test_invalid_utf8(self) -> None:
        """Undecodable bytes are format errors."""
        with pytest.raises(ResourceFormatError, match="not valid utf-8"):
            _load(PropertiesFormat(), b"a=\xff")

    def test_oversized_resource(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Resources beyond the size limit are rejected."""
        monkeypatch.setattr(formats, "MAX_RESOURCE_SIZE", 8)
        with pytest.raises(ResourceFormatError, match="exceeds maximum size"):
            _load(PropertiesFormat(), b"key=a long value")

    def test_unreadable_stream(self) -> None:
        """Read failures are reported as unreadable resources."""

        class FailingStream(io.BytesIO):
            def read(self, size: int | None = -1, /) -> bytes:
                raise OSError("device gone")

        with pytest.raises(ResourceFormatError, match="could not be read") as exc_info:
            PropertiesFormat().load(FailingStream())
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code is DiagnosticCode.RESOURCE_UNREADABLE

    def test_keys(self) -> None:
        """Every parsed key is a lookup key."""
        fmt = PropertiesFormat()
        assert fmt.keys(_load(fmt, b"a=1\nb=2")) == frozenset({"a", "b"})


class TestJsonFormat:
    """JsonFormat value shapes."""

    def test_value_shapes(self) -> None:
        """Scalars and single-scalar arrays map; everything else does not."""
        data = (
            b'{"s": "text", "t": true, "f": false, "i": 3, "x": 1.5,'
            b' "one": ["only"], "one_num": [7], "empty": [], "many": ["a", "b"],'
            b' "obj": {"k": "v"}, "nil": null, "nested_list": [["a"]], "nil_list": [null]}'
        )
        assert _load(JsonFormat(), data) == {
            "s": "text",
            "t": "true",
            "f": "false",
            "i": "3",
            "x": "1.5",
            "one": "only",
            "one_num": "7",
        }

    def test_numbers_keep_their_source_text(self) -> None:
        """Numbers render as written, not as re-printed floats."""
        data = b'{"big": 1e5, "cents": 1.10, "neg": -0, "one_exp": [2E-3]}'
        assert _load(JsonFormat(), data) == {
            "big": "1e5",
            "cents": "1.10",
            "neg": "-0",
            "one_exp": "2E-3",
        }

    def test_deep_nesting_is_a_format_error(self) -> None:
        """Nesting beyond the interpreter's limits is reported, not raised raw."""
        depth = 100_000
        data = b'{"a": ' + b"[" * depth + b"]" * depth + b"}"
        with pytest.raises(ResourceFormatError, match="nesting too deep") as exc_info:
            _load(JsonFormat(), data)
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code is DiagnosticCode.RESOURCE_MALFORMED

    def test_keys_are_mapped_keys_only(self) -> None:
        """Unmapped members are not lookup keys."""
        fmt = JsonFormat()
        assert fmt.keys(_load(fmt, b'{"a": "1", "b": {}}')) == frozenset({"a"})

    def test_nested_objects_are_not_flattened(self) -> None:
        """No dotted-key flattening."""
        assert _load(JsonFormat(), b'{"menu": {"quit": "Quit"}}') == {}

    def test_malformed_json(self) -> None:
        """Syntax errors are format errors with a position."""
        with pytest.raises(ResourceFormatError, match="line 1"):
            _load(JsonFormat(), b'{"a": ')

    @pytest.mark.parametrize("document", [b"[]", b'"text"', b"3"])
    def test_top_level_must_be_object(self, document: bytes) -> None:
        """Only an object is a bundle."""
        with pytest.raises(ResourceFormatError, match="must be an object"):
            _load(JsonFormat(), document)

    def test_extension(self) -> None:
        """*.json."""
        assert JsonFormat().file_extension == "json"


class TestFormatFor:
    """ResourceType dispatch."""

    def test_lang(self) -> None:
        """LANG reads *.lang properties files."""
        assert format_for(ResourceType.LANG) == PropertiesFormat("lang")

    def test_properties(self) -> None:
        """PROPERTIES reads *.properties files."""
        assert format_for(ResourceType.PROPERTIES) == PropertiesFormat("properties")

    def test_json(self) -> None:
        """JSON reads *.json files."""
        assert isinstance(format_for(ResourceType.JSON), JsonFormat)

    def test_custom_requires_format(self) -> None:
        """CUSTOM without a format is a configuration error."""
        with pytest.raises(ValueError, match="requires a bundle_format"):
            format_for(ResourceType.CUSTOM)

    def test_custom_returns_given_format(self) -> None:
        """CUSTOM hands back the caller's implementation."""
        custom = PropertiesFormat("txt")
        assert format_for(ResourceType.CUSTOM, custom) is custom
