"""Tests for the JSON-with-comments parser."""

import pytest as _pytest

import layered_settings.errors as errors
import layered_settings.merging.jsonc as jsonc


class TestParseJsonc:
    """Comments and trailing commas are accepted."""

    def test_plain_json(self) -> None:
        assert jsonc.parse_jsonc('{"a": [1, 2], "b": null}') == {"a": [1, 2], "b": None}

    def test_line_comments(self) -> None:
        text = """{
            // This is a comment
            "settings": {
                "tabSize": 4 // inline comment
            }
        }"""
        assert jsonc.parse_jsonc(text) == {"settings": {"tabSize": 4}}

    def test_block_comments(self) -> None:
        text = '{ /* Block\n comment */ "theme": /* here too */ "dark" }'
        assert jsonc.parse_jsonc(text) == {"theme": "dark"}

    def test_trailing_commas(self) -> None:
        text = '{"extends": ["./base.json",], "settings": {"a": 1, "b": 2,},}'
        assert jsonc.parse_jsonc(text) == {
            "extends": ["./base.json"],
            "settings": {"a": 1, "b": 2},
        }

    def test_trailing_comma_before_comment(self) -> None:
        text = '{"a": [1, // one\n],}'
        assert jsonc.parse_jsonc(text) == {"a": [1]}

    def test_comment_markers_inside_strings_preserved(self) -> None:
        text = '{"url": "https://example.com/a", "glob": "**/*.js", "c": "a,]"}'
        assert jsonc.parse_jsonc(text) == {
            "url": "https://example.com/a",
            "glob": "**/*.js",
            "c": "a,]",
        }

    def test_escaped_quote_inside_string(self) -> None:
        text = r'{"a": "say \"hi\" // not a comment", "b": 1,}'
        assert jsonc.parse_jsonc(text) == {"a": 'say "hi" // not a comment', "b": 1}

    def test_comment_only_after_value(self) -> None:
        assert jsonc.parse_jsonc("42 // answer") == 42


class TestParseErrors:
    """Malformed input raises JsoncParseError with a position."""

    def test_error_message_has_offset(self) -> None:
        with _pytest.raises(jsonc.JsoncParseError) as exc_info:
            jsonc.parse_jsonc('{ "key": }')

        error = exc_info.value
        assert error.offset == 9
        assert error.line == 1
        assert error.column == 10
        assert "at offset 9" in str(error)

    def test_line_and_column_after_comments(self) -> None:
        text = '{\n  // comment\n  "a": @\n}'
        with _pytest.raises(jsonc.JsoncParseError) as exc_info:
            jsonc.parse_jsonc(text)

        assert exc_info.value.line == 3
        assert exc_info.value.column == 8

    def test_unterminated_block_comment(self) -> None:
        with _pytest.raises(jsonc.JsoncParseError, match="Unterminated block comment"):
            jsonc.parse_jsonc('{"a": 1 /* never closed')

    @_pytest.mark.parametrize("text", ["[,]", "{,}", "[ // nothing\n , ]", "[1,,]", '{"a": 1,,}'])
    def test_comma_without_preceding_value(self, text: str) -> None:
        with _pytest.raises(jsonc.JsoncParseError):
            jsonc.parse_jsonc(text)

    def test_empty_document(self) -> None:
        with _pytest.raises(jsonc.JsoncParseError):
            jsonc.parse_jsonc("   // nothing here\n")

    def test_error_hierarchy(self) -> None:
        with _pytest.raises(ValueError):
            jsonc.parse_jsonc("{")
        with _pytest.raises(errors.LayeredSettingsError):
            jsonc.parse_jsonc("{")
