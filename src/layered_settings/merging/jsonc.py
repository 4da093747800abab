"""JSON-with-comments parsing.

Accepts ``//`` line comments, ``/* */`` block comments and trailing commas
before ``]`` or ``}``. Comments and trailing commas are blanked with spaces
before handing the text to :mod:`json`, so every error offset reported by the
decoder is also an offset into the original text.
"""

from __future__ import annotations

import json as _json
import typing as _typing

import layered_settings.errors as errors


class JsoncParseError(errors.LayeredSettingsError, ValueError):
    """Raised when text is not valid JSON-with-comments.

    Attributes:
        msg: The decoder's message without position information.
        offset: Character offset into the original text.
        line: 1-indexed line number.
        column: 1-indexed column number.
    """

    def __init__(self, msg: str, text: str, offset: int) -> None:
        self.msg = msg
        self.offset = offset
        self.line = text.count("\n", 0, offset) + 1
        self.column = offset - (text.rfind("\n", 0, offset) + 1) + 1
        super().__init__(f"{msg} at offset {offset} (line {self.line}, column {self.column})")


def _blank(chars: list[str], start: int, end: int) -> None:
    """Replace chars[start:end] with spaces, keeping line breaks."""
    for k in range(start, end):
        if chars[k] not in "\r\n":
            chars[k] = " "


def _strip_comments(text: str) -> list[str]:
    chars = list(text)
    length = len(text)
    i = 0
    in_string = False

    while i < length:
        c = text[i]
        if in_string:
            if c == "\\":
                i += 2
                continue
            if c == '"':
                in_string = False
            i += 1
            continue

        if c == '"':
            in_string = True
            i += 1
        elif c == "/" and text.startswith("//", i):
            end = text.find("\n", i)
            end = length if end == -1 else end
            _blank(chars, i, end)
            i = end
        elif c == "/" and text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise JsoncParseError("Unterminated block comment", text, i)
            _blank(chars, i, end + 2)
            i = end + 2
        else:
            i += 1

    return chars


def _strip_trailing_commas(chars: list[str]) -> None:
    length = len(chars)
    in_string = False
    i = 0

    while i < length:
        c = chars[i]
        if in_string:
            if c == "\\":
                i += 2
                continue
            if c == '"':
                in_string = False
        elif c == '"':
            in_string = True
        elif c == ",":
            k = i + 1
            while k < length and chars[k].isspace():
                k += 1
            j = i - 1
            while j >= 0 and chars[j].isspace():
                j -= 1
            # Only a comma that follows a value is trailing; "[,]" stays an error
            if k < length and chars[k] in "]}" and j >= 0 and chars[j] not in "[{,":
                chars[i] = " "
        i += 1


def parse_jsonc(text: str) -> _typing.Any:
    """
    Parse JSON-with-comments text.

    Args:
        text: Document text.

    Returns:
        The decoded JSON value.

    Raises:
        JsoncParseError: If the text is malformed. The message contains
            ``at offset <n>``.
    """
    chars = _strip_comments(text)
    _strip_trailing_commas(chars)
    cleaned = "".join(chars)

    try:
        return _json.loads(cleaned)
    except _json.JSONDecodeError as e:
        raise JsoncParseError(e.msg, text, e.pos) from e
