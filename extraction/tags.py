"""
Struct tag parsing.

A tag is a sequence of space-separated ``key:"value"`` pairs, e.g.
``json:"name,omitempty" xml:"name"``. Values are kept verbatim; option
lists are not split.
"""

import logging
import re
from typing import Dict, List

from extraction.errors import MalformedTagError

logger = logging.getLogger(__name__)

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
}

_ESCAPE_RE = re.compile(
    r"""\\(?:(?P<simple>[abfnrtv\\'"])"""
    r"|(?P<octal>[0-7]{3})"
    r"|x(?P<hex>[0-9a-fA-F]{2})"
    r"|u(?P<u4>[0-9a-fA-F]{4})"
    r"|U(?P<u8>[0-9a-fA-F]{8}))"
)


def _unquote_interpreted(body: str, raw: str) -> str:
    """Decode the escape sequences of a Go interpreted string literal body.

    Raises:
        MalformedTagError: On an unknown escape or a code point out of range.
    """
    out: List[str] = []
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\":
            out.append(char)
            i += 1
            continue

        match = _ESCAPE_RE.match(body, i)
        if match is None:
            raise MalformedTagError(body[i:], tag=raw)
        if match.group("simple"):
            out.append(_SIMPLE_ESCAPES[match.group("simple")])
        else:
            if match.group("octal"):
                code = int(match.group("octal"), 8)
            else:
                code = int(match.group("hex") or match.group("u4") or match.group("u8"), 16)
            if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                raise MalformedTagError(match.group(0), tag=raw)
            out.append(chr(code))
        i = match.end()
    return "".join(out)


def _strip_delimiters(raw: str) -> str:
    """Remove the backticks (or double quotes) around a tag literal.

    Raw string tags are returned as written; interpreted string tags are
    unescaped first.
    """
    if raw.startswith("`"):
        body = raw[1:]
        return body[:-1] if body.endswith("`") else body
    if len(raw) >= 2 and raw[0] == '"' and raw[-1] == '"':
        return _unquote_interpreted(raw[1:-1], raw)
    return raw


def _is_key_char(char: str) -> bool:
    return char > " " and char not in ':"' and char != "\x7f"


def parse_tags(raw: str) -> Dict[str, str]:
    """Parse a raw struct tag into an ordered key -> value mapping.

    Args:
        raw: Tag literal as written in source, delimiters included
            (e.g. ``\\`json:"foo"\\```). May be empty.

    Returns:
        Mapping of tag keys to verbatim values; empty for an empty tag.
        A repeated key keeps its last value.

    Raises:
        MalformedTagError: If the tag does not match the ``key:"value"``
            grammar. No partial mapping is returned.

    Example:
        >>> parse_tags('`json:"name,omitempty" xml:"name"`')
        {'json': 'name,omitempty', 'xml': 'name'}
    """
    tag = _strip_delimiters(raw)
    tags: Dict[str, str] = {}
    i = 0
    length = len(tag)

    while True:
        while i < length and tag[i] == " ":
            i += 1
        if i >= length:
            break

        start = i
        while i < length and _is_key_char(tag[i]):
            i += 1
        if i == start or i + 1 >= length or tag[i] != ":" or tag[i + 1] != '"':
            raise MalformedTagError(tag[start:], tag=raw)
        key = tag[start:i]

        # Scan the quoted value, honouring backslash escapes
        i += 2
        value_start = i
        while i < length and tag[i] != '"':
            if tag[i] == "\\":
                i += 1
            i += 1
        if i >= length:
            raise MalformedTagError(tag[start:], tag=raw)
        tags[key] = tag[value_start:i]
        i += 1

        if i < length and tag[i] != " ":
            raise MalformedTagError(tag[start:], tag=raw)

    logger.debug(f"Parsed {len(tags)} tag keys from {raw!r}")
    return tags
