"""Stream schema resolution.

Parses stream definition text of the form::

    @Import('StockStream:1.0.0')
    define stream StockStream (symbol string, price float, volume long);

into a StreamDefinition carrying the stream id and its ordered attributes.
Leading annotations are accepted and ignored; keywords are case-insensitive
and the trailing semicolon is optional.

Only the definition header is interpreted. Query semantics belong to the
runtime.
"""

from __future__ import annotations

import re
from collections import Counter

from streamwire.contracts import ConfigurationError, StreamDefinition, StreamId

ATTRIBUTE_TYPES = frozenset({"string", "int", "long", "float", "double", "bool", "object"})

_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"

# @Name, @Name:sub, each with an optional parenthesised argument list that may
# contain quoted strings.
_ANNOTATION_RE = re.compile(
    rf"""\s*@{_IDENTIFIER}(?::{_IDENTIFIER})?\s*(?:\((?:[^()'"]|'[^']*'|"[^"]*")*\))?""",
)
_DEFINE_RE = re.compile(
    rf"^\s*define\s+stream\s+(?P<id>{_IDENTIFIER})\s*\((?P<attrs>.*)\)\s*;?\s*$",
    re.IGNORECASE | re.DOTALL,
)
_ATTRIBUTE_RE = re.compile(rf"^\s*(?P<name>{_IDENTIFIER})\s+(?P<type>{_IDENTIFIER})\s*$")


def _strip_annotations(text: str) -> str:
    position = 0
    while True:
        match = _ANNOTATION_RE.match(text, position)
        if match is None or match.end() == position:
            return text[position:]
        position = match.end()


def parse_stream_definition(text: str) -> StreamDefinition:
    """Parse a stream definition into its id and attributes.

    Args:
        text: Stream definition text

    Returns:
        Parsed StreamDefinition

    Raises:
        ConfigurationError: If the text is not a valid stream definition
    """
    match = _DEFINE_RE.match(_strip_annotations(text))
    if match is None:
        raise ConfigurationError(f"Invalid stream definition: {text.strip()!r}")

    stream_id = match.group("id")
    attrs_text = match.group("attrs").strip()

    names: list[str] = []
    types: list[str] = []
    if attrs_text:
        for raw in attrs_text.split(","):
            attribute = _ATTRIBUTE_RE.match(raw)
            if attribute is None:
                raise ConfigurationError(f"Invalid attribute {raw.strip()!r} in definition of stream '{stream_id}'")
            attr_type = attribute.group("type").lower()
            if attr_type not in ATTRIBUTE_TYPES:
                raise ConfigurationError(
                    f"Unknown type '{attribute.group('type')}' for attribute '{attribute.group('name')}' "
                    f"in stream '{stream_id}'. Expected one of: {', '.join(sorted(ATTRIBUTE_TYPES))}"
                )
            names.append(attribute.group("name"))
            types.append(attr_type)

    duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
    if duplicates:
        raise ConfigurationError(f"Stream '{stream_id}' declares duplicate attribute(s): {duplicates}")

    return StreamDefinition(
        stream_id=StreamId(stream_id),
        attributes=tuple(names),
        attribute_types=tuple(types),
        text=text,
    )
