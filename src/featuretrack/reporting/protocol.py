"""TeamCity service message format.

Each message is one line of the form::

    ##teamcity[testStarted timestamp = '2024-01-01T12:00:00.000+0000' name = 'step']

Attribute values are escaped so that any string can be carried: ``|``
becomes ``||``, newline ``|n``, carriage return ``|r`` and ``'`` becomes
``|'``.  ``None`` renders as an empty value.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

PREFIX = "##teamcity"

_ESCAPES = {"|": "||", "\n": "|n", "\r": "|r", "'": "|'"}
_UNESCAPES = {"|": "|", "n": "\n", "r": "\r", "'": "'"}

_MESSAGE_RE = re.compile(r"^##teamcity\[(?P<name>\w+)(?P<body>.*)\]\s*$", re.DOTALL)
_ATTRIBUTE_RE = re.compile(r"\s*(?P<key>\w+)\s*=\s*'(?P<value>(?:\|.|[^|'])*)'")


def escape(value: object) -> str:
    """Escape *value* for use inside a quoted attribute."""
    if value is None:
        return ""
    return "".join(_ESCAPES.get(char, char) for char in str(value))


def unescape(text: str) -> str:
    """Reverse :func:`escape`.

    Raises:
        ValueError: On a dangling or unknown ``|`` escape.
    """
    chars: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "|":
            if index + 1 >= len(text) or text[index + 1] not in _UNESCAPES:
                raise ValueError(f"Invalid escape at offset {index} in {text!r}")
            chars.append(_UNESCAPES[text[index + 1]])
            index += 2
            continue
        chars.append(char)
        index += 1
    return "".join(chars)


def format_timestamp(instant: datetime) -> str:
    """Format *instant* as ``yyyy-MM-ddTHH:mm:ss.SSS+0000`` in UTC.

    Naive datetimes are taken to be UTC already.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    instant = instant.astimezone(timezone.utc)
    millis = instant.microsecond // 1000
    return instant.strftime("%Y-%m-%dT%H:%M:%S") + f".{millis:03d}+0000"


def render(name: str, attributes: list[tuple[str, object]] | None = None) -> str:
    """Render a service message with *attributes* in the given order."""
    parts = [f"{PREFIX}[{name}"]
    for key, value in attributes or []:
        parts.append(f" {key} = '{escape(value)}'")
    parts.append("]")
    return "".join(parts)


def parse_message(line: str) -> tuple[str, dict[str, str]]:
    """Parse one rendered service message into its name and attributes.

    Raises:
        ValueError: If *line* is not a service message.
    """
    match = _MESSAGE_RE.match(line)
    if match is None:
        raise ValueError(f"Not a service message: {line!r}")
    body = match.group("body")
    attributes: dict[str, str] = {}
    pos = 0
    while pos < len(body):
        if body[pos:].strip() == "":
            break
        attr = _ATTRIBUTE_RE.match(body, pos)
        if attr is None:
            raise ValueError(f"Malformed attributes in service message: {line!r}")
        attributes[attr.group("key")] = unescape(attr.group("value"))
        pos = attr.end()
    return match.group("name"), attributes
