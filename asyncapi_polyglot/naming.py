"""Identifier casing shared by validation and every generator.

All conversions go through ``split_words`` so that ``orderCreated``,
``order_created``, ``order-created`` and ``OrderCreated`` agree on their words.
"""

from __future__ import annotations

import re

_BOUNDARY = re.compile(r"[^0-9A-Za-z]+")
_CAMEL_SPLIT = re.compile(r"[A-Z]+(?=[A-Z][a-z0-9])|[A-Z]?[a-z0-9]+|[A-Z]+")


def split_words(value: str) -> list[str]:
    """Split an identifier or free text into lowercase words.

    Examples:
        >>> split_words("publishOrderCreated")
        ['publish', 'order', 'created']
        >>> split_words("HTTPRequest-v2")
        ['http', 'request', 'v2']
    """
    words: list[str] = []
    for chunk in _BOUNDARY.split(value):
        words.extend(match.lower() for match in _CAMEL_SPLIT.findall(chunk))
    return words


def to_snake(value: str) -> str:
    """orderCreated -> order_created."""
    return "_".join(split_words(value))


def to_kebab(value: str) -> str:
    """orderCreated -> order-created."""
    return "-".join(split_words(value))


def to_pascal(value: str) -> str:
    """order_created -> OrderCreated."""
    return "".join(word.capitalize() for word in split_words(value))


def to_camel(value: str) -> str:
    """order_created -> orderCreated."""
    pascal = to_pascal(value)
    return pascal[:1].lower() + pascal[1:]


def to_screaming_snake(value: str) -> str:
    """orderCreated -> ORDER_CREATED."""
    return to_snake(value).upper()


def safe_identifier(name: str, reserved: frozenset[str], fallback: str = "value") -> str:
    """Make an already-cased identifier usable in a target language.

    Empty names become ``fallback``, names starting with a digit get a leading
    underscore and reserved words get a trailing underscore.
    """
    if not name:
        return fallback
    if name[0].isdigit():
        name = f"_{name}"
    if name in reserved:
        name = f"{name}_"
    return name
