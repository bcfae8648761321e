"""Helpers shared by the validation checks."""

from __future__ import annotations

from collections.abc import Iterable

from asyncapi_polyglot.errors import SchemaConstraintError
from asyncapi_polyglot.spec.types import VALID_STRING_FORMATS, VALID_TYPES


def find_first_duplicate(names: Iterable[str | None]) -> str | None:
    """Return the first name seen twice when scanning in order, ignoring None."""
    seen: set[str] = set()
    for name in names:
        if name is None:
            continue
        if name in seen:
            return name
        seen.add(name)
    return None


def check_names_present(entity: str, label: str, names: Iterable[str], path: str) -> None:
    """Raise on the first blank name; generated identifiers are derived from it."""
    for index, name in enumerate(names):
        if not name.strip():
            raise SchemaConstraintError(
                "name",
                f"{path}[{index}]",
                f"{entity} at index {index} must have a non-empty {label}",
            )


def check_type_and_format(
    entity: str,
    type_: str | None,
    format_: str | None,
    path: str,
) -> None:
    """Raise if ``type_`` is not a JSON type or a string format is unknown."""
    if type_ not in VALID_TYPES:
        raise SchemaConstraintError(
            "type",
            path,
            f"{entity} has invalid type: {type_}. Valid types are: {list(VALID_TYPES)}",
        )
    if type_ == "string" and format_ is not None and format_ not in VALID_STRING_FORMATS:
        raise SchemaConstraintError(
            "format",
            path,
            f"{entity} has invalid string format: {format_}",
        )


def check_bounds(
    entity: str,
    minimum: float | None,
    maximum: float | None,
    min_length: int | None,
    max_length: int | None,
    path: str,
) -> None:
    """Raise if a lower bound exceeds its upper bound."""
    if minimum is not None and maximum is not None and minimum > maximum:
        raise SchemaConstraintError(
            "bounds",
            path,
            f"{entity} has minimum ({minimum}) greater than maximum ({maximum})",
        )
    if min_length is not None and max_length is not None and min_length > max_length:
        raise SchemaConstraintError(
            "bounds",
            path,
            f"{entity} has min_length ({min_length}) greater than max_length ({max_length})",
        )
