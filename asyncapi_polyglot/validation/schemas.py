"""Schema checks.

Ensures that:
- Schema names are unique
- Types and string formats are known, bounds are consistent
- Object schemas have properties and array schemas have items (and not the reverse)
- Every property is well formed
- ``required`` only names declared properties
- Array items declare a valid type
"""

from __future__ import annotations

from asyncapi_polyglot.errors import SchemaConstraintError, SpecReferenceError
from asyncapi_polyglot.spec.document import ApiSpec
from asyncapi_polyglot.spec.schemas import PropertySpec, SchemaSpec
from asyncapi_polyglot.spec.types import VALID_TYPES
from asyncapi_polyglot.validation.common import (
    check_bounds,
    check_names_present,
    check_type_and_format,
    find_first_duplicate,
)


def check_schemas(spec: ApiSpec) -> None:
    """Run all schema checks in order."""
    schemas = spec.components.schemas
    check_names_present("schema", "name", (s.name for s in schemas), "components.schemas")
    name = find_first_duplicate(s.name for s in schemas)
    if name is not None:
        raise SpecReferenceError(
            "duplicate",
            f"components.schemas.{name}",
            f"duplicate schema name '{name}'; schema names must be unique",
        )

    for schema in schemas:
        entity = f"schema '{schema.name}'"
        path = _path(schema)
        check_type_and_format(entity, schema.type, schema.format, path)
        check_bounds(
            entity, schema.minimum, schema.maximum, schema.min_length, schema.max_length, path
        )
    for schema in schemas:
        _check_properties(schema)
    for schema in schemas:
        _check_required(schema)
    for schema in schemas:
        _check_items(schema)


def _path(schema: SchemaSpec) -> str:
    return f"components.schemas.{schema.name}"


def _check_properties(schema: SchemaSpec) -> None:
    if schema.type == "object" and not schema.properties:
        raise SchemaConstraintError(
            "shape",
            f"{_path(schema)}.properties",
            f"schema '{schema.name}' is of type 'object' but has no properties defined",
        )
    if schema.type != "object" and schema.properties:
        raise SchemaConstraintError(
            "shape",
            f"{_path(schema)}.properties",
            f"schema '{schema.name}' is of type '{schema.type}' but has properties defined; "
            "only 'object' schemas can have properties",
        )
    duplicate = find_first_duplicate(schema.property_names)
    if duplicate is not None:
        raise SpecReferenceError(
            "duplicate",
            f"{_path(schema)}.properties.{duplicate}",
            f"schema '{schema.name}' declares property '{duplicate}' more than once",
        )
    for prop in schema.properties:
        _check_property(schema, prop)


def _check_property(schema: SchemaSpec, prop: PropertySpec) -> None:
    entity = f"property '{prop.name}' in schema '{schema.name}'"
    path = f"{_path(schema)}.properties.{prop.name}"
    check_type_and_format(entity, prop.type, prop.format, path)
    check_bounds(entity, prop.minimum, prop.maximum, prop.min_length, prop.max_length, path)

    if prop.items is None:
        return
    if prop.type != "array":
        raise SchemaConstraintError(
            "shape",
            f"{path}.items",
            f"{entity} is of type '{prop.type}' but has items defined",
        )
    if prop.items.type not in VALID_TYPES:
        raise SchemaConstraintError(
            "type",
            f"{path}.items",
            f"items of {entity} have invalid type: {prop.items.type}",
        )


def _check_required(schema: SchemaSpec) -> None:
    declared = set(schema.property_names)
    undefined = [name for name in schema.required if name not in declared]
    if undefined:
        raise SchemaConstraintError(
            "required",
            f"{_path(schema)}.required",
            f"schema '{schema.name}' has required properties {undefined} "
            "that are not defined in properties",
        )


def _check_items(schema: SchemaSpec) -> None:
    path = f"{_path(schema)}.items"
    if schema.type == "array" and schema.items is None:
        raise SchemaConstraintError(
            "shape", path, f"schema '{schema.name}' is of type 'array' but has no items definition"
        )
    if schema.type != "array" and schema.items is not None:
        raise SchemaConstraintError(
            "shape",
            path,
            f"schema '{schema.name}' is of type '{schema.type}' but has items defined; "
            "only 'array' schemas can have items",
        )
    if schema.items is None:
        return
    if schema.items.type is None:
        raise SchemaConstraintError(
            "shape", path, f"items definition for array schema '{schema.name}' must have a type"
        )
    if schema.items.type not in VALID_TYPES:
        raise SchemaConstraintError(
            "type",
            path,
            f"items definition for array schema '{schema.name}' "
            f"has invalid type: {schema.items.type}",
        )
