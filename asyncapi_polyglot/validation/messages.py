"""Message checks: unique names, payload and header resolution, content types."""

from __future__ import annotations

from typing import assert_never

from asyncapi_polyglot.errors import SchemaConstraintError, SpecReferenceError
from asyncapi_polyglot.spec.document import ApiSpec
from asyncapi_polyglot.spec.messages import MessageSpec
from asyncapi_polyglot.spec.schemas import InlineSchema, MissingSchema, SchemaByName, SchemaRef
from asyncapi_polyglot.spec.types import KNOWN_CONTENT_TYPES
from asyncapi_polyglot.validation.common import check_names_present, find_first_duplicate


def check_messages(spec: ApiSpec) -> None:
    """Run all message checks in order."""
    messages = spec.components.messages
    check_names_present("message", "name", (m.name for m in messages), "components.messages")
    name = find_first_duplicate(m.name for m in messages)
    if name is not None:
        raise SpecReferenceError(
            "duplicate",
            f"components.messages.{name}",
            f"duplicate message name '{name}'; message names must be unique",
        )

    schema_names = {s.name for s in spec.components.schemas}
    for message in messages:
        _check_schema_ref(message, "payload", message.payload, schema_names, required=True)
    for message in messages:
        _check_schema_ref(message, "headers", message.headers, schema_names, required=False)
    for message in messages:
        _check_content_type(message)


def _check_schema_ref(
    message: MessageSpec,
    slot: str,
    ref: SchemaRef,
    schema_names: set[str],
    *,
    required: bool,
) -> None:
    path = f"components.messages.{message.name}.{slot}"
    match ref:
        case MissingSchema():
            if required:
                raise SchemaConstraintError(
                    "missing", path, f"message '{message.name}' must have a {slot} defined"
                )
        case SchemaByName(name=name):
            if name not in schema_names:
                raise SpecReferenceError(
                    "unresolved",
                    path,
                    f"message '{message.name}' references undefined {slot} schema '{name}'",
                )
        case InlineSchema(definition=definition):
            if definition.type is None:
                raise SchemaConstraintError(
                    "shape",
                    path,
                    f"invalid inline schema for {slot} of message '{message.name}': "
                    "must have a 'type' field",
                )
        case _:
            assert_never(ref)


def _check_content_type(message: MessageSpec) -> None:
    content_type = message.content_type
    if content_type in KNOWN_CONTENT_TYPES or "/" in content_type:
        return
    raise SchemaConstraintError(
        "content_type",
        f"components.messages.{message.name}.content_type",
        f"message '{message.name}' has invalid content type: {content_type}",
    )
