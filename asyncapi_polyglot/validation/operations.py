"""Operation checks.

Ensures that:
- Operation ids are unique
- Actions are ``send`` or ``receive``
- Channel, message and security references resolve
- Replies name a channel or an address, and their references resolve
"""

from __future__ import annotations

from asyncapi_polyglot.errors import SchemaConstraintError, SpecReferenceError
from asyncapi_polyglot.spec.document import ApiSpec
from asyncapi_polyglot.spec.operations import OperationSpec, ReplySpec
from asyncapi_polyglot.spec.types import VALID_ACTIONS
from asyncapi_polyglot.validation.common import check_names_present, find_first_duplicate


def channel_keys(spec: ApiSpec) -> set[str]:
    """Every string an operation may use to name a channel: addresses and symbolic names."""
    keys = {c.address for c in spec.channels}
    keys.update(c.name for c in spec.channels if c.name)
    return keys


def check_operations(spec: ApiSpec) -> None:
    """Run all operation checks in order."""
    operations = spec.operations
    check_names_present(
        "operation", "operation id", (op.operation_id for op in operations), "operations"
    )
    operation_id = find_first_duplicate(op.operation_id for op in operations)
    if operation_id is not None:
        raise SpecReferenceError(
            "duplicate",
            f"operations.{operation_id}",
            f"duplicate operation id '{operation_id}'; operation ids must be unique",
        )

    for op in operations:
        if op.action not in VALID_ACTIONS:
            raise SchemaConstraintError(
                "action",
                f"operations.{op.operation_id}.action",
                f"operation '{op.operation_id}' has invalid action: {op.action}. "
                f"Must be one of: {', '.join(VALID_ACTIONS)}",
            )

    channels = channel_keys(spec)
    messages = {m.name for m in spec.components.messages}
    schemes = {s.name for s in spec.components.security_schemes}

    for op in operations:
        _check_channel(op, channels)
    for op in operations:
        _check_messages(op, messages)
    for op in operations:
        _check_security(op, schemes)
    for op in operations:
        if op.reply is not None:
            _check_reply(op, op.reply, channels, messages)


def _check_channel(op: OperationSpec, channels: set[str]) -> None:
    path = f"operations.{op.operation_id}.channel"
    if not op.channel:
        raise SpecReferenceError(
            "unresolved", path, f"operation '{op.operation_id}' must reference a channel"
        )
    if op.channel not in channels:
        raise SpecReferenceError(
            "unresolved",
            path,
            f"operation '{op.operation_id}' references undefined channel '{op.channel}'",
        )


def _check_messages(op: OperationSpec, messages: set[str]) -> None:
    undefined = [m for m in op.messages if m not in messages]
    if undefined:
        raise SpecReferenceError(
            "unresolved",
            f"operations.{op.operation_id}.messages",
            f"operation '{op.operation_id}' references undefined messages {undefined}",
        )


def _check_security(op: OperationSpec, schemes: set[str]) -> None:
    undefined = [s for s in op.security if s not in schemes]
    if undefined:
        raise SpecReferenceError(
            "unresolved",
            f"operations.{op.operation_id}.security",
            f"operation '{op.operation_id}' references undefined security schemes {undefined}",
        )


def _check_reply(
    op: OperationSpec,
    reply: ReplySpec,
    channels: set[str],
    messages: set[str],
) -> None:
    path = f"operations.{op.operation_id}.reply"
    if reply.channel is None and not reply.address:
        raise SpecReferenceError(
            "unresolved",
            path,
            f"reply for operation '{op.operation_id}' must specify either a channel or address",
        )
    if reply.channel is not None and reply.channel not in channels:
        raise SpecReferenceError(
            "unresolved",
            f"{path}.channel",
            f"reply for operation '{op.operation_id}' references undefined channel "
            f"'{reply.channel}'",
        )
    undefined = [m for m in reply.messages if m not in messages]
    if undefined:
        raise SpecReferenceError(
            "unresolved",
            f"{path}.messages",
            f"reply for operation '{op.operation_id}' references undefined messages {undefined}",
        )
