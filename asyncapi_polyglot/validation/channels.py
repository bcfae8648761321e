"""Channel checks.

Ensures that:
- Channel addresses (and symbolic names) are unique
- Every ``{param}`` placeholder in an address has a declared parameter
- Operations listed under a channel reference declared messages
"""

from __future__ import annotations

from asyncapi_polyglot.errors import SpecReferenceError
from asyncapi_polyglot.naming import to_snake
from asyncapi_polyglot.spec.channels import ChannelSpec
from asyncapi_polyglot.spec.document import ApiSpec
from asyncapi_polyglot.validation.common import find_first_duplicate


def check_channels(spec: ApiSpec) -> None:
    """Run all channel checks in order."""
    _check_unique(spec.channels)
    for channel in spec.channels:
        _check_parameters(channel)
    message_names = {m.name for m in spec.components.messages}
    for channel in spec.channels:
        _check_operation_messages(channel, message_names)


def _check_unique(channels: list[ChannelSpec]) -> None:
    address = find_first_duplicate(c.address for c in channels)
    if address is not None:
        raise SpecReferenceError(
            "duplicate",
            f"channels.{address}",
            f"duplicate channel address '{address}'; channel addresses must be unique",
        )
    name = find_first_duplicate(c.name for c in channels)
    if name is not None:
        raise SpecReferenceError(
            "duplicate",
            f"channels.{name}",
            f"duplicate channel name '{name}'; channel names must be unique",
        )


def placeholder_satisfied(placeholder: str, declared: list[str]) -> bool:
    """A placeholder matches a parameter by exact or snake_case-normalised name."""
    if placeholder in declared:
        return True
    wanted = to_snake(placeholder)
    return any(to_snake(name) == wanted for name in declared)


def _check_parameters(channel: ChannelSpec) -> None:
    declared = channel.parameter_names
    missing = [p for p in channel.placeholders if not placeholder_satisfied(p, declared)]
    if missing:
        raise SpecReferenceError(
            "unresolved",
            f"channels.{channel.address}.parameters",
            f"channel '{channel.address}' references undefined parameters {missing}",
        )


def _check_operation_messages(channel: ChannelSpec, message_names: set[str]) -> None:
    for operation in channel.operations:
        undefined = [m for m in operation.messages if m not in message_names]
        if undefined:
            raise SpecReferenceError(
                "unresolved",
                f"channels.{channel.address}.operations.{operation.operation_id}",
                f"operation '{operation.operation_id}' on channel '{channel.address}' "
                f"references undefined messages {undefined}",
            )
