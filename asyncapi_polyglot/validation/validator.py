"""Reference validator.

Runs the five check groups in a fixed order (channels, messages, components,
schemas, operations) and stops at the first violation. A successful run wraps
the untouched spec in ``ValidatedSpec``, the only input generators accept.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import assert_never

from asyncapi_polyglot.errors import SpecValidationError
from asyncapi_polyglot.spec.channels import ChannelSpec
from asyncapi_polyglot.spec.document import ApiSpec, InfoSpec
from asyncapi_polyglot.spec.messages import MessageSpec
from asyncapi_polyglot.spec.operations import OperationSpec
from asyncapi_polyglot.spec.schemas import (
    InlineSchema,
    MissingSchema,
    SchemaByName,
    SchemaRef,
    SchemaSpec,
)
from asyncapi_polyglot.validation.channels import check_channels
from asyncapi_polyglot.validation.components import check_components
from asyncapi_polyglot.validation.messages import check_messages
from asyncapi_polyglot.validation.operations import check_operations
from asyncapi_polyglot.validation.schemas import check_schemas

logger = logging.getLogger(__name__)

CHECKS: tuple[tuple[str, Callable[[ApiSpec], None]], ...] = (
    ("channels", check_channels),
    ("messages", check_messages),
    ("components", check_components),
    ("schemas", check_schemas),
    ("operations", check_operations),
)


@dataclass(frozen=True)
class ValidatedSpec:
    """A spec that passed every check.

    Lookups here may assume references resolve; a miss is a defect.
    """

    spec: ApiSpec

    @property
    def info(self) -> InfoSpec:
        return self.spec.info

    @property
    def schemas(self) -> list[SchemaSpec]:
        return self.spec.components.schemas

    @property
    def messages(self) -> list[MessageSpec]:
        return self.spec.components.messages

    @property
    def schema_hash(self) -> str:
        """``schemaHash`` constant shared by the IDL and every client, as a hex literal."""
        return f"0x{int(self.spec.fingerprint()[:16], 16):016x}"

    def send_operations(self) -> list[OperationSpec]:
        """Operations with action ``send``, in declaration order."""
        return [op for op in self.spec.operations if op.is_send]

    def channel_for(self, operation: OperationSpec) -> ChannelSpec:
        """Channel an operation refers to, by address or symbolic name."""
        for channel in self.spec.channels:
            if operation.channel in (channel.address, channel.name):
                return channel
        msg = f"Operation '{operation.operation_id}' has no channel after validation"
        raise LookupError(msg)

    def resolve(self, ref: SchemaRef) -> SchemaSpec | None:
        """Resolve a payload/header slot to a schema (None when absent)."""
        match ref:
            case SchemaByName(name=name):
                schema = self.spec.components.get_schema(name)
                if schema is None:
                    msg = f"Schema '{name}' is not declared"
                    raise LookupError(msg)
                return schema
            case InlineSchema(definition=definition):
                return definition
            case MissingSchema():
                return None
            case _:
                assert_never(ref)


def validate(spec: ApiSpec) -> ValidatedSpec:
    """Validate a spec, raising the first SpecValidationError found."""
    for group, check in CHECKS:
        logger.debug("Running %s checks", group)
        check(spec)
    return ValidatedSpec(spec)


def validation_report(spec: ApiSpec) -> tuple[bool, str]:
    """Validate and return a success flag plus a human readable summary."""
    try:
        validate(spec)
    except SpecValidationError as e:
        return False, f"Validation failed [{e.kind}] at {e.path}: {e.detail}"

    components = spec.components
    lines = [
        f"Spec '{spec.info.title}' v{spec.info.version} is valid",
        f"  channels: {len(spec.channels)}",
        f"  operations: {len(spec.operations)}",
        f"  messages: {len(components.messages)}",
        f"  schemas: {len(components.schemas)}",
        f"  security schemes: {len(components.security_schemes)}",
    ]
    return True, "\n".join(lines)
