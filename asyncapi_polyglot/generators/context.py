"""Client context builder for code generation.

Provides one place that turns validated operations and schemas into template
context, so every language template receives the same shape of data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import keyword
from typing import TYPE_CHECKING, assert_never

from asyncapi_polyglot.errors import GenerationError
from asyncapi_polyglot.naming import to_kebab, to_pascal, to_snake
from asyncapi_polyglot.spec.channels import PLACEHOLDER_PATTERN
from asyncapi_polyglot.spec.schemas import InlineSchema, MissingSchema, SchemaByName

if TYPE_CHECKING:
    from asyncapi_polyglot.generators.languages import LanguageProfile
    from asyncapi_polyglot.spec.document import InfoSpec
    from asyncapi_polyglot.spec.operations import OperationSpec
    from asyncapi_polyglot.spec.schemas import SchemaSpec
    from asyncapi_polyglot.validation.validator import ValidatedSpec


@dataclass(frozen=True)
class ProjectNames:
    """Names derived from the API info, shared by every static file.

    Attributes:
        title: API title as written in the spec
        version: API version
        description: API description (empty when absent)
        package: Distribution name, kebab-case (``orders-api``)
        module: Importable module / OTP app name, snake_case (``orders_api``)
        namespace: PascalCase prefix for classes and modules (``OrdersApi``)
        bus: Event bus class name (``OrdersApiEventBus``)
    """

    title: str
    version: str
    description: str
    package: str
    module: str
    namespace: str
    bus: str

    @classmethod
    def from_info(cls, info: InfoSpec) -> ProjectNames:
        module = to_snake(info.title) or "api"
        if module[0].isdigit() or keyword.iskeyword(module):
            module = f"api_{module}"
        namespace = to_pascal(module)
        return cls(
            title=info.title,
            version=info.version,
            description=info.description or "",
            package=to_kebab(info.title) or "api",
            module=module,
            namespace=namespace,
            bus=f"{namespace}EventBus",
        )


@dataclass
class ParamContext:
    """Context for a channel placeholder turned into a method parameter.

    Attributes:
        name: Parameter name in the target language
        placeholder: Placeholder name as written in the channel address
        description: Parameter description from the channel, if declared
    """

    name: str
    placeholder: str
    description: str | None = None


@dataclass
class PublishContext:
    """Complete context for generating one publish method."""

    operation_id: str
    method_name: str
    event_type: str
    address: str
    subject: str
    payload_type: str
    payload_typed: bool = False  # True when payload_type is declared in the types module
    params: list[ParamContext] = field(default_factory=list)
    summary: str | None = None

    @property
    def doc(self) -> str:
        """One-line doc text, safe inside a docstring or block comment."""
        lines = (self.summary or "").strip().splitlines()
        text = lines[0] if lines else f"Publish {self.event_type} on '{self.address}'."
        return text.replace('"""', '"').replace("*/", "* /")


@dataclass
class FieldContext:
    """A field of a generated payload type."""

    name: str  # Identifier in the target language
    wire_name: str  # JSON key
    type: str
    required: bool
    description: str | None = None

    @property
    def key(self) -> str:
        """Wire name usable as an object key, quoted when not an identifier."""
        if self.wire_name.isidentifier():
            return self.wire_name
        return json.dumps(self.wire_name)


@dataclass
class TypeContext:
    """A generated payload type: a record of fields or an alias of another type."""

    name: str
    description: str | None = None
    fields: list[FieldContext] = field(default_factory=list)
    alias: str | None = None

    @property
    def is_record(self) -> bool:
        return self.alias is None

    @property
    def has_identifier_keys(self) -> bool:
        """Whether every wire name is a plain identifier (TypedDict class syntax)."""
        return all(f.wire_name.isidentifier() and not keyword.iskeyword(f.wire_name)
                   for f in self.fields)


class ClientContextBuilder:
    """Builds template context for one language from a validated spec.

    Centralizes:
    - Publish method names, parameters and subject expressions
    - Payload type names, including generated names for inline payloads
    - Payload type definitions derived from schemas
    """

    def __init__(self, validated: ValidatedSpec, profile: LanguageProfile) -> None:
        self.validated = validated
        self.profile = profile

    def build_publishes(self) -> list[PublishContext]:
        """One PublishContext per send operation, in declaration order."""
        publishes = [self.build_publish(op) for op in self.validated.send_operations()]
        self._ensure_unique(
            [p.method_name for p in publishes], "publish method", "operation ids"
        )
        return publishes

    def build_publish(self, operation: OperationSpec) -> PublishContext:
        channel = self.validated.channel_for(operation)
        declared = {p.name: p for p in channel.parameters}

        args: dict[str, str] = {}
        params: list[ParamContext] = []
        for placeholder in PLACEHOLDER_PATTERN.findall(channel.address):
            name = self.profile.param_name(placeholder)
            if placeholder not in args:
                args[placeholder] = name
            if any(p.name == name for p in params):
                continue
            parameter = declared.get(placeholder) or next(
                (p for p in channel.parameters if to_snake(p.name) == to_snake(placeholder)),
                None,
            )
            params.append(
                ParamContext(
                    name=name,
                    placeholder=placeholder,
                    description=parameter.description if parameter else None,
                )
            )

        event_type = operation.messages[0] if operation.messages else operation.operation_id
        payload_type = self._payload_type(operation)
        return PublishContext(
            operation_id=operation.operation_id,
            method_name=self.profile.method_name(operation.operation_id),
            event_type=event_type,
            address=channel.address,
            subject=self.profile.subject(channel.address, args),
            payload_type=payload_type,
            payload_typed=payload_type != self.profile.generic,
            params=params,
            summary=operation.summary or operation.description,
        )

    def _payload_type(self, operation: OperationSpec) -> str:
        if not operation.messages:
            return self.profile.generic
        message = self.validated.spec.components.get_message(operation.messages[0])
        if message is None:
            raise GenerationError(f"Message '{operation.messages[0]}' vanished after validation")
        match message.payload:
            case SchemaByName(name=name):
                return self.profile.type_name(name)
            case InlineSchema():
                return self.profile.type_name(f"{message.name}_payload")
            case MissingSchema():
                return self.profile.generic
            case _:
                assert_never(message.payload)

    def build_types(self) -> list[TypeContext]:
        """Payload types: one per named schema, then one per inline message payload."""
        types = [self.build_type(schema.name, schema) for schema in self.validated.schemas]
        for message in self.validated.messages:
            if isinstance(message.payload, InlineSchema):
                types.append(
                    self.build_type(f"{message.name}_payload", message.payload.definition)
                )
        self._ensure_unique([t.name for t in types], "type", "schema names")
        return types

    def build_type(self, name: str, schema: SchemaSpec) -> TypeContext:
        type_name = self.profile.type_name(name)
        if schema.type != "object":
            return TypeContext(
                name=type_name,
                description=schema.description,
                alias=self.profile.type_for(schema.type, schema.format, schema.items),
            )

        required = set(schema.required)
        fields = [
            FieldContext(
                name=self.profile.field_name(prop.name),
                wire_name=prop.name,
                type=self.profile.property_type(prop),
                required=prop.name in required,
                description=prop.description,
            )
            for prop in schema.properties
        ]
        self._ensure_unique([f.name for f in fields], f"field of '{type_name}'", "property names")
        return TypeContext(name=type_name, description=schema.description, fields=fields)

    def _ensure_unique(self, names: list[str], what: str, source: str) -> None:
        seen: set[str] = set()
        for name in names:
            if name in seen:
                msg = (
                    f"{self.profile.language} {what} '{name}' is generated twice; "
                    f"{source} collide after casing"
                )
                raise GenerationError(msg)
            seen.add(name)
