"""Cap'n Proto schema generator.

Produces four documents from a validated spec:
- types.capnp: one struct per schema plus shared utility structs
- events.capnp: one struct per message, the Event union and OperationMetadata
- schema.capnp: EventEnvelope, EventBatch, Metrics and the schemaHash constant
- imports.capnp: per-language option structs

Field ordinals follow property declaration order, so reordering properties in
the spec changes the wire layout and nothing else does.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
import hashlib
import logging
import secrets

from asyncapi_polyglot.errors import GenerationError
from asyncapi_polyglot.generators.base import BaseGenerator
from asyncapi_polyglot.generators.context import ProjectNames
from asyncapi_polyglot.generators.options import IdlIdMode
from asyncapi_polyglot.materializer import Artifact
from asyncapi_polyglot.naming import to_camel, to_pascal
from asyncapi_polyglot.spec.schemas import PropertySpec, SchemaSpec

logger = logging.getLogger(__name__)

SCHEMA_DIR = "schema"

CAPNP_TYPES = {
    "string": "Text",
    "integer": "Int64",
    "int64": "Int64",
    "int32": "Int32",
    "number": "Float64",
    "float": "Float64",
    "float64": "Float64",
    "float32": "Float32",
    "boolean": "Bool",
    "null": "Void",
    "timestamp": "Timestamp",
    "uuid": "UUID",
    "binary": "Data",
}

STRING_FORMATS = {
    "date-time": "Timestamp",
    "uuid": "UUID",
    "binary": "Data",
    "byte": "Data",
}

NUMERIC_FORMATS = {
    "int32": "Int32",
    "int64": "Int64",
    "float": "Float32",
    "double": "Float64",
}

# Declared in types.capnp next to the schema structs
UTILITY_STRUCTS = frozenset({"Timestamp", "Duration", "UUID", "KeyValue", "BinaryData"})

# Declared in events.capnp next to the message structs
EVENT_STRUCTS = frozenset({"Event", "OperationMetadata"})


def capnp_type(
    type_: str | None,
    format_: str | None = None,
    items: SchemaSpec | None = None,
) -> str:
    """Map a JSON type, its format and item schema to a Cap'n Proto type."""
    if type_ == "array":
        if items is None:
            return "List(Data)"
        return f"List({capnp_type(items.type, items.format, items.items)})"
    if type_ == "string" and format_ in STRING_FORMATS:
        return STRING_FORMATS[format_]
    if type_ in ("integer", "number") and format_ in NUMERIC_FORMATS:
        return NUMERIC_FORMATS[format_]
    # object and anything unrecognised travel as opaque bytes
    return CAPNP_TYPES.get(type_ or "", "Data")


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(value)


def constraint_comment(
    spec: PropertySpec | SchemaSpec,
    required: bool = False,
) -> str:
    """Trailing comment carrying the constraints Cap'n Proto cannot express."""
    parts = ["required"] if required else []
    if spec.minimum is not None:
        parts.append(f"minimum: {_number(spec.minimum)}")
    if spec.maximum is not None:
        parts.append(f"maximum: {_number(spec.maximum)}")
    if spec.min_length is not None:
        parts.append(f"minLength: {spec.min_length}")
    if spec.max_length is not None:
        parts.append(f"maxLength: {spec.max_length}")
    if spec.format and capnp_type(spec.type, spec.format) == capnp_type(spec.type):
        parts.append(f"format: {spec.format}")
    return ", ".join(parts)


def struct_name(name: str) -> str:
    """PascalCase struct name, prefixed when it would not start with a letter."""
    pascal = to_pascal(name)
    if not pascal or not pascal[0].isalpha():
        return f"Schema{pascal}"
    return pascal


def field_name(name: str) -> str:
    """camelCase field name without underscores."""
    camel = to_camel(name)
    if not camel:
        return "value"
    if not camel[0].isalpha():
        return f"field{camel}"
    return camel


@dataclass
class IdlField:
    name: str
    ordinal: int
    type: str
    comment: str = ""

    @property
    def line(self) -> str:
        text = f"{self.name} @{self.ordinal} :{self.type};"
        return f"{text}  # {self.comment}" if self.comment else text


@dataclass
class IdlStruct:
    name: str
    description: str | None = None
    fields: list[IdlField] = field(default_factory=list)


@dataclass
class IdlMember:
    """A member of the Event union."""

    name: str
    ordinal: int
    struct: str
    message: str


@dataclass(frozen=True)
class IdlDocuments:
    """The four generated Cap'n Proto documents."""

    main: str
    imports: str
    types: str
    events: str

    def files(self) -> dict[str, str]:
        """Relative output path for each document."""
        return {
            f"{SCHEMA_DIR}/schema.capnp": self.main,
            f"{SCHEMA_DIR}/imports.capnp": self.imports,
            f"{SCHEMA_DIR}/types.capnp": self.types,
            f"{SCHEMA_DIR}/events.capnp": self.events,
        }


class IdlGenerator(BaseGenerator):
    """Generate Cap'n Proto schemas from a validated spec."""

    @cached_property
    def fingerprint(self) -> str:
        return self.validated.spec.fingerprint()

    @cached_property
    def names(self) -> ProjectNames:
        return ProjectNames.from_info(self.validated.info)

    def file_id(self, document: str) -> str:
        """64-bit file id with the high bit set.

        Content-hash mode derives it from the spec fingerprint and the document
        name, so identical input yields identical ids.
        """
        if self.options.id_mode is IdlIdMode.RANDOM:
            value = secrets.randbits(64)
        else:
            digest = hashlib.sha256(f"{self.fingerprint}:{document}".encode()).digest()
            value = int.from_bytes(digest[:8], "big")
        return f"0x{value | 1 << 63:016x}"

    @property
    def schema_hash(self) -> str:
        return self.validated.schema_hash

    def generate(self) -> IdlDocuments:
        """Render all four documents."""
        structs = self.build_type_structs()
        members = self.build_event_members()
        common = {"names": self.names}

        documents = IdlDocuments(
            main=self.render(
                "idl/schema.capnp.j2",
                file_id=self.file_id("schema"),
                schema_hash=self.schema_hash,
                has_events=bool(members),
                **common,
            ),
            imports=self.render("idl/imports.capnp.j2", file_id=self.file_id("imports"), **common),
            types=self.render(
                "idl/types.capnp.j2", file_id=self.file_id("types"), structs=structs, **common
            ),
            events=self.render(
                "idl/events.capnp.j2",
                file_id=self.file_id("events"),
                members=members,
                **common,
            ),
        )
        logger.debug(
            "Generated IDL with %d type structs and %d event members", len(structs), len(members)
        )
        return documents

    def artifacts(self) -> list[Artifact]:
        return [Artifact(path, text) for path, text in self.generate().files().items()]

    def build_type_structs(self) -> list[IdlStruct]:
        """One struct per schema, in declaration order."""
        structs = [self.build_struct(schema) for schema in self.validated.schemas]
        self._ensure_unique(
            [s.name for s in structs],
            UTILITY_STRUCTS,
            "schemas",
        )
        return structs

    def build_struct(self, schema: SchemaSpec) -> IdlStruct:
        name = struct_name(schema.name)
        if schema.type != "object":
            # Non-object schemas are wrapped in a single-field struct
            value = IdlField(
                name="value",
                ordinal=0,
                type=capnp_type(schema.type, schema.format, schema.items),
                comment=constraint_comment(schema),
            )
            return IdlStruct(name=name, description=schema.description, fields=[value])

        required = set(schema.required)
        fields = [
            IdlField(
                name=field_name(prop.name),
                ordinal=ordinal,
                type=capnp_type(prop.type, prop.format, prop.items),
                comment=constraint_comment(prop, required=prop.name in required),
            )
            for ordinal, prop in enumerate(schema.properties)
        ]
        self._ensure_unique([f.name for f in fields], frozenset(), f"properties of '{name}'")
        return IdlStruct(name=name, description=schema.description, fields=fields)

    def build_event_members(self) -> list[IdlMember]:
        """Union members: ordinal 0 is reserved for ``unknown``, messages follow."""
        members = [
            IdlMember(
                name=field_name(message.name),
                ordinal=ordinal,
                struct=struct_name(message.name),
                message=message.name,
            )
            for ordinal, message in enumerate(self.validated.messages, start=1)
        ]
        self._ensure_unique([m.struct for m in members], EVENT_STRUCTS, "messages")
        self._ensure_unique([m.name for m in members], frozenset({"unknown"}), "messages")
        return members

    @staticmethod
    def _ensure_unique(names: list[str], taken: frozenset[str], source: str) -> None:
        seen = set(taken)
        for name in names:
            if name in seen:
                msg = f"IDL identifier '{name}' is generated twice; {source} collide after casing"
                raise GenerationError(msg)
            seen.add(name)
