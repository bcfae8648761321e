"""Per-language naming and type mapping for client scaffolding.

Each target language gets exactly one ``LanguageProfile``; templates never case
or map anything themselves.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import keyword

from asyncapi_polyglot.generators.options import Language
from asyncapi_polyglot.naming import safe_identifier, to_camel, to_pascal, to_snake
from asyncapi_polyglot.spec.schemas import PropertySpec, SchemaSpec

TS_RESERVED = frozenset(
    {
        "break", "case", "catch", "class", "const", "continue", "debugger", "default",
        "delete", "do", "else", "enum", "export", "extends", "false", "finally", "for",
        "function", "if", "import", "in", "instanceof", "new", "null", "return", "super",
        "switch", "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
        "let", "static", "yield", "await", "payload", "subject",
    }
)  # fmt: skip

RUST_RESERVED = frozenset(
    {
        "as", "async", "await", "break", "const", "continue", "crate", "dyn", "else",
        "enum", "extern", "false", "fn", "for", "if", "impl", "in", "let", "loop", "match",
        "mod", "move", "mut", "pub", "ref", "return", "self", "Self", "static", "struct",
        "super", "trait", "true", "type", "unsafe", "use", "where", "while", "payload",
        "subject",
    }
)  # fmt: skip

ELIXIR_RESERVED = frozenset(
    {
        "do", "end", "fn", "nil", "true", "false", "when", "and", "or", "not", "in",
        "catch", "rescue", "after", "else", "payload", "subject", "server",
    }
)  # fmt: skip

PYTHON_RESERVED = frozenset(keyword.kwlist) | {
    "self",
    "payload",
    "subject",
    "Any",
    "NotRequired",
    "TypedDict",
}

# Names each generated event bus already defines
PYTHON_MEMBERS = frozenset(
    {"publish", "publish_batch", "subscribe", "metrics", "config", "transport"}
)

TS_MEMBERS = frozenset(
    {
        "constructor", "publish", "publishBatch", "subscribe", "metrics", "config", "transport",
        "send", "counters", "countError",
    }
)

RUST_MEMBERS = frozenset(
    {"new", "with_config", "publish", "publish_batch", "subscribe", "metrics", "send"}
)

ELIXIR_MEMBERS = frozenset(
    {
        "start_link", "child_spec", "init", "handle_call", "handle_cast", "handle_info",
        "publish", "publish_batch", "subscribe", "metrics", "decode_envelope", "decode_batch",
        "new_envelope", "encode_envelope", "from_wire", "from_wires", "checksum", "send_encoded",
        "update_metrics", "record_sent", "record_received", "count_error", "smooth", "elapsed",
        "uuid4", "format_uuid",
    }
)  # fmt: skip


def _python_subject(address: str, args: dict[str, str]) -> str:
    text = address.replace("\\", "\\\\").replace('"', '\\"')
    if not args:
        return f'"{text}"'
    for placeholder, arg in args.items():
        text = text.replace(f"{{{placeholder}}}", f"{{{arg}}}")
    return f'f"{text}"'


def _typescript_subject(address: str, args: dict[str, str]) -> str:
    if not args:
        return '"' + address.replace("\\", "\\\\").replace('"', '\\"') + '"'
    text = address.replace("\\", "\\\\").replace("`", "\\`")
    for placeholder, arg in args.items():
        text = text.replace(f"{{{placeholder}}}", f"${{{arg}}}")
    return f"`{text}`"


def _rust_subject(address: str, args: dict[str, str]) -> str:
    text = address.replace("\\", "\\\\").replace('"', '\\"')
    if not args:
        return f'"{text}".to_string()'
    for placeholder, arg in args.items():
        text = text.replace(f"{{{placeholder}}}", f"{{{arg}}}")
    return f'format!("{text}")'


def elixir_escape(text: str) -> str:
    """Escape text for an Elixir double-quoted string; ``#{`` would interpolate."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("#{", "\\#{")


def _elixir_subject(address: str, args: dict[str, str]) -> str:
    text = elixir_escape(address)
    for placeholder, arg in args.items():
        text = text.replace(f"{{{placeholder}}}", f"#{{{arg}}}")
    return f'"{text}"'


@dataclass(frozen=True)
class LanguageProfile:
    """Naming rules and type table of one target language.

    Attributes:
        language: The language this profile describes
        method_case: Casing applied to operation ids for publish methods
        param_case: Casing applied to channel placeholders for method parameters
        reserved: Words that cannot be used as identifiers
        scalars: JSON type (or type/format pair) to target type
        array: Format string wrapping an item type into a list type
        generic: Type used for untyped payloads and unknown types
        subject_builder: Renders a channel address into a subject expression
        members: Names the generated event bus defines itself
        formats: Type/format pair to target type, checked before scalars
    """

    language: Language
    method_case: Callable[[str], str]
    param_case: Callable[[str], str]
    reserved: frozenset[str]
    scalars: dict[str, str]
    array: str
    generic: str
    subject_builder: Callable[[str, dict[str, str]], str]
    members: frozenset[str] = frozenset()
    formats: dict[str, str] = field(default_factory=dict)

    def method_name(self, operation_id: str) -> str:
        """Publish method name for an operation id, clear of the bus's own members."""
        return safe_identifier(self.method_case(operation_id), self.reserved | self.members)

    def param_name(self, placeholder: str) -> str:
        return safe_identifier(self.param_case(placeholder), self.reserved, fallback="param")

    def type_name(self, name: str) -> str:
        return safe_identifier(to_pascal(name), self.reserved, fallback="Value")

    def field_name(self, name: str) -> str:
        """Language-idiomatic field identifier (used where wire names are not kept)."""
        return safe_identifier(to_snake(name), self.reserved, fallback="field")

    def subject(self, address: str, args: dict[str, str]) -> str:
        return self.subject_builder(address, args)

    def type_for(
        self,
        type_: str | None,
        format_: str | None = None,
        items: SchemaSpec | None = None,
    ) -> str:
        """Map a JSON type (with format and item schema) to a target type."""
        if type_ == "array":
            inner = self.type_for(items.type, items.format, items.items) if items else self.generic
            return self.array.format(inner)
        if format_ and f"{type_}:{format_}" in self.formats:
            return self.formats[f"{type_}:{format_}"]
        return self.scalars.get(type_ or "", self.generic)

    def property_type(self, prop: PropertySpec) -> str:
        return self.type_for(prop.type, prop.format, prop.items)


PYTHON = LanguageProfile(
    language=Language.PYTHON,
    method_case=to_snake,
    param_case=to_snake,
    reserved=PYTHON_RESERVED,
    members=PYTHON_MEMBERS,
    scalars={
        "string": "str",
        "integer": "int",
        "number": "float",
        "boolean": "bool",
        "null": "None",
        "object": "dict[str, Any]",
    },
    array="list[{}]",
    generic="Any",
    subject_builder=_python_subject,
)

TYPESCRIPT = LanguageProfile(
    language=Language.TYPESCRIPT,
    method_case=to_camel,
    param_case=to_camel,
    reserved=TS_RESERVED,
    members=TS_MEMBERS,
    scalars={
        "string": "string",
        "integer": "number",
        "number": "number",
        "boolean": "boolean",
        "null": "null",
        "object": "Record<string, unknown>",
    },
    array="Array<{}>",
    generic="unknown",
    subject_builder=_typescript_subject,
)

RUST = LanguageProfile(
    language=Language.RUST,
    method_case=to_snake,
    param_case=to_snake,
    reserved=RUST_RESERVED,
    members=RUST_MEMBERS,
    scalars={
        "string": "String",
        "integer": "i64",
        "number": "f64",
        "boolean": "bool",
        "null": "()",
        "object": "serde_json::Value",
    },
    formats={
        "integer:int32": "i32",
        "number:float": "f32",
    },
    array="Vec<{}>",
    generic="serde_json::Value",
    subject_builder=_rust_subject,
)

ELIXIR = LanguageProfile(
    language=Language.ELIXIR,
    method_case=to_snake,
    param_case=to_snake,
    reserved=ELIXIR_RESERVED,
    members=ELIXIR_MEMBERS,
    scalars={
        "string": "String.t()",
        "integer": "integer()",
        "number": "float()",
        "boolean": "boolean()",
        "null": "nil",
        "object": "map()",
    },
    array="list({})",
    generic="map()",
    subject_builder=_elixir_subject,
)

PROFILES: dict[Language, LanguageProfile] = {
    Language.PYTHON: PYTHON,
    Language.TYPESCRIPT: TYPESCRIPT,
    Language.RUST: RUST,
    Language.ELIXIR: ELIXIR,
}


def get_profile(language: Language) -> LanguageProfile:
    return PROFILES[language]
