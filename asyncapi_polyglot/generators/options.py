"""Options shared by all generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Language(StrEnum):
    """Target languages for client scaffolding."""

    PYTHON = "python"
    TYPESCRIPT = "typescript"
    RUST = "rust"
    ELIXIR = "elixir"


class IdlIdMode(StrEnum):
    """How Cap'n Proto file ids are chosen."""

    CONTENT_HASH = "content-hash"  # Derived from the spec fingerprint, reproducible
    RANDOM = "random"


ALL_LANGUAGES: tuple[Language, ...] = tuple(Language)


@dataclass(frozen=True)
class GeneratorOptions:
    """Immutable knobs passed to every generator.

    Attributes:
        languages: Client targets to generate, in output order
        publish_timeout: Seconds a generated publish call waits on the transport
        id_mode: File id strategy for the IDL documents
    """

    languages: tuple[Language, ...] = field(default=ALL_LANGUAGES)
    publish_timeout: float = 30.0
    id_mode: IdlIdMode = IdlIdMode.CONTENT_HASH
