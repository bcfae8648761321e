# noqa: D104
"""Text generators: Cap'n Proto schemas, language clients and root project files."""

from asyncapi_polyglot.generators.clients import ClientsGenerator
from asyncapi_polyglot.generators.idl import IdlDocuments, IdlGenerator
from asyncapi_polyglot.generators.options import (
    ALL_LANGUAGES,
    GeneratorOptions,
    IdlIdMode,
    Language,
)
from asyncapi_polyglot.generators.project import ProjectGenerator

__all__ = [
    "ALL_LANGUAGES",
    "ClientsGenerator",
    "GeneratorOptions",
    "IdlDocuments",
    "IdlGenerator",
    "IdlIdMode",
    "Language",
    "ProjectGenerator",
]
