# noqa: D104
"""Compile event-driven API documents into Cap'n Proto schemas and client scaffolds."""

from asyncapi_polyglot.errors import (
    GenerationError,
    MaterializationError,
    PipelineError,
    PolyglotError,
    SpecLoadError,
    SpecValidationError,
)
from asyncapi_polyglot.pipeline import Pipeline, compile_spec

__version__ = "0.1.0"

__all__ = [
    "compile_spec",
    "Pipeline",
    "PolyglotError",
    "SpecLoadError",
    "SpecValidationError",
    "GenerationError",
    "MaterializationError",
    "PipelineError",
]
