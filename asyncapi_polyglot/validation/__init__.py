# noqa: D104
"""Uniqueness and cross-reference validation for API specs."""

from asyncapi_polyglot.errors import (
    ConfigurationError,
    SchemaConstraintError,
    SpecReferenceError,
    SpecValidationError,
)
from asyncapi_polyglot.validation.validator import ValidatedSpec, validate, validation_report

__all__ = [
    "validate",
    "validation_report",
    "ValidatedSpec",
    "SpecValidationError",
    "SpecReferenceError",
    "SchemaConstraintError",
    "ConfigurationError",
]
