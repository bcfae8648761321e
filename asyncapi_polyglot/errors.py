"""Exception hierarchy shared by every stage.

PolyglotError
├── SpecLoadError
├── SpecValidationError(kind, path, detail)
│   ├── SpecReferenceError
│   ├── SchemaConstraintError
│   └── ConfigurationError
├── GenerationError
├── MaterializationError(failures, skipped)
└── PipelineError(stage, details)
"""

from __future__ import annotations

from pathlib import Path


class PolyglotError(Exception):
    """Base class for all errors raised by this package."""


class SpecLoadError(PolyglotError):
    """Raised when a spec document cannot be read or has the wrong shape."""

    def __init__(self, message: str, file_path: str | None = None) -> None:
        self.file_path = file_path
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.file_path:
            return f"{self.file_path}: {self.message}"
        return self.message


class SpecValidationError(PolyglotError):
    """Raised when a spec violates a structural or referential rule.

    Attributes:
        kind: Short classifier, e.g. "duplicate", "unresolved", "shape"
        path: Dotted location of the offending entity, e.g. "components.messages.X"
        detail: Human readable description naming the entity and the constraint
    """

    def __init__(self, kind: str, path: str, detail: str) -> None:
        self.kind = kind
        self.path = path
        self.detail = detail
        super().__init__(f"{path}: {detail}")


class SpecReferenceError(SpecValidationError):
    """Duplicate name or unresolved reference."""


class SchemaConstraintError(SpecValidationError):
    """Type, format, shape, bounds, required, content type or action violation."""


class ConfigurationError(SpecValidationError):
    """Security scheme misconfiguration."""


class GenerationError(PolyglotError):
    """Raised when a generator hits an invariant that validation should have ensured."""


class MaterializationError(PolyglotError):
    """Raised when one or more artifacts could not be written.

    Every failure is reported, not only the first one.
    """

    def __init__(
        self,
        failures: list[tuple[Path, BaseException]],
        skipped: list[Path] | None = None,
    ) -> None:
        self.failures = failures
        self.skipped = skipped or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        lines = [f"{len(self.failures)} artifact(s) failed to write"]
        lines.extend(f"  {path}: {cause}" for path, cause in self.failures)
        if self.skipped:
            lines.append(f"{len(self.skipped)} artifact(s) skipped after cancellation")
        return "\n".join(lines)


class PipelineError(PolyglotError):
    """Raised by the pipeline, naming the stage that failed.

    The underlying error is chained as ``__cause__``.
    """

    def __init__(self, stage: str, details: str) -> None:
        self.stage = stage
        self.details = details
        super().__init__(f"{stage} failed: {details}")
