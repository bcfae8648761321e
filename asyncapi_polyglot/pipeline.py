"""Validate, generate and materialize in one call.

Stages run strictly in sequence and hand typed results to each other:

    ApiSpec -> ValidatedSpec -> Generation -> MaterializeResult

Any stage failure is re-raised as ``PipelineError`` naming the stage, with the
original error chained. Nothing is written unless validation and generation
both succeed.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
import logging
from pathlib import Path

from jinja2 import TemplateError

from asyncapi_polyglot.core.settings import Settings, get_settings
from asyncapi_polyglot.errors import (
    GenerationError,
    MaterializationError,
    PipelineError,
    SpecValidationError,
)
from asyncapi_polyglot.generators.clients import ClientsGenerator
from asyncapi_polyglot.generators.idl import IdlGenerator
from asyncapi_polyglot.generators.options import GeneratorOptions
from asyncapi_polyglot.generators.project import ProjectGenerator
from asyncapi_polyglot.materializer import Artifact, CancelToken, Materializer, MaterializeResult
from asyncapi_polyglot.spec.document import ApiSpec
from asyncapi_polyglot.spec.loader import load_spec
from asyncapi_polyglot.validation.validator import ValidatedSpec, validate

logger = logging.getLogger(__name__)


class Stage(StrEnum):
    VALIDATION = "validation"
    GENERATION = "generation"
    MATERIALIZATION = "materialization"


class PipelineState(StrEnum):
    PENDING = "pending"
    VALIDATED = "validated"
    REJECTED = "rejected"
    GENERATED = "generated"
    WRITING = "writing"
    WRITTEN = "written"
    FAILED = "failed"


@dataclass(frozen=True)
class Generation:
    """Everything the generators produced, not yet written."""

    validated: ValidatedSpec
    artifacts: tuple[Artifact, ...]

    @property
    def paths(self) -> list[str]:
        return [artifact.path for artifact in self.artifacts]


class Pipeline:
    """One compilation run; ``state`` follows the stage transitions.

    Attributes:
        output_dir: Directory the generated tree is written under
        options: Generator options (languages, publish timeout, id mode)
        max_workers: Concurrent writes
        write_timeout: Seconds allowed per write
    """

    def __init__(
        self,
        output_dir: Path | str,
        options: GeneratorOptions | None = None,
        *,
        max_workers: int = 8,
        write_timeout: float = 30.0,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.options = options or GeneratorOptions()
        self.max_workers = max_workers
        self.write_timeout = write_timeout
        self.state = PipelineState.PENDING

    @classmethod
    def from_settings(cls, settings: Settings, output_dir: Path | str | None = None) -> Pipeline:
        return cls(
            output_dir if output_dir is not None else settings.output_dir,
            settings.generator_options(),
            max_workers=settings.max_workers,
            write_timeout=settings.write_timeout,
        )

    def _transition(self, state: PipelineState) -> None:
        logger.info("Pipeline %s -> %s", self.state, state)
        self.state = state

    def validate(self, spec: ApiSpec) -> ValidatedSpec:
        try:
            validated = validate(spec)
        except SpecValidationError as e:
            self._transition(PipelineState.REJECTED)
            raise PipelineError(Stage.VALIDATION, str(e)) from e
        self._transition(PipelineState.VALIDATED)
        return validated

    def generate(self, validated: ValidatedSpec) -> Generation:
        try:
            generated = [
                *IdlGenerator(validated, self.options).artifacts(),
                *ClientsGenerator(validated, self.options).artifacts(),
                *ProjectGenerator(validated, self.options).artifacts(),
            ]
            # Boilerplate thunks render here so template errors fail this stage
            artifacts = [artifact.resolved() for artifact in generated]
        except (GenerationError, TemplateError) as e:
            self._transition(PipelineState.FAILED)
            raise PipelineError(Stage.GENERATION, str(e)) from e
        self._transition(PipelineState.GENERATED)
        logger.info("Generated %d artifacts", len(artifacts))
        return Generation(validated, tuple(artifacts))

    async def materialize(
        self,
        generation: Generation,
        cancel_token: CancelToken | None = None,
    ) -> MaterializeResult:
        materializer = Materializer(
            self.output_dir,
            max_workers=self.max_workers,
            task_timeout=self.write_timeout,
        )
        self._transition(PipelineState.WRITING)
        try:
            result = await materializer.run(generation.artifacts, cancel_token)
        except (MaterializationError, ValueError) as e:
            self._transition(PipelineState.FAILED)
            raise PipelineError(Stage.MATERIALIZATION, str(e)) from e
        self._transition(PipelineState.WRITTEN)
        return result

    async def run_async(
        self,
        spec: ApiSpec,
        cancel_token: CancelToken | None = None,
    ) -> list[Path]:
        """Run every stage and return the written paths in generation order."""
        generation = self.generate(self.validate(spec))
        result = await self.materialize(generation, cancel_token)
        return result.written

    def run(self, spec: ApiSpec, cancel_token: CancelToken | None = None) -> list[Path]:
        return asyncio.run(self.run_async(spec, cancel_token))


def compile_spec(
    spec: ApiSpec | Path | str,
    output_dir: Path | str | None = None,
    *,
    settings: Settings | None = None,
    options: GeneratorOptions | None = None,
    cancel_token: CancelToken | None = None,
) -> list[Path]:
    """Compile a spec (model or path to a YAML/JSON document) into a project tree.

    Args:
        spec: A parsed ``ApiSpec`` or the path of a document to load
        output_dir: Overrides ``settings.output_dir``
        settings: Defaults to the cached environment settings
        options: Overrides the generator options derived from settings
        cancel_token: Stops dispatching writes once set

    Returns:
        The written paths

    Raises:
        SpecLoadError: When a document path cannot be loaded
        PipelineError: When validation, generation or materialization fails
    """
    settings = settings or get_settings()
    if not isinstance(spec, ApiSpec):
        spec = load_spec(spec)

    pipeline = Pipeline.from_settings(settings, output_dir)
    if options is not None:
        pipeline.options = options
    return pipeline.run(spec, cancel_token)
