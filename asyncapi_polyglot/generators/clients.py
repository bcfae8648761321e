"""Client scaffold generator.

For each selected language produces a small project: an event bus with one
publish method per send operation, batch publishing, metrics and a generic
subscribe; payload types; a transport abstraction (interface, in-memory, NATS);
a manifest, tests and a Dockerfile. Python also gets a module loading the
Cap'n Proto schema.

Files that depend on operations or schemas are rendered eagerly so generator
errors surface before anything is written. Boilerplate that only depends on
the API info is returned as a lazy thunk; the pipeline renders it before
anything is written.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property, partial
import logging
from typing import Any

from asyncapi_polyglot.generators.base import BaseGenerator
from asyncapi_polyglot.generators.context import ClientContextBuilder, ProjectNames
from asyncapi_polyglot.generators.languages import get_profile
from asyncapi_polyglot.generators.options import Language
from asyncapi_polyglot.materializer import Artifact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateFile:
    """One file of a language layout.

    Attributes:
        path: Output path relative to the language directory; ``{module}`` is substituted
        template: Template name relative to the templates directory
        static: True when the file depends on the API info only
    """

    path: str
    template: str
    static: bool = True


LAYOUTS: dict[Language, tuple[TemplateFile, ...]] = {
    Language.PYTHON: (
        TemplateFile("pyproject.toml", "python/pyproject.toml.j2"),
        TemplateFile("{module}/__init__.py", "python/__init__.py.j2"),
        TemplateFile("{module}/event_bus.py", "python/event_bus.py.j2", static=False),
        TemplateFile("{module}/types.py", "python/types.py.j2", static=False),
        TemplateFile("{module}/wire.py", "python/wire.py.j2"),
        TemplateFile("{module}/transport/__init__.py", "python/transport_init.py.j2"),
        TemplateFile("{module}/transport/memory.py", "python/transport_memory.py.j2"),
        TemplateFile("{module}/transport/nats.py", "python/transport_nats.py.j2"),
        TemplateFile("tests/test_event_bus.py", "python/test_event_bus.py.j2"),
        TemplateFile("Dockerfile", "python/Dockerfile.j2"),
    ),
    Language.TYPESCRIPT: (
        TemplateFile("package.json", "typescript/package.json.j2"),
        TemplateFile("tsconfig.json", "typescript/tsconfig.json.j2"),
        TemplateFile("src/index.ts", "typescript/index.ts.j2"),
        TemplateFile("src/event_bus.ts", "typescript/event_bus.ts.j2", static=False),
        TemplateFile("src/types.ts", "typescript/types.ts.j2", static=False),
        TemplateFile("src/transport/index.ts", "typescript/transport_index.ts.j2"),
        TemplateFile("src/transport/memory.ts", "typescript/transport_memory.ts.j2"),
        TemplateFile("src/transport/nats.ts", "typescript/transport_nats.ts.j2"),
        TemplateFile("src/__tests__/event_bus.test.ts", "typescript/event_bus.test.ts.j2"),
        TemplateFile("Dockerfile", "typescript/Dockerfile.j2"),
    ),
    Language.RUST: (
        TemplateFile("Cargo.toml", "rust/Cargo.toml.j2"),
        TemplateFile("build.rs", "rust/build.rs.j2"),
        TemplateFile("src/lib.rs", "rust/lib.rs.j2"),
        TemplateFile("src/event_bus.rs", "rust/event_bus.rs.j2", static=False),
        TemplateFile("src/types.rs", "rust/types.rs.j2", static=False),
        TemplateFile("src/transport/mod.rs", "rust/transport_mod.rs.j2"),
        TemplateFile("src/transport/memory.rs", "rust/transport_memory.rs.j2"),
        TemplateFile("src/transport/nats.rs", "rust/transport_nats.rs.j2"),
        TemplateFile("tests/integration_test.rs", "rust/integration_test.rs.j2"),
        TemplateFile("Dockerfile", "rust/Dockerfile.j2"),
    ),
    Language.ELIXIR: (
        TemplateFile("mix.exs", "elixir/mix.exs.j2"),
        TemplateFile("lib/{module}/application.ex", "elixir/application.ex.j2"),
        TemplateFile("lib/{module}/event_bus.ex", "elixir/event_bus.ex.j2", static=False),
        TemplateFile("lib/{module}/transport.ex", "elixir/transport.ex.j2"),
        TemplateFile("lib/{module}/transport/memory.ex", "elixir/transport_memory.ex.j2"),
        TemplateFile("lib/{module}/transport/nats.ex", "elixir/transport_nats.ex.j2"),
        TemplateFile("test/event_bus_test.exs", "elixir/event_bus_test.exs.j2"),
        TemplateFile("test/test_helper.exs", "elixir/test_helper.exs.j2"),
        TemplateFile("Dockerfile", "elixir/Dockerfile.j2"),
    ),
}


class ClientsGenerator(BaseGenerator):
    """Generate client scaffolding for every selected language."""

    @cached_property
    def names(self) -> ProjectNames:
        return ProjectNames.from_info(self.validated.info)

    def generate(self) -> dict[Language, dict[str, str]]:
        """Fully rendered files per language, keyed by path relative to the language dir."""
        return {
            language: {a.path: a.render() for a in self.language_artifacts(language)}
            for language in self.options.languages
        }

    def artifacts(self) -> list[Artifact]:
        """All files of all languages, prefixed with the language directory."""
        return [
            artifact.under(language.value)
            for language in self.options.languages
            for artifact in self.language_artifacts(language)
        ]

    def language_artifacts(self, language: Language) -> list[Artifact]:
        dynamic = self.dynamic_context(language)
        artifacts = []
        for file in LAYOUTS[language]:
            path = file.path.format(module=self.names.module)
            if file.static:
                content: Any = partial(self.render, file.template, names=self.names)
            else:
                content = self.render(file.template, **dynamic)
            artifacts.append(Artifact(path, content))

        logger.debug(
            "Prepared %d %s files (%d publish methods)",
            len(artifacts),
            language,
            len(dynamic["publishes"]),
        )
        return artifacts

    def dynamic_context(self, language: Language) -> dict[str, Any]:
        """Context for the files that depend on operations and schemas."""
        builder = ClientContextBuilder(self.validated, get_profile(language))
        publishes = builder.build_publishes()
        types = builder.build_types()
        type_imports = sorted({p.payload_type for p in publishes if p.payload_typed})
        return {
            "names": self.names,
            "publishes": publishes,
            "types": types,
            "type_imports": type_imports,
            "publish_timeout": self.options.publish_timeout,
            "publish_timeout_ms": int(self.options.publish_timeout * 1000),
            "schema_hash": self.validated.schema_hash,
        }
