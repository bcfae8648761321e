"""Root project files: build orchestration, compose stack, docs and CI.

Every file here is a function of the API info and the selected languages only,
so all of them are handed to the materializer as lazy thunks.
"""

from __future__ import annotations

from functools import cached_property, partial

from asyncapi_polyglot.generators.base import BaseGenerator
from asyncapi_polyglot.generators.context import ProjectNames
from asyncapi_polyglot.materializer import Artifact

PROJECT_FILES: dict[str, str] = {
    "Makefile": "project/Makefile.j2",
    "docker-compose.yml": "project/docker-compose.yml.j2",
    "README.md": "project/README.md.j2",
    ".gitignore": "project/gitignore.j2",
    ".github/workflows/ci.yml": "project/ci.yml.j2",
    "schema/README.md": "project/schema_readme.md.j2",
}


class ProjectGenerator(BaseGenerator):
    """Generate the files that tie the language clients together."""

    @cached_property
    def names(self) -> ProjectNames:
        return ProjectNames.from_info(self.validated.info)

    @property
    def languages(self) -> list[str]:
        return [language.value for language in self.options.languages]

    def generate(self) -> dict[str, str]:
        return {artifact.path: artifact.render() for artifact in self.artifacts()}

    def artifacts(self) -> list[Artifact]:
        return [
            Artifact(
                path,
                partial(self.render, template, names=self.names, languages=self.languages),
            )
            for path, template in PROJECT_FILES.items()
        ]
