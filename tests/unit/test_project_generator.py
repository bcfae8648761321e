"""Tests for the root project files."""

import pytest
import yaml

from asyncapi_polyglot.generators import GeneratorOptions, Language, ProjectGenerator
from asyncapi_polyglot.generators.project import PROJECT_FILES
from asyncapi_polyglot.validation import ValidatedSpec


@pytest.fixture
def two_languages(validated_orders: ValidatedSpec) -> ProjectGenerator:
    options = GeneratorOptions(languages=(Language.PYTHON, Language.RUST))
    return ProjectGenerator(validated_orders, options)


class TestProjectGenerator:
    """Tests for ProjectGenerator."""

    def test_every_file_is_lazy(self, validated_orders: ValidatedSpec) -> None:
        artifacts = ProjectGenerator(validated_orders).artifacts()
        assert [a.path for a in artifacts] == list(PROJECT_FILES)
        assert all(callable(a.content) for a in artifacts)

    def test_makefile_targets(self, two_languages: ProjectGenerator) -> None:
        makefile = two_languages.generate()["Makefile"]
        assert "build: build-python build-rust\n" in makefile
        assert "test: test-python test-rust\n" in makefile
        assert "build-rust:\n\tcd rust && cargo build\n" in makefile
        assert "build-typescript" not in makefile

    def test_compose_services(self, two_languages: ProjectGenerator) -> None:
        compose = yaml.safe_load(two_languages.generate()["docker-compose.yml"])
        assert set(compose["services"]) == {"python-client", "rust-client", "nats"}
        # Both images need ../schema, so they build from the root
        for language in ("python", "rust"):
            assert compose["services"][f"{language}-client"]["build"] == {
                "context": ".",
                "dockerfile": f"{language}/Dockerfile",
            }
        assert compose["services"]["rust-client"]["depends_on"] == ["nats"]

    def test_ci_jobs(self, two_languages: ProjectGenerator) -> None:
        workflow = yaml.safe_load(two_languages.generate()[".github/workflows/ci.yml"])
        assert list(workflow["jobs"]) == ["python", "rust"]
        assert workflow["jobs"]["python"]["defaults"]["run"]["working-directory"] == "python"

    def test_readme(self, validated_orders: ValidatedSpec) -> None:
        readme = ProjectGenerator(validated_orders).generate()["README.md"]
        assert readme.startswith("# Orders API\n\nOrder lifecycle events\n")
        assert "Version 1.0.0." in readme
        for language in Language:
            assert f"- `{language}/`" in readme

    def test_schema_readme(self, validated_orders: ValidatedSpec) -> None:
        readme = ProjectGenerator(validated_orders).generate()["schema/README.md"]
        assert readme.startswith("# Orders API schemas\n")
        assert "`events.capnp`" in readme
