"""Base class for template-driven generators."""

from __future__ import annotations

import json
from functools import cached_property
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from asyncapi_polyglot.generators.options import GeneratorOptions
from asyncapi_polyglot.generators.languages import elixir_escape
from asyncapi_polyglot.naming import to_camel, to_kebab, to_pascal, to_snake
from asyncapi_polyglot.validation.validator import ValidatedSpec

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _quote(value: str) -> str:
    """Double-quoted string literal valid in Python, TypeScript, Rust and Elixir."""
    return json.dumps(value, ensure_ascii=False)


def _elixir_quote(value: str) -> str:
    """Elixir string literal; ``#{`` is escaped so the text is never interpolated."""
    return _quote(value).replace("#{", "\\#{")


def _comment(text: str, prefix: str = "#") -> str:
    """Prefix every line of free text with a line-comment marker."""
    return "\n".join(f"{prefix} {line}".rstrip() for line in text.splitlines())


class BaseGenerator:
    """Holds the validated spec, the options and a shared Jinja2 environment.

    Generators never touch the filesystem; they return text (or Artifacts) and
    leave writing to the materializer.
    """

    templates_dir: Path = TEMPLATES_DIR

    def __init__(self, validated: ValidatedSpec, options: GeneratorOptions | None = None) -> None:
        """Initialize generator."""
        self.validated = validated
        self.options = options or GeneratorOptions()

    @cached_property
    def env(self) -> Environment:
        env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            autoescape=False,  # noqa: S701 - Generating source code
        )
        env.filters.update(
            snake=to_snake,
            camel=to_camel,
            pascal=to_pascal,
            kebab=to_kebab,
            quote=_quote,
            elixir_quote=_elixir_quote,
            elixir_escape=elixir_escape,
            comment=_comment,
        )
        return env

    def render(self, template_name: str, **context: Any) -> str:
        """Render a template from the templates directory."""
        return self.env.get_template(template_name).render(**context)
