"""Compiler configuration loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from asyncapi_polyglot.generators.options import (
    ALL_LANGUAGES,
    GeneratorOptions,
    IdlIdMode,
    Language,
)


class Settings(BaseSettings):
    """Settings for the spec compiler and its CLI."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    output_dir: Path = Field(default=Path("generated"), validation_alias="POLYGLOT_OUTPUT_DIR")
    languages_raw: str = Field(default="", validation_alias="POLYGLOT_LANGUAGES")

    max_workers: int = Field(default=8, ge=1, validation_alias="POLYGLOT_MAX_WORKERS")
    write_timeout: float = Field(default=30.0, gt=0, validation_alias="POLYGLOT_WRITE_TIMEOUT")
    publish_timeout: float = Field(
        default=30.0, gt=0, validation_alias="POLYGLOT_PUBLISH_TIMEOUT"
    )
    idl_id_mode: IdlIdMode = Field(
        default=IdlIdMode.CONTENT_HASH, validation_alias="POLYGLOT_IDL_ID_MODE"
    )
    log_level: str = Field(default="INFO", validation_alias="POLYGLOT_LOG_LEVEL")

    @field_validator("languages_raw")
    @classmethod
    def validate_languages(cls, value: str) -> str:
        """Reject unknown language names early."""
        known = {lang.value for lang in Language}
        unknown = [name for name in _split(value) if name not in known]
        if unknown:
            msg = f"Unknown languages {unknown}; expected some of {sorted(known)}"
            raise ValueError(msg)
        return value

    @property
    def languages(self) -> tuple[Language, ...]:
        """Selected client languages; all of them when none are configured."""

        names = _split(self.languages_raw)
        if not names:
            return ALL_LANGUAGES
        return tuple(Language(name) for name in names)

    def generator_options(self) -> GeneratorOptions:
        """Build the immutable options handed to generators."""

        return GeneratorOptions(
            languages=self.languages,
            publish_timeout=self.publish_timeout,
            id_mode=self.idl_id_mode,
        )


def _split(raw: str) -> list[str]:
    return [name.strip().lower() for name in raw.split(",") if name.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the compiler settings."""

    return Settings()
