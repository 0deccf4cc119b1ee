# factorygen/conf/models.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from factorygen.exceptions import ConfigurationError
from factorygen.naming import is_dotted_identifier


class GeneratorConfig(BaseModel):
    """
    Validated, typed view over :class:`~factorygen.conf.settings.Settings`.

    Settings keys are upper-case (``OUTPUT_DIR``); fields are their lower-case
    counterparts. Unknown keys are rejected so typos surface early.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    output_dir: Path = Path("generated")
    generated_package: str | None = None
    factory_suffix: str = "Factory"
    module_suffix: str = "_factory"
    fail_fast: bool = False
    max_superclass_depth: int = Field(default=64, ge=1)
    annotation_names: tuple[str, ...] = ("factorygen.factory", "factorygen.decorators.factory")
    source_roots: tuple[Path, ...] = ()
    discovery_paths: tuple[str, ...] = ()
    encoding: str = "utf-8"
    runtime_module: str = "factorygen.runtime"

    @field_validator("generated_package", "runtime_module")
    @classmethod
    def _dotted(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        if not value or not is_dotted_identifier(value):
            raise ValueError(f"not a dotted module path: {value!r}")
        return value

    @field_validator("factory_suffix")
    @classmethod
    def _class_suffix(cls, value: str) -> str:
        if not value or not value.isidentifier():
            raise ValueError(f"factory_suffix must be an identifier fragment, got {value!r}")
        return value

    @field_validator("module_suffix")
    @classmethod
    def _module_suffix(cls, value: str) -> str:
        if value and not f"m{value}".isidentifier():
            raise ValueError(f"module_suffix must be an identifier fragment, got {value!r}")
        return value

    @field_validator("annotation_names")
    @classmethod
    def _annotation_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one annotation name is required")
        bad = [v for v in value if not is_dotted_identifier(v)]
        if bad:
            raise ValueError(f"annotation names must be dotted paths: {bad}")
        return value

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> GeneratorConfig:
        payload = {k.lower(): v for k, v in settings.items() if k.isupper()}
        try:
            return cls(**payload)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid factorygen settings: {exc}") from exc
