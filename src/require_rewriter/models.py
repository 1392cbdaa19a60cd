import os
import re
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from require_rewriter.core.glob import unescape_glob
from require_rewriter.core.languages import DEFAULT_EXTENSIONS, normalize_extensions

DEFAULT_INCLUDE = r"\.([jt]sx?)$"

# (matched files, importer path) -> narrowed files
FilesHook = Callable[[list[str], str], list[str]]


def _default_root() -> str:
    return os.getenv("REQUIRE_REWRITER_ROOT", os.getcwd())


class ResolvedAlias(BaseModel):
    """A dynamic glob whose head was an alias or bare specifier, before and after resolution."""

    kind: Literal["alias", "bare"]
    # glob as written in source, e.g. "@/views/*"
    importee: str
    # same glob relative to the importer, e.g. "./src/views/*"
    resolved: str

    @property
    def alias_prefix(self) -> str:
        return _static_prefix(self.importee)

    @property
    def resolved_prefix(self) -> str:
        return _static_prefix(self.resolved)


def _static_prefix(glob: str) -> str:
    # Text before the first unescaped "*", as it reads outside a glob
    match = re.match(r"(?:\\.|[^*\\])*", glob)
    return unescape_glob(match.group(0) if match else glob)


class DynamicOptions(BaseModel):
    # True matches as many files as possible (webpack-like), False keeps the literal glob shape
    loose: bool = True


class Options(BaseModel):
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    include: list[str] = Field(default_factory=lambda: [DEFAULT_INCLUDE])
    exclude: list[str] = Field(default_factory=list)
    dynamic: DynamicOptions = Field(default_factory=DynamicOptions)
    alias: dict[str, str] = Field(default_factory=dict)
    root: str = Field(default_factory=_default_root)
    on_files: FilesHook | None = None

    @field_validator("extensions")
    @classmethod
    def _merge_extensions(cls, value: list[str]) -> list[str]:
        return normalize_extensions([*DEFAULT_EXTENSIONS, *value])

    @field_validator("include", "exclude")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid file filter pattern {pattern!r}: {exc}") from exc
        return value
