import logging
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from require_rewriter.models import DynamicOptions, Options

ExtensionOption = Annotated[
    list[str] | None, typer.Option("--extension", "-e", help="Extra extension to discover (repeatable).")
]
IncludeOption = Annotated[list[str] | None, typer.Option("--include", help="Regex a file path must match (repeatable).")]
ExcludeOption = Annotated[list[str] | None, typer.Option("--exclude", help="Regex that skips a file path (repeatable).")]
AliasOption = Annotated[
    list[str] | None, typer.Option("--alias", "-a", help="Alias as FIND=REPLACEMENT, e.g. @=./src (repeatable).")
]
RootOption = Annotated[str | None, typer.Option(help="Base directory for relative alias replacements.")]
StrictOption = Annotated[
    bool, typer.Option("--strict", help="Match dynamic requires only at the literal glob depth.")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log every rewrite decision.")]


def parse_alias(values: list[str] | None) -> dict[str, str]:
    alias: dict[str, str] = {}
    for value in values or []:
        find, sep, replacement = value.partition("=")
        if not sep or not find or not replacement:
            raise typer.BadParameter(f"Expected FIND=REPLACEMENT, got {value!r}", param_hint="--alias")
        alias[find] = replacement
    return alias


def build_options(
    extension: list[str] | None,
    include: list[str] | None,
    exclude: list[str] | None,
    alias: list[str] | None,
    root: str | None,
    strict: bool,
) -> Options:
    values: dict[str, object] = {
        "extensions": extension or [],
        "exclude": exclude or [],
        "alias": parse_alias(alias),
        "dynamic": DynamicOptions(loose=not strict),
    }
    if include:
        values["include"] = include
    if root is not None:
        values["root"] = root
    try:
        return Options.model_validate(values)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
