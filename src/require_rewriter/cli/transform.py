import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from require_rewriter.cli.options import (
    AliasOption,
    ExcludeOption,
    ExtensionOption,
    IncludeOption,
    RootOption,
    StrictOption,
    VerboseOption,
    build_options,
    configure_logging,
)
from require_rewriter.core.errors import RequireConversionError, SourceParseError
from require_rewriter.core.languages import SOURCE_EXTENSIONS
from require_rewriter.core.transform import RequireTransformer

console = Console()
err_console = Console(stderr=True)


@dataclass(frozen=True)
class FileResult:
    path: Path
    # path below the input directory, used to mirror into --out-dir
    relative: Path
    original: str | None = None
    rewritten: str | None = None
    error: str | None = None

    @property
    def changed(self) -> bool:
        return self.rewritten is not None


def collect_files(paths: list[Path]) -> list[tuple[Path, Path]]:
    """Expand directories into their source files, skipping node_modules and dot directories."""
    files: list[tuple[Path, Path]] = []
    for path in paths:
        if not path.is_dir():
            files.append((path, Path(path.name)))
            continue
        for candidate in sorted(path.rglob("*")):
            relative = candidate.relative_to(path)
            if any(part == "node_modules" or part.startswith(".") for part in relative.parts):
                continue
            if candidate.is_file() and candidate.suffix in SOURCE_EXTENSIONS:
                files.append((candidate, relative))
    return files


async def transform_one(transformer: RequireTransformer, path: Path, relative: Path) -> FileResult:
    try:
        original = path.read_text(encoding="utf-8")
        rewritten = await transformer.transform(original, str(path))
    except (RequireConversionError, SourceParseError, OSError, UnicodeDecodeError) as exc:
        return FileResult(path=path, relative=relative, error=str(exc))
    return FileResult(path=path, relative=relative, original=original, rewritten=rewritten)


async def transform_many(transformer: RequireTransformer, files: list[tuple[Path, Path]]) -> list[FileResult]:
    return list(await asyncio.gather(*(transform_one(transformer, path, relative) for path, relative in files)))


def write_result(result: FileResult, out_dir: Path | None) -> None:
    text = result.rewritten if result.rewritten is not None else result.original
    if text is None:
        return
    if out_dir is None:
        if result.changed:
            result.path.write_text(text, encoding="utf-8")
        return
    target = out_dir / result.relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")


def report_error(result: FileResult) -> None:
    err_console.print(f"[red]Failed[/red] {result.path}")
    err_console.print(result.error, markup=False, highlight=False)


def transform(
    paths: Annotated[list[Path], typer.Argument(help="Source files or directories.")],
    write: Annotated[bool, typer.Option("--write", "-w", help="Rewrite changed files in place.")] = False,
    out_dir: Annotated[Path | None, typer.Option(help="Write every file below this directory.")] = None,
    check: Annotated[bool, typer.Option(help="Only list files that would change; exit 1 if any.")] = False,
    extension: ExtensionOption = None,
    include: IncludeOption = None,
    exclude: ExcludeOption = None,
    alias: AliasOption = None,
    root: RootOption = None,
    strict: StrictOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Rewrite require() calls into ES module imports."""
    configure_logging(verbose)
    options = build_options(extension, include, exclude, alias, root, strict)
    files = collect_files(paths)
    if not files:
        err_console.print("[yellow]No source files found.[/yellow]")
        raise typer.Exit(1)

    single_file = len(files) == 1 and not paths[0].is_dir()
    if not (write or out_dir or check or single_file):
        err_console.print("[red]Pass --write, --out-dir or --check when transforming more than one file.[/red]")
        raise typer.Exit(1)

    results = asyncio.run(transform_many(RequireTransformer(options), files))

    failed = [result for result in results if result.error is not None]
    for result in failed:
        report_error(result)
    succeeded = [result for result in results if result.error is None]

    if check:
        changed = [result for result in succeeded if result.changed]
        for result in changed:
            console.print(f"[yellow]Would rewrite[/yellow] {result.path}")
        console.print(f"{len(changed)} of {len(results)} file(s) would change")
        if changed or failed:
            raise typer.Exit(1)
        return

    if write or out_dir:
        for result in succeeded:
            write_result(result, out_dir)
            if result.changed:
                console.print(f"[green]Rewrote[/green] {result.path}")
    elif succeeded:
        text = succeeded[0].rewritten if succeeded[0].changed else succeeded[0].original
        typer.echo(text, nl=False)

    if failed:
        raise typer.Exit(1)
