import asyncio
import contextlib
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
from require_rewriter.cli.transform import collect_files, report_error, transform_many, write_result
from require_rewriter.core.transform import RequireTransformer
from require_rewriter.watcher.watchfiles_adapter import WatchfilesWatcher

console = Console()


def watch(
    directory: Annotated[Path, typer.Argument(help="Directory to watch.")],
    out_dir: Annotated[Path, typer.Option(help="Directory that receives rewritten files.")],
    initial: Annotated[bool, typer.Option(help="Rewrite every file once before watching.")] = True,
    extension: ExtensionOption = None,
    include: IncludeOption = None,
    exclude: ExcludeOption = None,
    alias: AliasOption = None,
    root: RootOption = None,
    strict: StrictOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Rewrite files into --out-dir whenever they change."""
    configure_logging(verbose)
    if not directory.is_dir():
        console.print(f"[red]Not a directory:[/red] {directory}")
        raise typer.Exit(1)

    transformer = RequireTransformer(build_options(extension, include, exclude, alias, root, strict))
    source_root = directory.resolve()

    async def _rewrite(files: list[tuple[Path, Path]]) -> None:
        for result in await transform_many(transformer, files):
            if result.error is not None:
                report_error(result)
                continue
            write_result(result, out_dir)
            if result.changed:
                console.print(f"[green]Rewrote[/green] {result.relative}")

    async def _on_change(paths: set[Path]) -> None:
        await _rewrite([(path, path.resolve().relative_to(source_root)) for path in sorted(paths)])

    async def _run() -> None:
        if initial:
            await _rewrite(collect_files([directory]))
        watcher = WatchfilesWatcher(directory, _on_change, ignore=out_dir)
        await watcher.start()
        console.print(f"[green]Watching[/green] {directory} -> {out_dir}")
        try:
            await watcher.wait()
        finally:
            await watcher.stop()

    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_run())
