import typer

from require_rewriter.cli.transform import transform
from require_rewriter.cli.watch import watch

app = typer.Typer(
    name="require-rewriter",
    help="Require Rewriter CLI: turn CommonJS require() calls into ES module imports.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("transform")(transform)
app.command("watch")(watch)


def main() -> None:
    app()
