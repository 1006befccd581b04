from __future__ import annotations

from pathlib import Path

import typer
import yaml

app = typer.Typer(name="opcheck", help="Inspect opcheck expressions and settings")


@app.command()
def explain(
    expression: str = typer.Argument(help="Check expression, e.g. 'smaller > larger'"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
):
    """Show how an expression dispatches, without evaluating it."""
    from opcheck.dispatch import compile_check
    from opcheck.errors import MalformedCheckError
    from opcheck.verbose import release_logger, setup_logger

    if verbose:
        setup_logger(verbose=True)

    try:
        compiled = compile_check(expression)
    except MalformedCheckError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        if verbose:
            release_logger()

    typer.echo(f"kind: {compiled.kind.name}")
    typer.echo(f"operator: {compiled.kind.symbol}")
    if compiled.pattern is not None:
        typer.echo(f"pattern: {compiled.lhs_label}")
    else:
        typer.echo(f"lhs: {compiled.lhs_label}")
    typer.echo(f"rhs: {compiled.rhs_label}")


@app.command()
def config(
    file: str | None = typer.Option(None, "--file", "-f", help="YAML config file to load"),
):
    """Print the effective configuration (file, then OPCHECK_* environment)."""
    from opcheck.config import config_from_env, load_config
    from opcheck.errors import ConfigError

    try:
        base = None
        if file is not None:
            path = Path(file)
            if not path.exists():
                typer.echo(f"Error: config file not found: {file}", err=True)
                raise typer.Exit(1)
            base = load_config(path)
        effective = config_from_env(base)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(yaml.safe_dump(effective.model_dump(), sort_keys=False).rstrip())


if __name__ == "__main__":
    app()
