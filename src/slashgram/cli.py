from __future__ import annotations

from pathlib import Path

import msgspec
import typer
from rich import box
from rich.console import Console
from rich.table import Table

from . import __version__
from .builder import CommandBuilder
from .errors import ConfigError
from .grammar import parse_syntax
from .logging import setup_logging
from .payload import encode_payload
from .registry import CommandRegistry
from .settings import HOME_CONFIG_PATH, load_settings

_CONFIG_PATH_OPTION = typer.Option(
    None,
    "--config-path",
    help="Override the default config path.",
)


def _exit_config_error(exc: ConfigError, *, code: int = 2) -> None:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=code) from exc


def _constraints(arg) -> str:
    parts: list[str] = []
    if arg.choices:
        parts.append("choices: " + ", ".join(str(c) for c in arg.choices))
    if arg.min_value is not None:
        parts.append(f"min_value={arg.min_value}")
    if arg.max_value is not None:
        parts.append(f"max_value={arg.max_value}")
    if arg.min_length is not None:
        parts.append(f"min_length={arg.min_length}")
    if arg.max_length is not None:
        parts.append(f"max_length={arg.max_length}")
    if arg.autocomplete:
        parts.append("autocomplete")
    return "; ".join(parts)


def parse_cmd(
    syntax: str = typer.Argument(..., help="Argument syntax, e.g. 'group add <name>'."),
) -> None:
    """Show how a syntax string is classified."""
    try:
        parsed = parse_syntax(syntax)
    except ConfigError as exc:
        _exit_config_error(exc)
        return

    table = Table(show_header=True, header_style="bold", box=box.SIMPLE)
    table.add_column("segment")
    table.add_column("kind")
    table.add_column("type")
    table.add_column("constraints")
    for segment in parsed.segments:
        if segment.subgroup:
            table.add_row(segment.name, "subgroup", "", "")
        elif segment.subcommand:
            table.add_row(segment.name, "subcommand", "", "")
        else:
            arg = segment.argument
            kind = "optional" if segment.optional else "required"
            table.add_row(arg.name, kind, arg.datatype.value, _constraints(arg))
    console = Console()
    console.print(table)
    console.print(f"canonical: {parsed.argument.to_syntax()}", markup=False)


def payload_cmd(
    name: str = typer.Argument(..., help="Command name."),
    description: str = typer.Argument(..., help="Command description."),
    syntaxes: list[str] = typer.Argument(None, help="Argument syntax strings."),
    docs: Path | None = typer.Option(
        None, "--docs", help="JSON file mapping paths to descriptions."
    ),
    pretty: bool = typer.Option(True, "--pretty/--compact", help="Indent the JSON."),
) -> None:
    """Print the registration payload a command would be registered with."""
    try:
        builder = CommandBuilder(name, description, registry=CommandRegistry())
        builder.arguments(syntaxes or [])
        if docs is not None:
            builder.docs(docs)
        encoded = encode_payload(builder.compile())
    except ConfigError as exc:
        _exit_config_error(exc)
        return
    if pretty:
        encoded = msgspec.json.format(encoded, indent=2)
    typer.echo(encoded.decode())


def config_cmd(
    config_path: Path | None = _CONFIG_PATH_OPTION,
) -> None:
    """Print the resolved settings as JSON."""
    try:
        settings, path = load_settings(config_path)
    except ConfigError as exc:
        _exit_config_error(exc)
        return
    source = str(path) if path.exists() else f"{path} (missing, using defaults)"
    typer.echo(f"# {source}", err=True)
    data = msgspec.json.encode(settings.model_dump(mode="json"))
    typer.echo(msgspec.json.format(data, indent=2).decode())


def app_main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show the version and exit."),
    debug: bool = typer.Option(False, "--debug", help="Log debug output to stderr."),
) -> None:
    """Compile and inspect slash command declarations."""
    if version:
        typer.echo(__version__)
        raise typer.Exit()
    setup_logging(debug=debug)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def create_app() -> typer.Typer:
    app = typer.Typer(
        add_completion=False,
        invoke_without_command=True,
        help="Compile and inspect slash command declarations.",
    )
    app.callback()(app_main)
    app.command(name="parse")(parse_cmd)
    app.command(name="payload")(payload_cmd)
    app.command(name="config")(config_cmd)
    return app


def main() -> None:
    app = create_app()
    app()


__all__ = ["HOME_CONFIG_PATH", "create_app", "main"]


if __name__ == "__main__":
    main()
