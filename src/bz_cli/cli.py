"""Command-line interface for bz."""

import json
import sys

import click
from colorama import init, Fore, Style

from bz_cli.version import get_version
from bz_cli.config import get_config, get_config_file, set_server_token
from bz_cli.core.alias_expander import AliasExpander
from bz_cli.core.command_runner import CommandRunner
from bz_cli.core.project import compose_project, resolve_project
from bz_cli.errors import BzError
from bz_cli.factory import get_app_context
from bz_cli.utils.console import _rich_success, _rich_error, _rich_info, _rich_panel, _get_console
from bz_cli.commands.deps import deps

# Initialize colorama for fallback
init(autoreset=True)

TITLE = f"{Fore.CYAN}{Style.BRIGHT}"
ERROR = f"{Fore.RED}{Style.BRIGHT}"
RESET = Style.RESET_ALL


def print_version(ctx, param, value):
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return

    console = _get_console()
    if console:
        from rich.text import Text
        from rich.panel import Panel
        version_text = Text()
        version_text.append("bz", style="bold cyan")
        version_text.append(f" version {get_version()}", style="white")
        console.print(Panel(version_text, border_style="cyan", padding=(0, 1)))
    else:
        click.echo(f"{TITLE}bz{RESET} version {get_version()}", err=True)

    ctx.exit()


@click.group(help="bz: project-local tool dependency manager")
@click.option('--version', is_flag=True, callback=print_version,
              expose_value=False, is_eager=True, help="Show version and exit.")
@click.pass_context
def cli(ctx):
    """Main entry point for the bz CLI."""
    ctx.ensure_object(dict)


# Register command groups
cli.add_command(deps)


@cli.command(
    name="exec",
    help="Run a command with the project's dependencies on PATH",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument('command', nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def exec_command(ctx, command):
    """Resolve the project, expand aliases and run COMMAND."""
    try:
        app_context = get_app_context(ctx.obj)
        root = resolve_project(app_context)
        composed = compose_project(app_context, root)
        argv = AliasExpander(composed).resolve_alias(list(command))
        exit_code = CommandRunner().run(argv, composed.to_process_env())
    except BzError as e:
        _rich_error(str(e), symbol="error")
        sys.exit(1)

    ctx.exit(exit_code)


@cli.command(help="Print the environment composed from the project's dependencies")
@click.option('--json', 'as_json', is_flag=True, help="Print PATH entries and variables as JSON")
@click.pass_context
def env(ctx, as_json):
    """Print the composed variables (stdout)."""
    try:
        app_context = get_app_context(ctx.obj)
        root = resolve_project(app_context)
        composed = compose_project(app_context, root)
    except BzError as e:
        _rich_error(str(e), symbol="error")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"path": composed.path, "env": composed.env}, indent=2, sort_keys=True))
        return

    process_env = dict(composed.env)
    process_env["PATH"] = composed.to_process_env()["PATH"]
    for key in sorted(process_env):
        click.echo(f"{key}={process_env[key]}")


def _mask_token(token: str) -> str:
    if not token:
        return ""
    return f"{token[:4]}***" if len(token) > 8 else "***"


@cli.command(help="Show or change the user configuration")
@click.option('--show', is_flag=True, help="Show the current configuration")
@click.option('--set-token', 'set_token', nargs=2, metavar="SERVER TOKEN",
              help="Store the access token used for SERVER")
def config(show, set_token):
    """Manage ~/.bz/config.json."""
    try:
        if set_token:
            server, token = set_token
            set_server_token(server, token)
            _rich_success(f"Token for {server} saved to {get_config_file()}", symbol="check")
            if not show:
                return

        current = get_config()
    except (OSError, ValueError) as e:
        _rich_error(f"Error accessing {get_config_file()}: {e}")
        sys.exit(1)

    servers = current.get("servers") or {}
    lines = [f"Config file: {get_config_file()}"]
    if servers:
        for name, settings in sorted(servers.items()):
            token = settings.get("token", "") if isinstance(settings, dict) else ""
            lines.append(f"{name}: token {_mask_token(token) or '(none)'}")
    else:
        lines.append("No servers configured")
    _rich_panel("\n".join(lines), title="bz configuration")
    if not servers:
        _rich_info("Use 'bz config --set-token github.com <token>' to add one", symbol="info")


def main():
    """Main entry point for the CLI."""
    try:
        cli(obj={})
    except BzError as e:
        click.echo(f"{ERROR}Error: {e}{RESET}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
