"""iptctl command-line entry point.

Registers the rule, chain, table, all and config command groups and
the root-level ``tool`` report.
"""

from typing import Annotated

import typer
from rich.console import Console

from iptctl import __version__
from iptctl.core.config import AppConfig, get_example_config, init_config
from iptctl.core.context import create_context
from iptctl.core.exceptions import IptctlError
from iptctl.commands.common import (
    ConfigOption,
    Ipv6Option,
    NoColorOption,
    VerboseOption,
    get_service,
    handle_error,
)


app = typer.Typer(
    name="iptctl",
    help="Lock-safe command-line facade over iptables and ip6tables.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)

config_app = typer.Typer(
    name="config",
    help="Configuration management.",
    no_args_is_help=True,
)

# Import sub-commands
from iptctl.commands.rule import app as rule_app
from iptctl.commands.chain import app as chain_app
from iptctl.commands.table import app as table_app, all_app

app.add_typer(rule_app, name="rule")
app.add_typer(chain_app, name="chain")
app.add_typer(table_app, name="table")
app.add_typer(all_app, name="all")
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console = Console()
        console.print(f"iptctl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """iptctl - drive iptables safely from scripts and services.

    Concurrent invocations are serialized: with iptables >= 1.4.20 through
    its own --wait lock, on older builds through a shared lock file.

    [bold]Examples:[/bold]
        iptctl tool
        iptctl chain new MYCHAIN
        iptctl rule append MYCHAIN -- "-p tcp --dport 22 -j ACCEPT"
        iptctl all save /root/rules.v4
    """
    pass


# ============================================================================
# Tool capabilities
# ============================================================================

@app.command("tool")
def tool_info(
    ipv6: Ipv6Option = False,
    verbose: VerboseOption = 0,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Show the installed iptables version and the features iptctl uses."""
    try:
        ctx, iptables = get_service(
            verbose=verbose, no_color=no_color, ipv6=ipv6, config=config,
        )
    except IptctlError as e:
        handle_error(e)

    tool = iptables.tool
    rows = [
        ["Command", tool.cmd],
        ["Version", str(tool.version)],
        ["Native check (-C)", "yes" if tool.supports_native_existence_check else "no"],
        ["Native wait (--wait)", "yes" if tool.supports_native_wait_flag else "no"],
        ["Locking", tool.lock_strategy.value],
    ]
    if not tool.supports_native_wait_flag:
        rows.append(["Lock file", str(ctx.config.lock.path)])
    ctx.console.table("Firewall tool", ["Property", "Value"], rows)


# ============================================================================
# Config commands
# ============================================================================

@config_app.command("show")
def config_show(
    config: ConfigOption = None,
    verbose: VerboseOption = 0,
    no_color: NoColorOption = False,
) -> None:
    """Show the effective configuration (file plus IPTCTL_* overrides)."""
    ctx = create_context(verbose=verbose, no_color=no_color, config=config)

    try:
        app_config = ctx.config
    except IptctlError as e:
        handle_error(e)

    ctx.console.print()
    ctx.console.print(f"[bold]Configuration file:[/bold] {ctx.config_path}")
    ctx.console.print(f"[bold]File exists:[/bold] {ctx.config_path.exists()}")
    ctx.console.print()
    ctx.console.lines(app_config.config.to_yaml().splitlines())


@config_app.command("init")
def config_init(
    config: ConfigOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file."),
    ] = False,
    no_color: NoColorOption = False,
) -> None:
    """Initialize a new configuration file with defaults and comments."""
    ctx = create_context(no_color=no_color, config=config)

    try:
        init_config(ctx.config_path, force=force)
    except IptctlError as e:
        handle_error(e)

    ctx.console.success(f"Configuration file created: {ctx.config_path}")


@config_app.command("validate")
def config_validate(
    config: ConfigOption = None,
    no_color: NoColorOption = False,
) -> None:
    """Check that the configuration file and overrides are valid."""
    ctx = create_context(no_color=no_color, config=config)

    try:
        AppConfig(config_path=ctx.config_path)
    except IptctlError as e:
        handle_error(e)

    ctx.console.success(f"Configuration is valid: {ctx.config_path}")


@config_app.command("example")
def config_example(no_color: NoColorOption = False) -> None:
    """Print an example configuration file."""
    ctx = create_context(no_color=no_color)
    ctx.console.lines(get_example_config().splitlines())


# Entry point
if __name__ == "__main__":
    app()
