"""Shared CLI options and helpers for iptctl command groups."""

from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.markup import escape

from iptctl.core import (
    IptctlError,
    ExecutionContext,
    create_context,
    console,
)
from iptctl.core.config import DEFAULT_CONFIG_PATH
from iptctl.services.iptables import IptablesService


# Type aliases for common options
DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        help="Show mutating iptables commands without running them.",
        is_flag=True,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase output verbosity. Can be repeated (-v, -vv).",
    ),
]

QuietOption = Annotated[
    bool,
    typer.Option(
        "--quiet",
        "-q",
        help="Suppress non-essential output. Only show errors.",
        is_flag=True,
    ),
]

NoColorOption = Annotated[
    bool,
    typer.Option(
        "--no-color",
        help="Disable colored output.",
        is_flag=True,
    ),
]

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help=f"Path to configuration file. Default: {DEFAULT_CONFIG_PATH}",
        exists=False,
        file_okay=True,
        dir_okay=False,
    ),
]

Ipv6Option = Annotated[
    bool,
    typer.Option(
        "--ipv6",
        "-6",
        help="Operate on ip6tables instead of iptables.",
        is_flag=True,
    ),
]

TableOption = Annotated[
    str,
    typer.Option(
        "--table",
        "-t",
        help="Table to operate on (filter, nat, mangle, raw, security).",
    ),
]


def get_service(
    dry_run: bool = False,
    verbose: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    ipv6: bool = False,
    config: Optional[Path] = None,
) -> tuple[ExecutionContext, IptablesService]:
    """Create context and probe the firewall tool.

    Raises:
        IptctlError: If the tool cannot be probed
    """
    ctx = create_context(
        dry_run=dry_run,
        verbose=verbose,
        quiet=quiet,
        no_color=no_color,
        ipv6=ipv6,
        config=config,
    )
    return ctx, IptablesService.create(ctx)


def handle_error(error: IptctlError) -> NoReturn:
    """Handle an IptctlError by printing formatted error and exiting."""
    console.error(error.message)

    for detail in error.details:
        console.print(f"  [dim]{escape(detail)}[/dim]")

    if error.hint:
        console.hint(error.hint)

    raise typer.Exit(error.exit_code)
