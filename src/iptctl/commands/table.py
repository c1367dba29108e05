"""Table and whole-ruleset commands: flush, delete, save, restore.

Save and restore go through iptables-save/iptables-restore with shell
redirection and do not take the fallback lock.
"""

from pathlib import Path
from typing import Annotated

import typer

from iptctl.core import IptctlError
from iptctl.commands.common import (
    ConfigOption,
    DryRunOption,
    Ipv6Option,
    NoColorOption,
    QuietOption,
    VerboseOption,
    get_service,
    handle_error,
)


app = typer.Typer(
    name="table",
    help="Flush, delete, save and restore a single table.",
    no_args_is_help=True,
)

all_app = typer.Typer(
    name="all",
    help="Flush, delete, save and restore the whole rule set.",
    no_args_is_help=True,
)

TableArg = Annotated[str, typer.Argument(help="Table name, e.g. nat")]
TargetArg = Annotated[Path, typer.Argument(help="File to write", dir_okay=False)]
SourceArg = Annotated[
    Path,
    typer.Argument(help="File to read", exists=True, dir_okay=False, readable=True),
]


# =============================================================================
# Single table
# =============================================================================

@app.command("flush")
def table_flush(
    table: TableArg,
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Flush every chain in a table."""
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.flush_table(table)
        ctx.console.success(f"Flushed table {table}")
    except IptctlError as e:
        handle_error(e)


@app.command("delete")
def table_delete(
    table: TableArg,
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Delete every user-defined chain in a table."""
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.delete_table(table)
        ctx.console.success(f"Deleted user chains in table {table}")
    except IptctlError as e:
        handle_error(e)


@app.command("save")
def table_save(
    table: TableArg,
    target: TargetArg,
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Save one table's rules to a file.

    [bold]Examples:[/bold]

        iptctl table save nat /root/nat.rules
    """
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.save_table(table, str(target))
        ctx.console.success(f"Saved table {table} to {target}")
    except IptctlError as e:
        handle_error(e)


@app.command("restore")
def table_restore(
    table: TableArg,
    source: SourceArg,
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Restore one table's rules from a file."""
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.restore_table(table, str(source))
        ctx.console.success(f"Restored table {table} from {source}")
    except IptctlError as e:
        handle_error(e)


# =============================================================================
# Whole rule set
# =============================================================================

@all_app.command("flush")
def all_flush(
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Flush every chain (iptables -F)."""
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.flush_all()
        ctx.console.success("Flushed all chains")
    except IptctlError as e:
        handle_error(e)


@all_app.command("delete")
def all_delete(
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Delete every user-defined chain (iptables -X)."""
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.delete_all()
        ctx.console.success("Deleted all user chains")
    except IptctlError as e:
        handle_error(e)


@all_app.command("save")
def all_save(
    target: TargetArg,
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Save the whole rule set to a file."""
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.save_all(str(target))
        ctx.console.success(f"Saved rule set to {target}")
    except IptctlError as e:
        handle_error(e)


@all_app.command("restore")
def all_restore(
    source: SourceArg,
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Restore the whole rule set from a file."""
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.restore_all(str(source))
        ctx.console.success(f"Restored rule set from {source}")
    except IptctlError as e:
        handle_error(e)
