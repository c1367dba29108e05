"""Chain commands: list, exists, new, flush, rename, delete, policy."""

from typing import Annotated

import typer

from iptctl.core import IptctlError
from iptctl.commands.common import (
    ConfigOption,
    DryRunOption,
    Ipv6Option,
    NoColorOption,
    QuietOption,
    TableOption,
    VerboseOption,
    get_service,
    handle_error,
)


app = typer.Typer(
    name="chain",
    help="Create, rename, flush and delete chains.",
    no_args_is_help=True,
)

ChainArg = Annotated[str, typer.Argument(help="Chain name")]


@app.command("list")
def chain_list(
    table: TableOption = "filter",
    ipv6: Ipv6Option = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """List the chains of a table, built-in chains first."""
    try:
        ctx, iptables = get_service(
            verbose=verbose, quiet=quiet, no_color=no_color, ipv6=ipv6, config=config,
        )
        chains = iptables.list_chains(table)
    except IptctlError as e:
        handle_error(e)

    ctx.console.lines(chains)


@app.command("exists")
def chain_exists(
    chain: ChainArg,
    table: TableOption = "filter",
    ipv6: Ipv6Option = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Check whether a chain exists. Exits 0 if it does, 1 if not."""
    try:
        ctx, iptables = get_service(
            verbose=verbose, quiet=quiet, no_color=no_color, ipv6=ipv6, config=config,
        )
        present = iptables.chain_exists(table, chain)
    except IptctlError as e:
        handle_error(e)

    if present:
        ctx.console.success(f"Chain {table}/{chain} exists")
        raise typer.Exit(0)
    ctx.console.info(f"Chain {table}/{chain} does not exist")
    raise typer.Exit(1)


@app.command("new")
def chain_new(
    chain: ChainArg,
    table: TableOption = "filter",
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Create a user-defined chain."""
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.new_chain(table, chain)
        ctx.console.success(f"Created chain {table}/{chain}")
    except IptctlError as e:
        handle_error(e)


@app.command("flush")
def chain_flush(
    chain: ChainArg,
    table: TableOption = "filter",
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Remove every rule from a chain."""
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.flush_chain(table, chain)
        ctx.console.success(f"Flushed chain {table}/{chain}")
    except IptctlError as e:
        handle_error(e)


@app.command("rename")
def chain_rename(
    old_chain: Annotated[str, typer.Argument(help="Current chain name")],
    new_chain: Annotated[str, typer.Argument(help="New chain name")],
    table: TableOption = "filter",
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Rename a user-defined chain."""
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.rename_chain(table, old_chain, new_chain)
        ctx.console.success(f"Renamed chain {table}/{old_chain} to {new_chain}")
    except IptctlError as e:
        handle_error(e)


@app.command("delete")
def chain_delete(
    chain: ChainArg,
    purge: Annotated[
        bool,
        typer.Option(
            "--purge",
            help="Flush the chain first, and succeed if it does not exist",
        ),
    ] = False,
    table: TableOption = "filter",
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Delete a user-defined chain.

    [bold]Examples:[/bold]

        iptctl chain delete MYCHAIN
        iptctl chain delete --purge -t nat MYCHAIN
    """
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        if purge:
            iptables.flush_and_delete_chain(table, chain)
        else:
            iptables.delete_chain(table, chain)
        ctx.console.success(f"Deleted chain {table}/{chain}")
    except IptctlError as e:
        handle_error(e)


@app.command("policy")
def chain_policy(
    chain: Annotated[str, typer.Argument(help="Built-in chain, e.g. FORWARD")],
    target: Annotated[str, typer.Argument(help="Policy target: ACCEPT or DROP")],
    table: TableOption = "filter",
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Set the default policy of a built-in chain.

    [bold]Examples:[/bold]

        iptctl chain policy FORWARD DROP
    """
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.change_policy(table, chain, target.upper())
        ctx.console.success(f"Policy of {table}/{chain} set to {target.upper()}")
    except IptctlError as e:
        handle_error(e)
