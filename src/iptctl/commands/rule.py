"""Rule commands: check, insert, append, delete, list.

Rule specifications are passed as one quoted argument after ``--`` so
their leading dashes are not read as iptctl options:

    iptctl rule append INPUT -- "-p tcp --dport 22 -j ACCEPT"
"""

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
    name="rule",
    help="Check, add, remove and list rules in a chain.",
    no_args_is_help=True,
)

ChainArg = Annotated[str, typer.Argument(help="Chain name, e.g. INPUT")]
RuleArg = Annotated[
    str,
    typer.Argument(help='Rule specification, e.g. "-p tcp --dport 22 -j ACCEPT"'),
]


@app.command("check")
def rule_check(
    chain: ChainArg,
    rule: RuleArg,
    table: TableOption = "filter",
    ipv6: Ipv6Option = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Check whether a rule exists. Exits 0 if present, 1 if not.

    [bold]Examples:[/bold]

        iptctl rule check INPUT -- "-p tcp --dport 22 -j ACCEPT"
    """
    try:
        ctx, iptables = get_service(
            verbose=verbose, quiet=quiet, no_color=no_color, ipv6=ipv6, config=config,
        )
        present = iptables.exists(table, chain, rule)
    except IptctlError as e:
        handle_error(e)

    if present:
        ctx.console.success(f"Rule present in {table}/{chain}")
        raise typer.Exit(0)
    ctx.console.info(f"Rule not present in {table}/{chain}")
    raise typer.Exit(1)


@app.command("insert")
def rule_insert(
    chain: ChainArg,
    position: Annotated[int, typer.Argument(help="1-based position", min=1)],
    rule: RuleArg,
    table: TableOption = "filter",
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Insert a rule at a position in a chain.

    [bold]Examples:[/bold]

        iptctl rule insert INPUT 1 -- "-i lo -j ACCEPT"
    """
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        iptables.insert(table, chain, rule, position)
        ctx.console.success(f"Inserted rule at {table}/{chain}:{position}")
    except IptctlError as e:
        handle_error(e)


@app.command("append")
def rule_append(
    chain: ChainArg,
    rule: RuleArg,
    unique: Annotated[
        bool,
        typer.Option("--unique", "-u", help="Fail if the rule already exists"),
    ] = False,
    table: TableOption = "filter",
    ipv6: Ipv6Option = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Append a rule to the end of a chain.

    [bold]Examples:[/bold]

        iptctl rule append INPUT -- "-p tcp --dport 443 -j ACCEPT"
        iptctl rule append --unique -t nat POSTROUTING -- "-o eth0 -j MASQUERADE"
    """
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        if unique:
            iptables.append_unique(table, chain, rule)
        else:
            iptables.append(table, chain, rule)
        ctx.console.success(f"Appended rule to {table}/{chain}")
    except IptctlError as e:
        handle_error(e)


@app.command("delete")
def rule_delete(
    chain: ChainArg,
    rule: RuleArg,
    all_copies: Annotated[
        bool,
        typer.Option(
            "--if-exists",
            "-e",
            help="Delete every copy and succeed when the rule is absent",
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
    """Delete a rule from a chain.

    [bold]Examples:[/bold]

        iptctl rule delete INPUT -- "-p tcp --dport 443 -j ACCEPT"
        iptctl rule delete --if-exists INPUT -- "-s 203.0.113.7 -j DROP"
    """
    try:
        ctx, iptables = get_service(
            dry_run=dry_run, verbose=verbose, quiet=quiet,
            no_color=no_color, ipv6=ipv6, config=config,
        )
        if all_copies:
            iptables.delete_if_exists(table, chain, rule)
        else:
            iptables.delete(table, chain, rule)
        ctx.console.success(f"Deleted rule from {table}/{chain}")
    except IptctlError as e:
        handle_error(e)


@app.command("list")
def rule_list(
    chain: ChainArg,
    counters: Annotated[
        bool,
        typer.Option("--counters", help="Include packet and byte counters"),
    ] = False,
    table: TableOption = "filter",
    ipv6: Ipv6Option = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    config: ConfigOption = None,
) -> None:
    """Print a chain's rules in iptables -S form.

    [bold]Examples:[/bold]

        iptctl rule list INPUT
        iptctl rule list -t nat --counters POSTROUTING
    """
    try:
        ctx, iptables = get_service(
            verbose=verbose, quiet=quiet, no_color=no_color, ipv6=ipv6, config=config,
        )
        if counters:
            lines = iptables.list_rules_with_counters(table, chain)
        else:
            lines = iptables.list_rules(table, chain)
    except IptctlError as e:
        handle_error(e)

    ctx.console.lines(lines)
