"""Iptables facade service.

Provides chain, rule and table operations over iptables/ip6tables with:
- Capability-aware existence checks (-C, or -S listing on old builds)
- Serialized invocation (--wait, or the fallback file lock)
- Bulk save/restore through the tool's -save/-restore companions
- Dry-run mode support for mutating operations

Rules are opaque strings, tokenized into separate arguments; nothing
here parses rule fields, and no firewall state is cached between calls.
"""

import shlex
from typing import Optional

from iptctl.core.context import ExecutionContext
from iptctl.core.executor import CommandExecutor
from iptctl.core.exceptions import DuplicateRuleError
from iptctl.services.invoker import LockGuardedInvoker
from iptctl.services.lock import FileLock
from iptctl.services.results import listing_contains, to_exists, to_lines, to_result
from iptctl.services.rulespec import split_quoted
from iptctl.services.version import Family, ToolHandle, ToolVersion, probe


# Markers on `-S` lines that declare a chain
POLICY_MARKER = "-P"
NEW_CHAIN_MARKER = "-N"


class IptablesService:
    """Facade over one iptables binary family.

    Every method re-invokes the tool; predicates return bool, listings
    return lines, everything else returns None or raises
    NonZeroExitError with the tool's exit code and stderr.
    """

    def __init__(
        self,
        ctx: ExecutionContext,
        executor: CommandExecutor,
        tool: ToolHandle,
        *,
        lock: Optional[FileLock] = None,
    ) -> None:
        """Initialize the service around an already-probed tool.

        Args:
            ctx: Execution context
            executor: Command executor
            tool: Probed tool handle
            lock: Fallback lock (built from config when omitted)
        """
        self.ctx = ctx
        self.executor = executor
        self.tool = tool
        self.invoker = LockGuardedInvoker(tool, executor, lock)

    @classmethod
    def create(
        cls,
        ctx: ExecutionContext,
        family: Optional[Family] = None,
        *,
        executor: Optional[CommandExecutor] = None,
    ) -> "IptablesService":
        """Probe the installed tool and build a service for it.

        Args:
            ctx: Execution context
            family: IPv4 or IPv6 (default: the context's family)
            executor: Command executor (default: a new one on ctx)

        Raises:
            UnsupportedPlatformError: On non-Linux hosts
            InvalidVersionFormatError: If the version probe fails
            SpawnError: If the tool cannot be started
        """
        executor = executor or CommandExecutor(ctx)
        family = family or Family(ctx.family)
        return cls(ctx, executor, probe(executor, family))

    def get_version(self) -> ToolVersion:
        """Return the probed (major, minor, patch)."""
        return self.tool.version

    # =========================================================================
    # Rule Management
    # =========================================================================

    def exists(self, table: str, chain: str, rule: str) -> bool:
        """Check if a rule is present in a chain.

        Uses ``-C`` where supported, otherwise searches the ``-S``
        listing of the whole table.
        """
        tokens = split_quoted(rule)
        if not self.tool.supports_native_existence_check:
            outcome = self.invoker.invoke(["-t", table, "-S"])
            return listing_contains(outcome, chain, tokens)

        return to_exists(self.invoker.invoke(["-t", table, "-C", chain, *tokens]))

    def insert(self, table: str, chain: str, rule: str, position: int) -> None:
        """Insert a rule at a 1-based position in a chain."""
        self._mutate(["-t", table, "-I", chain, str(position), *split_quoted(rule)])

    def append(self, table: str, chain: str, rule: str) -> None:
        """Append a rule to the end of a chain."""
        self._mutate(["-t", table, "-A", chain, *split_quoted(rule)])

    def append_unique(self, table: str, chain: str, rule: str) -> None:
        """Append a rule unless it is already present.

        Raises:
            DuplicateRuleError: If the rule already exists; nothing is appended
        """
        if self.exists(table, chain, rule):
            raise DuplicateRuleError(table=table, chain=chain, rule=rule)

        self.append(table, chain, rule)

    def delete(self, table: str, chain: str, rule: str) -> None:
        """Delete the first matching rule from a chain."""
        self._mutate(["-t", table, "-D", chain, *split_quoted(rule)])

    def delete_if_exists(self, table: str, chain: str, rule: str) -> None:
        """Delete every copy of a rule; a no-op when it is absent.

        Terminates once the existence check reports False, so each pass
        must actually remove a copy.
        """
        while self.exists(table, chain, rule):
            self.delete(table, chain, rule)
            if self.ctx.dry_run:
                return

    # =========================================================================
    # Listing
    # =========================================================================

    def list_rules(self, table: str, chain: str) -> list[str]:
        """List a chain's rules in ``-S`` form."""
        return to_lines(self.invoker.invoke(["-t", table, "-S", chain]))

    def list_rules_with_counters(self, table: str, chain: str) -> list[str]:
        """List a chain's rules in ``-S`` form with packet/byte counters."""
        return to_lines(self.invoker.invoke(["-t", table, "-v", "-S", chain]))

    def list_chains(self, table: str) -> list[str]:
        """List every chain in a table, built-in chains first."""
        chains = []
        for line in to_lines(self.invoker.invoke(["-t", table, "-S"])):
            fields = line.split(" ")
            if len(fields) > 1 and fields[0] in (POLICY_MARKER, NEW_CHAIN_MARKER):
                chains.append(fields[1])
        return chains

    # =========================================================================
    # Chain Management
    # =========================================================================

    def chain_exists(self, table: str, chain: str) -> bool:
        """Check if a chain exists; any failure counts as absent."""
        return to_exists(self.invoker.invoke(["-t", table, "-L", chain]))

    def new_chain(self, table: str, chain: str) -> None:
        """Create a user-defined chain."""
        self._mutate(["-t", table, "-N", chain])

    def flush_chain(self, table: str, chain: str) -> None:
        """Remove every rule from a chain."""
        self._mutate(["-t", table, "-F", chain])

    def rename_chain(self, table: str, old_chain: str, new_chain: str) -> None:
        """Rename a user-defined chain."""
        self._mutate(["-t", table, "-E", old_chain, new_chain])

    def delete_chain(self, table: str, chain: str) -> None:
        """Delete an empty, unreferenced user-defined chain."""
        self._mutate(["-t", table, "-X", chain])

    def flush_and_delete_chain(self, table: str, chain: str) -> None:
        """Flush then delete a chain, if it exists.

        The first error from either step is raised immediately.
        """
        while self.chain_exists(table, chain):
            self.flush_chain(table, chain)
            self.delete_chain(table, chain)
            if self.ctx.dry_run:
                # The chain is still there; don't loop on it
                return

    def change_policy(self, table: str, chain: str, target: str) -> None:
        """Set a built-in chain's default policy."""
        self._mutate(["-t", table, "-P", chain, target])

    # =========================================================================
    # Table Management
    # =========================================================================

    def flush_table(self, table: str) -> None:
        """Flush every chain in a table."""
        self._mutate(["-t", table, "-F"])

    def delete_table(self, table: str) -> None:
        """Delete every user-defined chain in a table."""
        self._mutate(["-t", table, "-X"])

    def flush_all(self) -> None:
        """Flush every chain in the default (filter) table."""
        self._mutate(["-F"])

    def delete_all(self) -> None:
        """Delete every user-defined chain in the default (filter) table."""
        self._mutate(["-X"])

    # =========================================================================
    # Bulk Save/Restore
    # =========================================================================
    #
    # These run the -save/-restore companions through the shell for file
    # redirection and do not take the fallback lock.

    def save_table(self, table: str, target: str) -> None:
        """Write one table's rules to target."""
        self._shell(
            f"{self.tool.save_cmd} -t {shlex.quote(table)} > {shlex.quote(target)}"
        )

    def save_all(self, target: str) -> None:
        """Write every table's rules to target."""
        self._shell(f"{self.tool.save_cmd} > {shlex.quote(target)}")

    def restore_table(self, table: str, target: str) -> None:
        """Load one table's rules from target."""
        self._shell(
            f"{self.tool.restore_cmd} -t {shlex.quote(table)} < {shlex.quote(target)}"
        )

    def restore_all(self, target: str) -> None:
        """Load a full rule set from target."""
        self._shell(f"{self.tool.restore_cmd} < {shlex.quote(target)}")

    # =========================================================================
    # Private Helpers
    # =========================================================================

    def _mutate(self, args: list[str]) -> None:
        to_result(self.invoker.invoke(args, mutating=True))

    def _shell(self, script: str) -> None:
        to_result(self.executor.run_shell(script, mutating=True))
