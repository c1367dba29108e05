"""Shared fixtures: an in-memory stand-in for the iptables binary."""

from unittest.mock import Mock

import pytest

from iptctl.core.executor import CommandResult


BUILTIN_CHAINS = {
    "filter": ["INPUT", "FORWARD", "OUTPUT"],
    "nat": ["PREROUTING", "INPUT", "OUTPUT", "POSTROUTING"],
}

NO_SUCH_CHAIN = "iptables: No chain/target/match by that name.\n"
BAD_RULE = "iptables: Bad rule (does a matching rule exist in that chain?).\n"
CHAIN_EXISTS = "iptables: Chain already exists.\n"


class FakeIptables:
    """Executor double that interprets a subset of iptables arguments.

    Only the ``-S`` output format and exit codes matter to the code
    under test, so rules are stored as the joined token string.
    """

    def __init__(self, ctx) -> None:
        self.ctx = ctx
        self.calls: list[list[str]] = []
        self.shell_calls: list[str] = []
        self.shell_result = CommandResult(["sh"], 0, "", "")
        self.policies = {
            table: {chain: "ACCEPT" for chain in chains}
            for table, chains in BUILTIN_CHAINS.items()
        }
        self.user_chains: dict[str, list[str]] = {table: [] for table in BUILTIN_CHAINS}
        self.rules: dict[tuple[str, str], list[str]] = {}

    # Executor interface ------------------------------------------------

    def run(self, command, *, mutating=False, description=None):
        self.calls.append(list(command))
        if mutating and self.ctx.dry_run:
            return CommandResult(list(command), 0, "", "")
        args = [a for a in command[1:] if a != "--wait"]
        code, out, err = self._dispatch(args)
        return CommandResult(list(command), code, out, err)

    def run_shell(self, script, *, mutating=False, description=None):
        self.shell_calls.append(script)
        return self.shell_result

    # Helpers for assertions ---------------------------------------------

    def count(self, flag: str) -> int:
        return sum(1 for call in self.calls if flag in call)

    # Interpreter ----------------------------------------------------------

    def _chains(self, table):
        return BUILTIN_CHAINS[table] + self.user_chains[table]

    def _dispatch(self, args):
        table = "filter"
        if args[:1] == ["-t"]:
            table, args = args[1], args[2:]
        if args[:1] == ["-v"]:
            args = args[1:]
        op, rest = args[0], args[1:]

        if op == "-S":
            return self._list(table, rest[0] if rest else None)
        if op == "-L":
            return (0, "", "") if rest[0] in self._chains(table) else (1, "", NO_SUCH_CHAIN)
        if op == "-N":
            if rest[0] in self._chains(table):
                return 1, "", CHAIN_EXISTS
            self.user_chains[table].append(rest[0])
            return 0, "", ""
        if op == "-X":
            return self._delete_chain(table, rest)
        if op == "-F":
            chains = rest or self._chains(table)
            for chain in chains:
                if chain not in self._chains(table):
                    return 1, "", NO_SUCH_CHAIN
                self.rules.pop((table, chain), None)
            return 0, "", ""
        if op == "-E":
            old, new = rest
            if old not in self.user_chains[table]:
                return 1, "", NO_SUCH_CHAIN
            idx = self.user_chains[table].index(old)
            self.user_chains[table][idx] = new
            self.rules[(table, new)] = self.rules.pop((table, old), [])
            return 0, "", ""
        if op == "-P":
            self.policies[table][rest[0]] = rest[1]
            return 0, "", ""

        chain = rest[0]
        if chain not in self._chains(table):
            return 1, "", NO_SUCH_CHAIN
        rules = self.rules.setdefault((table, chain), [])
        if op == "-I":
            rules.insert(int(rest[1]) - 1, " ".join(rest[2:]))
            return 0, "", ""
        spec = " ".join(rest[1:])
        if op == "-A":
            rules.append(spec)
            return 0, "", ""
        if op == "-C":
            return (0, "", "") if spec in rules else (1, "", BAD_RULE)
        if op == "-D":
            if spec not in rules:
                return 1, "", BAD_RULE
            rules.remove(spec)
            return 0, "", ""
        raise AssertionError(f"unsupported args: {args}")

    def _list(self, table, chain):
        if chain is not None and chain not in self._chains(table):
            return 1, "", NO_SUCH_CHAIN
        chains = [chain] if chain else self._chains(table)
        lines = []
        for name in chains:
            if name in self.policies[table]:
                lines.append(f"-P {name} {self.policies[table][name]}")
            else:
                lines.append(f"-N {name}")
        for name in chains:
            for spec in self.rules.get((table, name), []):
                lines.append(f"-A {name} {spec}")
        return 0, "\n".join(lines) + "\n", ""

    def _delete_chain(self, table, rest):
        targets = rest or list(self.user_chains[table])
        for chain in targets:
            if chain not in self.user_chains[table]:
                return 1, "", NO_SUCH_CHAIN
            if self.rules.get((table, chain)):
                return 1, "", "iptables: Directory not empty.\n"
            self.user_chains[table].remove(chain)
        return 0, "", ""


@pytest.fixture
def mock_ctx():
    """Create a mock execution context."""
    ctx = Mock()
    ctx.dry_run = False
    ctx.console = Mock()
    return ctx


@pytest.fixture
def fake_iptables(mock_ctx):
    """In-memory iptables bound to the mock context."""
    return FakeIptables(mock_ctx)
