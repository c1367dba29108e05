"""Classification of raw firewall tool outcomes.

Turns a CommandResult into the value an operation hands back: nothing,
a boolean, a list of lines, or a NonZeroExitError carrying the tool's
exit code and standard error.
"""

from iptctl.core.executor import CommandResult
from iptctl.core.exceptions import NonZeroExitError
from iptctl.services.rulespec import rule_line


def to_result(outcome: CommandResult) -> None:
    """Raise unless the tool exited 0.

    Raises:
        NonZeroExitError: With the exit code (-1 if killed) and stderr
    """
    if not outcome.success:
        raise NonZeroExitError(
            outcome.return_code,
            outcome.stderr,
            command=outcome.display,
        )


def to_exists(outcome: CommandResult) -> bool:
    """Predicate outcome: any non-zero exit means False."""
    return outcome.success


def to_lines(outcome: CommandResult) -> list[str]:
    """Classify, then split stdout into lines.

    Surrounding blank lines are dropped; empty output gives [].
    """
    to_result(outcome)
    text = outcome.stdout.strip()
    if not text:
        return []
    return text.split("\n")


def listing_contains(outcome: CommandResult, chain: str, tokens: list[str]) -> bool:
    """Existence check for tools without ``-C``.

    Looks for ``-A <chain> <tokens...>`` in the stdout of ``-S``. This
    is a literal substring match, so it is sensitive to how iptables
    normalizes rules when printing them. A failed listing counts as
    not present, like any other predicate.
    """
    if not outcome.success:
        return False
    return rule_line(chain, tokens) in outcome.stdout
