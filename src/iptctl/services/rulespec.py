"""Rule specification tokenizing.

Rules are opaque strings such as ``-p tcp --dport 22 -j ACCEPT``. They are
split into separate process arguments so no shell is involved, with quoted
spans (``--comment "allow ssh"``) kept together as one argument.
"""

import re

# A quoted span wins over a plain run; nested/unmatched quotes are not special
RULE_SPLIT = re.compile(r"""["'].+?["']|\S+""")

QUOTE_CHARS = "\"'"


def split_quoted(rule: str) -> list[str]:
    """Split a rule specification into argument tokens.

    Leading and trailing quote characters of each matched span are
    stripped; quotes inside a token are left alone.

    Examples:
        >>> split_quoted("-j ACCEPT")
        ['-j', 'ACCEPT']
        >>> split_quoted('-m comment --comment "hello world"')
        ['-m', 'comment', '--comment', 'hello world']
    """
    return [m.group(0).strip(QUOTE_CHARS) for m in RULE_SPLIT.finditer(rule)]


def rule_line(chain: str, tokens: list[str]) -> str:
    """Render a rule the way ``iptables -S`` prints it."""
    return " ".join(["-A", chain, *tokens])
