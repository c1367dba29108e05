"""
iptctl - Lock-safe facade over iptables and ip6tables.

Create, inspect and mutate chains and rules, and bulk save/restore rule
sets, with concurrent invocations serialized on older iptables builds.
"""

__version__ = "1.0.0"
