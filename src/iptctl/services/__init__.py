"""Firewall tool services: probing, locking, invocation and operations."""

from iptctl.services.iptables import IptablesService
from iptctl.services.invoker import LockGuardedInvoker
from iptctl.services.lock import FileLock
from iptctl.services.rulespec import split_quoted
from iptctl.services.version import Family, LockStrategy, ToolHandle, ToolVersion, probe

__all__ = [
    "IptablesService",
    "LockGuardedInvoker",
    "FileLock",
    "split_quoted",
    "Family",
    "LockStrategy",
    "ToolHandle",
    "ToolVersion",
    "probe",
]
