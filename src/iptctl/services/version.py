"""Firewall tool capability detection.

iptables grew two features that change how it must be driven:
- 1.4.11 added ``-C`` (check whether a rule exists)
- 1.4.20 added ``--wait`` (the tool serializes itself on the xtables lock)

The installed version is probed once and the resulting ToolHandle is
immutable for the life of the service.
"""

import re
import sys
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from iptctl.core.executor import CommandExecutor
from iptctl.core.exceptions import (
    InvalidVersionFormatError,
    UnsupportedPlatformError,
)


VERSION_RE = re.compile(r"v(\d+)\.(\d+)\.(\d+)")
VERSION_FLAG = "--version"

# Newest versions lacking each feature; support means strictly greater
LAST_WITHOUT_CHECK = (1, 4, 10)
LAST_WITHOUT_WAIT = (1, 4, 19)


class Family(str, Enum):
    """Address family, selecting the binary set."""
    IPV4 = "ipv4"
    IPV6 = "ipv6"

    @property
    def prefix(self) -> str:
        return "iptables" if self is Family.IPV4 else "ip6tables"


class LockStrategy(str, Enum):
    """How concurrent invocations are serialized."""
    NATIVE_WAIT = "native-wait"
    FILE_LOCK = "file-lock"


class ToolVersion(NamedTuple):
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class ToolHandle:
    """The probed firewall binary family and its capabilities."""
    cmd: str
    save_cmd: str
    restore_cmd: str
    version: ToolVersion
    supports_native_existence_check: bool
    lock_strategy: LockStrategy

    @property
    def supports_native_wait_flag(self) -> bool:
        return self.lock_strategy is LockStrategy.NATIVE_WAIT

    @classmethod
    def for_version(cls, family: Family, version: ToolVersion) -> "ToolHandle":
        """Build the handle for a family at a known version."""
        prefix = family.prefix
        return cls(
            cmd=prefix,
            save_cmd=f"{prefix}-save",
            restore_cmd=f"{prefix}-restore",
            version=version,
            supports_native_existence_check=tuple(version) > LAST_WITHOUT_CHECK,
            lock_strategy=(
                LockStrategy.NATIVE_WAIT
                if tuple(version) > LAST_WITHOUT_WAIT
                else LockStrategy.FILE_LOCK
            ),
        )


def parse_version(output: str) -> ToolVersion:
    """Extract v<major>.<minor>.<patch> from ``--version`` output.

    Raises:
        InvalidVersionFormatError: If no version number is present
    """
    match = VERSION_RE.search(output)
    if match is None:
        raise InvalidVersionFormatError(output)
    major, minor, patch = (int(part) for part in match.groups())
    return ToolVersion(major, minor, patch)


def require_linux(platform: str = sys.platform) -> None:
    """Fail fast on hosts without netfilter."""
    if not platform.startswith("linux"):
        raise UnsupportedPlatformError(
            "iptables only works on Linux",
            details=[f"Detected platform: {platform}"],
        )


def probe(
    executor: CommandExecutor,
    family: Family = Family.IPV4,
    *,
    platform: str = sys.platform,
) -> ToolHandle:
    """Run ``<cmd> --version`` once and derive the tool's capabilities.

    Args:
        executor: Executor used to spawn the tool
        family: IPv4 (iptables) or IPv6 (ip6tables)
        platform: Host platform, ``sys.platform`` by default

    Returns:
        Immutable ToolHandle

    Raises:
        UnsupportedPlatformError: On non-Linux hosts, before spawning anything
        SpawnError: If the tool cannot be started
        InvalidVersionFormatError: If the version cannot be parsed
    """
    require_linux(platform)

    cmd = family.prefix
    result = executor.run([cmd, VERSION_FLAG])
    try:
        version = parse_version(result.stdout)
    except InvalidVersionFormatError as e:
        e.command = result.display
        if result.stderr.strip():
            e.details.append(f"Error output: {result.stderr.strip()}")
        raise

    handle = ToolHandle.for_version(family, version)
    executor.ctx.console.verbose(
        f"{cmd} v{version}: check={'yes' if handle.supports_native_existence_check else 'no'}, "
        f"locking={handle.lock_strategy.value}"
    )
    return handle
