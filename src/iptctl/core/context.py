"""Per-invocation state shared by the executor, invoker and service.

One ExecutionContext is built from the CLI flags of a single command.
It owns the console configuration and loads the configuration file only
when something first asks for it, so commands that never touch the lock
or the shell never read /etc/iptctl/config.yaml.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from iptctl.core.config import AppConfig, DEFAULT_CONFIG_PATH
from iptctl.core.output import Console, console, Verbosity


@dataclass
class ExecutionContext:
    """Flags and lazily-loaded settings for one iptctl command.

    Attributes:
        dry_run: Mutating iptables calls are printed and reported as
            successful instead of being run
        verbosity: Output verbosity level (0-3)
        no_color: Disable colored output
        ipv6: Drive ip6tables regardless of tool.family
        config_path: YAML configuration file
    """

    dry_run: bool = False
    verbosity: int = Verbosity.NORMAL
    no_color: bool = False
    ipv6: bool = False
    config_path: Path = field(default_factory=lambda: DEFAULT_CONFIG_PATH)

    _config: Optional[AppConfig] = field(default=None, repr=False)
    _console: Console = field(default_factory=lambda: console, repr=False)

    def __post_init__(self) -> None:
        self._console.configure(
            verbosity=self.verbosity,
            dry_run=self.dry_run,
            no_color=self.no_color,
        )

    @property
    def config(self) -> AppConfig:
        """Configuration file merged with IPTCTL_* overrides.

        Raises:
            ConfigurationError: On first access, if the file or an
                override is invalid
        """
        if self._config is None:
            self._config = AppConfig(config_path=self.config_path)
        return self._config

    @property
    def console(self) -> Console:
        return self._console

    @property
    def is_debug(self) -> bool:
        return self.verbosity >= Verbosity.DEBUG

    @property
    def family(self) -> str:
        """Address family to drive, the --ipv6 flag winning over config."""
        if self.ipv6:
            return "ipv6"
        return self.config.tool.family


def _verbosity(verbose: int, quiet: bool) -> Verbosity:
    if quiet:
        return Verbosity.QUIET
    return Verbosity(min(Verbosity.NORMAL + verbose, Verbosity.DEBUG))


def create_context(
    dry_run: bool = False,
    verbose: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    ipv6: bool = False,
    config: Optional[Path] = None,
) -> ExecutionContext:
    """Build the context for one command from its CLI options.

    ``-q`` wins over any number of ``-v``.
    """
    return ExecutionContext(
        dry_run=dry_run,
        verbosity=_verbosity(verbose, quiet),
        no_color=no_color,
        ipv6=ipv6,
        config_path=config or DEFAULT_CONFIG_PATH,
    )
