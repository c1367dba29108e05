"""Terminal output for iptctl, backed by Rich.

Results (listings, capability tables, confirmations) go to stdout so they
can be piped; diagnostics (errors, hints, lock contention, command
tracing) go to stderr. Every message is tagged with a level and shown
only when the configured verbosity allows it.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from rich import box
from rich.console import Console as RichConsole
from rich.markup import escape
from rich.table import Table


class Verbosity(IntEnum):
    """Output verbosity levels."""
    QUIET = 0    # Errors only
    NORMAL = 1   # Results and confirmations
    VERBOSE = 2  # Lock contention, chosen strategy
    DEBUG = 3    # Every command line


@dataclass(frozen=True)
class Level:
    """How one kind of message is rendered."""
    prefix: str
    minimum: Verbosity
    to_stderr: bool


INFO = Level("[green][INFO][/green] ", Verbosity.NORMAL, False)
OK = Level("[green][OK][/green] ", Verbosity.NORMAL, False)
STEP = Level("[blue]->[/blue] ", Verbosity.NORMAL, False)
DRY_RUN = Level("[blue][DRY-RUN][/blue] Would: ", Verbosity.QUIET, False)
ERROR = Level("[red][ERROR][/red] ", Verbosity.QUIET, True)
HINT = Level("[cyan]Hint:[/cyan] ", Verbosity.QUIET, True)
VERBOSE = Level("[dim]", Verbosity.VERBOSE, True)
DEBUG = Level("[cyan][DEBUG][/cyan] ", Verbosity.DEBUG, True)


class Console:
    """Leveled console shared by the CLI, the executor and the lock.

    Messages are markup-escaped before printing since iptables rules
    routinely contain square brackets (``--dport [0:65535]`` errors,
    ``[unsupported revision]`` listings).
    """

    def __init__(self) -> None:
        self.verbosity = Verbosity.NORMAL
        self.dry_run = False
        self._build(no_color=False)

    def _build(self, no_color: bool) -> None:
        self.no_color = no_color
        self._out = RichConsole(highlight=False, no_color=no_color)
        self._err = RichConsole(stderr=True, highlight=False, no_color=no_color)

    def configure(
        self,
        verbosity: int = 1,
        dry_run: bool = False,
        no_color: bool = False,
    ) -> None:
        """Apply CLI flags."""
        self.verbosity = Verbosity(max(Verbosity.QUIET, min(verbosity, Verbosity.DEBUG)))
        self.dry_run = dry_run
        if no_color != self.no_color:
            self._build(no_color)

    def emit(self, level: Level, message: str) -> None:
        """Print one tagged message if the verbosity allows it."""
        if self.verbosity < level.minimum:
            return
        text = level.prefix + escape(message)
        if level is VERBOSE:
            text += "[/dim]"
        (self._err if level.to_stderr else self._out).print(text)

    def info(self, message: str) -> None:
        self.emit(INFO, message)

    def success(self, message: str) -> None:
        self.emit(OK, message)

    def step(self, message: str) -> None:
        self.emit(STEP, message)

    def error(self, message: str) -> None:
        self.emit(ERROR, message)

    def hint(self, message: str) -> None:
        self.emit(HINT, message)

    def verbose(self, message: str) -> None:
        self.emit(VERBOSE, message)

    def debug(self, message: str) -> None:
        self.emit(DEBUG, message)

    def dry_run_msg(self, message: str) -> None:
        """Announce a skipped mutating command (dry-run only)."""
        if self.dry_run:
            self.emit(DRY_RUN, message)

    def print(self, message: Any = "", **kwargs: Any) -> None:
        """Print raw markup or a Rich renderable to stdout."""
        self._out.print(message, **kwargs)

    def lines(self, lines: list[str]) -> None:
        """Print tool output verbatim, one entry per line."""
        for line in lines:
            self._out.print(line, markup=False)

    def table(
        self,
        title: str,
        columns: list[str],
        rows: list[list[str]],
        box_style: box.Box = box.ROUNDED,
    ) -> None:
        """Print a key/value style report table."""
        table = Table(title=title, box=box_style)
        for col in columns:
            table.add_column(col)
        for row in rows:
            table.add_row(*[escape(cell) for cell in row])
        self._out.print(table)


# Global console instance
console = Console()
