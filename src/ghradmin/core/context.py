"""Execution context shared by the client and the workflows."""

from contextlib import contextmanager
from dataclasses import dataclass, field
import json
import threading

from rich.console import Console
from rich.markup import escape

from ghradmin.core.errors import Cancelled


class CancellationToken:
    """Cooperative cancellation flag.

    Set once (usually from a signal handler) and checked before every HTTP
    call and between streamed chunks. While a call is blocked on the
    network ``in_flight`` is true and the signal handler raises Cancelled
    directly instead of waiting for the next check.
    """

    def __init__(self):
        self._event = threading.Event()
        self.signum: int | None = None
        self.in_flight = False

    def cancel(self, signum: int | None = None) -> None:
        if self.signum is None:
            self.signum = signum
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise Cancelled("operation cancelled")

    @contextmanager
    def interruptible(self):
        """Mark the enclosed block as a blocking call that a signal may abort."""
        self.raise_if_cancelled()
        self.in_flight = True
        try:
            yield
        finally:
            self.in_flight = False


@dataclass
class ExecutionContext:
    """Verbosity, cancellation and output sinks for one command run."""

    verbose: bool = False
    cancel: CancellationToken = field(default_factory=CancellationToken)
    out: Console = field(default_factory=Console)
    err: Console = field(default_factory=lambda: Console(stderr=True))

    def info(self, message: str) -> None:
        """Report progress on stderr, keeping stdout for results."""
        self.err.print(message, markup=False, highlight=False, soft_wrap=True)

    def debug(self, message: str) -> None:
        """Print a message only in verbose mode."""
        if self.verbose:
            self.err.print(f"[dim]{escape(message)}[/dim]", highlight=False, soft_wrap=True)

    def warn(self, message: str) -> None:
        self.err.print(f"[yellow]Warning:[/yellow] {escape(message)}", highlight=False, soft_wrap=True)

    def error(self, message: str) -> None:
        self.err.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)

    def dump(self, label: str, data) -> None:
        """Log ``data`` as indented JSON in verbose mode."""
        if self.verbose:
            self.debug(f"{label}: {json.dumps(data, indent=2)}")
