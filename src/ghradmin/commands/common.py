"""State and helpers shared by the commands."""

from dataclasses import dataclass, field

import httpx

from ghradmin.core.config import Settings
from ghradmin.core.context import CancellationToken, ExecutionContext
from ghradmin.core.github import GitHubClient
from ghradmin.models.release import Release


@dataclass
class AppState:
    """Per-invocation state shared by all commands."""

    cancel: CancellationToken = field(default_factory=CancellationToken)
    transport: httpx.BaseTransport | None = None
    context: ExecutionContext | None = None
    repository: str | None = None

    def client(self) -> GitHubClient:
        """Create a client for the selected repository."""
        settings = Settings.from_env(self.repository)
        return GitHubClient(settings, self.context, transport=self.transport)


def print_releases(context: ExecutionContext, releases: list[Release]) -> None:
    """Print releases as a JSON array on stdout."""
    context.out.print_json(data=[r.to_dict() for r in releases])
