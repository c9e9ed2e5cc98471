"""Configuration derived from the environment."""

from dataclasses import dataclass
from urllib.parse import urlsplit
import os
import re

from ghradmin.core.errors import InvalidArgument, InvalidConfiguration


GITHUB_API_URL = "https://api.github.com"

OWNER_NAME = re.compile(r"^[A-Za-z0-9-]+$")
REPO_NAME = re.compile(r"^[\w-][\w.-]*$", re.ASCII)


def getenv(key: str) -> str | None:
    """Get an environment variable with surrounding whitespace removed."""
    value = os.environ.get(key)
    if value is None:
        return None
    return value.strip()


def parse_repository(spec: str) -> tuple[str, str]:
    """Parse an ``owner/repo`` string into (owner, repo).

    The owner may contain ASCII letters, digits and hyphens but must not
    start or end with a hyphen. The repository name may contain word
    characters, hyphens and dots, and must not start with a dot.
    """
    spec = spec.strip()
    if not spec:
        raise InvalidArgument("repo name must not be empty")

    parts = spec.split("/")
    if len(parts) != 2:
        raise InvalidArgument(f"invalid repo name {spec!r}")

    owner, repo = parts
    if owner.startswith("-") or owner.endswith("-") or not OWNER_NAME.match(owner):
        raise InvalidArgument(f"invalid repo name {spec!r}")
    if not REPO_NAME.match(repo):
        raise InvalidArgument(f"invalid repo name {spec!r}")

    return owner, repo


def validate_api_url(value: str) -> str:
    """Validate an alternate API URL.

    The URL needs a scheme and a host and may not carry a path, query or
    fragment. A lone trailing slash is dropped.
    """
    try:
        parts = urlsplit(value)
    except ValueError as e:
        raise InvalidConfiguration(f"invalid GITHUB_API_URL environment variable: {e}") from e

    path = "" if parts.path == "/" else parts.path
    if not parts.scheme or not parts.netloc or path or parts.query or parts.fragment:
        raise InvalidConfiguration("invalid GITHUB_API_URL environment variable: invalid url")

    return f"{parts.scheme}://{parts.netloc}"


@dataclass
class Settings:
    """Connection settings for one repository."""

    owner: str
    repo: str
    api_url: str = GITHUB_API_URL
    token: str | None = None

    @classmethod
    def from_env(cls, repository: str | None = None) -> "Settings":
        """Create settings from GITHUB_* environment variables.

        ``repository`` overrides GITHUB_REPOSITORY when given.
        """
        if repository is None:
            repository = getenv("GITHUB_REPOSITORY") or ""
        owner, repo = parse_repository(repository)

        api_url = GITHUB_API_URL
        override = getenv("GITHUB_API_URL")
        if override:
            api_url = validate_api_url(override)

        return cls(
            owner=owner,
            repo=repo,
            api_url=api_url,
            token=getenv("GITHUB_TOKEN") or None,
        )

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def base_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    @property
    def base_url(self) -> str:
        return self.api_url + self.base_path
