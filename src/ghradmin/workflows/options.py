"""Typed options for each workflow and the parsers that build them."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ghradmin.core.errors import InvalidArgument
from ghradmin.core.selection import MatchMode, NameMatcher, ReleaseFilter


def parse_release_id(value: str) -> int:
    """Parse a release id, which must be a positive integer."""
    value = value.strip()
    if not value:
        raise InvalidArgument("invalid <release-id> argument")
    try:
        release_id = int(value, 10)
    except ValueError as e:
        raise InvalidArgument(f"invalid <release-id> argument {value!r}") from e
    if release_id <= 0:
        raise InvalidArgument("<release-id> must be greater than 0")
    return release_id


def parse_tag_target(value: str) -> tuple[str, str]:
    """Parse ``<tag>[@<target>]`` into (tag, target).

    ``target`` is empty when omitted. Both parts must be non-blank.
    """
    parts = value.split("@")
    if len(parts) == 1 and parts[0].strip():
        return parts[0], ""
    if len(parts) == 2 and parts[0].strip() and parts[1].strip():
        return parts[0], parts[1]
    raise InvalidArgument(f"invalid <tag>[@<target>] argument {value!r}")


class ListView(Enum):
    STABLE = "stable"
    DRAFT = "draft"
    PRERELEASE = "prerelease"
    ALL = "all"


@dataclass(frozen=True)
class ListOptions:
    view: ListView = ListView.STABLE
    branch: str = ""
    branch_exists: bool = False
    max_items: int = 0
    per_page: int = 0

    @property
    def filter(self) -> ReleaseFilter:
        return ReleaseFilter(
            draft_only=self.view is ListView.DRAFT,
            prerelease_only=self.view is ListView.PRERELEASE,
            branch=self.branch,
            any_state=self.view is ListView.ALL,
        )


@dataclass(frozen=True)
class CreateOptions:
    tag_name: str
    asset: NameMatcher
    target_commitish: str = ""
    title: str = ""
    body: str = ""
    directory: Path = field(default_factory=lambda: Path("."))
    draft: bool = True
    prerelease: bool = True
    dry_run: bool = True


@dataclass(frozen=True)
class DeleteByIdOptions:
    release_id: int
    dry_run: bool = True


@dataclass(frozen=True)
class DeleteByTagOptions:
    """Delete releases by tag name or tag pattern.

    Without ``draft``/``prerelease`` the state of a release does not matter.
    """

    tag: NameMatcher
    target_commitish: str = ""
    draft: bool = False
    prerelease: bool = False
    dry_run: bool = True
    per_page: int = 0

    @property
    def filter(self) -> ReleaseFilter:
        return ReleaseFilter(
            draft_only=self.draft,
            prerelease_only=self.prerelease,
            branch=self.target_commitish,
            any_state=True,
        )


class BulkSelection(Enum):
    UNBRANCHED = "unbranched"
    DRAFT = "draft"
    PRERELEASE = "prerelease"


@dataclass(frozen=True)
class BulkDeleteOptions:
    selection: BulkSelection
    dry_run: bool = True
    per_page: int = 0


@dataclass(frozen=True)
class LatestRelease:
    pass


@dataclass(frozen=True)
class ReleaseById:
    release_id: int


@dataclass(frozen=True)
class ReleaseByTag:
    tag_name: str
    target_commitish: str = ""


DownloadTarget = LatestRelease | ReleaseById | ReleaseByTag


@dataclass(frozen=True)
class DownloadOptions:
    target: DownloadTarget
    filename: str
    save_as: str = ""
    dry_run: bool = True

    @property
    def destination(self) -> Path:
        return Path(self.save_as.strip() or self.filename)


def tag_matcher(tag: str, regex: bool = False, posix: bool = False) -> NameMatcher:
    """Compile a tag argument for the requested match mode."""
    if not tag.strip():
        raise InvalidArgument("invalid <tag> argument")
    return NameMatcher.compile(tag, MatchMode.from_flags(regex, posix))
