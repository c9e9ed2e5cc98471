"""Selection predicates deciding which releases a command acts on."""

from dataclasses import dataclass, field
from enum import Enum
import re

from ghradmin.core.context import ExecutionContext
from ghradmin.core.errors import InvalidPattern
from ghradmin.core.posix import compile_posix
from ghradmin.models.release import Release


class MatchMode(Enum):
    """How a tag name or file name pattern is interpreted."""

    PLAIN = "plain"
    REGEX = "regex"
    POSIX = "posix"

    @classmethod
    def from_flags(cls, regex: bool = False, posix: bool = False) -> "MatchMode":
        """Pick the mode for ``--regex`` / ``--posix`` flags (posix wins)."""
        if posix:
            return cls.POSIX
        if regex:
            return cls.REGEX
        return cls.PLAIN


@dataclass(frozen=True)
class NameMatcher:
    """A compiled name pattern.

    Plain patterns compare for equality. Regex and POSIX patterns match when
    they are found anywhere in the name.
    """

    pattern: str
    mode: MatchMode = MatchMode.PLAIN
    compiled: re.Pattern | None = field(default=None, compare=False, repr=False)

    @classmethod
    def compile(cls, pattern: str, mode: MatchMode = MatchMode.PLAIN) -> "NameMatcher":
        """Compile ``pattern``, raising InvalidPattern when it is malformed."""
        if mode is MatchMode.PLAIN:
            return cls(pattern, mode)
        if mode is MatchMode.POSIX:
            return cls(pattern, mode, compile_posix(pattern))
        try:
            return cls(pattern, mode, re.compile(pattern))
        except re.error as e:
            raise InvalidPattern(f"{pattern!r} cannot be compiled as regular expression: {e}") from e

    @property
    def is_pattern(self) -> bool:
        return self.mode is not MatchMode.PLAIN

    def matches(self, name: str) -> bool:
        if self.compiled is None:
            return name == self.pattern
        return self.compiled.search(name) is not None


@dataclass(frozen=True)
class ReleaseFilter:
    """State and branch filters for releases.

    With neither ``draft_only`` nor ``prerelease_only`` set, only stable
    releases pass unless ``any_state`` is set. Setting both flags requires
    a release to be a draft and a prerelease at once.
    """

    draft_only: bool = False
    prerelease_only: bool = False
    branch: str = ""
    any_state: bool = False

    def reject_reason(self, release: Release) -> str | None:
        """Why ``release`` is excluded, or None when it passes."""
        if not (self.draft_only or self.prerelease_only):
            if not self.any_state and (release.draft or release.prerelease):
                return "ignore draft or prerelease"
        else:
            if self.draft_only and not release.draft:
                return "ignore non-draft release"
            if self.prerelease_only and not release.prerelease:
                return "ignore non-prerelease"

        if self.branch and self.branch != release.target_commitish:
            return f"ignore release that commitish does not match {self.branch!r}"
        return None

    def accepts(self, release: Release, context: ExecutionContext | None = None) -> bool:
        reason = self.reject_reason(release)
        if reason is not None and context is not None:
            context.debug(f"{reason}: {release.tag_name}<{release.id}>")
        return reason is None


def is_unbranched(client, release: Release, per_page: int = 0) -> bool:
    """Whether no existing branch covers the release's target commitish.

    A release is covered when a branch with the commitish's name exists, or
    when the commitish resolves to a commit that is identical to or behind
    the tip of some branch. The latter costs one comparison per branch.
    """
    context: ExecutionContext = client.context
    commitish = release.target_commitish

    if commitish and client.get_branch(commitish) is not None:
        context.debug(f"release {release.id} is on branch {commitish!r}")
        return False

    commit = client.get_commit(commitish) if commitish else None
    if commit is None:
        context.debug(f"commitish {commitish!r} of release {release.id} does not exist")
        return True

    for branch, _ in client.iter_branches(per_page=per_page):
        comparison = client.compare_commits(branch.name, commit.sha)
        if comparison is not None and comparison.head_is_covered:
            context.debug(
                f"release {release.id} commit {commit.sha} is {comparison.status} "
                f"branch {branch.name!r}"
            )
            return False

    return True


def has_branch(client, release: Release, per_page: int = 0) -> bool:
    """Whether a branch or a commit reachable from one backs the release."""
    return not is_unbranched(client, release, per_page)
