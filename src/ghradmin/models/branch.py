"""Branch and commit data models."""

from dataclasses import dataclass


@dataclass
class Branch:
    """Represents a repository branch."""

    name: str
    protected: bool = False
    sha: str = ""  # tip commit, when the API includes it

    @classmethod
    def from_api_response(cls, data: dict) -> "Branch":
        """Create Branch from GitHub API response."""
        commit = data.get("commit") or {}
        return cls(
            name=data["name"],
            protected=data.get("protected", False),
            sha=commit.get("sha") or "",
        )


@dataclass
class CommitRef:
    """Represents a single commit."""

    sha: str
    author_name: str = ""
    author_date: str = ""
    committer_name: str = ""
    committer_date: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "CommitRef":
        """Create CommitRef from GitHub API response."""
        commit = data.get("commit") or {}
        author = commit.get("author") or {}
        committer = commit.get("committer") or {}
        return cls(
            sha=data["sha"],
            author_name=author.get("name") or "",
            author_date=author.get("date") or "",
            committer_name=committer.get("name") or "",
            committer_date=committer.get("date") or "",
        )


@dataclass
class CommitComparison:
    """Result of comparing two commits (``base...head``)."""

    status: str
    ahead_by: int = 0
    behind_by: int = 0

    @classmethod
    def from_api_response(cls, data: dict) -> "CommitComparison":
        """Create CommitComparison from GitHub API response."""
        return cls(
            status=data.get("status", ""),
            ahead_by=data.get("ahead_by", 0),
            behind_by=data.get("behind_by", 0),
        )

    @property
    def head_is_covered(self) -> bool:
        """Whether head is reachable from (behind or equal to) base."""
        return self.status in ("behind", "identical")
