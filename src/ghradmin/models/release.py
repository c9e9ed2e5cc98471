"""GitHub release data models."""

from dataclasses import dataclass, field


@dataclass
class Author:
    """Represents the user who published a release or uploaded an asset."""

    login: str = ""
    id: int = 0
    avatar_url: str = ""
    html_url: str = ""
    type: str = ""
    site_admin: bool = False

    @classmethod
    def from_api_response(cls, data: dict | None) -> "Author":
        """Create Author from GitHub API response."""
        data = data or {}
        return cls(
            login=data.get("login") or "",
            id=data.get("id") or 0,
            avatar_url=data.get("avatar_url") or "",
            html_url=data.get("html_url") or "",
            type=data.get("type") or "",
            site_admin=bool(data.get("site_admin", False)),
        )

    def to_dict(self) -> dict:
        return {
            "login": self.login,
            "id": self.id,
            "avatar_url": self.avatar_url,
            "html_url": self.html_url,
            "type": self.type,
            "site_admin": self.site_admin,
        }


@dataclass
class Asset:
    """Represents a GitHub release asset."""

    id: int
    name: str
    size: int
    content_type: str = "application/octet-stream"
    label: str = ""
    url: str = ""
    browser_download_url: str = ""
    download_count: int = 0
    created_at: str = ""
    updated_at: str = ""
    uploader: Author = field(default_factory=Author)

    @classmethod
    def from_api_response(cls, data: dict) -> "Asset":
        """Create Asset from GitHub API response."""
        return cls(
            id=data["id"],
            name=data["name"],
            size=data.get("size", 0),
            content_type=data.get("content_type") or "application/octet-stream",
            label=data.get("label") or "",
            url=data.get("url") or "",
            browser_download_url=data.get("browser_download_url") or "",
            download_count=data.get("download_count", 0),
            created_at=data.get("created_at") or "",
            updated_at=data.get("updated_at") or "",
            uploader=Author.from_api_response(data.get("uploader")),
        )

    def to_dict(self) -> dict:
        """Convert to the same shape the API returns."""
        return {
            "id": self.id,
            "name": self.name,
            "label": self.label,
            "content_type": self.content_type,
            "size": self.size,
            "url": self.url,
            "browser_download_url": self.browser_download_url,
            "download_count": self.download_count,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "uploader": self.uploader.to_dict(),
        }


@dataclass
class Release:
    """Represents a GitHub release.

    A release built locally (for example during a dry run) keeps ``id == 0``
    and an empty ``upload_url`` because those are assigned by the server.
    """

    tag_name: str
    id: int = 0
    target_commitish: str = ""
    name: str = ""
    body: str = ""
    draft: bool = False
    prerelease: bool = False
    assets: list[Asset] = field(default_factory=list)
    upload_url: str = ""
    html_url: str = ""
    created_at: str = ""
    published_at: str = ""
    author: Author = field(default_factory=Author)

    @classmethod
    def from_api_response(cls, data: dict) -> "Release":
        """Create Release from GitHub API response."""
        assets = [Asset.from_api_response(a) for a in data.get("assets") or []]
        return cls(
            id=data["id"],
            tag_name=data["tag_name"],
            target_commitish=data.get("target_commitish") or "",
            name=data.get("name") or "",
            body=data.get("body") or "",
            draft=data.get("draft", False),
            prerelease=data.get("prerelease", False),
            assets=assets,
            upload_url=data.get("upload_url") or "",
            html_url=data.get("html_url") or "",
            created_at=data.get("created_at") or "",
            published_at=data.get("published_at") or "",
            author=Author.from_api_response(data.get("author")),
        )

    def to_dict(self) -> dict:
        """Convert to the same shape the API returns."""
        return {
            "id": self.id,
            "tag_name": self.tag_name,
            "target_commitish": self.target_commitish,
            "name": self.name,
            "body": self.body,
            "draft": self.draft,
            "prerelease": self.prerelease,
            "html_url": self.html_url,
            "upload_url": self.upload_url,
            "created_at": self.created_at,
            "published_at": self.published_at,
            "author": self.author.to_dict(),
            "assets": [a.to_dict() for a in self.assets],
        }

    def find_asset(self, name: str) -> Asset | None:
        """Find an asset by exact file name."""
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None
