"""Shared fixtures: an in-memory GitHub served through httpx.MockTransport."""

import io
import json
import re

import httpx
import pytest
from rich.console import Console

from ghradmin.core.config import Settings
from ghradmin.core.context import ExecutionContext
from ghradmin.core.github import GitHubClient

API_URL = "https://api.example.com"
UPLOAD_HOST = "uploads.example.com"
BASE_PATH = "/repos/octo/hello"


class FakeGitHub:
    """Release, tag, branch and commit endpoints of the ``octo/hello`` repository.

    Releases are kept in server order (newest first). Every request is
    recorded; ``calls`` shows them relative to the repository path.
    """

    def __init__(self):
        self.releases: list[dict] = []
        self.tags: set[str] = set()
        self.branches: list[dict] = []
        self.commits: dict[str, str] = {}
        self.comparisons: dict[tuple[str, str], str] = {}
        self.asset_data: dict[int, bytes] = {}
        self.failures: dict[tuple[str, str], tuple[int, dict]] = {}
        self.upload_failures: dict[str, int] = {}
        self.overrides: dict[tuple[str, str], httpx.Response] = {}
        self.requests: list[httpx.Request] = []
        self._last_id = 100
        self.transport = httpx.MockTransport(self.handle)

    # --- setup ---------------------------------------------------------

    def _new_id(self) -> int:
        self._last_id += 1
        return self._last_id

    def add_release(
        self,
        tag: str,
        target: str = "main",
        draft: bool = False,
        prerelease: bool = False,
        assets: dict[str, bytes] | None = None,
    ) -> dict:
        release_id = self._new_id()
        release = {
            "id": release_id,
            "tag_name": tag,
            "target_commitish": target,
            "name": tag,
            "body": "",
            "draft": draft,
            "prerelease": prerelease,
            "html_url": f"https://github.example.com/octo/hello/releases/tag/{tag}",
            "upload_url": f"https://{UPLOAD_HOST}{BASE_PATH}/releases/{release_id}/assets{{?name,label}}",
            "assets": [],
        }
        for name, data in (assets or {}).items():
            self._add_asset(release, name, data)
        self.releases.append(release)
        self.tags.add(tag)
        return release

    def _add_asset(self, release: dict, name: str, data: bytes, content_type: str = "application/octet-stream") -> dict:
        asset = {
            "id": self._new_id(),
            "name": name,
            "size": len(data),
            "content_type": content_type,
            "url": f"{API_URL}{BASE_PATH}/releases/assets/{self._last_id}",
        }
        self.asset_data[asset["id"]] = data
        release["assets"].append(asset)
        return asset

    def add_branch(self, name: str, sha: str) -> None:
        self.branches.append({"name": name, "protected": False, "commit": {"sha": sha}})
        self.commits[name] = sha
        self.commits[sha] = sha

    def add_commit(self, sha: str) -> None:
        self.commits[sha] = sha

    def fail(self, method: str, path: str, status: int = 500, headers: dict | None = None) -> None:
        """Answer ``method path`` with an error status from now on."""
        self.failures[(method, path)] = (status, headers or {})

    def respond(self, method: str, path: str, response: httpx.Response) -> None:
        """Answer ``method path`` with a fixed response."""
        self.overrides[(method, path)] = response

    @property
    def calls(self) -> list[tuple[str, str]]:
        result = []
        for request in self.requests:
            path = request.url.path
            if path.startswith(BASE_PATH):
                path = path[len(BASE_PATH):]
            if request.url.host == UPLOAD_HOST:
                path += f"?name={request.url.params.get('name')}"
            result.append((request.method, path))
        return result

    def _find(self, release_id: int) -> dict | None:
        for release in self.releases:
            if release["id"] == release_id:
                return release
        return None

    # --- routing -------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host == UPLOAD_HOST:
            return self._upload(request)

        path = request.url.path
        if not path.startswith(BASE_PATH):
            return _message(404, "Not Found")
        path = path[len(BASE_PATH):]
        method = request.method

        if (method, path) in self.overrides:
            return self.overrides[(method, path)]
        if (method, path) in self.failures:
            status, headers = self.failures[(method, path)]
            return httpx.Response(status, headers=headers, json={"message": "injected failure"})

        if path == "/releases" and method == "GET":
            return self._paginate(request, self.releases, "/releases")
        if path == "/releases" and method == "POST":
            return self._create(request)
        if path == "/releases/latest":
            for release in self.releases:
                if not release["draft"] and not release["prerelease"]:
                    return httpx.Response(200, json=release)
            return _message(404, "Not Found")

        m = re.fullmatch(r"/releases/assets/(\d+)", path)
        if m:
            data = self.asset_data.get(int(m.group(1)))
            if data is None:
                return _message(404, "Not Found")
            return httpx.Response(200, content=data, headers={"Content-Type": "application/octet-stream"})

        m = re.fullmatch(r"/releases/tags/(.+)", path)
        if m:
            for release in self.releases:
                if release["tag_name"] == m.group(1):
                    return httpx.Response(200, json=release)
            return _message(404, "Not Found")

        m = re.fullmatch(r"/releases/(\d+)", path)
        if m:
            release = self._find(int(m.group(1)))
            if release is None:
                return _message(404, "Not Found")
            if method == "DELETE":
                self.releases.remove(release)
                return httpx.Response(204)
            return httpx.Response(200, json=release)

        m = re.fullmatch(r"/git/refs/tags/(.+)", path)
        if m and method == "DELETE":
            if m.group(1) not in self.tags:
                return _message(422, "Reference does not exist")
            self.tags.remove(m.group(1))
            return httpx.Response(204)

        if path == "/branches":
            return self._paginate(request, self.branches, "/branches")

        m = re.fullmatch(r"/branches/(.+)", path)
        if m:
            for branch in self.branches:
                if branch["name"] == m.group(1):
                    return httpx.Response(200, json=branch)
            return _message(404, "Branch not found")

        m = re.fullmatch(r"/commits/(.+)", path)
        if m:
            sha = self.commits.get(m.group(1))
            if sha is None:
                return _message(422, f"No commit found for SHA: {m.group(1)}")
            return httpx.Response(
                200,
                json={"sha": sha, "commit": {"author": {"name": "octocat", "date": "2024-01-01T00:00:00Z"}}},
            )

        m = re.fullmatch(r"/compare/(.+)\.\.\.(.+)", path)
        if m:
            status = self.comparisons.get((m.group(1), m.group(2)), "diverged")
            return httpx.Response(200, json={"status": status, "ahead_by": 1, "behind_by": 1})

        return _message(404, "Not Found")

    def _paginate(self, request: httpx.Request, items: list[dict], path: str) -> httpx.Response:
        per_page = int(request.url.params.get("per_page", "30"))
        page = int(request.url.params.get("page", "1"))
        start = (page - 1) * per_page
        headers = {}
        if start + per_page < len(items):
            last = (len(items) + per_page - 1) // per_page
            headers["Link"] = (
                f'<{API_URL}{BASE_PATH}{path}?per_page={per_page}&page={page + 1}>; rel="next", '
                f'<{API_URL}{BASE_PATH}{path}?per_page={per_page}&page={last}>; rel="last"'
            )
        return httpx.Response(200, json=items[start:start + per_page], headers=headers)

    def _create(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        for release in self.releases:
            if release["tag_name"] == payload["tag_name"]:
                return _message(422, "Validation Failed")
        release = self.add_release(
            payload["tag_name"],
            target=payload.get("target_commitish", "main"),
            draft=payload.get("draft", False),
            prerelease=payload.get("prerelease", False),
        )
        release["name"] = payload.get("name", "")
        release["body"] = payload.get("body", "")
        self.releases.remove(release)
        self.releases.insert(0, release)
        return httpx.Response(201, json=release)

    def _upload(self, request: httpx.Request) -> httpx.Response:
        name = request.url.params.get("name")
        if name in self.upload_failures:
            return _message(self.upload_failures[name], "upload failed")
        m = re.fullmatch(rf"{BASE_PATH}/releases/(\d+)/assets", request.url.path)
        release = self._find(int(m.group(1))) if m else None
        if release is None:
            return _message(404, "Not Found")
        asset = self._add_asset(release, name, request.content, request.headers["Content-Type"])
        return httpx.Response(201, json=asset)


def _message(status: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"message": message})


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def context() -> ExecutionContext:
    return ExecutionContext(
        verbose=True,
        out=Console(file=io.StringIO(), width=200),
        err=Console(file=io.StringIO(), width=200),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(owner="octo", repo="hello", api_url=API_URL, token="s3cret")


@pytest.fixture
def client(settings, context, github):
    with GitHubClient(settings, context, transport=github.transport) as c:
        yield c
