"""GitHub API client for administering releases of one repository."""

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote, urlsplit, urlunsplit
import json
import re

import httpx

from ghradmin.core.config import Settings
from ghradmin.core.context import ExecutionContext
from ghradmin.core.downloader import download_to
from ghradmin.core.errors import InvalidEndpoint, NotFound, TransportError
from ghradmin.core.pagination import Paginator, fetch, parse_next_page
from ghradmin.models.branch import Branch, CommitComparison, CommitRef
from ghradmin.models.page import Page
from ghradmin.models.release import Asset, Release


UPLOAD_CHUNK_SIZE = 64 * 1024

MULTIPLE_SLASHES = re.compile(r"/+")
UPLOAD_URL_SUFFIX = re.compile(r"/assets[^/]*$")


def _remove_dot_segments(path: str) -> str:
    if not path:
        return ""

    segments = path.split("/")
    stack: list[str] = []
    for segment in segments:
        if segment == ".":
            continue
        if segment == "..":
            if stack:
                stack.pop()
            continue
        stack.append(segment)

    resolved = "/" + "/".join(stack)
    if segments[-1] in (".", "..") and not resolved.endswith("/"):
        resolved += "/"
    return resolved


def resolve_endpoint(endpoint: str) -> str:
    """Normalize a relative endpoint.

    Dot segments are resolved, runs of slashes collapse and the result is
    rooted at ``/``. The query string is kept as is. Anything that carries
    a scheme, host, user info or fragment is rejected so that a request can
    never leave the configured base URL.
    """
    try:
        parts = urlsplit(endpoint)
    except ValueError as e:
        raise InvalidEndpoint(f"invalid endpoint {endpoint!r}: {e}") from e

    if parts.scheme or parts.netloc or parts.fragment or "#" in endpoint:
        raise InvalidEndpoint(f"invalid endpoint {endpoint!r}")

    path = MULTIPLE_SLASHES.sub("/", _remove_dot_segments(parts.path) or "/")
    return urlunsplit(("", "", path, parts.query, ""))


def dump_response(response: httpx.Response, body: bool = True) -> str:
    """Render a response the way it looked on the wire."""
    version = response.http_version or "HTTP/1.1"
    lines = [f"{version} {response.status_code} {response.reason_phrase}"]
    lines.extend(f"{key}: {value}" for key, value in response.headers.multi_items())
    text = "\n".join(lines) + "\n"
    if body:
        text += "\n" + response.text
    return text


def _mask_headers(headers: httpx.Headers) -> list[str]:
    lines = []
    for key, value in headers.multi_items():
        if key.lower() == "authorization":
            value = value.split(" ", 1)[0] + " ********"
        lines.append(f"{key}: {value}")
    return lines


class GitHubClient:
    """Client for the release endpoints of one repository.

    Every call goes through the configured base URL
    (``{api_url}/repos/{owner}/{repo}``), is checked against the context's
    cancellation token first, and is issued synchronously.
    """

    def __init__(
        self,
        settings: Settings,
        context: ExecutionContext | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.settings = settings
        self.context = context or ExecutionContext()
        self.base_url = settings.base_url

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if settings.token:
            headers["Authorization"] = f"Bearer {settings.token}"

        self.client = httpx.Client(
            headers=headers,
            timeout=30.0,
            follow_redirects=True,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.client.close()

    # --- transport ---------------------------------------------------

    def url_for(self, endpoint: str) -> str:
        return self.base_url + resolve_endpoint(endpoint)

    def _log_request(self, request: httpx.Request) -> None:
        if not self.context.verbose:
            return
        lines = [f"{request.method} {request.url}"]
        lines.extend(_mask_headers(request.headers))
        self.context.debug("\n".join(lines))

    def _send(self, request: httpx.Request, stream: bool = False) -> httpx.Response:
        self.context.cancel.raise_if_cancelled()
        self._log_request(request)
        try:
            with self.context.cancel.interruptible():
                return self.client.send(request, stream=stream)
        except httpx.HTTPError as e:
            raise TransportError(f"{request.method} {request.url} failed: {e}") from e

    def request(
        self,
        method: str,
        endpoint: str,
        json_body: dict | None = None,
    ) -> httpx.Response:
        """Send a request to an endpoint below the repository base URL."""
        request = self.client.build_request(method, self.url_for(endpoint), json=json_body)
        return self._send(request)

    def get(self, endpoint: str) -> httpx.Response:
        return self.request("GET", endpoint)

    def post(self, endpoint: str, json_body: dict | None = None) -> httpx.Response:
        return self.request("POST", endpoint, json_body)

    def delete(self, endpoint: str) -> httpx.Response:
        return self.request("DELETE", endpoint)

    def _error(self, response: httpx.Response, body: bool = True) -> TransportError:
        """Build the error for an unexpected response."""
        dump = dump_response(response, body=body)
        if response.status_code in (403, 429) and response.headers.get("x-ratelimit-remaining") == "0":
            reset = response.headers.get("x-ratelimit-reset", "unknown")
            message = f"GitHub API rate limit exceeded (resets at {reset})\n{dump}"
        else:
            message = dump
        return TransportError(message, status_code=response.status_code, dump=dump)

    def _decode(self, response: httpx.Response):
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise TransportError(
                f"failed to decode response from {response.request.url}: {e}",
                status_code=response.status_code,
                dump=dump_response(response),
            ) from e

    def _lookup(self, endpoint: str, absent: tuple[int, ...] = (404,)) -> dict | None:
        """GET a single resource, returning None when it does not exist."""
        response = self.get(endpoint)
        if response.status_code in absent:
            return None
        if response.status_code != 200:
            raise self._error(response)
        return self._decode(response)

    def _next_page(self, response: httpx.Response) -> int:
        next_page = 0
        for link in response.headers.get_list("link"):
            try:
                next_page = parse_next_page(link)
            except ValueError as e:
                self.context.error(f"failed to parse Link header: {e}")
        return next_page

    def _list(self, endpoint: str, per_page: int, page: int) -> tuple[list, int]:
        response = self.get(f"{endpoint}?per_page={per_page}&page={page}")
        if response.status_code == 404:
            raise NotFound(f"repository {self.settings.repository} not found")
        if response.status_code != 200:
            raise self._error(response)
        return self._decode(response), self._next_page(response)

    # --- releases ----------------------------------------------------

    def list_releases(self, per_page: int, page: int) -> Page[Release]:
        """List one page of releases."""
        items, next_page = self._list("/releases", per_page, page)
        return Page(
            page=page,
            items=[Release.from_api_response(data) for data in items],
            next_page=next_page,
        )

    def iter_releases(self, start_page: int = 1, per_page: int = 0) -> Paginator[Release]:
        return Paginator(self.list_releases, start_page, per_page)

    def fetch_releases(
        self,
        start_page: int,
        per_page: int,
        callback: Callable[[Release, int], None],
    ) -> None:
        """Call ``callback(release, page)`` for each release in server order."""
        fetch(self.iter_releases(start_page, per_page), callback)

    def get_release(self, release_id: int) -> Release | None:
        data = self._lookup(f"/releases/{release_id}")
        return Release.from_api_response(data) if data is not None else None

    def get_release_by_tag(self, tag: str) -> Release | None:
        data = self._lookup(f"/releases/tags/{quote(tag, safe='/')}")
        return Release.from_api_response(data) if data is not None else None

    def get_latest_release(self) -> Release | None:
        """Get the latest published, non-prerelease release."""
        data = self._lookup("/releases/latest")
        return Release.from_api_response(data) if data is not None else None

    def create_release(
        self,
        tag_name: str,
        target_commitish: str = "",
        name: str = "",
        body: str = "",
        draft: bool = False,
        prerelease: bool = False,
    ) -> Release:
        payload = {
            "tag_name": tag_name,
            "name": name,
            "body": body,
            "draft": draft,
            "prerelease": prerelease,
        }
        if target_commitish:
            payload["target_commitish"] = target_commitish

        response = self.post("/releases", payload)
        if response.status_code != 201:
            raise self._error(response)
        return Release.from_api_response(self._decode(response))

    def delete_release(self, release_id: int) -> None:
        response = self.delete(f"/releases/{release_id}")
        if response.status_code != 204:
            raise self._error(response)

    def delete_tag(self, tag: str) -> None:
        """Delete a tag ref. A tag that is already gone is not an error."""
        response = self.delete(f"/git/refs/tags/{quote(tag, safe='/')}")
        if response.status_code not in (204, 422):
            raise self._error(response)

    # --- assets ------------------------------------------------------

    def _iter_chunks(self, stream: BinaryIO) -> Iterator[bytes]:
        while True:
            self.context.cancel.raise_if_cancelled()
            chunk = stream.read(UPLOAD_CHUNK_SIZE)
            if not chunk:
                return
            yield chunk

    def upload_asset(
        self,
        release: Release,
        name: str,
        stream: BinaryIO,
        size: int,
        content_type: str,
    ) -> Asset:
        """Upload ``size`` bytes from ``stream`` as a new asset of ``release``."""
        base = UPLOAD_URL_SUFFIX.sub("", release.upload_url)
        url = f"{base}/assets?name={quote(name, safe='')}"
        request = self.client.build_request(
            "POST",
            url,
            content=self._iter_chunks(stream),
            headers={
                "Content-Type": content_type,
                "Content-Length": str(size),
                "Expect": "100-continue",
            },
        )
        response = self._send(request)
        if response.status_code != 201:
            raise self._error(response)
        try:
            return Asset.from_api_response(self._decode(response))
        except (KeyError, TypeError, AttributeError) as e:
            raise TransportError(
                f"unexpected upload response for {name}: {e!r}",
                status_code=response.status_code,
                dump=dump_response(response),
            ) from e

    def download_asset(self, asset: Asset, dest: Path, show_progress: bool = False) -> bool:
        """Download an asset to ``dest``.

        Returns False when the asset is not present on the server.
        """
        request = self.client.build_request(
            "GET",
            self.url_for(f"/releases/assets/{asset.id}"),
            headers={"Accept": "application/octet-stream"},
        )
        response = self._send(request, stream=True)
        try:
            if response.status_code == 404:
                return False
            if response.status_code != 200:
                raise self._error(response, body=False)
            with self.context.cancel.interruptible():
                download_to(
                    response,
                    dest,
                    expected_size=asset.size,
                    cancel=self.context.cancel,
                    show_progress=show_progress,
                    console=self.context.err,
                )
            return True
        except httpx.HTTPError as e:
            raise TransportError(f"failed to download {asset.name}: {e}") from e
        finally:
            response.close()

    # --- branches and commits -----------------------------------------

    def list_branches(self, per_page: int, page: int) -> Page[Branch]:
        """List one page of branches."""
        items, next_page = self._list("/branches", per_page, page)
        return Page(
            page=page,
            items=[Branch.from_api_response(data) for data in items],
            next_page=next_page,
        )

    def iter_branches(self, start_page: int = 1, per_page: int = 0) -> Paginator[Branch]:
        return Paginator(self.list_branches, start_page, per_page)

    def get_branch(self, name: str) -> Branch | None:
        data = self._lookup(f"/branches/{quote(name, safe='/')}")
        return Branch.from_api_response(data) if data is not None else None

    def get_commit(self, ref: str) -> CommitRef | None:
        """Resolve a ref or sha to a commit."""
        data = self._lookup(f"/commits/{quote(ref, safe='/')}", absent=(404, 422))
        return CommitRef.from_api_response(data) if data is not None else None

    def compare_commits(self, base: str, head: str) -> CommitComparison | None:
        """Compare ``head`` against ``base``."""
        endpoint = f"/compare/{quote(base, safe='/')}...{quote(head, safe='/')}"
        data = self._lookup(endpoint, absent=(404, 422))
        return CommitComparison.from_api_response(data) if data is not None else None
