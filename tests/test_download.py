from pathlib import Path

import httpx
import pytest

from ghradmin.core.errors import Cancelled, NotFound, TransportError
from ghradmin.workflows.download import download_asset
from ghradmin.workflows.options import DownloadOptions, LatestRelease, ReleaseById, ReleaseByTag

PAYLOAD = b"#!/bin/sh\necho hello\n"


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def asset_requests(github) -> list:
    return [call for call in github.calls if call[1].startswith("/releases/assets/")]


def test_download_latest(client, github, in_tmp):
    github.add_release("v2.0.0-rc1", prerelease=True, assets={"app.sh": b"rc"})
    github.add_release("v1.0.0", assets={"app.sh": PAYLOAD, "other.txt": b"x"})

    path = download_asset(client, DownloadOptions(LatestRelease(), "app.sh", dry_run=False))

    assert path.read_bytes() == PAYLOAD
    assert sorted(p.name for p in in_tmp.iterdir()) == ["app.sh"]
    request = github.requests[-1]
    assert request.headers["Accept"] == "application/octet-stream"


def test_download_by_id_with_save_as(client, github, in_tmp):
    release = github.add_release("v1.0.0", assets={"app.sh": PAYLOAD})

    options = DownloadOptions(ReleaseById(release["id"]), "app.sh", save_as="bin/tool", dry_run=False)
    path = download_asset(client, options)

    assert path == Path("bin/tool")
    assert (in_tmp / "bin" / "tool").read_bytes() == PAYLOAD


def test_download_by_tag_checks_target(client, github, in_tmp):
    github.add_release("v1.0.0", target="main", assets={"app.sh": PAYLOAD})

    with pytest.raises(NotFound):
        download_asset(client, DownloadOptions(ReleaseByTag("v1.0.0", "develop"), "app.sh", dry_run=False))
    path = download_asset(client, DownloadOptions(ReleaseByTag("v1.0.0", "main"), "app.sh", dry_run=False))

    assert path.read_bytes() == PAYLOAD


def test_missing_asset_name_makes_no_asset_request(client, github, in_tmp):
    release = github.add_release("v1.0.0", assets={"app.sh": PAYLOAD})

    with pytest.raises(NotFound, match="'app.exe' not found"):
        download_asset(client, DownloadOptions(ReleaseById(release["id"]), "app.exe", dry_run=False))

    assert asset_requests(github) == []
    assert list(in_tmp.iterdir()) == []


def test_missing_release(client, github, in_tmp):
    with pytest.raises(NotFound, match="latest release not found"):
        download_asset(client, DownloadOptions(LatestRelease(), "app.sh", dry_run=False))
    with pytest.raises(NotFound, match="release 77 not found"):
        download_asset(client, DownloadOptions(ReleaseById(77), "app.sh", dry_run=False))


def test_dry_run_downloads_nothing(client, github, context, in_tmp):
    github.add_release("v1.0.0", assets={"app.sh": PAYLOAD})

    assert download_asset(client, DownloadOptions(LatestRelease(), "app.sh")) is None

    assert asset_requests(github) == []
    assert list(in_tmp.iterdir()) == []
    assert "-> app.sh" in context.err.file.getvalue()


def test_asset_removed_before_download(client, github, in_tmp):
    release = github.add_release("v1.0.0", assets={"app.sh": PAYLOAD})
    github.asset_data.clear()

    with pytest.raises(NotFound, match="no longer present"):
        download_asset(client, DownloadOptions(ReleaseById(release["id"]), "app.sh", dry_run=False))
    assert list(in_tmp.iterdir()) == []


def test_short_read_leaves_no_file(client, github, in_tmp):
    release = github.add_release("v1.0.0", assets={"app.sh": PAYLOAD})
    asset_id = release["assets"][0]["id"]
    github.respond(
        "GET",
        f"/releases/assets/{asset_id}",
        httpx.Response(200, content=b"#!/bin", headers={"Content-Length": str(len(PAYLOAD))}),
    )

    with pytest.raises(TransportError, match="unable to download the required file size"):
        download_asset(client, DownloadOptions(ReleaseById(release["id"]), "app.sh", dry_run=False))

    assert list(in_tmp.iterdir()) == []


def test_existing_file_survives_failed_download(client, github, in_tmp):
    release = github.add_release("v1.0.0", assets={"app.sh": PAYLOAD})
    asset_id = release["assets"][0]["id"]
    github.fail("GET", f"/releases/assets/{asset_id}", status=500)
    (in_tmp / "app.sh").write_bytes(b"old")

    with pytest.raises(TransportError):
        download_asset(client, DownloadOptions(ReleaseById(release["id"]), "app.sh", dry_run=False))

    assert (in_tmp / "app.sh").read_bytes() == b"old"


def test_cancel_during_download(client, github, context, in_tmp):
    release = github.add_release("v1.0.0", assets={"app.sh": PAYLOAD})
    asset_id = release["assets"][0]["id"]

    serve = github.handle

    def handle(request):
        response = serve(request)
        if request.url.path.endswith(f"/releases/assets/{asset_id}"):
            context.cancel.cancel()
        return response

    github.transport.handler = handle

    with pytest.raises(Cancelled):
        download_asset(client, DownloadOptions(ReleaseById(release["id"]), "app.sh", dry_run=False))
    assert list(in_tmp.iterdir()) == []
