"""Download workflow: resolve a release, pick an asset, fetch it."""

from pathlib import Path

from ghradmin.core.errors import NotFound
from ghradmin.core.github import GitHubClient
from ghradmin.models.release import Asset, Release
from ghradmin.workflows.options import (
    DownloadOptions,
    DownloadTarget,
    LatestRelease,
    ReleaseById,
    ReleaseByTag,
)


def resolve_release(client: GitHubClient, target: DownloadTarget) -> Release:
    """Find the release a download refers to, or raise NotFound."""
    if isinstance(target, LatestRelease):
        release = client.get_latest_release()
        label = "latest release"
    elif isinstance(target, ReleaseById):
        release = client.get_release(target.release_id)
        label = f"release {target.release_id}"
    elif isinstance(target, ReleaseByTag):
        release = client.get_release_by_tag(target.tag_name)
        label = f"release {target.tag_name!r}"
        if (
            release is not None
            and target.target_commitish
            and release.target_commitish != target.target_commitish
        ):
            client.context.debug(
                f"ignore release that commitish does not match {target.target_commitish!r}: {release.id}"
            )
            release = None
    else:
        raise TypeError(f"unknown download target {target!r}")

    if release is None:
        raise NotFound(f"{label} not found")
    return release


def select_asset(release: Release, name: str) -> Asset:
    asset = release.find_asset(name)
    if asset is None:
        raise NotFound(f"asset {name!r} not found in release {release.tag_name!r}")
    return asset


def download_asset(client: GitHubClient, options: DownloadOptions) -> Path | None:
    """Download the asset named in ``options``.

    Returns the saved path, or None in a dry run.
    """
    context = client.context
    release = resolve_release(client, options.target)
    asset = select_asset(release, options.filename)

    dest = options.destination
    context.info(f"download asset {asset.id}: {asset.name} -> {dest}")
    context.dump(f"download asset {asset.id}", asset.to_dict())
    if options.dry_run:
        return None

    if not client.download_asset(asset, dest, show_progress=context.err.is_terminal):
        raise NotFound(f"asset {asset.name!r} is no longer present")
    return dest
