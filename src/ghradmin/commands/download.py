"""Download command implementation."""

import click

from ghradmin.commands.common import AppState
from ghradmin.core.errors import InvalidArgument
from ghradmin.workflows.download import download_asset
from ghradmin.workflows.options import (
    DownloadOptions,
    DownloadTarget,
    LatestRelease,
    ReleaseById,
    ReleaseByTag,
    parse_release_id,
    parse_tag_target,
)

save_as_option = click.option("--save-as", default="", help="Save under this path instead of FILENAME.")
no_dry_run_option = click.option("--no-dry-run", is_flag=True, help="Actually execute the requests.")


@click.group()
def download():
    """Download a release asset."""
    pass


def _download(state: AppState, target: DownloadTarget, filename: str, save_as: str, no_dry_run: bool) -> None:
    if not filename.strip():
        raise InvalidArgument("invalid <filename> argument")
    options = DownloadOptions(target=target, filename=filename, save_as=save_as, dry_run=not no_dry_run)

    with state.client() as client:
        path = download_asset(client, options)

    if path is not None:
        state.context.info(f"saved {path}")


@download.command("latest")
@click.argument("filename")
@save_as_option
@no_dry_run_option
@click.pass_obj
def download_latest(state: AppState, filename: str, save_as: str, no_dry_run: bool):
    """Download FILENAME from the latest release."""
    _download(state, LatestRelease(), filename, save_as, no_dry_run)


@download.command("id")
@click.argument("release_id")
@click.argument("filename")
@save_as_option
@no_dry_run_option
@click.pass_obj
def download_by_id(state: AppState, release_id: str, filename: str, save_as: str, no_dry_run: bool):
    """Download FILENAME from the release with RELEASE_ID."""
    _download(state, ReleaseById(parse_release_id(release_id)), filename, save_as, no_dry_run)


@download.command("by-tag")
@click.argument("tag_target", metavar="TAG[@TARGET]")
@click.argument("filename")
@save_as_option
@no_dry_run_option
@click.pass_obj
def download_by_tag(state: AppState, tag_target: str, filename: str, save_as: str, no_dry_run: bool):
    """Download FILENAME from the release with TAG (and TARGET)."""
    tag, target = parse_tag_target(tag_target)
    _download(state, ReleaseByTag(tag, target), filename, save_as, no_dry_run)
