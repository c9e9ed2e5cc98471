"""Delete command implementation."""

import click

from ghradmin.commands.common import AppState, print_releases
from ghradmin.workflows.delete import delete_bulk, delete_by_id, delete_by_tag
from ghradmin.workflows.options import (
    BulkDeleteOptions,
    BulkSelection,
    DeleteByIdOptions,
    DeleteByTagOptions,
    parse_release_id,
    parse_tag_target,
    tag_matcher,
)

no_dry_run_option = click.option("--no-dry-run", is_flag=True, help="Actually execute the requests.")
per_page_option = click.option(
    "--per-page", type=click.IntRange(min=0), default=0, help="Releases per API page (default 20)."
)


@click.group()
def delete():
    """Delete releases and their tags."""
    pass


@delete.command("id")
@click.argument("release_id")
@no_dry_run_option
@click.pass_obj
def delete_release_by_id(state: AppState, release_id: str, no_dry_run: bool):
    """Delete the release with RELEASE_ID (greater than 0)."""
    options = DeleteByIdOptions(release_id=parse_release_id(release_id), dry_run=not no_dry_run)

    with state.client() as client:
        release = delete_by_id(client, options)

    print_releases(state.context, [release])


@delete.command("by-tag")
@click.argument("tag_target", metavar="TAG[@TARGET]")
@click.option("--regex", is_flag=True, help="Compile TAG as a regular expression.")
@click.option("--posix", is_flag=True, help="Compile TAG as POSIX ERE (egrep).")
@click.option("--target", default="", help="Only releases targeting this branch or commit.")
@click.option("--draft", is_flag=True, help="Delete only draft releases.")
@click.option("--prerelease", is_flag=True, help="Delete only prereleases.")
@per_page_option
@no_dry_run_option
@click.pass_obj
def delete_release_by_tag(
    state: AppState,
    tag_target: str,
    regex: bool,
    posix: bool,
    target: str,
    draft: bool,
    prerelease: bool,
    per_page: int,
    no_dry_run: bool,
):
    """Delete the release with TAG, or all releases matching a TAG pattern."""
    tag, tag_target_commitish = parse_tag_target(tag_target)
    options = DeleteByTagOptions(
        tag=tag_matcher(tag, regex=regex, posix=posix),
        target_commitish=target.strip() or tag_target_commitish,
        draft=draft,
        prerelease=prerelease,
        dry_run=not no_dry_run,
        per_page=per_page,
    )

    with state.client() as client:
        releases = delete_by_tag(client, options)

    print_releases(state.context, releases)


def _delete_bulk(state: AppState, selection: BulkSelection, no_dry_run: bool, per_page: int) -> None:
    options = BulkDeleteOptions(selection=selection, dry_run=not no_dry_run, per_page=per_page)
    with state.client() as client:
        releases = delete_bulk(client, options)
    print_releases(state.context, releases)


@delete.command("unbranched")
@per_page_option
@no_dry_run_option
@click.pass_obj
def delete_unbranched(state: AppState, per_page: int, no_dry_run: bool):
    """Delete releases whose target is not covered by any existing branch."""
    _delete_bulk(state, BulkSelection.UNBRANCHED, no_dry_run, per_page)


@delete.command("draft")
@per_page_option
@no_dry_run_option
@click.pass_obj
def delete_drafts(state: AppState, per_page: int, no_dry_run: bool):
    """Delete all draft releases."""
    _delete_bulk(state, BulkSelection.DRAFT, no_dry_run, per_page)


@delete.command("prerelease")
@per_page_option
@no_dry_run_option
@click.pass_obj
def delete_prereleases(state: AppState, per_page: int, no_dry_run: bool):
    """Delete all prereleases."""
    _delete_bulk(state, BulkSelection.PRERELEASE, no_dry_run, per_page)
