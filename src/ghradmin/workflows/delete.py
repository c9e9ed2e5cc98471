"""Delete workflows: by id, by tag or tag pattern, and bulk selections."""

from collections.abc import Callable

from ghradmin.core.errors import NotFound, PartialFailure, ReleaseAdminError
from ghradmin.core.github import GitHubClient
from ghradmin.core.selection import ReleaseFilter, is_unbranched
from ghradmin.models.release import Release
from ghradmin.workflows.options import (
    BulkDeleteOptions,
    BulkSelection,
    DeleteByIdOptions,
    DeleteByTagOptions,
)


def delete_release(
    client: GitHubClient,
    release: Release,
    dry_run: bool,
    deleted: list[Release] | None = None,
) -> None:
    """Delete a release and then its tag.

    ``release`` is appended to ``deleted`` as soon as the release itself is
    gone, before the tag is touched.
    """
    context = client.context
    context.info(f"delete release {release.id}: {release.tag_name}")
    context.dump(f"delete release {release.id}", release.to_dict())
    if not dry_run:
        client.delete_release(release.id)
    if deleted is not None:
        deleted.append(release)
    if not dry_run:
        client.delete_tag(release.tag_name)


def delete_all(client: GitHubClient, releases: list[Release], dry_run: bool) -> list[Release]:
    """Delete ``releases`` in order, stopping at the first failure.

    A failure after at least one deletion is raised as PartialFailure with
    the releases already deleted.
    """
    deleted: list[Release] = []
    for release in releases:
        try:
            delete_release(client, release, dry_run, deleted)
        except ReleaseAdminError as e:
            if not deleted:
                raise
            raise PartialFailure(
                f"deleted {len(deleted)} of {len(releases)} releases", deleted, e
            ) from e
    return deleted


def collect(client: GitHubClient, predicate: Callable[[Release], bool], per_page: int = 0) -> list[Release]:
    """Traverse every release and return those ``predicate`` accepts.

    Matches are gathered before anything is deleted so that deletions do not
    shift the pages still to be read.
    """
    matches: list[Release] = []

    def visit(release: Release, page: int) -> None:
        if predicate(release):
            matches.append(release)

    client.fetch_releases(1, per_page, visit)
    return matches


def delete_by_id(client: GitHubClient, options: DeleteByIdOptions) -> Release:
    release = client.get_release(options.release_id)
    if release is None:
        raise NotFound(f"release {options.release_id} not found")

    delete_release(client, release, options.dry_run)
    return release


def delete_by_tag(client: GitHubClient, options: DeleteByTagOptions) -> list[Release]:
    """Delete the release with a tag, or every release whose tag matches."""
    context = client.context
    release_filter = options.filter

    if not options.tag.is_pattern:
        release = client.get_release_by_tag(options.tag.pattern)
        if release is None or not release_filter.accepts(release, context):
            raise NotFound(f"release {options.tag.pattern!r} not found")
        delete_release(client, release, options.dry_run)
        return [release]

    def selected(release: Release) -> bool:
        if not release_filter.accepts(release, context):
            return False
        if not options.tag.matches(release.tag_name):
            context.debug(
                f"ignore release that tag-name does not match {options.tag.pattern!r}: "
                f"{release.tag_name}<{release.id}>"
            )
            return False
        return True

    matches = collect(client, selected, options.per_page)
    if not matches:
        raise NotFound(f"no release matches {options.tag.pattern!r}")
    return delete_all(client, matches, options.dry_run)


def bulk_predicate(client: GitHubClient, options: BulkDeleteOptions) -> Callable[[Release], bool]:
    context = client.context
    if options.selection is BulkSelection.DRAFT:
        release_filter = ReleaseFilter(draft_only=True)
        return lambda release: release_filter.accepts(release, context)
    if options.selection is BulkSelection.PRERELEASE:
        release_filter = ReleaseFilter(prerelease_only=True)
        return lambda release: release_filter.accepts(release, context)

    def unbranched(release: Release) -> bool:
        if is_unbranched(client, release, options.per_page):
            return True
        context.debug(f"ignore the release associated with the branch: {release.id}")
        return False

    return unbranched


def delete_bulk(client: GitHubClient, options: BulkDeleteOptions) -> list[Release]:
    """Delete every unbranched, draft or prerelease release."""
    matches = collect(client, bulk_predicate(client, options), options.per_page)
    if not matches:
        raise NotFound(f"no {options.selection.value} release found")
    return delete_all(client, matches, options.dry_run)
