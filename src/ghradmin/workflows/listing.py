"""List workflow."""

from ghradmin.core.github import GitHubClient
from ghradmin.core.pagination import StopFetch
from ghradmin.core.selection import has_branch
from ghradmin.models.release import Release
from ghradmin.workflows.options import ListOptions


def list_releases(client: GitHubClient, options: ListOptions) -> list[Release]:
    """Collect releases passing the options' filters, in server order.

    Stops after ``max_items`` matches when it is positive.
    """
    context = client.context
    release_filter = options.filter
    found: list[Release] = []

    def visit(release: Release, page: int) -> None:
        if not release_filter.accepts(release, context):
            return
        if options.branch_exists and not has_branch(client, release, options.per_page):
            context.debug(
                f"ignore release that branch {release.target_commitish!r} does not exist: {release.id}"
            )
            return

        found.append(release)
        if options.max_items > 0 and len(found) >= options.max_items:
            raise StopFetch

    client.fetch_releases(1, options.per_page, visit)
    return found
