"""List command implementation."""

import click

from ghradmin.commands.common import AppState, print_releases
from ghradmin.workflows.listing import list_releases as list_workflow
from ghradmin.workflows.options import ListOptions, ListView


@click.command("list")
@click.argument(
    "view",
    type=click.Choice([v.value for v in ListView]),
    default=ListView.STABLE.value,
)
@click.option("--branch", default="", help="Only releases whose target is this branch.")
@click.option(
    "--branch-exists",
    is_flag=True,
    help="Only releases whose target is covered by an existing branch.",
)
@click.option("--max-items", type=click.IntRange(min=0), default=0, help="Stop after this many releases.")
@click.option("--per-page", type=click.IntRange(min=0), default=0, help="Releases per API page (default 20).")
@click.pass_obj
def list_releases(
    state: AppState,
    view: str,
    branch: str,
    branch_exists: bool,
    max_items: int,
    per_page: int,
):
    """List releases.

    VIEW is one of stable (default), draft, prerelease or all.
    """
    options = ListOptions(
        view=ListView(view),
        branch=branch.strip(),
        branch_exists=branch_exists,
        max_items=max_items,
        per_page=per_page,
    )

    with state.client() as client:
        releases = list_workflow(client, options)

    print_releases(state.context, releases)
