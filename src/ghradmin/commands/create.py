"""Create command implementation."""

from pathlib import Path

import click

from ghradmin.commands.common import AppState
from ghradmin.core.errors import InvalidArgument
from ghradmin.core.readdir import scan
from ghradmin.core.selection import MatchMode, NameMatcher
from ghradmin.workflows.create import create_release
from ghradmin.workflows.options import CreateOptions, parse_tag_target


@click.command()
@click.argument("tag_target", metavar="TAG[@TARGET]")
@click.argument("filename")
@click.option("--title", default="", help="Release title.")
@click.option("--body", default="", help="Describe this release.")
@click.option(
    "--dir",
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Read asset files from this directory.",
)
@click.option("--regex", is_flag=True, help="Compile FILENAME as a regular expression.")
@click.option("--posix", is_flag=True, help="Compile FILENAME as POSIX ERE (egrep).")
@click.option("--no-draft", is_flag=True, help="Save as a non-draft release.")
@click.option("--no-prerelease", is_flag=True, help="Save as a production-ready release.")
@click.option("--no-dry-run", is_flag=True, help="Actually execute the requests.")
@click.pass_obj
def create(
    state: AppState,
    tag_target: str,
    filename: str,
    title: str,
    body: str,
    directory: Path,
    regex: bool,
    posix: bool,
    no_draft: bool,
    no_prerelease: bool,
    no_dry_run: bool,
):
    """Create a release and upload asset files.

    TAG is an existing tag or a new one (e.g. v1.0.0); TARGET is a branch
    or commit sha (e.g. main). FILENAME names the files in --dir to upload,
    literally or as a pattern with --regex / --posix.
    """
    tag_name, target = parse_tag_target(tag_target)
    if not filename.strip():
        raise InvalidArgument("invalid <filename> argument")

    options = CreateOptions(
        tag_name=tag_name,
        target_commitish=target,
        asset=NameMatcher.compile(filename, MatchMode.from_flags(regex, posix)),
        title=title,
        body=body,
        directory=directory,
        draft=not no_draft,
        prerelease=not no_prerelease,
        dry_run=not no_dry_run,
    )

    try:
        assets = scan(options.directory, options.asset)
    except OSError as e:
        raise click.FileError(str(options.directory), hint=e.strerror or str(e)) from e

    with state.client() as client:
        create_release(client, options, assets)
