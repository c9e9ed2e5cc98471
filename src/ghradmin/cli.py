"""CLI entry point for ghr-admin."""

import signal
import sys

import click
import httpx
from rich.console import Console
from rich.markup import escape

from ghradmin import __version__
from ghradmin.commands import create, delete, download, list_cmd
from ghradmin.commands.common import AppState
from ghradmin.core.context import CancellationToken, ExecutionContext
from ghradmin.core.errors import Cancelled, PartialFailure, ReleaseAdminError

console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__, prog_name="ghr-admin")
@click.option(
    "--repo",
    "-R",
    "repository",
    envvar="GITHUB_REPOSITORY",
    metavar="OWNER/REPO",
    help="Target repository (defaults to $GITHUB_REPOSITORY).",
)
@click.option("--verbose", "-v", is_flag=True, help="Display verbose output of the execution.")
@click.pass_context
def main(ctx: click.Context, repository: str | None, verbose: bool):
    """ghr-admin - administer the releases of a GitHub repository.

    Every mutating command is a dry run unless --no-dry-run is given.

    Environment variables: GITHUB_TOKEN (required for private repositories
    and for any change), GITHUB_REPOSITORY, GITHUB_API_URL.

    Examples:

        ghr-admin -R owner/repo list draft

        ghr-admin create v1.0.0@main 'app-.*\\.tar\\.gz' --regex --dir dist

        ghr-admin delete by-tag '^nightly-' --regex --no-dry-run

        ghr-admin download latest app.tar.gz --no-dry-run
    """
    state = ctx.ensure_object(AppState)
    state.repository = repository.strip() if repository else None
    state.context = ExecutionContext(verbose=verbose, cancel=state.cancel)


# Register commands
main.add_command(list_cmd.list_releases)
main.add_command(create.create)
main.add_command(delete.delete)
main.add_command(download.download)


def _install_signal_handlers(token: CancellationToken) -> dict:
    def handler(signum, frame):
        if token.cancelled:
            # second signal: give up immediately
            raise KeyboardInterrupt
        console.print(f"[red]stop command by {signal.Signals(signum).name}[/red]")
        token.cancel(signum)
        if token.in_flight:
            raise Cancelled("operation cancelled")

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, handler)
    return previous


def run(argv: list[str] | None = None, transport: httpx.BaseTransport | None = None) -> int:
    """Run the CLI and return the process exit code."""
    token = CancellationToken()
    previous = _install_signal_handlers(token)
    try:
        code = main.main(
            args=argv,
            prog_name="ghr-admin",
            standalone_mode=False,
            obj=AppState(cancel=token, transport=transport),
        )
        return code if isinstance(code, int) else 0
    except click.ClickException as e:
        e.show()
        return 1
    except click.Abort:
        return token.signum or 1
    except (Cancelled, KeyboardInterrupt):
        return token.signum or int(signal.SIGINT)
    except PartialFailure as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        for release in e.completed:
            console.print(f"  deleted release {release.id}: {escape(release.tag_name)}", soft_wrap=True)
        if isinstance(e.cause, Cancelled):
            return token.signum or int(signal.SIGINT)
        return 1
    except (ReleaseAdminError, OSError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        return 1
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def entry() -> None:
    sys.exit(run())


if __name__ == "__main__":
    entry()
