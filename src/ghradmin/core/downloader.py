"""Streaming download of a response body with progress reporting."""

from pathlib import Path
import os
import tempfile

import httpx
from rich.console import Console
from rich.progress import (
    Progress,
    BarColumn,
    DownloadColumn,
    TransferSpeedColumn,
    TimeRemainingColumn,
)

from ghradmin.core.context import CancellationToken
from ghradmin.core.errors import TransportError


CHUNK_SIZE = 8192


def _write_chunks(response: httpx.Response, f, cancel: CancellationToken, progress=None, task=None) -> None:
    for chunk in response.iter_bytes(chunk_size=CHUNK_SIZE):
        cancel.raise_if_cancelled()
        f.write(chunk)
        if progress is not None:
            progress.update(task, advance=len(chunk))


def download_to(
    response: httpx.Response,
    dest: Path,
    expected_size: int = 0,
    cancel: CancellationToken | None = None,
    show_progress: bool = False,
    console: Console | None = None,
) -> Path:
    """Stream ``response`` into ``dest``.

    The body goes to a temporary file next to ``dest`` and is renamed into
    place only after the received size matches Content-Length (or
    ``expected_size`` when the header is missing). On any failure the
    temporary file is removed and ``dest`` is left untouched.

    Args:
        response: An open streaming response with status 200
        dest: Final path of the file
        expected_size: Size to verify against when Content-Length is absent
        cancel: Token checked between chunks
        show_progress: Whether to show progress bar
        console: Console the progress bar renders to

    Returns:
        Path to downloaded file
    """
    cancel = cancel or CancellationToken()
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)

    header = response.headers.get("content-length")
    total = int(header) if header and header.isdigit() else expected_size

    fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=".ghr-download-")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            if show_progress and total > 0:
                with Progress(
                    "[progress.description]{task.description}",
                    BarColumn(),
                    DownloadColumn(),
                    TransferSpeedColumn(),
                    TimeRemainingColumn(),
                    console=console,
                ) as progress:
                    task = progress.add_task(f"Downloading {dest.name}", total=total)
                    _write_chunks(response, f, cancel, progress, task)
            else:
                _write_chunks(response, f, cancel)

        received = response.num_bytes_downloaded if header else tmp_path.stat().st_size
        if total and received != total:
            raise TransportError(
                f"unable to download the required file size {received}/{total}",
                status_code=response.status_code,
            )

        os.replace(tmp_path, dest)
    finally:
        tmp_path.unlink(missing_ok=True)

    return dest
