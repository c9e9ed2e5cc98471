"""Create workflow: create a release, upload its assets, roll back on failure."""

from pathlib import Path
import os

from ghradmin.core.errors import ReleaseAdminError
from ghradmin.core.github import GitHubClient
from ghradmin.core.sniff import SNIFF_LEN, detect_content_type
from ghradmin.models.release import Release
from ghradmin.workflows.options import CreateOptions


def upload(client: GitHubClient, release: Release, path: Path, dry_run: bool) -> None:
    """Upload one file as an asset of ``release``.

    The size comes from the file system and the content type from the
    first bytes, then the file is rewound and streamed. In a dry run
    everything but the upload request happens.
    """
    context = client.context
    with open(path, "rb") as f:
        head = f.read(SNIFF_LEN)
        size = os.fstat(f.fileno()).st_size
        f.seek(0)

        content_type = detect_content_type(head)
        context.info(f"upload {path.name} {size} byte ({content_type})")
        if not dry_run:
            client.upload_asset(release, path.name, f, size, content_type)


def create_release(
    client: GitHubClient,
    options: CreateOptions,
    assets: list[Path],
) -> Release | None:
    """Create a release and upload ``assets`` to it.

    Returns None when there is nothing to upload. If an upload fails the
    newly created release is deleted again and the upload error is raised.
    """
    context = client.context
    if not assets:
        context.warn("asset files not found")
        return None

    context.info(
        "create release:\n"
        f"  tag        : {options.tag_name!r}\n"
        f"  target     : {options.target_commitish!r}\n"
        f"  title      : {options.title!r}\n"
        f"  body       : {options.body!r}\n"
        f"  draft      : {options.draft}\n"
        f"  pre-release: {options.prerelease}"
    )

    if options.dry_run:
        release = Release(
            tag_name=options.tag_name,
            target_commitish=options.target_commitish,
            name=options.title,
            body=options.body,
            draft=options.draft,
            prerelease=options.prerelease,
        )
    else:
        release = client.create_release(
            options.tag_name,
            options.target_commitish,
            options.title,
            options.body,
            options.draft,
            options.prerelease,
        )
    context.dump("create release", release.to_dict())

    for path in assets:
        try:
            upload(client, release, path, options.dry_run)
        except (ReleaseAdminError, OSError) as e:
            context.error(f"failed to upload {str(path)!r}: {e}")
            if not options.dry_run:
                try:
                    client.delete_release(release.id)
                except ReleaseAdminError as delete_error:
                    context.error(f"failed to delete the failed release: {delete_error}")
            raise

    return release
