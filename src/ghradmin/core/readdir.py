"""Discovery of asset files to upload."""

from pathlib import Path

from ghradmin.core.selection import NameMatcher


def scan(directory: Path | str, matcher: NameMatcher) -> list[Path]:
    """List regular files in ``directory`` whose names match ``matcher``.

    Results are sorted by file name.
    """
    root = Path(directory or ".")
    return sorted(
        (entry for entry in root.iterdir() if entry.is_file() and matcher.matches(entry.name)),
        key=lambda p: p.name,
    )
