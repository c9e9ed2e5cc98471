"""Data models for ghr-admin."""

from ghradmin.models.branch import Branch, CommitComparison, CommitRef
from ghradmin.models.page import Page
from ghradmin.models.release import Asset, Author, Release

__all__ = [
    "Asset",
    "Author",
    "Branch",
    "CommitComparison",
    "CommitRef",
    "Page",
    "Release",
]
