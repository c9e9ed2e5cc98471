"""ghr-admin - administer the releases of a GitHub repository."""

__version__ = "0.1.0"
