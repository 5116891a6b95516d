"""bumpr: bump, tag and open a release pull request through the GitHub REST API."""

__version__ = "0.3.0"
