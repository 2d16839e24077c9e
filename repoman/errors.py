"""Exceptions raised by repoman."""

from pathlib import Path


class RepomanError(Exception):
    """Base exception for repository maintenance failures."""


class RepositoryNotFoundError(RepomanError):
    """Raised when an operation needs an existing database that is missing."""

    def __init__(self, path: Path):
        super().__init__(f"repo doesn't exist: {path}")
        self.path = path


class RepositoryReadError(RepomanError):
    """Raised when an existing database cannot be parsed."""


class ScanError(RepomanError):
    """Raised when a scan root cannot be traversed at all."""


class MetadataError(RepomanError):
    """Raised when a package archive carries no usable .PKGINFO."""


class PackageNotFoundError(RepomanError):
    """Raised when a queried package name is not in the database."""

    def __init__(self, name: str):
        super().__init__(f"pkg not found: {name}")
        self.name = name
