from dataclasses import dataclass
from pathlib import Path

@dataclass(frozen=True)
class PackageMetadata:
    """Metadata of one package as recorded in the repository database.

    Instances are never modified; a newer package replaces the whole record.
    List-valued fields are tuples and keep their original order.
    """
    name: str
    version: str
    filename: Path # Backing package archive on disk
    desc: str = ""
    url: str = ""
    packager: str = ""
    arch: str = ""
    csize: int = 0 # Size of the package archive
    isize: int = 0 # Installed size
    md5sum: str = ""
    sha256sum: str = ""
    builddate: int = 0 # Epoch seconds
    licenses: tuple[str, ...] = ()
    depends: tuple[str, ...] = ()
    conflicts: tuple[str, ...] = ()
    provides: tuple[str, ...] = ()
    optdepends: tuple[str, ...] = ()
    makedepends: tuple[str, ...] = ()

    @property
    def full_name(self) -> str:
        """'<name>-<version>', the directory of this record inside the database."""
        return f"{self.name}-{self.version}"


def format_package_info(pkg: PackageMetadata) -> str:
    """Renders the human readable block printed by a query."""
    return (
        f"Filename     : {pkg.filename}\n"
        f"Name         : {pkg.name}\n"
        f"Version      : {pkg.version}\n"
        f"Description  : {pkg.desc}\n"
        f"Architecture : {pkg.arch}\n"
        f"URL          : {pkg.url}\n"
        f"Packager     : {pkg.packager}\n"
    )
