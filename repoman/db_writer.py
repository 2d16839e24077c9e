import io
import logging
import os
import tarfile
import time
from pathlib import Path

from .config import ENTRY_MODE, PARTIAL_SUFFIX
from .models import PackageMetadata
from .package_index import PackageIndex

logger = logging.getLogger(__name__)

# Every field is '%HEADER%', its value line(s), then one blank line.
# This layout is read by pacman and must not change.

def _write_string(parts: list[str], header: str, value) -> None:
    parts.append(f"%{header}%\n{value}\n\n")

def _write_list(parts: list[str], header: str, values) -> None:
    parts.append(f"%{header}%\n")
    for value in values:
        parts.append(f"{value}\n")
    parts.append("\n")

def render_desc(pkg: PackageMetadata) -> bytes:
    """Builds the '<name>-<version>/desc' entry for pkg."""
    parts: list[str] = []
    _write_string(parts, "FILENAME", Path(pkg.filename).name)
    _write_string(parts, "NAME", pkg.name)
    _write_string(parts, "VERSION", pkg.version)
    _write_string(parts, "DESC", pkg.desc)
    _write_string(parts, "CSIZE", int(pkg.csize))
    _write_string(parts, "ISIZE", int(pkg.isize))
    _write_string(parts, "MD5SUM", pkg.md5sum)
    _write_string(parts, "SHA256SUM", pkg.sha256sum)
    _write_string(parts, "URL", pkg.url)
    _write_list(parts, "LICENSE", pkg.licenses)
    _write_string(parts, "ARCH", pkg.arch)
    _write_string(parts, "BUILDDATE", int(pkg.builddate))
    _write_string(parts, "PACKAGER", pkg.packager)
    return "".join(parts).encode("utf-8")

def render_depends(pkg: PackageMetadata) -> bytes:
    """Builds the '<name>-<version>/depends' entry for pkg."""
    parts: list[str] = []
    _write_list(parts, "DEPENDS", pkg.depends)
    _write_list(parts, "CONFLICTS", pkg.conflicts)
    _write_list(parts, "PROVIDES", pkg.provides)
    _write_list(parts, "OPTDEPENDS", pkg.optdepends)
    _write_list(parts, "MAKEDEPENDS", pkg.makedepends)
    return "".join(parts).encode("utf-8")

def _add_entry(tar: tarfile.TarFile, path: str, data: bytes, now: int) -> None:
    info = tarfile.TarInfo(name=path)
    info.type = tarfile.REGTYPE
    info.size = len(data)
    info.mode = ENTRY_MODE
    info.mtime = now
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    tar.addfile(info, io.BytesIO(data))

def write_package(tar: tarfile.TarFile, pkg: PackageMetadata, now: int | None = None) -> None:
    """Appends the desc and depends entries of one package to an open archive."""
    if now is None:
        now = int(time.time())
    _add_entry(tar, f"{pkg.full_name}/desc", render_desc(pkg), now)
    _add_entry(tar, f"{pkg.full_name}/depends", render_depends(pkg), now)

def write_repository(index: PackageIndex, repo_path: Path) -> None:
    """
    Writes every record of index into a new gzip-compressed database at repo_path.
    The archive is built in '<repo_path>.partial' and only renamed over repo_path
    once it has been closed and synced, so readers never see a truncated database.
    """
    repo_path = Path(repo_path)
    tmp_path = repo_path.with_name(repo_path.name + PARTIAL_SUFFIX)
    now = int(time.time())

    try:
        with open(tmp_path, 'wb') as f:
            with tarfile.open(fileobj=f, mode="w:gz", format=tarfile.PAX_FORMAT) as tar:
                for pkg in index.records():
                    write_package(tar, pkg, now)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, repo_path)
        logger.debug(f"Wrote {len(index)} packages to {repo_path}")
    finally:
        # Left over only when writing or renaming failed
        if tmp_path.exists():
            try:
                tmp_path.unlink()
                logger.warning(f"Removed incomplete database {tmp_path}")
            except OSError as unlink_err:
                logger.error(f"Error deleting incomplete database {tmp_path}: {unlink_err}")
