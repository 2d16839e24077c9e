import logging
import tarfile
from pathlib import Path

import zstandard

from .checksums import calculate_md5, calculate_sha256
from .config import PKGINFO_NAME, ZSTD_MAGIC
from .errors import MetadataError
from .models import PackageMetadata

logger = logging.getLogger(__name__)

def parse_pkginfo(text: str) -> dict[str, list[str]]:
    """
    Parses the 'key = value' lines of a .PKGINFO file.
    Repeated keys (license, depend, ...) accumulate in order.
    """
    info: dict[str, list[str]] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        key, sep, value = line.partition('=')
        if not sep:
            logger.debug(f"Ignoring malformed .PKGINFO line: {line!r}")
            continue
        info.setdefault(key.strip(), []).append(value.strip())
    return info


def _read_pkginfo_member(tar: tarfile.TarFile) -> bytes | None:
    # Stream mode: members must be consumed in order
    for member in tar:
        name = member.name[2:] if member.name.startswith('./') else member.name
        if name != PKGINFO_NAME or not member.isfile():
            continue
        extracted = tar.extractfile(member)
        if extracted is None:
            return None
        with extracted:
            return extracted.read()
    return None


def read_pkginfo(package_path: Path) -> str:
    """Returns the text of the .PKGINFO stored in a package archive."""
    try:
        with open(package_path, 'rb') as f:
            magic = f.read(len(ZSTD_MAGIC))
            f.seek(0)
            if magic == ZSTD_MAGIC:
                dctx = zstandard.ZstdDecompressor()
                with dctx.stream_reader(f) as reader, tarfile.open(fileobj=reader, mode="r|") as tar:
                    content = _read_pkginfo_member(tar)
            else:
                with tarfile.open(fileobj=f, mode="r|*") as tar:
                    content = _read_pkginfo_member(tar)
    except (tarfile.TarError, zstandard.ZstdError, OSError, EOFError) as e:
        raise MetadataError(f"cannot read package {package_path}: {e}") from e

    if content is None:
        raise MetadataError(f"package {package_path} has no {PKGINFO_NAME}")
    return content.decode("utf-8", errors="replace")


def _first(info: dict[str, list[str]], key: str) -> str:
    values = info.get(key)
    return values[0] if values else ""

def _number(info: dict[str, list[str]], key: str, package_path: Path) -> int:
    value = _first(info, key)
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid {key} '{value}' in {package_path}, using 0")
        return 0


def load_package_metadata(package_path: Path) -> PackageMetadata:
    """Builds a record for a package archive from its .PKGINFO, size and checksums."""
    package_path = Path(package_path)
    info = parse_pkginfo(read_pkginfo(package_path))

    name = _first(info, "pkgname")
    version = _first(info, "pkgver")
    if not name or not version:
        raise MetadataError(f"package {package_path} has no pkgname or pkgver")

    md5sum = calculate_md5(package_path)
    sha256sum = calculate_sha256(package_path)
    if md5sum is None or sha256sum is None:
        raise MetadataError(f"cannot checksum package {package_path}")

    return PackageMetadata(
        name=name,
        version=version,
        filename=package_path,
        desc=_first(info, "pkgdesc"),
        url=_first(info, "url"),
        packager=_first(info, "packager"),
        arch=_first(info, "arch"),
        csize=package_path.stat().st_size,
        isize=_number(info, "size", package_path),
        md5sum=md5sum,
        sha256sum=sha256sum,
        builddate=_number(info, "builddate", package_path),
        licenses=tuple(info.get("license", ())),
        depends=tuple(info.get("depend", ())),
        conflicts=tuple(info.get("conflict", ())),
        provides=tuple(info.get("provides", ())),
        optdepends=tuple(info.get("optdepend", ())),
        makedepends=tuple(info.get("makedepend", ())),
    )
