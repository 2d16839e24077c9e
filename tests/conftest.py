import io
import tarfile
from pathlib import Path

import pytest
import zstandard


def build_pkginfo(name, version, **fields) -> str:
    """Renders a .PKGINFO; list values produce one line per item."""
    lines = ["# Generated by tests", f"pkgname = {name}", f"pkgver = {version}"]
    defaults = {
        "pkgdesc": f"The {name} package",
        "url": f"https://example.com/{name}",
        "builddate": "1700000000",
        "packager": "Test Packager <test@example.com>",
        "size": "4096",
        "arch": "x86_64",
        "license": ["GPL"],
    }
    defaults.update(fields)
    for key, value in defaults.items():
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            lines.append(f"{key} = {item}")
    return "\n".join(lines) + "\n"


def _tar_bytes(members: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        for member_name, data in members.items():
            info = tarfile.TarInfo(member_name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def write_package(directory: Path, name: str, version: str, compression: str = "gz",
                  payload: bytes = b"binary", pkginfo: str | None = None, **fields) -> Path:
    """Creates '<name>-<version>-x86_64.pkg.tar.<compression>' in directory."""
    if pkginfo is None:
        pkginfo = build_pkginfo(name, version, **fields)
    raw = _tar_bytes({".PKGINFO": pkginfo.encode("utf-8"), f"usr/bin/{name}": payload})

    path = Path(directory) / f"{name}-{version}-x86_64.pkg.tar.{compression}"
    if compression == "zst":
        path.write_bytes(zstandard.ZstdCompressor().compress(raw))
    else:
        with tarfile.open(path, mode=f"w:{compression}") as tar:
            with tarfile.open(fileobj=io.BytesIO(raw), mode="r") as src:
                for member in src.getmembers():
                    tar.addfile(member, src.extractfile(member))
    return path


@pytest.fixture
def make_package(tmp_path):
    """Factory fixture writing package archives into tmp_path (or a given directory)."""
    def _make(name, version, directory=None, **kwargs):
        target = Path(directory) if directory is not None else tmp_path
        target.mkdir(parents=True, exist_ok=True)
        return write_package(target, name, version, **kwargs)
    return _make
