import logging
import posixpath
import tarfile
from pathlib import Path

from .errors import RepositoryReadError
from .models import PackageMetadata
from .package_index import PackageIndex

logger = logging.getLogger(__name__)

def parse_entry(text: str) -> dict[str, list[str]]:
    """
    Parses a desc/depends entry into {HEADER: [value lines]}.
    A field starts at a '%HEADER%' line and ends at the next blank line.
    Blank lines between fields are ignored.
    """
    fields: dict[str, list[str]] = {}
    current = None
    for line in text.split('\n'):
        if current is None:
            if len(line) > 2 and line.startswith('%') and line.endswith('%'):
                current = line[1:-1]
                fields[current] = []
            elif line:
                logger.debug(f"Ignoring stray line outside of a field: {line!r}")
        elif line == '':
            current = None
        else:
            fields[current].append(line)
    return fields


def _scalar(fields: dict[str, list[str]], header: str) -> str:
    values = fields.get(header)
    return values[0] if values else ""

def _integer(fields: dict[str, list[str]], header: str, full_name: str) -> int:
    value = _scalar(fields, header)
    if not value:
        return 0
    try:
        return int(value)
    except ValueError as e:
        raise RepositoryReadError(f"invalid {header} '{value}' for {full_name}") from e


def build_package(fields: dict[str, list[str]], repo_dir: Path, full_name: str) -> PackageMetadata:
    """Creates a record from the merged desc and depends fields of one package."""
    name = _scalar(fields, "NAME")
    version = _scalar(fields, "VERSION")
    filename = _scalar(fields, "FILENAME")
    if not name or not version:
        raise RepositoryReadError(f"entry {full_name} has no NAME or VERSION")

    return PackageMetadata(
        name=name,
        version=version,
        filename=repo_dir / filename,
        desc=_scalar(fields, "DESC"),
        url=_scalar(fields, "URL"),
        packager=_scalar(fields, "PACKAGER"),
        arch=_scalar(fields, "ARCH"),
        csize=_integer(fields, "CSIZE", full_name),
        isize=_integer(fields, "ISIZE", full_name),
        md5sum=_scalar(fields, "MD5SUM"),
        sha256sum=_scalar(fields, "SHA256SUM"),
        builddate=_integer(fields, "BUILDDATE", full_name),
        licenses=tuple(fields.get("LICENSE", ())),
        depends=tuple(fields.get("DEPENDS", ())),
        conflicts=tuple(fields.get("CONFLICTS", ())),
        provides=tuple(fields.get("PROVIDES", ())),
        optdepends=tuple(fields.get("OPTDEPENDS", ())),
        makedepends=tuple(fields.get("MAKEDEPENDS", ())),
    )


def read_repository(repo_path: Path) -> PackageIndex:
    """
    Loads a database written by db_writer into a new PackageIndex.
    Package files are expected next to the database; FILENAME only holds the base name.
    """
    repo_path = Path(repo_path)
    repo_dir = repo_path.parent
    # '<name>-<version>' -> merged fields, in archive order
    entries: dict[str, dict[str, list[str]]] = {}
    has_desc: set[str] = set()

    try:
        with tarfile.open(repo_path, mode="r:*") as tar:
            for member in tar:
                if not member.isfile():
                    continue
                directory, entry_name = posixpath.split(member.name)
                if entry_name not in ("desc", "depends") or not directory:
                    logger.debug(f"Ignoring database member {member.name}")
                    continue
                extracted = tar.extractfile(member)
                if extracted is None:
                    continue
                with extracted:
                    text = extracted.read().decode("utf-8")
                entries.setdefault(directory, {}).update(parse_entry(text))
                if entry_name == "desc":
                    has_desc.add(directory)
    except (tarfile.TarError, OSError, EOFError, UnicodeDecodeError) as e:
        raise RepositoryReadError(f"cannot read database {repo_path}: {e}") from e

    index = PackageIndex(capacity_hint=max(len(entries), 1))
    for full_name, fields in entries.items():
        if full_name not in has_desc:
            logger.warning(f"Database entry {full_name} has no desc file, skipping")
            continue
        index.insert(build_package(fields, repo_dir, full_name))

    logger.debug(f"Read {len(index)} packages from {repo_path}")
    return index
