import logging
from pathlib import Path

from tqdm import tqdm

from .checksums import calculate_md5, calculate_sha256
from .db_reader import read_repository
from .db_writer import write_repository
from .errors import MetadataError, PackageNotFoundError, RepositoryNotFoundError
from .models import PackageMetadata
from .package_index import PackageIndex
from .pkginfo import load_package_metadata
from .scanner import find_packages
from .version import VersionOrder, compare_versions

logger = logging.getLogger(__name__)


def _remove_file(path: Path, reason: str) -> None:
    """Deletes a superseded package file; failures are reported but not fatal."""
    try:
        Path(path).unlink()
        logger.info(f"Deleted {reason} package file {path}")
    except FileNotFoundError:
        logger.warning(f"Cannot delete {reason} package file {path}: already gone")
    except OSError as e:
        logger.warning(f"Cannot delete {reason} package file {path}: {e}")


def is_same_package_file(recorded: PackageMetadata, candidate: PackageMetadata) -> bool:
    """True if candidate is the recorded package file, possibly found in another directory."""
    return (recorded.name == candidate.name
            and recorded.version == candidate.version
            and recorded.sha256sum == candidate.sha256sum
            and Path(recorded.filename).name == Path(candidate.filename).name)


def verify_pkg(pkg: PackageMetadata, deep: bool) -> bool:
    """
    Checks that the file behind a record exists and, if deep, that its
    MD5 and SHA256 sums still match. Each failure is logged.
    """
    if not Path(pkg.filename).exists():
        logger.error(f"couldn't find pkg {pkg.filename}")
        return False

    if not deep:
        return True

    ok = True
    if calculate_md5(pkg.filename) != pkg.md5sum:
        logger.error(f"md5 sum for pkg {pkg.filename} is different")
        ok = False
    if calculate_sha256(pkg.filename) != pkg.sha256sum:
        logger.error(f"sha256 sum for pkg {pkg.filename} is different")
        ok = False
    return ok


def verify_db(repo_path: Path, show_progress: bool = False) -> bool:
    """Checks every package in the database against its file. True if all pass."""
    repo_path = Path(repo_path)
    if not repo_path.exists():
        raise RepositoryNotFoundError(repo_path)

    index = read_repository(repo_path)
    ok = True
    for pkg in tqdm(index.records(), desc="Verifying", unit="pkg", disable=not show_progress):
        # No short-circuit: every broken package gets reported
        ok &= verify_pkg(pkg, deep=True)

    if ok:
        logger.info("repo okay!")
    return ok


def update_db(repo_path: Path, scan_paths=(), clean: bool = False, show_progress: bool = False) -> bool:
    """
    Synchronises the database at repo_path with the packages found below scan_paths.

    Records whose files are gone are pruned after the scan, unless the scan
    finds the identical package file in another directory (the database only
    stores base names). Unknown packages are added and
    newer versions replace older ones. With clean, the file of a replaced record
    and any candidate older than the recorded version are deleted.
    The database is rewritten only if something changed.

    The database is not locked: concurrent updates of the same repository race,
    and the last one to rename its new database into place wins.

    Returns False if some candidate package could not be read.
    """
    repo_path = Path(repo_path)
    dirty = False
    ok = True
    # Records whose file is not beside the database; pruned unless the scan finds them
    missing: dict[str, PackageMetadata] = {}

    # Read the existing repo or construct a new package index
    if not repo_path.exists():
        logger.warning("repo doesn't exist, creating...")
        index = PackageIndex()
        dirty = True
    else:
        logger.info(":: Reading existing database...")
        index = read_repository(repo_path)
        for pkg in index.records():
            if not Path(pkg.filename).exists():
                logger.debug(f"{pkg.full_name}: {pkg.filename} not found")
                missing[pkg.name] = pkg

    scan_paths = list(scan_paths)
    if scan_paths:
        logger.info(":: Scanning for new packages...")
        candidates = find_packages(scan_paths)

        for path in tqdm(candidates, desc="Scanning", unit="pkg", disable=not show_progress):
            try:
                pkg = load_package_metadata(path)
            except MetadataError as e:
                logger.error(f"Skipping {path}: {e}")
                ok = False
                continue

            old = index.find(pkg.name)
            stale = missing.pop(pkg.name, None)
            if stale is not None:
                if is_same_package_file(stale, pkg):
                    # Serialises to the same bytes; only the in-memory path moves
                    logger.debug(f"{pkg.full_name} found at {pkg.filename}")
                    index.insert(pkg)
                    continue
                logger.info(f"REMOVING: {stale.full_name}")
                index.remove(stale.name)
                dirty = True
                old = None

            order = VersionOrder.NEWER if old is None else compare_versions(pkg.version, old.version)

            if order == VersionOrder.NEWER:
                if old is not None:
                    logger.info(f"UPDATING: {pkg.full_name}")
                    # A package rebuilt in place shares its file with the old record
                    if clean and Path(old.filename).resolve() != pkg.filename.resolve():
                        _remove_file(old.filename, "superseded")
                    index.remove(old.name)
                else:
                    logger.info(f"ADDING: {pkg.full_name}")
                index.insert(pkg)
                dirty = True
            elif order == VersionOrder.OLDER:
                logger.debug(f"{pkg.full_name} is older than {old.full_name}, ignoring")
                if clean:
                    _remove_file(pkg.filename, "outdated")
            else:
                logger.debug(f"{pkg.full_name} is already in the database")

    for pkg in missing.values():
        logger.info(f"REMOVING: {pkg.full_name}")
        index.remove(pkg.name)
        dirty = True

    if dirty:
        logger.info(":: Writing database to disk...")
        write_repository(index, repo_path)
        logger.info(f"repo {repo_path} updated successfully")
    else:
        logger.info(f"repo {repo_path} does not need updating")

    return ok


def query_db(repo_path: Path, names=()) -> list[PackageMetadata]:
    """
    Returns the records for the given package names, or all records if none are given.
    Raises PackageNotFoundError for the first name missing from the database.
    """
    repo_path = Path(repo_path)
    if not repo_path.exists():
        raise RepositoryNotFoundError(repo_path)

    index = read_repository(repo_path)
    if not names:
        return index.records()

    results = []
    for name in names:
        pkg = index.find(name)
        if pkg is None:
            raise PackageNotFoundError(name)
        results.append(pkg)
    return results
