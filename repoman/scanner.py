import fnmatch
import logging
import os
from pathlib import Path

from .config import PACKAGE_GLOB, SIGNATURE_SUFFIX
from .errors import ScanError

logger = logging.getLogger(__name__)

def is_package_file(name: str) -> bool:
    """True if a file name looks like a package archive (case-insensitive), not its signature."""
    lowered = name.lower()
    return fnmatch.fnmatchcase(lowered, PACKAGE_GLOB.lower()) and not lowered.endswith(SIGNATURE_SUFFIX)

def find_packages(paths) -> list[Path]:
    """
    Recursively collects package archives below the given roots.
    Symlinks to directories are followed; each physical directory is visited once.
    A root that is itself a file is checked directly.
    Raises ScanError if a root cannot be traversed at all.
    """
    found: list[Path] = []
    visited: set[tuple[int, int]] = set()

    for root in paths:
        root = Path(root)
        try:
            st = root.stat()
        except OSError as e:
            raise ScanError(f"cannot scan {root}: {e.strerror or e}") from e

        if root.is_file():
            if is_package_file(root.name):
                found.append(root)
            continue
        if not root.is_dir():
            logger.debug(f"Skipping special file {root}")
            continue
        if not os.access(root, os.R_OK | os.X_OK):
            raise ScanError(f"cannot scan {root}: permission denied")

        visited.add((st.st_dev, st.st_ino))
        walk_errors = []
        for dirpath, dirnames, filenames in os.walk(root, followlinks=True, onerror=walk_errors.append):
            # Prune directories already seen through another path (symlink cycles)
            kept = []
            for dirname in sorted(dirnames):
                try:
                    dst = os.stat(os.path.join(dirpath, dirname))
                except OSError as e:
                    logger.warning(f"Cannot stat {os.path.join(dirpath, dirname)}: {e}")
                    continue
                key = (dst.st_dev, dst.st_ino)
                if key in visited:
                    logger.debug(f"Already visited {os.path.join(dirpath, dirname)}, skipping")
                    continue
                visited.add(key)
                kept.append(dirname)
            dirnames[:] = kept

            for filename in sorted(filenames):
                if not is_package_file(filename):
                    if filename.lower().endswith(SIGNATURE_SUFFIX):
                        logger.debug(f"Skipping signature {os.path.join(dirpath, filename)}")
                    continue
                candidate = Path(dirpath) / filename
                if candidate.is_file():
                    found.append(candidate)

        for e in walk_errors:
            logger.warning(f"Skipping unreadable directory {e.filename}: {e.strerror}")

    logger.debug(f"Found {len(found)} candidate package files")
    return found
