import hashlib
import logging
from pathlib import Path

from .config import CHUNK_SIZE

logger = logging.getLogger(__name__)

def _file_digest(file_path: Path, algorithm: str) -> str | None:
    """Hashes a file in chunks, returning the lowercase hex digest or None if unreadable."""
    hasher = hashlib.new(algorithm)
    try:
        with open(file_path, 'rb') as f:
            while True:
                chunk = f.read(CHUNK_SIZE)
                if not chunk:
                    break
                hasher.update(chunk)
        return hasher.hexdigest()
    except FileNotFoundError:
        logger.error(f"Cannot calculate {algorithm.upper()}, file not found: {file_path}")
        return None
    except OSError as e:
        logger.error(f"Error calculating {algorithm.upper()} for {file_path}: {e}")
        return None

def calculate_md5(file_path: Path) -> str | None:
    """Calculates the MD5 hash of a file."""
    return _file_digest(file_path, "md5")

def calculate_sha256(file_path: Path) -> str | None:
    """Calculates the SHA256 hash of a file."""
    return _file_digest(file_path, "sha256")
