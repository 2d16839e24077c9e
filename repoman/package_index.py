import logging

from .config import INDEX_CAPACITY_HINT
from .models import PackageMetadata

logger = logging.getLogger(__name__)


class PackageIndex:
    """Name-keyed collection of package records for one repository.

    Holds at most one record per package name. Enumeration follows insertion
    order; a replaced record keeps its slot, a removed-then-inserted one moves
    to the end. Callers must not rely on alphabetical order.
    """

    def __init__(self, capacity_hint: int = INDEX_CAPACITY_HINT):
        # dicts grow on demand; the hint only documents the expected size
        self.capacity_hint = capacity_hint
        self._records: dict[str, PackageMetadata] = {}

    def insert(self, pkg: PackageMetadata) -> PackageMetadata | None:
        """Adds pkg, replacing any record with the same name. Returns the replaced record."""
        previous = self._records.get(pkg.name)
        self._records[pkg.name] = pkg
        if previous is not None:
            logger.debug(f"Replaced {previous.full_name} with {pkg.full_name} in index")
        return previous

    def remove(self, name: str) -> PackageMetadata | None:
        """Removes and returns the record for name, or None if absent."""
        return self._records.pop(name, None)

    def find(self, name: str) -> PackageMetadata | None:
        return self._records.get(name)

    def records(self) -> list[PackageMetadata]:
        """Snapshot of all records; safe to iterate while the index is modified."""
        return list(self._records.values())

    def names(self) -> list[str]:
        return list(self._records)

    def __len__(self):
        return len(self._records)

    def __contains__(self, name):
        return name in self._records

    def __iter__(self):
        return iter(self.records())

    def __eq__(self, other):
        if not isinstance(other, PackageIndex):
            return NotImplemented
        return self._records == other._records

    def __repr__(self):
        return f"PackageIndex({len(self._records)} packages)"
