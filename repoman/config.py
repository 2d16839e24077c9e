VERSION = "0.2.0"

# Package archives are matched on the final path segment, case-insensitively.
PACKAGE_GLOB = "*.pkg.tar*"
SIGNATURE_SUFFIX = ".sig"  # Detached signatures also match the glob
PKGINFO_NAME = ".PKGINFO"

DB_SUFFIX = ".db.tar.gz"  # <repo>.db.tar.gz is the database itself
LINK_SUFFIX = ".db"  # <repo>.db -> <repo>.db.tar.gz
PARTIAL_SUFFIX = ".partial"  # Database is written here first, then renamed

ENTRY_MODE = 0o644  # Permission bits of every desc/depends entry
CHUNK_SIZE = 1024 * 1024  # 1 MB chunks for checksums
INDEX_CAPACITY_HINT = 23  # Initial number of records expected in a new index

ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"
