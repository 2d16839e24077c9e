import os

import pytest
from repoman.errors import ScanError
from repoman.scanner import find_packages, is_package_file

@pytest.mark.parametrize("name, expected", [
    ("foo-1.0-1-x86_64.pkg.tar.zst", True),
    ("foo-1.0-1-any.pkg.tar.xz", True),
    ("FOO-1.0-1-ANY.PKG.TAR.GZ", True),  # Case-insensitive
    ("foo-1.0-1-any.pkg.tar", True),
    ("foo-1.0-1-any.pkg.tar.zst.sig", False), # Detached signature
    ("FOO-1.0-1-ANY.PKG.TAR.ZST.SIG", False),
    ("foo.db.tar.gz", False),
    ("foo.tar.gz", False),
    ("notes.txt", False),
])
def test_is_package_file(name, expected):
    assert is_package_file(name) is expected

def test_find_packages_recursive(tmp_path):
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "top.pkg.tar.gz").write_bytes(b"x")
    (tmp_path / "a" / "mid.PKG.TAR.XZ").write_bytes(b"x")
    (tmp_path / "a" / "b" / "deep.pkg.tar.zst").write_bytes(b"x")
    (tmp_path / "a" / "readme.txt").write_text("ignored")
    (tmp_path / "a" / "dir.pkg.tar.gz").mkdir() # Directories never match

    found = find_packages([tmp_path])

    assert sorted(p.name for p in found) == ["deep.pkg.tar.zst", "mid.PKG.TAR.XZ", "top.pkg.tar.gz"]

def test_find_packages_file_root(tmp_path):
    pkg = tmp_path / "single.pkg.tar.gz"
    pkg.write_bytes(b"x")
    other = tmp_path / "other.txt"
    other.write_text("x")

    assert find_packages([pkg, other]) == [pkg]

def test_find_packages_follows_symlinked_dirs(tmp_path):
    real = tmp_path / "real"
    real.mkdir()
    (real / "linked.pkg.tar.gz").write_bytes(b"x")
    root = tmp_path / "root"
    root.mkdir()
    os.symlink(real, root / "link")

    found = find_packages([root])

    assert [p.name for p in found] == ["linked.pkg.tar.gz"]

def test_find_packages_symlink_cycle(tmp_path):
    root = tmp_path / "root"
    (root / "sub").mkdir(parents=True)
    (root / "sub" / "p.pkg.tar.gz").write_bytes(b"x")
    os.symlink(root, root / "sub" / "loop") # Points back to the root

    found = find_packages([root])

    assert [p.name for p in found] == ["p.pkg.tar.gz"]

def test_find_packages_missing_root_is_fatal(tmp_path):
    with pytest.raises(ScanError):
        find_packages([tmp_path / "does-not-exist"])

def test_find_packages_empty(tmp_path):
    assert find_packages([tmp_path]) == []

def test_find_packages_skips_signatures(tmp_path):
    (tmp_path / "foo-1-1-any.pkg.tar.zst").write_bytes(b"x")
    (tmp_path / "foo-1-1-any.pkg.tar.zst.sig").write_bytes(b"sig")

    found = find_packages([tmp_path])

    assert [p.name for p in found] == ["foo-1-1-any.pkg.tar.zst"]
