import os

import pytest
from repoman import config
from repoman.main import build_parser, link_database, main, repo_paths

@pytest.fixture
def in_repo_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path

def test_parser_requires_an_action():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])

def test_parser_actions_are_exclusive():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["-V", "-U"])

def test_parser_update_options():
    args = build_parser().parse_args(["-U", "-c", "-r", "myrepo", "pkgs", "more"])
    assert args.update and args.clean
    assert args.repo == "myrepo"
    assert args.targets == ["pkgs", "more"]

def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert config.VERSION in capsys.readouterr().out

def test_repo_paths():
    repo_path, link_path = repo_paths("custom")
    assert str(repo_path) == "custom.db.tar.gz"
    assert str(link_path) == "custom.db"

def test_default_repo_name_is_hostname(in_repo_dir, mocker):
    mocker.patch("repoman.main.socket.gethostname", return_value="buildbox")

    assert main(["-U"]) == 0

    assert (in_repo_dir / "buildbox.db.tar.gz").exists()

def test_update_then_query(in_repo_dir, make_package, capsys):
    make_package("foo", "1.0-1", pkgdesc="Foo tool")

    assert main(["-U", "-r", "custom", "."]) == 0
    link = in_repo_dir / "custom.db"
    assert link.is_symlink()
    assert os.readlink(link) == "custom.db.tar.gz"

    assert main(["-Q", "-r", "custom", "foo"]) == 0
    out = capsys.readouterr().out
    assert "Name         : foo" in out
    assert "Version      : 1.0-1" in out
    assert "Description  : Foo tool" in out

def test_query_unknown_package_exits_1(in_repo_dir, make_package, capsys):
    make_package("foo", "1.0-1")
    main(["-U", "-r", "custom", "."])
    capsys.readouterr()

    assert main(["-Q", "-r", "custom", "foo", "ghost"]) == 1
    assert "Name         : foo" not in capsys.readouterr().out

def test_verify_missing_repo_exits_1(in_repo_dir):
    assert main(["-V", "-r", "absent"]) == 1

def test_verify_ok_exits_0(in_repo_dir, make_package):
    make_package("foo", "1.0-1")
    main(["-U", "-r", "custom", "."])

    assert main(["-V", "-r", "custom"]) == 0

def test_update_bad_scan_root_exits_1(in_repo_dir):
    assert main(["-U", "-r", "custom", "missing-dir"]) == 1
    assert not (in_repo_dir / "custom.db").exists()

def test_link_database_repoints_stale_link(tmp_path):
    repo_path = tmp_path / "r.db.tar.gz"
    repo_path.write_bytes(b"")
    link_path = tmp_path / "r.db"
    os.symlink("old.db.tar.gz", link_path)

    link_database(repo_path, link_path)

    assert os.readlink(link_path) == "r.db.tar.gz"

def test_link_database_leaves_regular_file(tmp_path):
    repo_path = tmp_path / "r.db.tar.gz"
    repo_path.write_bytes(b"")
    link_path = tmp_path / "r.db"
    link_path.write_text("not a link")

    link_database(repo_path, link_path)

    assert not link_path.is_symlink()
    assert link_path.read_text() == "not a link"

def test_unexpected_error_exits_1(in_repo_dir, mocker):
    mocker.patch("repoman.main.verify_db", side_effect=RuntimeError("boom"))
    assert main(["-V", "-r", "custom"]) == 1
