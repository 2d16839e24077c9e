import argparse
import logging
import os
import socket
import sys
import traceback
from pathlib import Path

# Project internal imports
from . import config
from .engine import query_db, update_db, verify_db
from .errors import PackageNotFoundError, RepomanError
from .models import format_package_info

# --- Logging Setup ---
# Place basicConfig here so logger instances in other modules inherit it
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__) # Get logger for this module


def repo_paths(reponame: str) -> tuple[Path, Path]:
    """Returns (database path, alias path) for a repository name."""
    return Path(f"{reponame}{config.DB_SUFFIX}"), Path(f"{reponame}{config.LINK_SUFFIX}")


def link_database(repo_path: Path, link_path: Path) -> None:
    """Points link_path at repo_path with a relative symlink, replacing an older link."""
    if link_path.exists() and not link_path.is_symlink():
        logger.warning(f"{link_path} exists and is not a symlink, leaving it alone.")
        return

    target = os.path.relpath(repo_path, link_path.parent)
    if link_path.is_symlink() and os.readlink(link_path) == target:
        return

    tmp_link = link_path.with_name(link_path.name + config.PARTIAL_SUFFIX)
    if tmp_link.is_symlink():
        tmp_link.unlink()
    os.symlink(target, tmp_link)
    os.replace(tmp_link, link_path)
    logger.debug(f"Linked {link_path} -> {target}")


def run_action(args) -> int:
    """Runs the selected action and converts its outcome to an exit status."""
    reponame = args.repo or socket.gethostname()
    repo_path, link_path = repo_paths(reponame)
    show_progress = not args.debug

    if args.verify:
        return 0 if verify_db(repo_path, show_progress=show_progress) else 1

    if args.update:
        ok = update_db(repo_path, args.targets, clean=args.clean, show_progress=show_progress)
        if not ok:
            return 1
        # symlink repo.db -> repo.db.tar.gz
        link_database(repo_path, link_path)
        return 0

    try:
        packages = query_db(repo_path, args.targets)
    except PackageNotFoundError as e:
        logger.error(str(e))
        return 1
    for pkg in packages:
        print(format_package_info(pkg))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoman",
        description="Maintain a pacman package repository database.",
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {config.VERSION}")
    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument("-V", "--verify", action="store_true", help="verify the contents of the database")
    actions.add_argument("-U", "--update", action="store_true", help="update the database")
    actions.add_argument("-Q", "--query", action="store_true", help="query the database")
    parser.add_argument("-c", "--clean", action="store_true", help="delete superseded package files while updating")
    parser.add_argument("-r", "--repo", metavar="NAME", help="repo name to use (default: host name)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging (very verbose).")
    parser.add_argument("targets", nargs="*", help="package names (query) or paths to scan (update)")
    return parser


def main(argv=None):
    """Parses arguments and runs the requested action."""
    args = build_parser().parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled.")
    else:
        logging.getLogger().setLevel(logging.INFO)

    try:
        return run_action(args)
    except RepomanError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.warning("Process interrupted by user.")
        return 1
    except Exception as e:
        logger.error(f"An unexpected critical error occurred: {e}")
        logger.error(traceback.format_exc())
        return 1

if __name__ == "__main__":
    sys.exit(main())
