"""Command-line interface: ``minigit <command> [arguments]``."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from minigit.merge import merge as run_merge
from minigit.objects import MiniGitError
from minigit.repository import GIT_DIR_NAME, Repository

_COMMANDS = (
    "init, add <filename>, commit -m \"<message>\", log, "
    "branch <branch-name>, checkout <ref>, merge <branch-name>"
)


def _init(repo: Repository, args: argparse.Namespace) -> int:
    if repo.init():
        print(f"Initialized empty MiniGit repository in {GIT_DIR_NAME}")
    else:
        print("MiniGit repository already initialized.")
    return 0


def _add(repo: Repository, args: argparse.Namespace) -> int:
    blob_hash = repo.add(args.filename)
    print(f"Added '{args.filename}' to staging area. Blob hash: {blob_hash}")
    return 0


def _commit(repo: Repository, args: argparse.Namespace) -> int:
    new_commit = repo.commit(args.message)
    if new_commit is None:
        print("Nothing to commit, working tree clean.")
        return 0
    print(f"Committed: {args.message}")
    print(f"Commit Hash: {new_commit.hash}")
    return 0


def _log(repo: Repository, args: argparse.Namespace) -> int:
    commits = list(repo.log())
    if not commits:
        print("No commits yet.")
        return 0
    for entry in commits:
        print(f"commit {entry.hash}")
        print(f"Date: {entry.timestamp}")
        print(f"    {entry.message}")
        print()
    return 0


def _branch(repo: Repository, args: argparse.Namespace) -> int:
    head = repo.branch(args.name)
    print(f"Branch '{args.name}' created at {head}")
    return 0


def _checkout(repo: Repository, args: argparse.Namespace) -> int:
    target = args.target
    is_branch = repo.exists() and repo.refs.branch_exists(target)
    repo.checkout(target)
    if is_branch:
        print(f"Switched to branch '{target}'")
    else:
        print(f"Switched to commit '{target}' (detached HEAD)")
    return 0


def _merge(repo: Repository, args: argparse.Namespace) -> int:
    result = run_merge(repo, args.branch)
    if result.up_to_date:
        print("Already up to date.")
        return 0
    if result.conflicts:
        for conflict in result.conflicts:
            print(str(conflict), file=sys.stderr)
            print(f"Conflict in {conflict.filename}. Markers added to file.")
        print("Automatic merge failed; fix conflicts and then commit.")
        return 0
    assert result.commit is not None
    print(f"Merge successful. New commit: {result.commit.hash}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one sub-command per repository operation."""
    parser = argparse.ArgumentParser(
        prog="minigit",
        description="A minimal version control system.",
    )
    commands = parser.add_subparsers(dest="command", metavar="<command>")

    init_cmd = commands.add_parser("init", help="create an empty repository")
    init_cmd.set_defaults(handler=_init)

    add_cmd = commands.add_parser("add", help="stage a file")
    add_cmd.add_argument("filename")
    add_cmd.set_defaults(handler=_add)

    commit_cmd = commands.add_parser("commit", help="commit the staged files")
    commit_cmd.add_argument("-m", "--message", required=True)
    commit_cmd.set_defaults(handler=_commit)

    log_cmd = commands.add_parser("log", help="show the commit history")
    log_cmd.set_defaults(handler=_log)

    branch_cmd = commands.add_parser("branch", help="create a branch at HEAD")
    branch_cmd.add_argument("name")
    branch_cmd.set_defaults(handler=_branch)

    checkout_cmd = commands.add_parser("checkout", help="switch to a branch or commit")
    checkout_cmd.add_argument("target")
    checkout_cmd.set_defaults(handler=_checkout)

    merge_cmd = commands.add_parser("merge", help="merge a branch into HEAD")
    merge_cmd.add_argument("branch")
    merge_cmd.set_defaults(handler=_merge)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run one command and return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_usage()
        print(f"Available commands: {_COMMANDS}")
        return 1
    repo = Repository()
    try:
        return args.handler(repo, args)
    except MiniGitError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())