"""A repository in a working directory: blobs, commits, the staging index and checkout."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterator

from minigit.objects import Commit, MiniGitError, sha1_hex
from minigit.refs import DEFAULT_BRANCH, RefStore

GIT_DIR_NAME = ".minigit"
_HASH_LENGTH = 40


class Repository:
    """A repository rooted at a working directory, with its data under ``.minigit``."""

    def __init__(self, root: str | Path = ".") -> None:
        self.root = Path(root)
        self.git_dir = self.root / GIT_DIR_NAME
        self.objects_dir = self.git_dir / "objects"
        self.commits_dir = self.git_dir / "commits"
        self.index_path = self.git_dir / "index"
        self.refs = RefStore(self.git_dir)

    def exists(self) -> bool:
        """Tell whether the repository directory is present."""
        return self.git_dir.is_dir()

    def _require(self) -> None:
        if not self.exists():
            raise MiniGitError("not a minigit repository; run 'minigit init' first")

    def init(self) -> bool:
        """Create an empty repository; return False if one was already there."""
        if self.exists():
            return False
        for directory in (self.objects_dir, self.commits_dir, self.refs.heads_dir):
            directory.mkdir(parents=True, exist_ok=True)
        self.refs.point_head_at_branch(DEFAULT_BRANCH)
        self._write_index({})
        return True

    # --- staging index -------------------------------------------------

    def staged(self) -> dict[str, str]:
        """Return the staged files as filename -> blob hash."""
        try:
            text = self.index_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        words = text.split()
        return dict(zip(words[0::2], words[1::2]))

    def _write_index(self, entries: dict[str, str]) -> None:
        self.git_dir.mkdir(parents=True, exist_ok=True)
        self.index_path.write_text(
            "".join(f"{name} {blob}\n" for name, blob in sorted(entries.items())),
            encoding="utf-8",
        )

    # --- objects -------------------------------------------------------

    def save_blob(self, content: bytes | str) -> str:
        """Store content as a blob named by its SHA-1 and return that hash."""
        self._require()
        if isinstance(content, str):
            content = content.encode("utf-8")
        blob_hash = sha1_hex(content)
        path = self.objects_dir / blob_hash
        if not path.exists():
            self.objects_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        return blob_hash

    def read_blob(self, blob_hash: str) -> bytes:
        """Return the content of a stored blob."""
        path = self.objects_dir / blob_hash
        if not blob_hash or not path.is_file():
            raise MiniGitError(f"blob object '{blob_hash}' not found")
        return path.read_bytes()

    def save_commit(self, commit: Commit) -> None:
        """Write a commit record under ``commits/``."""
        self._require()
        self.commits_dir.mkdir(parents=True, exist_ok=True)
        (self.commits_dir / commit.hash).write_text(commit.to_record(), encoding="utf-8")

    def read_commit(self, commit_hash: str) -> Commit:
        """Load a commit by its hash."""
        path = self.commits_dir / commit_hash
        if not commit_hash or not path.is_file():
            raise MiniGitError(f"commit object '{commit_hash}' not found")
        return Commit.from_record(path.read_text(encoding="utf-8"))

    # --- commands ------------------------------------------------------

    def add(self, filename: str) -> str:
        """Stage a file from the working directory and return its blob hash."""
        self._require()
        path = self.root / filename
        if not path.is_file():
            raise MiniGitError(f"file '{filename}' not found")
        blob_hash = self.save_blob(path.read_bytes())
        entries = self.staged()
        entries[filename] = blob_hash
        self._write_index(entries)
        return blob_hash

    def commit(self, message: str) -> Commit | None:
        """Commit the staged files; return None when nothing is staged."""
        self._require()
        entries = self.staged()
        if not entries:
            return None
        parent = self.refs.head_commit_hash()
        new_commit = Commit.create(message, [parent] if parent else [], entries)
        self.save_commit(new_commit)
        self.refs.update_head(new_commit.hash)
        self._write_index({})
        return new_commit

    def log(self) -> Iterator[Commit]:
        """Yield commits from HEAD back along first parents."""
        self._require()
        commit_hash = self.refs.head_commit_hash()
        while commit_hash:
            try:
                current = self.read_commit(commit_hash)
            except MiniGitError:
                return
            yield current
            commit_hash = current.parent_hash

    def branch(self, name: str) -> str:
        """Create a branch at the HEAD commit and return that commit's hash."""
        self._require()
        if not name:
            raise MiniGitError("branch name cannot be empty")
        if self.refs.branch_exists(name):
            raise MiniGitError(f"branch '{name}' already exists")
        head = self.refs.head_commit_hash()
        if not head:
            raise MiniGitError("cannot create branch: no commits yet")
        self.refs.create_branch(name, head)
        return head

    def checkout(self, target: str) -> Commit | None:
        """Switch to a branch or a commit hash and restore its files.

        Returns the commit checked out, or None for a branch without commits.
        """
        self._require()
        if self.refs.branch_exists(target):
            commit_hash = self.refs.branch_head(target)
            self.refs.point_head_at_branch(target)
        elif len(target) == _HASH_LENGTH and (self.commits_dir / target).is_file():
            commit_hash = target
            self.refs.detach_head(target)
        else:
            raise MiniGitError(f"reference '{target}' not found")
        if not commit_hash:
            return None
        checked_out = self.read_commit(commit_hash)
        self.restore_tree(checked_out.files)
        return checked_out

    def restore_tree(self, files: dict[str, str]) -> None:
        """Replace the working directory's contents with the given files."""
        for entry in self.root.iterdir():
            if entry.name == GIT_DIR_NAME:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        for name, blob_hash in files.items():
            path = self.root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(self.read_blob(blob_hash))