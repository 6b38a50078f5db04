"""HEAD and branch references kept as small text files inside the repository directory."""

from __future__ import annotations

from pathlib import Path

from minigit.objects import MiniGitError

DEFAULT_BRANCH = "master"
_REF_PREFIX = "ref: "
_HEADS = "refs/heads/"


def _first_line(path: Path) -> str | None:
    """Return the first line of a file without its line ending, or None if absent."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    return text.split("\n", 1)[0].rstrip("\r")


class RefStore:
    """Reads and writes HEAD and the branch files under ``refs/heads``."""

    def __init__(self, git_dir: str | Path) -> None:
        self.git_dir = Path(git_dir)
        self.head_path = self.git_dir / "HEAD"
        self.heads_dir = self.git_dir / "refs" / "heads"

    def _branch_path(self, name: str) -> Path:
        if not name:
            raise MiniGitError("branch name cannot be empty")
        return self.heads_dir / name

    def _write(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content + "\n", encoding="utf-8")

    def read_head(self) -> str:
        """Return the content of HEAD, or an empty string if there is no HEAD."""
        return _first_line(self.head_path) or ""

    def head_commit_hash(self) -> str:
        """Return the commit HEAD resolves to, or an empty string if there is none yet."""
        head = self.read_head()
        if head.startswith(_REF_PREFIX):
            return _first_line(self.git_dir / head[len(_REF_PREFIX):]) or ""
        return head

    def current_branch(self) -> str | None:
        """Return the branch HEAD is on, or None when HEAD is detached.

        A repository without HEAD is taken to be on the default branch.
        """
        head = _first_line(self.head_path)
        if head is None:
            return DEFAULT_BRANCH
        prefix = _REF_PREFIX + _HEADS
        if head.startswith(prefix):
            return head[len(prefix):]
        return None

    def update_head(self, commit_hash: str) -> None:
        """Move HEAD's branch (or HEAD itself when detached) to ``commit_hash``."""
        head = _first_line(self.head_path)
        if head is None:
            raise MiniGitError("HEAD file not found")
        if head.startswith(_REF_PREFIX):
            self._write(self.git_dir / head[len(_REF_PREFIX):], commit_hash)
        else:
            self._write(self.head_path, commit_hash)

    def branch_exists(self, name: str) -> bool:
        """Tell whether a branch of that name exists."""
        return bool(name) and (self.heads_dir / name).is_file()

    def branch_head(self, name: str) -> str:
        """Return the commit a branch points to."""
        commit_hash = _first_line(self._branch_path(name))
        if commit_hash is None:
            raise MiniGitError(f"branch '{name}' does not exist")
        return commit_hash

    def create_branch(self, name: str, commit_hash: str) -> None:
        """Create a new branch pointing at ``commit_hash``."""
        path = self._branch_path(name)
        if path.exists():
            raise MiniGitError(f"branch '{name}' already exists")
        if not commit_hash:
            raise MiniGitError("cannot create branch: no commits yet")
        self._write(path, commit_hash)

    def point_head_at_branch(self, name: str) -> None:
        """Make HEAD refer to the named branch."""
        self._branch_path(name)
        self._write(self.head_path, f"{_REF_PREFIX}{_HEADS}{name}")

    def detach_head(self, commit_hash: str) -> None:
        """Make HEAD point straight at a commit."""
        if not commit_hash:
            raise MiniGitError("cannot detach HEAD without a commit")
        self._write(self.head_path, commit_hash)