"""Three-way merge of a branch into HEAD, based on the files each commit tracks."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from minigit.objects import Commit, MiniGitError
from minigit.repository import Repository

_DETACHED = "detached HEAD"


class ConflictKind(Enum):
    """The ways a file can conflict during a merge."""

    CONTENT = "content"
    ADD_ADD = "add/add"
    DELETE_MODIFY = "delete/modify"


@dataclass(frozen=True)
class Conflict:
    """A file the merge could not resolve on its own."""

    kind: ConflictKind
    filename: str
    description: str = ""

    def __str__(self) -> str:
        text = f"CONFLICT ({self.kind.value}): {self.filename}"
        return f"{text} {self.description}" if self.description else text


@dataclass
class MergeResult:
    """What a merge did: nothing, a merge commit, or a list of conflicts."""

    up_to_date: bool = False
    commit: Commit | None = None
    conflicts: list[Conflict] = field(default_factory=list)

    @property
    def merged(self) -> bool:
        """True when a merge commit was made."""
        return self.commit is not None


def ancestors(repo: Repository, commit_hash: str) -> set[str]:
    """Return ``commit_hash`` and every commit reachable from it through parents.

    Commits that cannot be read are kept in the set but not followed.
    """
    if not commit_hash:
        return set()
    seen = {commit_hash}
    pending = [commit_hash]
    while pending:
        current = pending.pop()
        try:
            parents = repo.read_commit(current).parents
        except MiniGitError:
            continue
        for parent in parents:
            if parent not in seen:
                seen.add(parent)
                pending.append(parent)
    return seen


def find_common_ancestor(repo: Repository, first: str, second: str) -> Commit:
    """Return the common ancestor of two commits found nearest to ``first``."""
    reachable_from_second = ancestors(repo, second)
    if first:
        seen = {first}
        queue = deque([first])
        while queue:
            current = queue.popleft()
            if current in reachable_from_second:
                try:
                    return repo.read_commit(current)
                except MiniGitError:
                    pass
            try:
                parents = repo.read_commit(current).parents
            except MiniGitError:
                continue
            for parent in parents:
                if parent not in seen:
                    seen.add(parent)
                    queue.append(parent)
    raise MiniGitError("could not find common ancestor")


def write_conflict_markers(path: str | Path, current: bytes, incoming: bytes) -> None:
    """Write both sides of a conflicting file, fenced by conflict markers."""
    Path(path).write_bytes(
        b"<<<<<<< HEAD\n" + current + b"=======\n" + incoming + b">>>>>>> incoming\n"
    )


def _blob(repo: Repository, blob_hash: str) -> bytes:
    """Content of a blob, or nothing when the side has no such file."""
    return repo.read_blob(blob_hash) if blob_hash else b""


def merge(repo: Repository, branch_name: str) -> MergeResult:
    """Merge the named branch into HEAD.

    Conflicting files get conflict markers in the working directory and no
    commit is made; otherwise the working directory is replaced by the merged
    files and a merge commit with both heads as parents is recorded.
    """
    if not repo.exists():
        raise MiniGitError("not a minigit repository; run 'minigit init' first")
    current_hash = repo.refs.head_commit_hash()
    if not repo.refs.branch_exists(branch_name):
        raise MiniGitError(f"branch '{branch_name}' does not exist")
    target_hash = repo.refs.branch_head(branch_name)

    if current_hash == target_hash:
        return MergeResult(up_to_date=True)

    base = find_common_ancestor(repo, current_hash, target_hash)
    current = repo.read_commit(current_hash)
    target = repo.read_commit(target_hash)

    merged = dict(current.files)
    conflicts: list[Conflict] = []

    def conflict(kind: ConflictKind, name: str, description: str = "") -> None:
        conflicts.append(Conflict(kind, name, description))
        write_conflict_markers(
            repo.root / name,
            _blob(repo, current.files.get(name, "")),
            _blob(repo, target.files.get(name, "")),
        )

    for name, theirs in sorted(target.files.items()):
        ours = current.files.get(name, "")
        common = base.files.get(name, "")
        if not ours and not common:
            merged[name] = theirs
        elif not ours:
            if theirs != common:
                conflict(
                    ConflictKind.DELETE_MODIFY,
                    name,
                    f"deleted in current, modified in {branch_name}",
                )
            else:
                merged.pop(name, None)
        elif not common:
            if theirs != ours:
                conflict(ConflictKind.ADD_ADD, name, "added differently")
        elif ours == theirs or theirs == common:
            pass
        elif ours == common:
            merged[name] = theirs
        else:
            conflict(ConflictKind.CONTENT, name)

    for name, ours in sorted(current.files.items()):
        if name in target.files:
            continue
        common = base.files.get(name, "")
        if not common:
            continue
        if ours == common:
            merged.pop(name, None)
        else:
            conflict(
                ConflictKind.DELETE_MODIFY,
                name,
                f"deleted in {branch_name}, modified in current",
            )

    if conflicts:
        return MergeResult(conflicts=conflicts)

    repo.restore_tree(merged)
    into = repo.refs.current_branch() or _DETACHED
    merge_commit = Commit.create(f"Merge branch '{branch_name}' into {into}", (), merged)
    merge_commit.add_parent(current_hash)
    merge_commit.add_parent(target_hash)
    repo.save_commit(merge_commit)
    repo.refs.update_head(merge_commit.hash)
    repo._write_index({})
    return MergeResult(commit=merge_commit)