"""Content hashing, timestamps and the commit object with its two on-disk forms."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_TIMESTAMP_LENGTH = 19
_AUTHOR = "MiniGit <minigit@example.com>"


class MiniGitError(Exception):
    """Raised when a repository operation cannot be carried out."""


def sha1_hex(data: bytes | str) -> str:
    """Return the hexadecimal SHA-1 digest of ``data`` (text is UTF-8 encoded)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha1(data).hexdigest()


def format_timestamp(moment: datetime | float | int | None = None) -> str:
    """Format a moment as ``YYYY-MM-DD HH:MM:SS`` in local time.

    ``moment`` may be a datetime, seconds since the epoch, or None for now.
    """
    if moment is None:
        moment = datetime.now()
    elif not isinstance(moment, datetime):
        moment = datetime.fromtimestamp(moment)
    return moment.strftime(TIMESTAMP_FORMAT)


def _split_lines(text: str) -> list[str]:
    """Split text into lines the way a line reader does: no empty final line."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


@dataclass
class Commit:
    """A commit: message, time, parent commits and tracked files (name -> blob hash)."""

    hash: str
    message: str
    timestamp: str
    parents: list[str] = field(default_factory=list)
    files: dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        message: str,
        parents: Iterable[str] = (),
        files: Mapping[str, str] | None = None,
        timestamp: str | None = None,
    ) -> "Commit":
        """Build a new commit and compute its hash from its contents."""
        parent_list = [parent for parent in parents if parent]
        tracked = dict(sorted((files or {}).items()))
        stamp = timestamp if timestamp is not None else format_timestamp()
        first_parent = parent_list[0] if parent_list else ""
        digest_input = "".join(
            [
                message,
                stamp,
                first_parent,
                *parent_list,
                *(name + blob for name, blob in tracked.items()),
            ]
        )
        return cls(
            hash=sha1_hex(digest_input),
            message=message,
            timestamp=stamp,
            parents=parent_list,
            files=tracked,
        )

    @property
    def parent_hash(self) -> str:
        """The first parent's hash, or an empty string for a root commit."""
        return self.parents[0] if self.parents else ""

    def add_parent(self, parent_hash: str) -> None:
        """Append a parent; the commit's hash is left as it was."""
        self.parents.append(parent_hash)

    def to_record(self) -> str:
        """Serialise to the line-per-field record stored under ``commits/``."""
        lines = [
            f"hash:{self.hash}",
            f"message:{self.message}",
            f"timestamp:{self.timestamp}",
            "parent_hash:" + ",".join(self.parents),
        ]
        lines.extend(f"file:{name}:{blob}" for name, blob in sorted(self.files.items()))
        return "\n".join(lines) + "\n"

    @classmethod
    def from_record(cls, text: str) -> "Commit":
        """Parse a record written by :meth:`to_record`."""
        commit_hash: str | None = None
        message = ""
        timestamp = ""
        parents: list[str] = []
        files: dict[str, str] = {}
        for line in _split_lines(text):
            if line.startswith("hash:"):
                commit_hash = line[len("hash:"):]
            elif line.startswith("message:"):
                message = line[len("message:"):]
            elif line.startswith("timestamp:"):
                timestamp = line[len("timestamp:"):]
            elif line.startswith("parent_hash:"):
                pieces = line[len("parent_hash:"):].split(",")
                if pieces[-1] == "":
                    pieces.pop()
                parents.extend(pieces)
            elif line.startswith("file:"):
                name, sep, blob = line[len("file:"):].partition(":")
                if sep:
                    files[name] = blob
        if not commit_hash:
            raise MiniGitError("commit record has no hash")
        return cls(commit_hash, message, timestamp, parents, files)

    def to_text(self) -> str:
        """Serialise to the header-and-message form, like a git commit object."""
        lines = ["tree"]
        lines.extend(f"blob {blob} {name}" for name, blob in sorted(self.files.items()))
        lines.extend(f"parent {parent}" for parent in self.parents)
        lines.append(f"author {_AUTHOR} {self.timestamp}")
        lines.append(f"committer {_AUTHOR} {self.timestamp}")
        lines.append("")
        lines.append(self.message)
        return "\n".join(lines) + "\n"

    @classmethod
    def from_text(cls, commit_hash: str, text: str) -> "Commit":
        """Parse the form written by :meth:`to_text`; the hash comes from outside."""
        parents: list[str] = []
        files: dict[str, str] = {}
        timestamp = ""
        message_lines: list[str] = []
        in_message = False
        for line in _split_lines(text):
            if in_message:
                message_lines.append(line)
            elif not line:
                in_message = True
            elif line.startswith("blob "):
                parts = line.split()
                if len(parts) >= 3:
                    files[parts[2]] = parts[1]
            elif line.startswith("parent "):
                parent = line[len("parent "):]
                if parent:
                    parents.append(parent)
            elif line.startswith("author "):
                if len(line) >= len("author ") + _TIMESTAMP_LENGTH:
                    timestamp = line[-_TIMESTAMP_LENGTH:]
        return cls(
            hash=commit_hash,
            message="\n".join(message_lines),
            timestamp=timestamp or format_timestamp(),
            parents=parents,
            files=dict(sorted(files.items())),
        )