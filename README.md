# minigit

A small version control system for one working directory. File contents are
kept as blobs named by their SHA-1 digest. Commits record their parents and
the files they track. There are branches, checkout of a branch or a commit,
and a three-way merge that writes conflict markers into files it cannot
resolve.

All data lives in a `.minigit` directory in the working directory:

- `objects/` holds the blobs.
- `commits/` holds the commit records.
- `refs/heads/` holds one file per branch.
- `HEAD` names the current branch, or a commit when HEAD is detached.
- `index` holds the staged files.

## Installation

```
pip install .
```

## Usage

Run the `minigit` command from the working directory:

```
minigit init
minigit add notes.txt
minigit commit -m "First notes"
minigit log
minigit branch feature
minigit checkout feature
minigit add notes.txt
minigit commit -m "More notes"
minigit checkout master
minigit merge feature
```

- `init` creates the `.minigit` repository, with `HEAD` on branch `master`.
  If a repository is already there, it says so and changes nothing.
- `add <filename>` stores the file's contents as a blob and records it in the
  staging index.
- `commit -m "<message>"` (or `--message`) turns the staged files into a new
  commit. The commit goes on the current branch, or on HEAD itself when HEAD
  is detached. The index is then emptied. When nothing is staged, it reports
  that there is nothing to commit.
- `log` lists commits from HEAD back to the first one. It follows each
  commit's first parent and prints the hash, date and message of each.
- `branch <name>` creates a branch at the HEAD commit. This fails if the
  branch already exists or if there are no commits yet.
- `checkout <target>` switches to a branch, or detaches HEAD at a commit. A
  commit must be given by its full 40-character hash. The working directory
  is then rewritten to match that commit.
- `merge <branch>` merges the branch into HEAD, measured against the common
  ancestor nearest to HEAD:
  - If both sides point at the same commit, it reports "Already up to date."
  - If there are no conflicts, the working directory is replaced by the merged
    files and a merge commit with both heads as parents is recorded.
  - If there are conflicts, each one (content, add/add or delete/modify) is
    reported. The conflicting files get `<<<<<<< HEAD`, `=======` and
    `>>>>>>> incoming` markers, and no commit is made.

If an operation cannot go ahead, the command prints `Error: ...` to standard
error and exits with status 1. This happens, for example, outside a
repository, for a missing file, or for an unknown branch. Running `minigit`
with no command prints the usage and also exits with status 1.

## Things to know

- A commit tracks exactly the files staged since the previous commit. Files
  from earlier commits are not carried over unless you `add` them again.
- `checkout` and a clean `merge` delete every file and directory in the
  working directory except `.minigit`. They then write back the files of the
  resulting commit.
- There is no `status`, `diff`, `rm`, tag, branch deletion or remote support.
  After a conflicted merge, nothing is staged. Resolve the files, then `add`
  and `commit` them yourself.

## Using it from Python

```python
from minigit.repository import Repository
from minigit.merge import merge

repo = Repository(".")
repo.init()
repo.add("notes.txt")          # returns the blob hash
first = repo.commit("First notes")
repo.branch("feature")

for entry in repo.log():
    print(entry.hash, entry.timestamp, entry.message)

result = merge(repo, "feature")
if result.up_to_date:
    print("nothing to merge")
elif result.conflicts:
    for conflict in result.conflicts:
        print(conflict)
else:
    print("merged as", result.commit.hash)
```

The modules are:

- `minigit.objects` holds `Commit`, `sha1_hex`, `format_timestamp` and
  `MiniGitError`. `Commit` can be written as the record stored on disk, with
  `to_record` and `from_record`. It can also be written in a header-and-message
  text form, with `to_text` and `from_text`.
- `minigit.refs` holds `RefStore`, which reads and writes HEAD and the
  branch files.
- `minigit.repository` holds `Repository`, which has `init`, `add`, `commit`,
  `log`, `branch`, `checkout`, `restore_tree`, and blob and commit storage.
- `minigit.merge` holds `merge`, `find_common_ancestor`, `ancestors`,
  `write_conflict_markers`, `MergeResult`, `Conflict` and `ConflictKind`.
- `minigit.cli` holds the command-line entry point, `main`.

Operations that cannot go ahead raise `minigit.objects.MiniGitError`.

## Running the tests

```
pip install .[test]
pytest
```