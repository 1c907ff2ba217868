# minigit

A small, self-contained version control system. It keeps its history in a
`.minigit` directory in the current working directory. File contents (blobs)
and commits are stored there as objects named by their content hash, an
8-hex-digit FNV-1a hash.

## Installation

```
pip install .
```

## Command line

```
minigit init                      # create the .minigit repository
minigit add README.md             # store the file as a blob and stage it
minigit commit -m "Initial commit"
minigit log                       # walk history from HEAD along first parents
minigit branch new-feature        # create a branch at the current commit
minigit checkout new-feature      # switch to a branch or a commit hash
minigit merge new-feature         # three-way merge into the current HEAD
minigit diff                      # working directory against HEAD
minigit diff <commit>             # working directory against a commit
minigit diff <commit> <commit>    # one commit against another
minigit help
minigit version
```

The command exits with status 0 on success and 1 on any error; errors are
printed to standard error as `Error: ...`.

Things to know about how the commands behave:

- A commit's snapshot is exactly the set of files staged since the previous
  commit; the staging area is emptied after every commit.
- `commit` and a successful `merge` always advance the `master` branch and
  point HEAD at it.
- `checkout` writes the files of the target commit into the working directory
  and clears the staging area. It does not delete files that the target does
  not contain.
- `merge` finds a common ancestor, takes new and changed files from the other
  branch and removes files deleted there. If a file was changed on both sides
  it writes conflict markers into the file (`<<<<<<< HEAD`, `=======`,
  `>>>>>>> <branch>`) and does not make a merge commit. A file deleted on the
  other branch but modified on the current one is reported as a conflict too.
  Resolve the conflicts, then add and commit the result.
- `diff` prints a simple line-by-line comparison: unchanged lines start with
  two spaces, removed lines with `- `, added lines with `+ `. Comparing against
  the working directory looks at every file under it except `.minigit`.

## Library use

```python
import io
from minigit.repository import Repository

out = io.StringIO()
repo = Repository(".", out)
repo.init()
repo.add("notes.txt")          # the file must exist under the repository root
repo.commit("First notes")
print(repo.head_commit_hash())
print(out.getvalue())
```

`Repository(root, out)` works on the repository under `root` (the current
directory by default) and writes its messages to `out` (standard output by
default). Besides the commands above it offers `head_commit_hash`,
`load_commit`, `blob_content` and `find_lca`. `minigit.repository.format_diff`
returns the diff text for two contents.

`minigit.commit.Commit` handles the stored commit format through
`Commit.create`, `serialize` and `deserialize`. `minigit.hashing.calculate_hash`
returns the hash that names every object. `minigit.fileutils` holds the small
file helpers the repository uses. Failures are raised as `RepositoryError` or
`CommitError`.

## What it does not do

There are no commands to remove or unstage files, show status, list or delete
branches, or talk to other repositories. Merges are done file by file; there
is no line-level merging, and `diff` does not compute a minimal edit script.