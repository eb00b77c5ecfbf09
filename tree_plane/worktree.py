"""
Working directory access.

Paths are POSIX-style and relative to the working tree root. The hidden
repository directory is never listed, read or written through here.
"""

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, Mapping

from tree_plane.errors import UsageError

logger = logging.getLogger(__name__)


class WorkingTree:
    def __init__(self, root: str | Path, repo_dir_name: str) -> None:
        self.root = Path(root).absolute()
        self.repo_dir_name = repo_dir_name

    def _parts(self, path: str) -> tuple[str, ...]:
        try:
            path.encode("utf-8")
        except UnicodeEncodeError:
            raise UsageError(f"Path is not valid UTF-8: {path!r}")
        rel = PurePosixPath(path)
        if (
            not rel.parts
            or rel.is_absolute()
            or ".." in rel.parts
            or rel.parts[0] == self.repo_dir_name
        ):
            raise UsageError(f"Path outside the working tree: {path}")
        return rel.parts

    def normalize(self, path: str) -> str:
        """Canonical key for `path`: `./a//b.txt` and `a/b.txt` name the same file."""
        return PurePosixPath(*self._parts(path)).as_posix()

    def _resolve(self, path: str) -> Path:
        return self.root.joinpath(*self._parts(path))

    def paths(self) -> set[str]:
        """
        All regular files under the root, excluding the repository directory
        and names that are not valid UTF-8.
        """
        found: set[str] = set()
        for entry in self.root.rglob("*"):
            rel = entry.relative_to(self.root)
            if rel.parts[0] == self.repo_dir_name:
                continue
            if entry.is_file():
                name = rel.as_posix()
                try:
                    name.encode("utf-8")
                except UnicodeEncodeError:
                    logger.debug("Skipping non UTF-8 path %r", name)
                    continue
                found.add(name)
        return found

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def read(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def write(self, path: str, content: bytes) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    def delete(self, path: str) -> None:
        target = self._resolve(path)
        target.unlink(missing_ok=True)
        # Drop directories emptied by the deletion, never the root itself.
        parent = target.parent
        while parent != self.root and parent.is_dir() and not any(parent.iterdir()):
            parent.rmdir()
            parent = parent.parent


def untracked_conflicts(
    worktree_paths: Iterable[str],
    head_tree: Mapping[str, str],
    target_tree: Mapping[str, str],
) -> list[str]:
    """
    Paths that checking out `target_tree` would silently clobber: present in
    the working tree, untracked by HEAD, tracked by the target.
    """
    return sorted(
        path
        for path in worktree_paths
        if path not in head_tree and path in target_tree
    )


class WorktreePlan:
    """Working-tree writes and deletes computed by an operation, applied last."""

    def __init__(self) -> None:
        self.writes: dict[str, bytes] = {}
        self.deletes: set[str] = set()

    def write(self, path: str, content: bytes) -> None:
        self.writes[path] = content
        self.deletes.discard(path)

    def delete(self, path: str) -> None:
        self.deletes.add(path)
        self.writes.pop(path, None)

    def apply(self, worktree: WorkingTree) -> None:
        for path in sorted(self.deletes):
            worktree.delete(path)
        for path, content in sorted(self.writes.items()):
            worktree.write(path, content)
        logger.debug(
            "Applied worktree plan: %d written, %d deleted",
            len(self.writes),
            len(self.deletes),
        )


def materialize(
    plan: WorktreePlan,
    worktree_paths: Iterable[str],
    target_files: Mapping[str, bytes],
) -> None:
    """Plan the writes and deletes that make the working tree equal `target_files`."""
    for path in worktree_paths:
        if path not in target_files:
            plan.delete(path)
    for path, content in target_files.items():
        plan.write(path, content)
