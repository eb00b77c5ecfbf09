import logging
from pathlib import Path
from typing import Any, Callable, TypeVar

from tree_plane import ops
from tree_plane.base import Commit, ObjectStore
from tree_plane.config import DEFAULT_BRANCH, DEFAULT_REPO_DIR_NAME, RepoConfig
from tree_plane.context import (
    Clock,
    RepoContext,
    load_context,
    new_context,
    save_context,
    utc_now,
)
from tree_plane.errors import AlreadyExistsError
from tree_plane.impl.files import create_file_object_store
from tree_plane.impl.memory import MemoryStoreData, create_memory_object_store
from tree_plane.worktree import WorkingTree

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Repository:
    """
    Version-controlled working tree.

    Each command runs as one load -> compute -> save cycle over a fresh
    `RepoContext`; the repository object itself holds no history state.
    """

    def __init__(
        self,
        store: ObjectStore,
        worktree: WorkingTree,
        default_branch: str = DEFAULT_BRANCH,
        now: Clock = utc_now,
    ) -> None:
        self.store = store
        self.worktree = worktree
        self.default_branch = default_branch
        self.now = now

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("Repository(...)")
        else:
            with p.group(4, "Repository(", ")"):
                p.breakable()
                p.text(f"work_tree={self.worktree.root},")
                p.breakable()
                p.text("store=")
                p.pretty(self.store)
                p.breakable()

    def _mutate(self, op: Callable[..., T], *args: Any) -> T:
        ctx = load_context(self.store, self.worktree, self.now)
        result = op(ctx, *args)
        save_context(ctx, self.store)
        return result

    def _read(self, op: Callable[..., T], *args: Any) -> T:
        return op(load_context(self.store, self.worktree, self.now), *args)

    def context(self) -> RepoContext:
        """Load a read-only view of the current persisted state."""
        return load_context(self.store, self.worktree, self.now)

    def init(self) -> Commit:
        if self.store.exists():
            raise AlreadyExistsError(
                "A tree-plane version-control system already exists "
                "in the current directory."
            )
        ctx = new_context(self.store, self.worktree, self.default_branch, self.now)
        self.store.create()
        save_context(ctx, self.store)
        logger.info("Initialized repository in %s", self.worktree.root)
        return ctx.head_commit()

    def add(self, path: str) -> str:
        return self._mutate(ops.add, path)

    def commit(self, message: str) -> Commit:
        return self._mutate(ops.commit, message)

    def rm(self, path: str) -> None:
        self._mutate(ops.rm, path)

    def restore(self, path: str, commit_id: str | None = None) -> None:
        self._mutate(ops.restore, path, commit_id)

    def branch(self, name: str) -> None:
        self._mutate(ops.branch, name)

    def rm_branch(self, name: str) -> None:
        self._mutate(ops.rm_branch, name)

    def switch(self, name: str) -> None:
        self._mutate(ops.switch, name)

    def reset(self, commit_id: str) -> Commit:
        return self._mutate(ops.reset, commit_id)

    def log(self) -> list[Commit]:
        return self._read(ops.log)

    def global_log(self) -> list[Commit]:
        return self._read(ops.global_log)

    def find(self, message: str) -> list[str]:
        return self._read(ops.find, message)

    def status(self) -> ops.StatusReport:
        return self._read(ops.status)


def create_file_repository(config: RepoConfig, now: Clock = utc_now) -> Repository:
    worktree = WorkingTree(config.work_tree, config.repo_dir_name)
    return Repository(
        create_file_object_store(config.repo_dir),
        worktree,
        default_branch=config.default_branch,
        now=now,
    )


def create_memory_repository(
    data: MemoryStoreData,
    work_tree: str | Path,
    default_branch: str = DEFAULT_BRANCH,
    now: Clock = utc_now,
) -> Repository:
    """Repository whose records live in `data`; files still live under `work_tree`."""
    return Repository(
        create_memory_object_store(data),
        WorkingTree(work_tree, DEFAULT_REPO_DIR_NAME),
        default_branch=default_branch,
        now=now,
    )
