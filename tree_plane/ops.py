"""
Repository commands as operations over a `RepoContext`.

Every operation validates first and raises a `UserError` before touching
the context, then mutates the in-memory state only. Persisting is the
caller's job.
"""

import logging
from dataclasses import dataclass, field

from tree_plane.base import Commit
from tree_plane.context import RepoContext
from tree_plane.errors import (
    EmptyMessageError,
    FileNotInCommitError,
    NoReasonToRemoveError,
    NotFoundError,
    NothingToCommitError,
    WorkingTreeConflictError,
)
from tree_plane.hashing import blob_id
from tree_plane.worktree import materialize, untracked_conflicts

logger = logging.getLogger(__name__)


def add(ctx: RepoContext, path: str) -> str:
    path = ctx.worktree.normalize(path)
    new_blob_id = ctx.blobs.put(path)
    committed_blob_id = ctx.head_commit().tree.get(path)
    ctx.blob_index[path] = new_blob_id
    ctx.stage.reconcile_add(path, new_blob_id, committed_blob_id)
    return new_blob_id


def commit(ctx: RepoContext, message: str) -> Commit:
    if not message or not message.strip():
        raise EmptyMessageError()
    if ctx.stage.is_empty():
        raise NothingToCommitError()

    head = ctx.head_commit()
    tree = {
        path: bid for path, bid in head.tree.items() if path not in ctx.stage.to_remove
    }
    tree.update(ctx.stage.to_add)

    new_commit = ctx.graph.create_commit(
        message, parent_id=head.id, tree=tree, timestamp=ctx.now()
    )
    ctx.registry.move_head(new_commit.id)
    ctx.stage.clear()
    logger.info("Committed %s on '%s'", new_commit.id, ctx.registry.current)
    return new_commit


def rm(ctx: RepoContext, path: str) -> None:
    path = ctx.worktree.normalize(path)
    staged = ctx.stage.is_staged_for_addition(path)
    tracked = ctx.head_commit().tracks(path)
    if not staged and not tracked:
        raise NoReasonToRemoveError()

    ctx.stage.unstage_add(path)
    if tracked:
        ctx.stage.stage_remove(path)
        if ctx.worktree.exists(path):
            ctx.plan.delete(path)


def restore(ctx: RepoContext, path: str, commit_id: str | None = None) -> None:
    """
    Overwrite `path` in the working tree with its version from HEAD, or from
    `commit_id` (full id or unambiguous prefix) when given.

    Both forms then stage the restored content the way `add` would, so a
    version equal to HEAD ends up unstaged and any other version ends up
    staged for addition.
    """
    path = ctx.worktree.normalize(path)
    head = ctx.head_commit()
    if commit_id is None:
        source = head
        missing = "File does not exist in the head commit."
    else:
        source = ctx.graph.resolve(commit_id)
        missing = "File does not exist in that commit."

    if not source.tracks(path):
        raise FileNotInCommitError(missing)

    restored_blob_id = source.tree[path]
    ctx.plan.write(path, ctx.blobs.get(restored_blob_id))
    ctx.blob_index[path] = restored_blob_id
    ctx.stage.reconcile_add(path, restored_blob_id, head.tree.get(path))


def branch(ctx: RepoContext, name: str) -> None:
    ctx.registry.create_branch(name)


def rm_branch(ctx: RepoContext, name: str) -> None:
    ctx.registry.delete_branch(name)


def _checkout(ctx: RepoContext, target: Commit) -> None:
    """Plan replacing the whole working tree with `target`'s tree."""
    worktree_paths = ctx.worktree.paths()
    conflicts = untracked_conflicts(
        worktree_paths, ctx.head_commit().tree, target.tree
    )
    if conflicts:
        raise WorkingTreeConflictError(conflicts)

    target_files = {path: ctx.blobs.get(bid) for path, bid in target.tree.items()}
    materialize(ctx.plan, worktree_paths, target_files)


def switch(ctx: RepoContext, name: str) -> None:
    target = ctx.graph.get(ctx.registry.check_switch(name))
    _checkout(ctx, target)
    ctx.registry.switch(name)
    ctx.stage.clear()
    logger.info("Switched to '%s' at %s", name, target.id)


def reset(ctx: RepoContext, commit_id: str) -> Commit:
    target = ctx.graph.resolve(commit_id)
    _checkout(ctx, target)
    ctx.registry.move_head(target.id)
    ctx.stage.clear()
    logger.info("Reset '%s' to %s", ctx.registry.current, target.id)
    return target


def log(ctx: RepoContext) -> list[Commit]:
    return list(ctx.graph.ancestors(ctx.registry.head))


def global_log(ctx: RepoContext) -> list[Commit]:
    return sorted(
        ctx.graph.all_commits(), key=lambda c: (c.timestamp, c.id), reverse=True
    )


def find(ctx: RepoContext, message: str) -> list[str]:
    found = ctx.graph.find_by_message(message)
    if not found:
        raise NotFoundError("Found no commit with that message.")
    return sorted(found)


@dataclass
class StatusReport:
    current_branch: str
    branches: list[str] = field(default_factory=list)
    staged: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)


def status(ctx: RepoContext) -> StatusReport:
    head_tree = ctx.head_commit().tree
    stage = ctx.stage
    worktree_paths = ctx.worktree.paths()
    current_ids = {path: blob_id(ctx.worktree.read(path)) for path in worktree_paths}

    modified = []
    for path in sorted(head_tree.keys() | stage.to_add.keys()):
        present = path in current_ids
        if stage.is_staged_for_addition(path):
            if not present:
                modified.append(f"{path} (deleted)")
            elif current_ids[path] != stage.to_add[path]:
                modified.append(f"{path} (modified)")
        elif not stage.is_staged_for_removal(path):
            if not present:
                modified.append(f"{path} (deleted)")
            elif current_ids[path] != head_tree[path]:
                modified.append(f"{path} (modified)")

    untracked = sorted(
        path
        for path in worktree_paths
        if (path not in head_tree and not stage.is_staged_for_addition(path))
        or stage.is_staged_for_removal(path)
    )

    return StatusReport(
        current_branch=ctx.registry.current,
        branches=ctx.registry.names(),
        staged=sorted(stage.to_add),
        removed=sorted(stage.to_remove),
        modified=modified,
        untracked=untracked,
    )
