"""
Request-scoped repository state.

A command loads a `RepoContext`, mutates it in memory, and only then is the
whole thing persisted. Nothing is written while the command is still
computing, so a user error leaves the repository exactly as it was.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from tree_plane import codec
from tree_plane.base import Commit, ObjectStore, RecordKind
from tree_plane.blobs import BlobStore
from tree_plane.branches import BranchRegistry
from tree_plane.errors import CorruptionError, RepositoryNotInitializedError
from tree_plane.graph import CommitGraph
from tree_plane.staging import StagingArea
from tree_plane.worktree import WorkingTree, WorktreePlan

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RepoContext:
    graph: CommitGraph
    registry: BranchRegistry
    stage: StagingArea
    blob_index: dict[str, str]
    blobs: BlobStore
    worktree: WorkingTree
    now: Clock = utc_now
    plan: WorktreePlan = field(default_factory=WorktreePlan)

    def head_commit(self) -> Commit:
        return self.graph.get(self.registry.head)


def _require(store: ObjectStore, kind: RecordKind) -> bytes:
    data = store.get(kind)
    if data is None:
        raise CorruptionError(f"Missing '{kind.value}' record")
    return data


def new_context(
    store: ObjectStore, worktree: WorkingTree, default_branch: str, now: Clock = utc_now
) -> RepoContext:
    """State of a freshly initialized repository: one root commit on `default_branch`."""
    graph = CommitGraph()
    root = graph.root()
    return RepoContext(
        graph=graph,
        registry=BranchRegistry({default_branch: root.id}, default_branch),
        stage=StagingArea(),
        blob_index={},
        blobs=BlobStore(store, worktree),
        worktree=worktree,
        now=now,
    )


def load_context(
    store: ObjectStore, worktree: WorkingTree, now: Clock = utc_now
) -> RepoContext:
    if not store.exists():
        raise RepositoryNotInitializedError()

    commits = codec.decode_commits(_require(store, RecordKind.COMMITS))
    branches = codec.decode_mapping(_require(store, RecordKind.BRANCH_MAP), "branch map")
    current = codec.decode_text(_require(store, RecordKind.CURRENT_BRANCH), "current branch")
    head = codec.decode_text(_require(store, RecordKind.HEAD), "head")
    stage = codec.decode_stage(_require(store, RecordKind.STAGE))
    index_data = store.get(RecordKind.BLOB_INDEX)
    blob_index = codec.decode_mapping(index_data, "blob index") if index_data else {}

    for name, commit_id in branches.items():
        if commit_id not in commits:
            raise CorruptionError(f"Branch '{name}' points at missing commit {commit_id}")

    registry = BranchRegistry(branches, current)
    if registry.head != head:
        logger.warning(
            "HEAD record %s disagrees with branch '%s' at %s; using the branch",
            head,
            current,
            registry.head,
        )

    logger.debug(
        "Loaded %d commits, %d branches, current '%s'",
        len(commits),
        len(branches),
        current,
    )
    return RepoContext(
        graph=CommitGraph(commits),
        registry=registry,
        stage=stage,
        blob_index=blob_index,
        blobs=BlobStore(store, worktree),
        worktree=worktree,
        now=now,
    )


def save_context(ctx: RepoContext, store: ObjectStore) -> None:
    """
    Persist every record of `ctx` as a whole snapshot, then apply the
    working-tree plan.

    Blobs go first so no record ever references a blob that is not stored.
    """
    ctx.blobs.flush()
    store.put(RecordKind.COMMITS, codec.encode_commits(ctx.graph.commits))
    store.put(RecordKind.BLOB_INDEX, codec.encode_mapping(ctx.blob_index))
    store.put(RecordKind.STAGE, codec.encode_stage(ctx.stage))
    store.put(RecordKind.BRANCH_MAP, codec.encode_mapping(ctx.registry.branches))

    for name, commit_id in ctx.registry.branches.items():
        store.put(RecordKind.BRANCH, codec.encode_text(commit_id), key=name)
    for name in store.keys(RecordKind.BRANCH):
        if name not in ctx.registry:
            store.delete(RecordKind.BRANCH, name)

    store.put(RecordKind.CURRENT_BRANCH, codec.encode_text(ctx.registry.current))
    store.put(RecordKind.HEAD, codec.encode_text(ctx.registry.head))
    logger.debug("Saved state: HEAD %s on '%s'", ctx.registry.head, ctx.registry.current)

    ctx.plan.apply(ctx.worktree)
