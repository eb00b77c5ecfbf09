import logging
from datetime import datetime, timezone
from typing import Iterator

from tree_plane.base import EPOCH, INITIAL_COMMIT_MESSAGE, Commit, Tree
from tree_plane.errors import CommitNotFoundError, CorruptionError, ValidationError

logger = logging.getLogger(__name__)


class CommitGraph:
    """
    Immutable history: commit id -> Commit, linked through parent ids.

    Commits are only ever added, never replaced or removed.
    """

    def __init__(self, commits: dict[str, Commit] | None = None) -> None:
        self.commits: dict[str, Commit] = dict(commits or {})

    def __contains__(self, commit_id: str) -> bool:
        return commit_id in self.commits

    def __len__(self) -> int:
        return len(self.commits)

    def root(self) -> Commit:
        commit = Commit.create(
            message=INITIAL_COMMIT_MESSAGE,
            parent_id=None,
            timestamp=EPOCH,
            tree={},
        )
        self.commits[commit.id] = commit
        return commit

    def create_commit(
        self,
        message: str,
        parent_id: str | None,
        tree: Tree,
        timestamp: datetime | None = None,
        merge_parent_id: str | None = None,
    ) -> Commit:
        if not message or not message.strip():
            raise ValidationError("Please enter a commit message.")
        if parent_id is not None and parent_id not in self.commits:
            raise CorruptionError(f"Parent commit {parent_id} is missing")

        commit = Commit.create(
            message=message,
            parent_id=parent_id,
            timestamp=timestamp or datetime.now(timezone.utc),
            tree=tree,
            merge_parent_id=merge_parent_id,
        )
        self.commits[commit.id] = commit
        logger.debug("Created commit %s (parent %s)", commit.id, parent_id)
        return commit

    def get(self, commit_id: str) -> Commit:
        try:
            return self.commits[commit_id]
        except KeyError:
            raise CorruptionError(f"Commit {commit_id} is referenced but missing")

    def resolve(self, id_or_prefix: str) -> Commit:
        """Look up a commit by full id or by an unambiguous id prefix."""
        if id_or_prefix in self.commits:
            return self.commits[id_or_prefix]
        if id_or_prefix:
            matches = [cid for cid in self.commits if cid.startswith(id_or_prefix)]
            if len(matches) == 1:
                return self.commits[matches[0]]
        raise CommitNotFoundError(id_or_prefix)

    def ancestors(self, commit_id: str) -> Iterator[Commit]:
        """Walk the first-parent chain from `commit_id` back to the root."""
        current: str | None = commit_id
        while current is not None:
            commit = self.get(current)
            yield commit
            current = commit.parent_id

    def all_commits(self) -> set[Commit]:
        return set(self.commits.values())

    def find_by_message(self, message: str) -> set[str]:
        return {cid for cid, c in self.commits.items() if c.message == message}
