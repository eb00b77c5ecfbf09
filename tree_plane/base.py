from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from tree_plane.hashing import blob_id, commit_id

Tree = Mapping[str, str]

INITIAL_COMMIT_MESSAGE = "initial commit"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Blob:
    """
    Immutable snapshot of one file's bytes.

    `source_path` records where the content was first seen. Only the content
    takes part in the id, so identical bytes anywhere share one blob.
    """

    content: bytes
    source_path: str

    @property
    def id(self) -> str:
        return blob_id(self.content)


@dataclass(frozen=True)
class Commit:
    """
    Immutable record of a message, timestamp, parent link(s) and a
    path -> blob id tree.

    `merge_parent_id` is reserved for merges; nothing sets it yet.
    """

    id: str
    message: str
    parent_id: str | None
    timestamp: datetime
    tree: Tree = field(default_factory=dict, compare=False)
    merge_parent_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tree", MappingProxyType(dict(self.tree)))

    @classmethod
    def create(
        cls,
        message: str,
        parent_id: str | None,
        timestamp: datetime,
        tree: Tree,
        merge_parent_id: str | None = None,
    ) -> "Commit":
        """Build a commit, deriving its id once from the complete final state."""
        frozen_tree = dict(tree)
        return cls(
            id=commit_id(message, parent_id, merge_parent_id, timestamp, frozen_tree),
            message=message,
            parent_id=parent_id,
            timestamp=timestamp,
            tree=frozen_tree,
            merge_parent_id=merge_parent_id,
        )

    def tracks(self, path: str) -> bool:
        return path in self.tree

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("Commit(...)")
        else:
            with p.group(4, "Commit(", ")"):
                p.breakable()
                p.text(f"id={self.id[:7]},")
                p.breakable()
                p.text(f"message={self.message!r},")
                p.breakable()
                p.text("tree=")
                p.pretty(dict(self.tree))
                p.breakable()


class RecordKind(Enum):
    """Kinds of persisted records. Keyed kinds hold one record per key."""

    STAGE = "stage"
    COMMITS = "commits"
    BLOB_INDEX = "blobs"
    BRANCH_MAP = "branch_map"
    HEAD = "head"
    CURRENT_BRANCH = "current_branch"
    BRANCH = "branches"
    BLOB = "objects"

    @property
    def keyed(self) -> bool:
        return self in (RecordKind.BRANCH, RecordKind.BLOB)


class ObjectStore:
    """
    Typed key-value store holding every persisted record of a repository.

    Singleton kinds (stage, commits, head...) are read and written whole.
    Keyed kinds are addressed by content id (blobs) or by name (branches).
    Values are opaque bytes; see `tree_plane.codec` for their encoding.
    """

    def exists(self) -> bool:
        """Check if a repository has been initialized in this store."""
        raise NotImplementedError()

    def create(self) -> None:
        """Create the empty repository root."""
        raise NotImplementedError()

    def get(self, kind: RecordKind, key: str | None = None) -> bytes | None:
        """Read a record, or None when it is absent."""
        raise NotImplementedError()

    def put(self, kind: RecordKind, data: bytes, key: str | None = None) -> None:
        """Replace a record in full."""
        raise NotImplementedError()

    def delete(self, kind: RecordKind, key: str) -> None:
        """Remove a keyed record if present."""
        raise NotImplementedError()

    def keys(self, kind: RecordKind) -> list[str]:
        """List the keys of a keyed kind."""
        raise NotImplementedError()


def check_key(kind: RecordKind, key: str | None) -> None:
    if kind.keyed and not key:
        raise ValueError(f"Record kind '{kind.value}' requires a key")
    if not kind.keyed and key is not None:
        raise ValueError(f"Record kind '{kind.value}' does not take a key")
