import logging
from typing import Any

logger = logging.getLogger(__name__)


class StagingArea:
    """
    Pending changes between HEAD and the next commit.

    A path is never staged for addition and for removal at the same time:
    staging it one way unstages it the other way.
    """

    def __init__(
        self,
        to_add: dict[str, str] | None = None,
        to_remove: set[str] | None = None,
    ) -> None:
        self.to_add: dict[str, str] = dict(to_add or {})
        self.to_remove: set[str] = set(to_remove or ())
        overlap = self.to_add.keys() & self.to_remove
        if overlap:
            raise ValueError(f"Paths staged both ways: {sorted(overlap)}")

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("StagingArea(...)")
        else:
            with p.group(4, "StagingArea(", ")"):
                p.breakable()
                p.text("to_add=")
                p.pretty(dict(sorted(self.to_add.items())))
                p.text(",")
                p.breakable()
                p.text("to_remove=")
                p.pretty(sorted(self.to_remove))
                p.breakable()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StagingArea):
            return NotImplemented
        return self.to_add == other.to_add and self.to_remove == other.to_remove

    def copy(self) -> "StagingArea":
        return StagingArea(self.to_add, self.to_remove)

    def stage_add(self, path: str, blob_id: str) -> None:
        self.to_add[path] = blob_id
        self.to_remove.discard(path)

    def stage_remove(self, path: str) -> None:
        self.to_remove.add(path)
        self.to_add.pop(path, None)

    def unstage_add(self, path: str) -> None:
        self.to_add.pop(path, None)

    def unstage_remove(self, path: str) -> None:
        self.to_remove.discard(path)

    def clear(self) -> None:
        self.to_add.clear()
        self.to_remove.clear()

    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove

    def is_staged_for_addition(self, path: str) -> bool:
        return path in self.to_add

    def is_staged_for_removal(self, path: str) -> bool:
        return path in self.to_remove

    def reconcile_add(
        self, path: str, new_blob_id: str, committed_blob_id: str | None
    ) -> None:
        """
        Stage `path` so the index holds the minimal diff against HEAD.

        `committed_blob_id` is HEAD's blob for `path`, or None if untracked.
        """
        if self.is_staged_for_addition(path):
            if new_blob_id == committed_blob_id:
                # Reverted to the tracked version.
                self.unstage_add(path)
                self.unstage_remove(path)
            else:
                self.stage_add(path, new_blob_id)
        elif committed_blob_id is not None and new_blob_id == committed_blob_id:
            self.unstage_remove(path)
        else:
            self.stage_add(path, new_blob_id)
        logger.debug(
            "Reconciled %s: staged=%s removed=%s",
            path,
            self.is_staged_for_addition(path),
            self.is_staged_for_removal(path),
        )
