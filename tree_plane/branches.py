import logging
from typing import Any

from tree_plane.errors import (
    AlreadyExistsError,
    CorruptionError,
    InvalidOperationError,
    NoOpError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class BranchRegistry:
    """
    Branch name -> commit id, plus the current branch.

    HEAD is always the commit the current branch points to.
    """

    def __init__(self, branches: dict[str, str], current: str) -> None:
        self.branches = dict(branches)
        self.current = current
        if current not in self.branches:
            raise CorruptionError(f"Current branch '{current}' has no head commit")

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("BranchRegistry(...)")
        else:
            with p.group(4, "BranchRegistry(", ")"):
                p.breakable()
                p.text(f"current='{self.current}',")
                p.breakable()
                p.text("branches=")
                p.pretty({name: cid[:7] for name, cid in sorted(self.branches.items())})
                p.breakable()

    @property
    def head(self) -> str:
        return self.branches[self.current]

    def __contains__(self, name: str) -> bool:
        return name in self.branches

    def names(self) -> list[str]:
        return sorted(self.branches)

    def create_branch(self, name: str) -> None:
        if not name.strip() or name.startswith(".") or "/" in name or "\\" in name:
            raise ValidationError("Invalid branch name.")
        if name in self.branches:
            raise AlreadyExistsError("A branch with that name already exists.")
        self.branches[name] = self.head
        logger.debug("Created branch %s at %s", name, self.head)

    def delete_branch(self, name: str) -> None:
        if name not in self.branches:
            raise NotFoundError("A branch with that name does not exist.")
        if name == self.current:
            raise InvalidOperationError("Cannot remove the current branch.")
        del self.branches[name]
        logger.debug("Deleted branch %s", name)

    def check_switch(self, name: str) -> str:
        """Validate a switch to `name` and return the target commit id."""
        if name not in self.branches:
            raise NotFoundError("No such branch exists.")
        if name == self.current:
            raise NoOpError("No need to switch to the current branch.")
        return self.branches[name]

    def switch(self, name: str) -> None:
        self.check_switch(name)
        self.current = name
        logger.debug("Switched to branch %s at %s", name, self.head)

    def move_head(self, commit_id: str) -> None:
        """Point the current branch (and so HEAD) at `commit_id`."""
        self.branches[self.current] = commit_id
        logger.debug("Moved %s to %s", self.current, commit_id)
