class TreePlaneError(Exception):
    """Base class for every error raised by tree-plane."""


class UserError(TreePlaneError):
    """
    Expected outcome of a bad request: usage mistakes, missing
    files/commits/branches, no-op requests.

    Raised before any effect is performed. The CLI reports the message
    and exits normally.
    """


class CorruptionError(TreePlaneError):
    """A persisted record that must exist is missing or undecodable."""


class UsageError(UserError):
    pass


class RepositoryNotInitializedError(UserError):
    def __init__(self, message: str = "Not in an initialized tree-plane directory.") -> None:
        super().__init__(message)


class NotFoundError(UserError):
    pass


class ValidationError(UserError):
    pass


class AlreadyExistsError(UserError):
    pass


class InvalidOperationError(UserError):
    pass


class NoOpError(UserError):
    pass


class WorkingTreeConflictError(UserError):
    def __init__(self, paths: list[str]) -> None:
        super().__init__(
            "There is an untracked file in the way; "
            "delete it, or add and commit it first."
        )
        self.paths = paths


class EmptyMessageError(ValidationError):
    def __init__(self) -> None:
        super().__init__("Please enter a commit message.")


class NothingToCommitError(UserError):
    def __init__(self) -> None:
        super().__init__("No changes added to the commit.")


class NoReasonToRemoveError(UserError):
    def __init__(self) -> None:
        super().__init__("No reason to remove the file.")


class CommitNotFoundError(NotFoundError):
    def __init__(self, commit_id: str) -> None:
        super().__init__("No commit with that id exists.")
        self.commit_id = commit_id


class FileNotInCommitError(NotFoundError):
    pass
