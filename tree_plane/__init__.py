from .base import Blob, Commit, ObjectStore, RecordKind
from .config import RepoConfig
from .errors import CorruptionError, TreePlaneError, UserError
from .repo import Repository, create_file_repository, create_memory_repository
from .staging import StagingArea

__all__ = [
    "Blob",
    "Commit",
    "ObjectStore",
    "RecordKind",
    "RepoConfig",
    "Repository",
    "StagingArea",
    "TreePlaneError",
    "UserError",
    "CorruptionError",
    "create_file_repository",
    "create_memory_repository",
]
