import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_REPO_DIR_NAME = ".tree-plane"
DEFAULT_BRANCH = "main"
WORK_TREE_ENV = "TREE_PLANE_WORK_TREE"


@dataclass
class RepoConfig:
    work_tree: Path = field(default_factory=Path.cwd)
    repo_dir_name: str = DEFAULT_REPO_DIR_NAME
    default_branch: str = DEFAULT_BRANCH

    @property
    def repo_dir(self) -> Path:
        return self.work_tree / self.repo_dir_name

    @classmethod
    def from_env(cls, work_tree: str | Path | None = None) -> "RepoConfig":
        """Explicit `work_tree` wins over $TREE_PLANE_WORK_TREE, which wins over cwd."""
        chosen = work_tree or os.environ.get(WORK_TREE_ENV)
        return cls(work_tree=Path(chosen).absolute() if chosen else Path.cwd())
