import logging
import os
from pathlib import Path
from typing import Any

from tree_plane.base import ObjectStore, RecordKind, check_key

logger = logging.getLogger(__name__)


class FileObjectStore(ObjectStore):
    """
    Object store over flat files inside the hidden repository directory.

    Layout::

        <root>/stage, commits, blobs, branch_map, head, current_branch
        <root>/branches/<name>
        <root>/objects/<blob id>

    Every write goes to a temporary sibling that is then renamed over the
    target, so a record is either the old snapshot or the new one.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).absolute()

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("FileObjectStore(...)")
        else:
            with p.group(4, "FileObjectStore(", ")"):
                p.breakable()
                p.text(f"root={self.root},")
                p.breakable()

    def _path(self, kind: RecordKind, key: str | None) -> Path:
        check_key(kind, key)
        if kind.keyed:
            assert key is not None
            if "/" in key or "\\" in key or key in (".", ".."):
                raise ValueError(f"Invalid record key: {key!r}")
            return self.root / kind.value / key
        return self.root / kind.value

    def exists(self) -> bool:
        return self.root.is_dir()

    def create(self) -> None:
        self.root.mkdir(parents=True)
        for kind in RecordKind:
            if kind.keyed:
                (self.root / kind.value).mkdir()
        logger.debug("Created repository directory %s", self.root)

    def get(self, kind: RecordKind, key: str | None = None) -> bytes | None:
        path = self._path(kind, key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def put(self, kind: RecordKind, data: bytes, key: str | None = None) -> None:
        path = self._path(kind, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f".{path.name}.tmp")
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)

    def delete(self, kind: RecordKind, key: str) -> None:
        path = self._path(kind, key)
        path.unlink(missing_ok=True)

    def keys(self, kind: RecordKind) -> list[str]:
        if not kind.keyed:
            raise ValueError(f"Record kind '{kind.value}' is not keyed")
        directory = self.root / kind.value
        if not directory.is_dir():
            return []
        return [
            entry.name
            for entry in directory.iterdir()
            if entry.is_file() and not entry.name.startswith(".")
        ]


def create_file_object_store(root: str | Path) -> FileObjectStore:
    return FileObjectStore(root)
