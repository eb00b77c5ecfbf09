import logging

from tree_plane import codec
from tree_plane.base import Blob, ObjectStore, RecordKind
from tree_plane.errors import CorruptionError, NotFoundError
from tree_plane.worktree import WorkingTree

logger = logging.getLogger(__name__)


class BlobStore:
    """
    Content-addressed, append-only store of file snapshots.

    New blobs stay in memory until `flush()`, which the repository calls
    once the whole command has been computed.
    """

    def __init__(self, store: ObjectStore, worktree: WorkingTree) -> None:
        self.store = store
        self.worktree = worktree
        self.pending: dict[str, Blob] = {}

    def contains(self, blob_id: str) -> bool:
        return blob_id in self.pending or self.store.get(RecordKind.BLOB, blob_id) is not None

    def put(self, path: str) -> str:
        if not self.worktree.exists(path):
            raise NotFoundError("File does not exist.")
        blob = Blob(content=self.worktree.read(path), source_path=path)
        if not self.contains(blob.id):
            self.pending[blob.id] = blob
        return blob.id

    def get(self, blob_id: str) -> bytes:
        if blob_id in self.pending:
            return self.pending[blob_id].content
        data = self.store.get(RecordKind.BLOB, blob_id)
        if data is None:
            raise CorruptionError(f"Blob {blob_id} is referenced but missing")
        return codec.decode_blob(data, blob_id).content

    def flush(self) -> None:
        for blob_id, blob in self.pending.items():
            self.store.put(RecordKind.BLOB, codec.encode_blob(blob), key=blob_id)
            logger.debug("Stored blob %s from %s", blob_id, blob.source_path)
        self.pending.clear()
