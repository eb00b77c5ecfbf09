import hashlib
import json
from datetime import datetime
from typing import Mapping

BLOB_TAG = "blob"
COMMIT_TAG = "commit"


def content_id(payload: bytes, tag: str) -> str:
    """
    SHA-1 of `payload` salted with an entity tag.

    The tag keeps a blob and a commit with identical serialized bytes from
    ever sharing an id.
    """
    h = hashlib.sha1()
    h.update(payload)
    h.update(tag.encode("utf-8"))
    return h.hexdigest()


def blob_id(content: bytes) -> str:
    return content_id(content, BLOB_TAG)


def canonical_commit_bytes(
    message: str,
    parent_id: str | None,
    merge_parent_id: str | None,
    timestamp: datetime,
    tree: Mapping[str, str],
) -> bytes:
    return json.dumps(
        {
            "message": message,
            "parent_id": parent_id,
            "merge_parent_id": merge_parent_id,
            "timestamp": timestamp.isoformat(),
            "tree": dict(sorted(tree.items())),
        },
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def commit_id(
    message: str,
    parent_id: str | None,
    merge_parent_id: str | None,
    timestamp: datetime,
    tree: Mapping[str, str],
) -> str:
    return content_id(
        canonical_commit_bytes(message, parent_id, merge_parent_id, timestamp, tree),
        COMMIT_TAG,
    )
