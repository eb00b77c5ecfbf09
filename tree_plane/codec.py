"""
JSON encoding of persisted records.

Every record is a whole-object snapshot; nothing is appended or patched.
Decoding failures surface as `CorruptionError`.
"""

import base64
import binascii
import json
from datetime import datetime
from typing import Any

from tree_plane.base import Blob, Commit
from tree_plane.errors import CorruptionError
from tree_plane.staging import StagingArea


def _dump(value: Any) -> bytes:
    return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False).encode(
        "utf-8"
    )


def _load(data: bytes, what: str) -> Any:
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptionError(f"Unreadable {what} record: {e}") from e


def encode_text(value: str) -> bytes:
    return value.encode("utf-8")


def decode_text(data: bytes, what: str) -> str:
    try:
        text = data.decode("utf-8").strip()
    except UnicodeDecodeError as e:
        raise CorruptionError(f"Unreadable {what} record: {e}") from e
    if not text:
        raise CorruptionError(f"Empty {what} record")
    return text


def encode_mapping(mapping: dict[str, str]) -> bytes:
    return _dump(mapping)


def decode_mapping(data: bytes, what: str) -> dict[str, str]:
    value = _load(data, what)
    if not isinstance(value, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise CorruptionError(f"Malformed {what} record")
    return value


def encode_stage(stage: StagingArea) -> bytes:
    return _dump({"to_add": stage.to_add, "to_remove": sorted(stage.to_remove)})


def decode_stage(data: bytes) -> StagingArea:
    value = _load(data, "stage")
    try:
        return StagingArea(value["to_add"], set(value["to_remove"]))
    except (KeyError, TypeError, ValueError) as e:
        raise CorruptionError(f"Malformed stage record: {e}") from e


def _commit_to_dict(commit: Commit) -> dict[str, Any]:
    return {
        "message": commit.message,
        "parent_id": commit.parent_id,
        "merge_parent_id": commit.merge_parent_id,
        "timestamp": commit.timestamp.isoformat(),
        "tree": dict(commit.tree),
    }


def _commit_from_dict(commit_id: str, value: dict[str, Any]) -> Commit:
    try:
        commit = Commit.create(
            message=value["message"],
            parent_id=value["parent_id"],
            timestamp=datetime.fromisoformat(value["timestamp"]),
            tree=value["tree"],
            merge_parent_id=value.get("merge_parent_id"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise CorruptionError(f"Malformed commit {commit_id}: {e}") from e
    if commit.id != commit_id:
        raise CorruptionError(f"Commit {commit_id} does not match its content")
    return commit


def encode_commits(commits: dict[str, Commit]) -> bytes:
    return _dump({cid: _commit_to_dict(c) for cid, c in commits.items()})


def decode_commits(data: bytes) -> dict[str, Commit]:
    value = _load(data, "commits")
    if not isinstance(value, dict):
        raise CorruptionError("Malformed commits record")
    return {cid: _commit_from_dict(cid, entry) for cid, entry in value.items()}


def encode_blob(blob: Blob) -> bytes:
    return _dump(
        {
            "source_path": blob.source_path,
            "content": base64.b64encode(blob.content).decode("ascii"),
        }
    )


def decode_blob(data: bytes, expected_id: str) -> Blob:
    value = _load(data, "blob")
    try:
        blob = Blob(
            content=base64.b64decode(value["content"], validate=True),
            source_path=value["source_path"],
        )
    except (KeyError, TypeError, binascii.Error) as e:
        raise CorruptionError(f"Malformed blob {expected_id}: {e}") from e
    if blob.id != expected_id:
        raise CorruptionError(f"Blob {expected_id} does not match its content")
    return blob
