from datetime import datetime, timezone
from pathlib import Path

import pytest
from IPython.lib.pretty import pretty

from tree_plane import codec
from tree_plane.base import Blob, ObjectStore, RecordKind
from tree_plane.config import RepoConfig
from tree_plane.errors import CorruptionError
from tree_plane.graph import CommitGraph
from tree_plane.impl.files import FileObjectStore
from tree_plane.impl.memory import MemoryObjectStore
from tree_plane.repo import create_file_repository, create_memory_repository
from tree_plane.staging import StagingArea


class StoreProvider:
    def create(self, path: Path) -> ObjectStore:
        raise NotImplementedError()


class MemoryStoreProvider(StoreProvider):
    def __init__(self):
        self.data = {}

    def create(self, path: Path) -> ObjectStore:
        return MemoryObjectStore(self.data)


class FileStoreProvider(StoreProvider):
    def create(self, path: Path) -> ObjectStore:
        return FileObjectStore(path / ".tree-plane")


PROVIDERS = [MemoryStoreProvider, FileStoreProvider]
PROVIDER_IDS = ["memory", "files"]


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_store_records(tmp_path: Path, provider_cls: type[StoreProvider]):
    provider = provider_cls()
    store = provider.create(tmp_path)
    assert store.exists() is False
    assert store.get(RecordKind.HEAD) is None

    store.create()
    assert store.exists() is True

    store.put(RecordKind.HEAD, b"abc")
    store.put(RecordKind.HEAD, b"def")
    store.put(RecordKind.BRANCH, b"1", key="main")
    store.put(RecordKind.BRANCH, b"2", key="dev")
    store.delete(RecordKind.BRANCH, "dev")
    store.delete(RecordKind.BRANCH, "never-existed")

    reopened = provider.create(tmp_path)
    assert reopened.get(RecordKind.HEAD) == b"def"
    assert reopened.keys(RecordKind.BRANCH) == ["main"]
    assert reopened.get(RecordKind.BRANCH, "main") == b"1"
    assert reopened.keys(RecordKind.BLOB) == []


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_store_key_checks(tmp_path: Path, provider_cls: type[StoreProvider]):
    store = provider_cls().create(tmp_path)
    store.create()
    with pytest.raises(ValueError):
        store.put(RecordKind.BLOB, b"x")
    with pytest.raises(ValueError):
        store.put(RecordKind.HEAD, b"x", key="main")
    with pytest.raises(ValueError):
        store.keys(RecordKind.STAGE)


def test_file_store_layout(tmp_path: Path):
    repo = create_file_repository(RepoConfig(work_tree=tmp_path))
    repo.init()
    repo.worktree.write("f.txt", b"content")
    blob_id = repo.add("f.txt")
    repo.branch("dev")

    root = tmp_path / ".tree-plane"
    for name in ["stage", "commits", "blobs", "branch_map", "head", "current_branch"]:
        assert (root / name).is_file(), name
    assert (root / "current_branch").read_text() == "main"
    assert (root / "branches" / "dev").read_text() == (root / "head").read_text()
    assert (root / "objects" / blob_id).is_file()
    assert not list(root.rglob("*.tmp"))

    repo.rm_branch("dev")
    assert not (root / "branches" / "dev").exists()


def test_file_store_rejects_path_keys(tmp_path: Path):
    store = FileObjectStore(tmp_path / ".tree-plane")
    store.create()
    with pytest.raises(ValueError):
        store.put(RecordKind.BRANCH, b"x", key="../escape")


def test_stage_codec():
    stage = StagingArea({"a": "1" * 40}, {"b"})
    assert codec.decode_stage(codec.encode_stage(stage)) == stage


def test_commits_codec_preserves_ids():
    graph = CommitGraph()
    root = graph.root()
    commit = graph.create_commit(
        "m", root.id, {"a": "1" * 40}, timestamp=datetime(2024, 5, 6, tzinfo=timezone.utc)
    )
    decoded = codec.decode_commits(codec.encode_commits(graph.commits))
    assert decoded[commit.id] == commit
    assert decoded[commit.id].tree == commit.tree


def test_commits_codec_detects_tampering():
    graph = CommitGraph()
    root = graph.root()
    data = codec.encode_commits(graph.commits).replace(b"initial commit", b"tampered")
    with pytest.raises(CorruptionError):
        codec.decode_commits(data)
    with pytest.raises(CorruptionError):
        codec.decode_commits(b"{not json")
    assert root.id in codec.decode_commits(codec.encode_commits(graph.commits))


def test_blob_codec():
    blob = Blob(content=b"\x00\xffbinary", source_path="bin.dat")
    decoded = codec.decode_blob(codec.encode_blob(blob), blob.id)
    assert decoded == blob
    with pytest.raises(CorruptionError):
        codec.decode_blob(codec.encode_blob(blob), "0" * 40)


def test_missing_blob_is_corruption(tmp_path: Path):
    data: dict = {}
    repo = create_memory_repository(data, tmp_path)
    repo.init()
    repo.worktree.write("f.txt", b"A")
    repo.add("f.txt")
    repo.commit("m1")

    data["keyed"]["objects"].clear()
    repo.worktree.write("f.txt", b"B")
    with pytest.raises(CorruptionError):
        repo.restore("f.txt")


def test_missing_record_is_corruption(tmp_path: Path):
    data: dict = {}
    repo = create_memory_repository(data, tmp_path)
    repo.init()
    del data["records"]["commits"]
    with pytest.raises(CorruptionError):
        repo.status()


def test_pretty(tmp_path: Path):
    repo = create_memory_repository({}, tmp_path)
    repo.init()
    text = pretty(repo)
    assert text.startswith("Repository(")
    assert "MemoryObjectStore(" in text
    assert pretty(repo.context().registry).startswith("BranchRegistry(")
    assert "FileObjectStore(" in pretty(FileObjectStore(tmp_path / ".tree-plane"))
