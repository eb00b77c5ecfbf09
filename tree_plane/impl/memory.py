from typing import Any

from tree_plane.base import ObjectStore, RecordKind, check_key

MemoryStoreData = dict[str, Any]


class MemoryObjectStore(ObjectStore):
    """
    Object store over a plain dict.

    The dict is owned by the caller, so several stores (one per simulated
    command invocation) can share the same repository data.
    """

    def __init__(self, data: MemoryStoreData) -> None:
        self.data = data

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("MemoryObjectStore(...)")
        else:
            with p.group(4, "MemoryObjectStore(", ")"):
                p.breakable()
                p.text(f"records={sorted(self.data.get('records', {}))},")
                p.breakable()

    def exists(self) -> bool:
        return "records" in self.data

    def create(self) -> None:
        self.data["records"] = {}
        self.data["keyed"] = {
            kind.value: {} for kind in RecordKind if kind.keyed
        }

    def get(self, kind: RecordKind, key: str | None = None) -> bytes | None:
        check_key(kind, key)
        if not self.exists():
            return None
        if kind.keyed:
            return self.data["keyed"][kind.value].get(key)
        return self.data["records"].get(kind.value)

    def put(self, kind: RecordKind, data: bytes, key: str | None = None) -> None:
        check_key(kind, key)
        if kind.keyed:
            self.data["keyed"][kind.value][key] = bytes(data)
        else:
            self.data["records"][kind.value] = bytes(data)

    def delete(self, kind: RecordKind, key: str) -> None:
        check_key(kind, key)
        self.data["keyed"][kind.value].pop(key, None)

    def keys(self, kind: RecordKind) -> list[str]:
        if not kind.keyed:
            raise ValueError(f"Record kind '{kind.value}' is not keyed")
        if not self.exists():
            return []
        return list(self.data["keyed"][kind.value].keys())


def create_memory_object_store(data: MemoryStoreData) -> MemoryObjectStore:
    return MemoryObjectStore(data)
