import hashlib
import json
import re
from dataclasses import dataclass, field
from typing import Optional

from errors import InvalidDocument

HASH_RE = re.compile(r"^[0-9A-F]{16}$")


def is_valid_hash(h: str) -> bool:
    return HASH_RE.match(h) is not None


def compute_hash(path: str) -> str:
    digest = hashlib.md5(path.encode()).hexdigest().upper()
    return f"00{digest[2:16]}"


@dataclass
class ResourceDependency:
    hash: str
    flag: str


@dataclass
class ResourceMeta:
    hash_value: str
    hash_offset: int = 0x10000000
    hash_reference_data: list[ResourceDependency] = field(default_factory=list)
    hash_reference_table_dummy: int = 0
    hash_reference_table_size: int = 4
    hash_resource_type: str = ""
    hash_size: int = 0
    hash_size_final: int = 0
    hash_size_in_memory: int = 0xFFFFFFFF
    hash_size_in_video_memory: int = 0xFFFFFFFF
    hash_path: Optional[str] = None

    @classmethod
    def new(cls, h: str, size: int, four_cc: str, dependencies: list[ResourceDependency]) -> "ResourceMeta":
        return cls(
            hash_value=h if is_valid_hash(h) else compute_hash(h),
            hash_offset=0x10000000,
            hash_size=0x80000000 + size,
            hash_resource_type=four_cc,
            hash_reference_table_size=9 * len(dependencies) + 4,
            hash_reference_table_dummy=0,
            hash_size_final=size,
            hash_size_in_memory=0xFFFFFFFF,
            hash_size_in_video_memory=0xFFFFFFFF,
            hash_reference_data=list(dependencies),
        )

    @classmethod
    def from_dict(cls, d: dict) -> "ResourceMeta":
        try:
            return cls(
                hash_value=d["hash_value"],
                hash_offset=d.get("hash_offset", 0x10000000),
                hash_reference_data=[ResourceDependency(e["hash"], e["flag"]) for e in d.get("hash_reference_data", [])],
                hash_reference_table_dummy=d.get("hash_reference_table_dummy", 0),
                hash_reference_table_size=d.get("hash_reference_table_size", 4),
                hash_resource_type=d.get("hash_resource_type", ""),
                hash_size=d.get("hash_size", 0),
                hash_size_final=d.get("hash_size_final", 0),
                hash_size_in_memory=d.get("hash_size_in_memory", 0xFFFFFFFF),
                hash_size_in_video_memory=d.get("hash_size_in_video_memory", 0xFFFFFFFF),
                hash_path=d.get("hash_path"),
            )
        except (KeyError, TypeError) as e:
            raise InvalidDocument(f"Malformed resource meta: {e}") from e

    @classmethod
    def from_json(cls, text: str) -> "ResourceMeta":
        try:
            return cls.from_dict(json.loads(text))
        except json.JSONDecodeError as e:
            raise InvalidDocument(f"Resource meta is not valid JSON: {e}") from e

    def to_dict(self) -> dict:
        d = {
            "hash_offset": self.hash_offset,
            "hash_reference_data": [{"hash": dep.hash, "flag": dep.flag} for dep in self.hash_reference_data],
            "hash_reference_table_dummy": self.hash_reference_table_dummy,
            "hash_reference_table_size": self.hash_reference_table_size,
            "hash_resource_type": self.hash_resource_type,
            "hash_size": self.hash_size,
            "hash_size_final": self.hash_size_final,
            "hash_size_in_memory": self.hash_size_in_memory,
            "hash_size_in_video_memory": self.hash_size_in_video_memory,
            "hash_value": self.hash_value,
        }
        if self.hash_path is not None:
            d["hash_path"] = self.hash_path
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class DependencyResolver:
    """Ordered, de-duplicated list of (resource, flag) dependencies.

    ``add`` returns the position of the resource in the table, inserting it
    with the given flag the first time it is seen. Later flags for an already
    known resource are ignored.
    """

    def __init__(self):
        self._index: dict[str, int] = {}
        self._deps: list[ResourceDependency] = []

    def add(self, path: str, flag: str) -> int:
        if path in self._index:
            return self._index[path]
        self._index[path] = len(self._deps)
        self._deps.append(ResourceDependency(path, flag))
        return len(self._deps) - 1

    @property
    def dependencies(self) -> list[ResourceDependency]:
        return list(self._deps)

    def __len__(self):
        return len(self._deps)
