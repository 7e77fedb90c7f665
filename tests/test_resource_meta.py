import json

import pytest

from errors import InvalidDocument
from resource_meta import DependencyResolver, ResourceDependency, ResourceMeta, compute_hash, is_valid_hash


@pytest.mark.parametrize("value,expected", [
    ("00123456789ABCDE", True),
    ("00123456789abcde", False),
    ("00123456789ABCD", False),
    ("[assembly:/localization/hitman6/conversations/test.sweetdialog].pc_dialogevent", False),
])
def test_is_valid_hash(value, expected):
    assert is_valid_hash(value) is expected


def test_compute_hash_is_a_valid_hash():
    h = compute_hash("[assembly:/localization/test.sweetdialog].pc_dialogevent")
    assert h.startswith("00")
    assert is_valid_hash(h)
    assert compute_hash("[assembly:/localization/test.sweetdialog].pc_dialogevent") == h


class TestResourceMeta:
    def test_new(self):
        deps = [ResourceDependency("00AAAAAAAAAAAAAA", "1F"), ResourceDependency("00BBBBBBBBBBBBBB", "81")]
        meta = ResourceMeta.new("00123456789ABCDE", 100, "DLGE", deps)

        assert meta.hash_value == "00123456789ABCDE"
        assert meta.hash_offset == 0x10000000
        assert meta.hash_size == 0x80000000 + 100
        assert meta.hash_size_final == 100
        assert meta.hash_reference_table_size == 9 * 2 + 4
        assert meta.hash_size_in_memory == 0xFFFFFFFF
        assert meta.hash_size_in_video_memory == 0xFFFFFFFF
        assert meta.hash_resource_type == "DLGE"
        assert meta.hash_reference_data == deps

    def test_new_hashes_paths(self):
        path = "[assembly:/localization/test.sweetdialog].pc_dialogevent"
        assert ResourceMeta.new(path, 0, "DLGE", []).hash_value == compute_hash(path)

    def test_json_round_trip(self):
        meta = ResourceMeta.new("00123456789ABCDE", 4, "DLGE", [ResourceDependency("00AAAAAAAAAAAAAA", "1F")])
        meta.hash_path = "[assembly:/test].pc_dialogevent"
        text = meta.to_json()

        assert json.loads(text)["hash_reference_data"] == [{"hash": "00AAAAAAAAAAAAAA", "flag": "1F"}]
        assert ResourceMeta.from_json(text) == meta

    def test_hash_path_omitted_when_unset(self):
        assert "hash_path" not in ResourceMeta.new("00123456789ABCDE", 0, "DLGE", []).to_dict()

    @pytest.mark.parametrize("text", ["{", "{}", '{"hash_value": "x", "hash_reference_data": [{"hash": "a"}]}'])
    def test_malformed(self, text):
        with pytest.raises(InvalidDocument):
            ResourceMeta.from_json(text)


class TestDependencyResolver:
    def test_add_returns_stable_indices(self):
        resolver = DependencyResolver()
        assert resolver.add("a", "1F") == 0
        assert resolver.add("b", "81") == 1
        assert resolver.add("a", "82") == 0
        assert resolver.add("c", "82") == 2
        assert resolver.dependencies == [
            ResourceDependency("a", "1F"),
            ResourceDependency("b", "81"),
            ResourceDependency("c", "82"),
        ]
        assert len(resolver) == 3
