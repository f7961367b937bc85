# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for SectionedList and the sections view of DataStore."""

import pytest
from pydantic import ValidationError

from arraystore import DataStore, Section, SectionedList, partition


def _items(sections):
    return [list(s.items) for s in sections]


@pytest.fixture
def objs():
    ids = [123, 234, 345, 456, 567, 678, 789, 891, 911, 1011, 1112, 1213]
    return [{"id": i} for i in ids]


class TestSectionedList:
    def test_empty(self):
        sl = SectionedList()
        assert sl.sections == []
        assert len(sl) == 0

    def test_default_size(self):
        sl = SectionedList(default_section_size=3)
        sl.extend(range(7))
        assert _items(sl.sections) == [[0, 1, 2], [3, 4, 5], [6]]
        assert len(sl) == 7

    def test_default_size_from_settings(self):
        sl = SectionedList()
        sl.extend(range(12))
        assert _items(sl.sections) == [list(range(10)), [10, 11]]

    def test_explicit_sizes_then_default(self):
        sl = SectionedList(section_sizes=[1, 2, 0, 3], default_section_size=10)
        sl.extend("abcdefgh")
        assert _items(sl.sections) == [
            ["a"],
            ["b", "c"],
            [],
            ["d", "e", "f"],
            ["g", "h"],
        ]

    def test_leading_zero_size(self):
        sl = SectionedList(section_sizes=[0, 0, 2])
        sl.add_item("a")
        assert _items(sl.sections) == [[], [], ["a"]]

    def test_zero_section_not_opened_until_needed(self):
        sl = SectionedList(section_sizes=[2, 0, 1])
        sl.extend("ab")
        assert _items(sl.sections) == [["a", "b"]]
        sl.add_item("c")
        assert _items(sl.sections) == [["a", "b"], [], ["c"]]

    def test_section_metadata(self):
        sl = SectionedList(section_sizes=[2], default_section_size=5)
        sl.extend(range(3))
        first, second = sl.sections
        assert (first.index, first.capacity, first.is_full) == (0, 2, True)
        assert (second.index, second.capacity, second.is_full) == (1, 5, False)
        assert len(second) == 1

    def test_sections_are_read_only(self):
        sl = SectionedList()
        sl.add_item(1)
        section = sl.sections[0]
        assert isinstance(section, Section)
        assert isinstance(section.items, tuple)
        with pytest.raises(ValidationError):
            section.items = (2,)

    def test_items_are_not_copied(self):
        obj = {"id": 1}
        sl = SectionedList()
        sl.add_item(obj)
        assert sl.sections[0].items[0] is obj

    def test_clear(self):
        sl = SectionedList(default_section_size=2)
        sl.extend(range(5))
        sl.clear()
        assert sl.sections == []
        assert len(sl) == 0

    def test_capacity_of(self):
        sl = SectionedList(section_sizes=[4, 0], default_section_size=7)
        assert [sl.capacity_of(i) for i in range(4)] == [4, 0, 7, 7]
        with pytest.raises(IndexError):
            sl.capacity_of(-1)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"section_sizes": [1, -2]},
            {"section_sizes": [1.5]},
            {"default_section_size": 0},
        ],
    )
    def test_invalid_sizes(self, kwargs):
        with pytest.raises(ValueError):
            SectionedList(**kwargs)

    def test_partition(self):
        assert _items(partition(range(5), [2], 2)) == [[0, 1], [2, 3], [4]]


class TestStoreSections:
    def test_default_sections(self, objs):
        store = DataStore()
        store.add_unique_objects([*objs[:3], objs[0], *objs[3:]])
        assert _items(store.sections) == [objs[:10], objs[10:]]

    def test_custom_sections(self, objs):
        store = DataStore(section_sizes=[1, 2, 0, 3])
        store.add_unique_objects([*objs[:3], objs[0], *objs[3:8]])
        assert _items(store.sections) == [
            [objs[0]],
            objs[1:3],
            [],
            objs[3:6],
            objs[6:8],
        ]

    def test_sections_follow_deletes_and_prepends(self, objs):
        store = DataStore(section_sizes=[2], default_section_size=2)
        store.add_unique_objects(objs[:4])
        store.delete_object_by_id(objs[1]["id"])
        store.prepend_unique_object(objs[5])
        assert _items(store.sections) == [
            [objs[5], objs[0]],
            [objs[2], objs[3]],
        ]

    def test_sections_recomputed_on_access(self, objs):
        store = DataStore()
        first = store.sections
        store.add_unique_object(objs[0])
        assert first == []
        assert _items(store.sections) == [[objs[0]]]
