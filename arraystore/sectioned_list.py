# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from .config import settings

__all__ = (
    "Section",
    "SectionedList",
    "partition",
)


class Section(BaseModel):
    """A read-only, contiguous slice of a sectioned sequence.

    Attributes:
        index (int): Position of this section among its siblings.
        capacity (int): Number of items this section holds when full.
        items (tuple): The items in this section, in order. The items
            themselves are the caller's objects, not copies.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    index: NonNegativeInt
    capacity: NonNegativeInt
    items: tuple[Any, ...] = Field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_full(self) -> bool:
        return len(self.items) >= self.capacity


class SectionedList:
    """Partitions a growing sequence into sections of configured sizes.

    Section ``i`` holds ``section_sizes[i]`` items while explicit sizes
    remain; every section after that holds ``default_section_size`` items.
    A size of 0 produces an empty section rather than skipping it.

    Example:
        >>> sl = SectionedList(section_sizes=[1, 2])
        >>> sl.extend("abcd")
        >>> [s.items for s in sl.sections]
        [('a',), ('b', 'c'), ('d',)]
    """

    def __init__(
        self,
        section_sizes: Sequence[int] | None = None,
        default_section_size: int | None = None,
    ) -> None:
        sizes = list(section_sizes or [])
        if any(not isinstance(s, int) or s < 0 for s in sizes):
            raise ValueError("section sizes must be non-negative integers")

        default_section_size = (
            default_section_size
            if default_section_size is not None
            else settings.DEFAULT_SECTION_SIZE
        )
        if default_section_size < 1:
            raise ValueError("default section size must be at least 1")

        self._section_sizes: list[int] = sizes
        self._default_section_size: int = default_section_size
        self._buckets: list[list[Any]] = []
        self._count = 0

    @property
    def section_sizes(self) -> list[int]:
        return list(self._section_sizes)

    @property
    def default_section_size(self) -> int:
        return self._default_section_size

    @property
    def sections(self) -> list[Section]:
        """Snapshot of the current sections, in order."""
        return [
            Section(index=i, capacity=self.capacity_of(i), items=tuple(b))
            for i, b in enumerate(self._buckets)
        ]

    def __len__(self) -> int:
        """Returns the number of items across all sections."""
        return self._count

    def capacity_of(self, index: int) -> int:
        """Returns how many items the section at ``index`` holds when full."""
        if index < 0:
            raise IndexError("section index must be non-negative")
        if index < len(self._section_sizes):
            return self._section_sizes[index]
        return self._default_section_size

    def add_item(self, item: Any) -> None:
        """Appends an item to the last section, opening new ones as needed."""
        last = len(self._buckets) - 1
        if not self._buckets or len(self._buckets[last]) >= self.capacity_of(
            last
        ):
            self._open_section()
        self._buckets[-1].append(item)
        self._count += 1

    def extend(self, items: Iterable[Any]) -> None:
        for item in items:
            self.add_item(item)

    def clear(self) -> None:
        self._buckets.clear()
        self._count = 0

    def _open_section(self) -> None:
        # zero-capacity sections are opened and immediately left behind
        self._buckets.append([])
        while self.capacity_of(len(self._buckets) - 1) == 0:
            self._buckets.append([])

    def __repr__(self) -> str:
        return (
            f"SectionedList(sections={len(self._buckets)}, "
            f"items={self._count}, "
            f"section_sizes={self._section_sizes}, "
            f"default_section_size={self._default_section_size})"
        )


def partition(
    items: Iterable[Any],
    section_sizes: Sequence[int] | None = None,
    default_section_size: int | None = None,
) -> list[Section]:
    """Returns the sections of ``items`` for the given sizes."""
    sectioned = SectionedList(
        section_sizes=section_sizes,
        default_section_size=default_section_size,
    )
    sectioned.extend(items)
    return sectioned.sections
