# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from datetime import datetime
from numbers import Number
from typing import Any, NamedTuple
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    PrivateAttr,
    model_validator,
)
from typing_extensions import Self

from ._errors import CallbackError, KeyExtractionError, ProcessorError
from .config import settings
from .sectioned_list import Section, partition
from .utils import (
    deep_merge,
    get_raw_id,
    is_array,
    is_number,
    loose_equals,
    now_utc,
)

__all__ = (
    "DataStore",
    "DeletedRecord",
    "PLACEHOLDER_FLAG",
    "PLACEHOLDER_INDEX",
    "is_placeholder",
)

logger = logging.getLogger(__name__)

PLACEHOLDER_FLAG = "is_placeholder"
PLACEHOLDER_INDEX = "index"

_MISSING = object()


def is_placeholder(obj: Any) -> bool:
    """True if ``obj`` is a placeholder record created by a store."""
    if isinstance(obj, Mapping):
        return obj.get(PLACEHOLDER_FLAG) is True
    return getattr(obj, PLACEHOLDER_FLAG, False) is True


def _is_absent(obj: Any) -> bool:
    # empty mappings and containers are real elements, falsy scalars are not
    return obj is None or (isinstance(obj, (str, bytes, Number)) and not obj)


class DeletedRecord(NamedTuple):
    """An object removed from a store and the position it held."""

    element: Any
    index: int


class DataStore(BaseModel):
    """An ordered collection of objects that are unique by their uid.

    Objects are arbitrary mappings (or objects) identified by a uid. The uid
    comes from ``object_uid_getter`` when one is set, otherwise from the
    object's ``id`` field. Adding an object whose uid is already stored is a
    no-op, so the first object with a given uid keeps its identity and its
    position.

    A store may be created with placeholders: filler records shown while
    real content loads. They sit at the front of ``contents``, are never
    indexed, are not counted by ``size``, and are all removed the first time
    anything is added, even when that object turns out to be a duplicate.

    Callback failures (uid getter or before-add processor) never escape an
    operation. They are counted, logged when ``debug`` is set, and passed to
    ``reporter`` when one is given; the store then falls back to the raw
    ``id`` field or adds the object unprocessed.

    The store is not thread-safe and callbacks must not call back into the
    store's mutating methods.

    Attributes:
        id (UUID): Identifier of this store, used in diagnostics.
        created_at (datetime): When the store was created.
        num_placeholders (int): Number of placeholders requested.
        placeholders_data (list[dict | None]): Seed data for each
            placeholder, by position.
        section_sizes (list[int] | None): Sizes passed to the sectioner.
        default_section_size (int | None): Section size once
            ``section_sizes`` is exhausted; falls back to settings.
        debug (bool): Log callback failures.
        reporter (Callable | None): Receives every ``CallbackError``.
        object_uid_getter (Callable | None): Computes an object's uid.
        before_add_processor (Callable | None): Called as
            ``processor(obj, is_prepend=bool)`` right before an object is
            stored; may modify the object in place.

    Example:
        >>> store = DataStore(placeholders=2)
        >>> store.has_placeholders()
        True
        >>> store.add_unique_objects([{"id": 1}, {"id": 2}, {"id": 1}])
        [{'id': 1}, {'id': 2}]
        >>> store.size
        2
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    id: UUID = Field(default_factory=uuid4, frozen=True)
    created_at: datetime = Field(default_factory=now_utc, frozen=True)
    num_placeholders: NonNegativeInt = 0
    placeholders_data: list[dict[str, Any] | None] = Field(
        default_factory=list
    )
    section_sizes: list[NonNegativeInt] | None = None
    default_section_size: PositiveInt | None = None
    debug: bool = Field(default_factory=lambda: settings.DEBUG)
    reporter: Callable[[CallbackError], Any] | None = Field(
        default=None, exclude=True
    )
    object_uid_getter: Callable[[Any], Any] | None = Field(
        default=None, exclude=True
    )
    before_add_processor: Callable[..., Any] | None = Field(
        default=None, exclude=True
    )

    _objects: list[Any] = PrivateAttr(default_factory=list)
    _object_id_map: dict[Any, Any] = PrivateAttr(default_factory=dict)
    _placeholders_cleared: bool = PrivateAttr(default=False)
    _failure_count: int = PrivateAttr(default=0)

    @model_validator(mode="before")
    @classmethod
    def _resolve_placeholders(cls, data: Any) -> Any:
        """Turns ``placeholders`` (a count or a list of seeds) into
        ``num_placeholders`` and ``placeholders_data``."""
        if not isinstance(data, dict) or "placeholders" not in data:
            return data

        data = dict(data)
        value = data.pop("placeholders")
        if value is None:
            data.setdefault("num_placeholders", 0)
            data.setdefault("placeholders_data", [])
        elif is_array(value):
            data["num_placeholders"] = len(value)
            data["placeholders_data"] = list(value)
        elif is_number(value):
            data["num_placeholders"] = value
            data["placeholders_data"] = []
        else:
            raise ValueError(
                "placeholders must be a non-negative integer or a list of "
                f"mappings, not {type(value).__name__}"
            )
        return data

    def model_post_init(self, __context: Any) -> None:
        super().model_post_init(__context)
        if self.num_placeholders:
            self._prepare_placeholders()

    @classmethod
    def instance(
        cls, config: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> Self:
        """Builds a store from a config mapping and/or keyword options."""
        return cls(**{**(config or {}), **kwargs})

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of real objects; placeholders are not counted."""
        size = len(self._objects)
        if self.has_placeholders():
            size -= self.num_placeholders
        return max(size, 0)

    @property
    def contents(self) -> list[Any]:
        """The live list of stored objects, placeholders included."""
        return self._objects

    @property
    def sections(self) -> list[Section]:
        """Real objects split into sections, rebuilt on every access."""
        return partition(
            (o for o in self._objects if not is_placeholder(o)),
            section_sizes=self.section_sizes,
            default_section_size=self.default_section_size,
        )

    @property
    def placeholders_cleared(self) -> bool:
        return self._placeholders_cleared

    @property
    def failure_count(self) -> int:
        """How many callback failures this store has seen."""
        return self._failure_count

    def has_contents(self) -> bool:
        return self.size > 0

    def has_placeholders(self) -> bool:
        return bool(self.num_placeholders) and not self._placeholders_cleared

    def get_objects(self) -> list[Any]:
        return self._objects

    def get_object_ids(self) -> list[Any]:
        """Uids of all stored objects, in the order they were registered."""
        return list(self._object_id_map)

    def get_object_by_id(self, uid: Any) -> Any | None:
        return self._object_id_map.get(uid)

    def has_object_by_id(self, uid: Any) -> bool:
        """True if ``uid`` is indexed and the indexed object still has it.

        A failing uid getter falls back to the ``id`` field here without
        being reported.
        """
        if uid not in self._object_id_map:
            return False
        return (
            self._get_object_uid(self._object_id_map[uid], report=False)
            == uid
        )

    def get_object_at_index(self, index: int) -> Any | None:
        if 0 <= index < len(self._objects):
            return self._objects[index]
        return None

    def get_object_index_by_id(self, obj_id: Any) -> int:
        """Position of the first object whose raw ``id`` field matches.

        This compares the ``id`` field loosely (``123`` matches ``"123"``)
        and ignores ``object_uid_getter``. Returns -1 when nothing matches.
        """
        for index, obj in enumerate(self._objects):
            if loose_equals(get_raw_id(obj), obj_id):
                return index
        return -1

    def get_object_by_predicate(
        self, predicate: Callable[[Any], bool]
    ) -> Any | None:
        """Returns the first object matching ``predicate``, or None."""
        return next((o for o in self._objects if predicate(o)), None)

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Any]:
        return iter(self._objects)

    def __contains__(self, uid: Any) -> bool:
        return self.has_object_by_id(uid)

    def __repr__(self) -> str:
        shown = self.num_placeholders if self.has_placeholders() else 0
        return (
            f"DataStore(id={self.id}, size={self.size}, placeholders={shown})"
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_before_add_processor(
        self, processor: Callable[..., Any] | None
    ) -> None:
        """Sets the callback run as ``processor(obj, is_prepend=bool)``
        right before an object is stored."""
        self.before_add_processor = processor

    def set_object_uid_getter(
        self, getter: Callable[[Any], Any] | None
    ) -> None:
        self.object_uid_getter = getter

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_unique_object(self, obj: Any) -> list[Any]:
        """Appends ``obj`` unless its uid is already stored."""
        return self.add_unique_objects([obj])

    def add_unique_objects(self, objects: list[Any]) -> list[Any]:
        """Appends each object in order, skipping stored uids.

        Returns the live contents. A value that is not a list or tuple is
        ignored.
        """
        return self._add_unique_objects(objects, prepend=False)

    def prepend_unique_object(self, obj: Any) -> list[Any]:
        return self.prepend_unique_objects([obj])

    def prepend_unique_objects(self, objects: list[Any]) -> list[Any]:
        """Puts the new objects in front of the existing ones.

        The batch keeps its own order: prepending ``[a, b]`` to ``[x]``
        gives ``[a, b, x]``.
        """
        return self._add_unique_objects(objects, prepend=True)

    def replace_object(self, obj: Any) -> list[Any]:
        """Swaps the stored object sharing ``obj``'s uid for ``obj``.

        The new object takes the old one's position; with no stored object
        to replace, ``obj`` is appended.
        """
        if _is_absent(obj):
            return self._objects

        uid = self._get_object_uid(obj)
        deleted = self.delete_object_by_id(uid)
        self._add_unique_object(
            obj,
            at_index=deleted.index if deleted is not None else None,
            uid=uid,
        )
        return self._objects

    def delete_object_by_id(self, uid: Any) -> DeletedRecord | None:
        """Removes the object stored under ``uid``.

        Returns the removed object with its former position, or None when
        nothing is stored under ``uid``.
        """
        obj = self._object_id_map.get(uid)
        if obj is None:
            return None

        index = next(
            (i for i, o in enumerate(self._objects) if o is obj), None
        )
        del self._object_id_map[uid]
        if index is None:
            return None
        del self._objects[index]
        return DeletedRecord(obj, index)

    def clear_placeholders(self) -> None:
        """Removes every placeholder record. Runs at most once per store."""
        if not self.num_placeholders or self._placeholders_cleared:
            return

        # filter by tag, real objects may already sit between placeholders
        self._objects[:] = [o for o in self._objects if not is_placeholder(o)]
        self._placeholders_cleared = True

    def reset(self) -> None:
        """Empties the store. Placeholders are not restored."""
        self._objects.clear()
        self._object_id_map.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prepare_placeholders(self) -> None:
        for i in range(self.num_placeholders):
            required = {PLACEHOLDER_FLAG: True, PLACEHOLDER_INDEX: i}
            seed = (
                self.placeholders_data[i]
                if i < len(self.placeholders_data)
                else None
            )
            self._objects.append(
                deep_merge(seed, required) if seed else required
            )

    def _add_unique_objects(self, objects: Any, prepend: bool) -> list[Any]:
        if not is_array(objects):
            return self._objects

        front = 0
        for obj in objects:
            if prepend:
                if self._add_unique_object(obj, prepend=True, at_index=front):
                    front += 1
            else:
                self._add_unique_object(obj)
        return self._objects

    def _add_unique_object(
        self,
        obj: Any,
        *,
        prepend: bool = False,
        at_index: int | None = None,
        uid: Any = _MISSING,
    ) -> bool:
        """Stores one object. Every add path ends here.

        Returns True if the object was stored, False if it was absent (None
        or a falsy scalar) or a duplicate.
        """
        if _is_absent(obj):
            return False

        # any add attempt ends the placeholder phase, duplicates included
        self.clear_placeholders()

        if uid is _MISSING:
            uid = self._get_object_uid(obj)
        if uid in self._object_id_map:
            return False

        if self.before_add_processor is not None:
            try:
                self.before_add_processor(obj, is_prepend=prepend)
            except Exception as e:
                self._report(
                    ProcessorError.from_failure(self.id, get_raw_id(obj), e)
                )

        self._object_id_map[uid] = obj
        if at_index is not None:
            self._objects.insert(at_index, obj)
        elif prepend:
            self._objects.insert(0, obj)
        else:
            self._objects.append(obj)
        return True

    def _get_object_uid(self, obj: Any, report: bool = True) -> Any:
        uid = None
        if self.object_uid_getter is not None:
            try:
                uid = self.object_uid_getter(obj)
            except Exception as e:
                if report:
                    self._report(
                        KeyExtractionError.from_failure(
                            self.id, get_raw_id(obj), e
                        )
                    )
        return uid if uid is not None else get_raw_id(obj)

    def _report(self, error: CallbackError) -> None:
        self._failure_count += 1
        if self.debug:
            logger.warning(error.message, exc_info=error.get_cause())
        if self.reporter is not None:
            try:
                self.reporter(error)
            except Exception:
                logger.exception(f"ArrayStore #{self.id} reporter failed")
