# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import copy as _copy
from collections.abc import Mapping
from datetime import datetime, timezone
from numbers import Number
from typing import Any

__all__ = (
    "deep_merge",
    "get_raw_id",
    "is_array",
    "is_number",
    "loose_equals",
    "now_utc",
)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def is_array(value: Any) -> bool:
    """True for list and tuple values. Strings and mappings are not arrays."""
    return isinstance(value, (list, tuple))


def is_number(value: Any) -> bool:
    """True for real numbers, excluding ``bool``."""
    return isinstance(value, Number) and not isinstance(value, bool)


def get_raw_id(obj: Any) -> Any:
    """Read the ``id`` field of a mapping or the ``id`` attribute of an object.

    Returns None when neither exists.
    """
    if isinstance(obj, Mapping):
        return obj.get("id")
    return getattr(obj, "id", None)


def loose_equals(a: Any, b: Any) -> bool:
    """Compare two ids the way a string-keyed lookup would.

    ``loose_equals(123, "123")`` is True. A bool compares as 0 or 1 and a
    blank string as 0, so ``loose_equals(True, "1")`` and
    ``loose_equals(0, "")`` are True. None only equals None.
    """
    if a is None or b is None:
        return a is b
    if a == b:
        return True
    a_str, b_str = isinstance(a, str), isinstance(b, str)
    if a_str == b_str:
        return False
    num, text = (b, a) if a_str else (a, b)
    if isinstance(num, bool):
        num = int(num)
    if is_number(num):
        if not text.strip():
            return num == 0
        try:
            return float(text) == num
        except ValueError:
            return False
    return str(num) == text


def deep_merge(base: Mapping, override: Mapping) -> dict:
    """Recursively merge *override* into a deep copy of *base*.

    Keys of *base* survive unless *override* sets them; nested mappings are
    merged rather than replaced. Neither input is modified.
    """
    merged = _copy.deepcopy(dict(base))
    for k, v in override.items():
        if k in merged and isinstance(merged[k], Mapping) and isinstance(
            v, Mapping
        ):
            merged[k] = deep_merge(merged[k], v)
        else:
            merged[k] = _copy.deepcopy(v)
    return merged
