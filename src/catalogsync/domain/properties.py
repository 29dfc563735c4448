"""Type-aware diff/merge over free-form property bags.

Property bags come back from the catalog as plain JSON, so the same logical
value may arrive with a different representation than the one a connector
produced (``2`` vs ``2.0``, ``Z`` vs ``+00:00`` offsets, tuples vs lists).
``values_equivalent`` is the single place where such representations are
considered equal; everything it cannot compare counts as changed, so the
newest value wins.

Merging is monotonic: keys may be added or overwritten, never removed.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogsync.domain.model import PropertyBag, PropertyValue

DEFAULT_MERGE_DEPTH = 5
LOCATION_MERGE_DEPTH = 10

_TIMESTAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


def merge_properties(
    target: PropertyBag,
    source: Mapping[str, PropertyValue] | None,
    max_depth: int = DEFAULT_MERGE_DEPTH,
) -> bool:
    """Merge ``source`` into ``target`` in place, returning whether ``target`` changed.

    Nested mappings are recursed while ``max_depth`` allows; below that depth
    they are compared as whole values.
    """

    if not source:
        return False

    changed = False
    for key, value in source.items():
        if key not in target:
            if is_empty(value):
                continue
            target[key] = copy.deepcopy(value)
            changed = True
            continue

        current = target[key]
        if isinstance(value, Mapping) and isinstance(current, dict) and max_depth > 0:
            if merge_properties(current, value, max_depth - 1):
                changed = True
            continue

        if not values_equivalent(value, current):
            target[key] = copy.deepcopy(value)
            changed = True
    return changed


def is_empty(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str | list | tuple | dict):
        return len(value) == 0
    return False


def values_equivalent(one: object, two: object) -> bool:
    """Compare two property values, tolerating representation differences.

    - numbers compare by numeric value (``2 == 2.0 == Decimal("2.00")``)
    - booleans only equal booleans
    - timestamp strings compare by the instant they denote
    - sequences compare element-wise with the same rules
    - mappings compare key by key with the same rules
    - anything else falls back to ``==``

    Strings never equal numbers. Anything that fails to parse is unequal.
    """

    if one is None or two is None:
        return one is None and two is None

    if isinstance(one, bool) or isinstance(two, bool):
        return type(one) is type(two) and one == two

    if _is_number(one) and _is_number(two):
        return _numbers_equal(one, two)

    if isinstance(one, str) and isinstance(two, str):
        return one == two or _timestamps_equal(one, two)

    if isinstance(one, datetime) or isinstance(two, datetime):
        left = _as_instant(one)
        right = _as_instant(two)
        return left is not None and right is not None and left == right

    if isinstance(one, Mapping) and isinstance(two, Mapping):
        if one.keys() != two.keys():
            return False
        return all(values_equivalent(one[key], two[key]) for key in one)

    if _is_sequence(one) and _is_sequence(two):
        if len(one) != len(two):
            return False
        return all(values_equivalent(a, b) for a, b in zip(one, two, strict=True))

    try:
        return bool(one == two)
    except (TypeError, ValueError):
        return False


def _is_number(value: object) -> bool:
    return isinstance(value, int | float | Decimal) and not isinstance(value, bool)


def _is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str | bytes)


def _numbers_equal(one: object, two: object) -> bool:
    try:
        return Decimal(str(one)) == Decimal(str(two))
    except InvalidOperation:
        return False


def _timestamps_equal(one: str, two: str) -> bool:
    one_parts = one.split("/")
    two_parts = two.split("/")
    if len(one_parts) != len(two_parts) or len(one_parts) > 2:  # noqa: PLR2004
        return False
    for left, right in zip(one_parts, two_parts, strict=True):
        left_instant = _parse_instant(left)
        right_instant = _parse_instant(right)
        if left_instant is None or right_instant is None or left_instant != right_instant:
            return False
    return True


def _as_instant(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, str):
        return _parse_instant(value)
    return None


def _parse_instant(value: str) -> datetime | None:
    text = value.strip()
    if not _TIMESTAMP_PATTERN.match(text):
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    # Naive timestamps are read as UTC.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
