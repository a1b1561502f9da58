# core/sorting.py
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, List


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortKey(str, Enum):
    # students
    ID = "id"
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    FULL_NAME = "fullName"
    EMAIL = "emailId"
    PHONE = "phoneNumber"
    CLASSES = "classes"
    # classes
    NAME = "name"
    DESCRIPTION = "description"


# Every supported key and the value it sorts by.
DERIVATIONS: Dict[SortKey, Callable[[Any], Any]] = {
    SortKey.ID: lambda e: e.id,
    SortKey.FIRST_NAME: lambda s: s.first_name,
    SortKey.LAST_NAME: lambda s: s.last_name,
    SortKey.FULL_NAME: lambda s: f"{s.first_name} {s.last_name}",
    SortKey.EMAIL: lambda s: s.email_id,
    SortKey.PHONE: lambda s: s.phone_number,
    SortKey.CLASSES: lambda s: ", ".join(c.name for c in s.classes),
    SortKey.NAME: lambda c: c.name,
    SortKey.DESCRIPTION: lambda c: c.description,
}

STUDENT_SORT_KEYS = (
    SortKey.FULL_NAME,
    SortKey.FIRST_NAME,
    SortKey.LAST_NAME,
    SortKey.EMAIL,
    SortKey.PHONE,
    SortKey.CLASSES,
    SortKey.ID,
)
CLASS_SORT_KEYS = (SortKey.NAME, SortKey.DESCRIPTION, SortKey.ID)


def normalize(value: Any) -> str:
    return "" if value is None else str(value).casefold()


def derive(entity: Any, key: SortKey) -> str:
    return normalize(DERIVATIONS[key](entity))


def _cmp(x: str, y: str) -> int:
    return (x > y) - (x < y)


def compare(a: Any, b: Any, key: SortKey, direction: Direction = Direction.ASC) -> int:
    """-1, 0 or 1. Descending flips the sign; equal values stay 0."""
    result = _cmp(derive(a, key), derive(b, key))
    return -result if direction == Direction.DESC else result


def sort_rows(rows: Iterable[Any], key: SortKey, direction: Direction = Direction.ASC) -> List[Any]:
    """Stable sort; returns a new list.

    Values are derived once per row, and ties keep their input order in
    either direction.
    """
    decorated = [(derive(r, key), r) for r in rows]
    sign = -1 if direction == Direction.DESC else 1

    def _by_value(p, q):
        return sign * _cmp(p[0], q[0])

    decorated.sort(key=cmp_to_key(_by_value))
    return [r for _, r in decorated]


@dataclass(frozen=True)
class SortState:
    key: SortKey
    direction: Direction = Direction.ASC

    def toggle(self, key: SortKey) -> "SortState":
        """Same key flips direction; a new key starts ascending."""
        if key == self.key:
            flipped = Direction.DESC if self.direction == Direction.ASC else Direction.ASC
            return replace(self, direction=flipped)
        return SortState(key, Direction.ASC)
