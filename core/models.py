# core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class SchoolClass:
    id: int
    name: str
    description: str = ""

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "SchoolClass":
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class Student:
    id: int
    first_name: str
    last_name: str
    email_id: str
    phone_number: str
    # Snapshot of the association at fetch time, in stored order.
    classes: tuple = ()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def class_names(self) -> List[str]:
        return [c.name for c in self.classes]

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Student":
        return cls(
            id=int(data["id"]),
            first_name=str(data.get("firstName") or ""),
            last_name=str(data.get("lastName") or ""),
            email_id=str(data.get("emailId") or ""),
            phone_number=str(data.get("phoneNumber") or ""),
            classes=tuple(_embedded_classes(data.get("classes"))),
        )


def _embedded_classes(raw: Any) -> List[SchoolClass]:
    """Accepts embedded class objects, or plain names as some list endpoints send."""
    out: List[SchoolClass] = []
    for i, item in enumerate(raw or []):
        if isinstance(item, dict):
            out.append(SchoolClass.from_payload(item))
        elif isinstance(item, str):
            out.append(SchoolClass(id=-(i + 1), name=item))
    return out


def class_ids_from_payload(data: Dict[str, Any]) -> List[int]:
    """Reconcile the two association shapes into one id list.

    Embedded ``classes`` win when present; otherwise fall back to ``classIds``.
    """
    classes = data.get("classes")
    if classes is not None:
        ids: List[int] = []
        for c in classes:
            if isinstance(c, dict) and c.get("id") is not None:
                ids.append(int(c["id"]))
            elif isinstance(c, int):
                ids.append(c)
        return ids
    return [int(i) for i in (data.get("classIds") or [])]


@dataclass
class StudentDraft:
    first_name: str = ""
    last_name: str = ""
    email_id: str = ""
    phone_number: str = ""
    class_ids: List[int] = field(default_factory=list)

    # form field name -> attribute
    FIELDS = {
        "firstName": "first_name",
        "lastName": "last_name",
        "emailId": "email_id",
        "phoneNumber": "phone_number",
    }

    def get(self, name: str) -> str:
        return getattr(self, self.FIELDS[name])

    def set(self, name: str, value: str) -> None:
        setattr(self, self.FIELDS[name], value)

    def text_fields(self) -> Dict[str, str]:
        return {name: self.get(name) for name in self.FIELDS}

    def to_payload(self) -> Dict[str, Any]:
        return {
            "firstName": self.first_name.strip(),
            "lastName": self.last_name.strip(),
            "emailId": self.email_id.strip(),
            "phoneNumber": self.phone_number,
            "classIds": list(self.class_ids),
        }

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "StudentDraft":
        return cls(
            first_name=str(data.get("firstName") or ""),
            last_name=str(data.get("lastName") or ""),
            email_id=str(data.get("emailId") or ""),
            phone_number=str(data.get("phoneNumber") or ""),
            class_ids=class_ids_from_payload(data),
        )

