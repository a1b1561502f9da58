# core/validation.py
from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, Mapping, Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NON_DIGITS = re.compile(r"\D")
PHONE_MAX_LEN = 10
PASSWORD_MIN_LEN = 3

LABELS = {
    "firstName": "First Name",
    "lastName": "Last Name",
    "emailId": "Email",
    "phoneNumber": "Phone Number",
    "username": "Username",
    "password": "Password",
}

STUDENT_FIELDS = ("firstName", "lastName", "emailId", "phoneNumber")
LOGIN_FIELDS = ("username", "password")

ErrorSet = Dict[str, Optional[str]]


def coerce_phone(raw: Optional[str]) -> str:
    """Keep digits only; anything past the tenth digit is not accepted."""
    return NON_DIGITS.sub("", raw or "")[:PHONE_MAX_LEN]


def _required(name: str, value: Optional[str]) -> Optional[str]:
    if not (value or "").strip():
        return f"{LABELS[name]} is required"
    return None


def _email(name: str, value: Optional[str]) -> Optional[str]:
    msg = _required(name, value)
    if msg:
        return msg
    if not EMAIL_PATTERN.match(value.strip()):
        return "Enter a valid email address"
    return None


def _phone(name: str, value: Optional[str]) -> Optional[str]:
    msg = _required(name, value)
    if msg:
        return msg
    if not value.isdigit() or not value.isascii():
        return f"{LABELS[name]} must contain only digits"
    if len(value) > PHONE_MAX_LEN:
        return f"{LABELS[name]} must be at most {PHONE_MAX_LEN} digits"
    return None


def _password(name: str, value: Optional[str]) -> Optional[str]:
    # not trimmed: whitespace is a legal password character
    if not value:
        return f"{LABELS[name]} is required"
    if len(value) < PASSWORD_MIN_LEN:
        return f"{LABELS[name]} must be at least {PASSWORD_MIN_LEN} characters"
    return None


RULES: Dict[str, Callable[[str, Optional[str]], Optional[str]]] = {
    "firstName": _required,
    "lastName": _required,
    "emailId": _email,
    "phoneNumber": _phone,
    "username": _required,
    "password": _password,
}


def validate_field(name: str, value: Optional[str]) -> Optional[str]:
    rule = RULES.get(name)
    if rule is None:
        raise KeyError(f"no validation rule for field {name!r}")
    return rule(name, value)


def validate_all(values: Mapping[str, Optional[str]], fields: Optional[Iterable[str]] = None) -> ErrorSet:
    """Validate every field; only failing fields get an entry."""
    errors: ErrorSet = {}
    for name in fields if fields is not None else values.keys():
        msg = validate_field(name, values.get(name))
        if msg:
            errors[name] = msg
    return errors


def is_valid(errors: Mapping[str, Optional[str]]) -> bool:
    return all(msg is None for msg in errors.values())


class FormValidator:
    """Error state for one mounted form.

    ``on_change`` re-checks only the edited field; ``on_submit`` re-checks all
    of them and replaces the error set.
    """

    def __init__(self, fields: Iterable[str]):
        self.fields = tuple(fields)
        self.errors: ErrorSet = {}

    def on_change(self, name: str, value: Optional[str]) -> Optional[str]:
        msg = validate_field(name, value)
        if msg:
            self.errors[name] = msg
        else:
            self.errors.pop(name, None)
        return msg

    def on_submit(self, values: Mapping[str, Optional[str]]) -> bool:
        self.errors = validate_all(values, self.fields)
        return is_valid(self.errors)

    def error_for(self, name: str) -> Optional[str]:
        return self.errors.get(name)
