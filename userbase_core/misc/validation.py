"""
Userbase library to validate representations of users

All functions in this module are pure. They never raise on invalid
input but report their findings as ``FieldError`` pairs instead.
"""

import string
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional

from .. import schemas


LOGIN_FIELD = "login"
FIRST_NAME_FIELD = "firstName"
LAST_NAME_FIELD = "lastName"

MSG_LOGIN_EMPTY = "Login cannot be empty."
MSG_LOGIN_REQUIRED = "The Login field is required."
MSG_LOGIN_PATTERN = "Login should contain only letters or digits"
MSG_LOGIN_SPECIAL_CHARACTERS = "Login must not contain special characters."
MSG_FIRST_NAME_EMPTY = "First name cannot be empty."
MSG_LAST_NAME_EMPTY = "Last name cannot be empty."


class FieldError(NamedTuple):
    field: str
    message: str


class FieldErrors:
    """
    Ordered set of field errors

    Adding the same pair of field and message twice keeps only the first
    one. The order of insertion is preserved in iteration and in the
    mapping returned by ``as_dict``, where every field maps to its messages.
    """

    def __init__(self, errors: Optional[Iterable[FieldError]] = None):
        self._errors: Dict[FieldError, None] = {}
        for error in errors or []:
            self.add(*error)

    def add(self, field: str, message: str) -> "FieldErrors":
        self._errors.setdefault(FieldError(field, message), None)
        return self

    def fields(self) -> List[str]:
        return list(dict.fromkeys(error.field for error in self._errors))

    def as_dict(self) -> Dict[str, List[str]]:
        result: Dict[str, List[str]] = {}
        for error in self._errors:
            result.setdefault(error.field, []).append(error.message)
        return result

    def __iter__(self) -> Iterator[FieldError]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __contains__(self, item: Any) -> bool:
        if isinstance(item, str):
            return any(error.field == item for error in self._errors)
        return item in self._errors

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FieldErrors):
            return list(self) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"FieldErrors({list(self._errors)!r})"


def is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def matches_login_pattern(value: str) -> bool:
    """
    Check that the value consists of ASCII digits and unicode letters only
    """

    return all(c in string.digits or c.isalpha() for c in value)


def is_letter_or_digit(value: str) -> bool:
    """
    Check that the value consists of unicode letters and unicode decimal digits only

    This is looser than ``matches_login_pattern``, e.g. Arabic-Indic digits pass here.
    """

    return all(c.isalpha() or c.isdecimal() for c in value)


def check_login(value: Optional[str]) -> Optional[FieldError]:
    if value is None:
        return FieldError(LOGIN_FIELD, MSG_LOGIN_REQUIRED)
    if value == "":
        return FieldError(LOGIN_FIELD, MSG_LOGIN_EMPTY)
    if not matches_login_pattern(value):
        return FieldError(LOGIN_FIELD, MSG_LOGIN_PATTERN)
    return None


def check_login_presence(value: Optional[str]) -> Optional[FieldError]:
    if not value:
        return FieldError(LOGIN_FIELD, MSG_LOGIN_EMPTY)
    return None


def validate_creation(representation: schemas.UserCreation) -> FieldErrors:
    errors = FieldErrors()
    error = check_login(representation.login)
    if error:
        errors.add(*error)
    return errors


def validate_full(representation: schemas.UserUpdate) -> FieldErrors:
    """
    Validate a representation that fully replaces a stored user

    :param representation: the update representation of the request
    :return: all detected field errors, in the order login, firstName, lastName
    """

    errors = FieldErrors()
    error = check_login(representation.login)
    if error:
        errors.add(*error)
    if is_blank(representation.first_name):
        errors.add(FIRST_NAME_FIELD, MSG_FIRST_NAME_EMPTY)
    if is_blank(representation.last_name):
        errors.add(LAST_NAME_FIELD, MSG_LAST_NAME_EMPTY)
    return errors


def validate_patched(representation: schemas.UserUpdate) -> FieldErrors:
    """
    Validate the result of a patch, which only requires a valid login
    """

    errors = FieldErrors()
    error = check_login(representation.login)
    if error:
        errors.add(*error)
    return errors


def as_text(raw_value: Any) -> str:
    if raw_value is None:
        return ""
    if isinstance(raw_value, bool):
        return str(raw_value).lower()
    return str(raw_value)


def normalize_path(path: Optional[str]) -> str:
    return (path or "").strip("/").lower()


def validate_patch_target(path: Optional[str], raw_value: Any) -> Optional[FieldError]:
    """
    Check the value of a single patch operation in isolation

    Only operations targeting one of the known fields are checked,
    any other path is silently accepted.

    :param path: JSON pointer of the operation, e.g. ``/login``
    :param raw_value: value of the operation as found in the request
    :return: the field error or None if the value is acceptable
    """

    target = normalize_path(path)
    value = as_text(raw_value)
    if target == LOGIN_FIELD.lower():
        if is_blank(value):
            return FieldError(LOGIN_FIELD, MSG_LOGIN_EMPTY)
        if not is_letter_or_digit(value):
            return FieldError(LOGIN_FIELD, MSG_LOGIN_SPECIAL_CHARACTERS)
    elif target == FIRST_NAME_FIELD.lower():
        if is_blank(value):
            return FieldError(FIRST_NAME_FIELD, MSG_FIRST_NAME_EMPTY)
    elif target == LAST_NAME_FIELD.lower():
        if is_blank(value):
            return FieldError(LAST_NAME_FIELD, MSG_LAST_NAME_EMPTY)
    return None
