"""
Userbase library to apply JSON patch documents to user representations

A patch is an ordered list of operations, each targeting one field of
the ``UserUpdate`` representation by its JSON pointer (e.g. ``/login``).
Paths are compared case-insensitively and unknown paths are ignored.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from . import validation
from .logger import enforce_logger
from .validation import FieldError, FieldErrors
from .. import schemas


FIELDS: Dict[str, str] = {
    validation.LOGIN_FIELD.lower(): "login",
    validation.FIRST_NAME_FIELD.lower(): "first_name",
    validation.LAST_NAME_FIELD.lower(): "last_name"
}
"""
dispatch table of normalized JSON pointers to the attributes of ``UserUpdate``
"""

PATCH_TARGETS: Dict[str, str] = {
    validation.LOGIN_FIELD.lower(): validation.LOGIN_FIELD,
    validation.FIRST_NAME_FIELD.lower(): validation.FIRST_NAME_FIELD,
    validation.LAST_NAME_FIELD.lower(): validation.LAST_NAME_FIELD
}
"""
mapping of normalized JSON pointers to the field names used in field errors
"""


def resolve_field(path: Optional[str]) -> Optional[str]:
    return FIELDS.get(validation.normalize_path(path))


def pre_validate(operations: Sequence[schemas.PatchOperation]) -> Optional[FieldError]:
    """
    Check the values of all operations targeting known fields before applying anything

    :param operations: ordered sequence of patch operations
    :return: the error of the first rejected operation or None
    """

    for operation in operations:
        if validation.normalize_path(operation.path) not in PATCH_TARGETS:
            continue
        error = validation.validate_patch_target(operation.path, operation.value)
        if error is not None:
            return error
    return None


def _coerce_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise ValueError(f"The value {value!r} is invalid for the target location.")
    return validation.as_text(value)


def _add(target: Dict[str, Any], field: str, operation: schemas.PatchOperation):
    target[field] = _coerce_value(operation.value)


def _remove(target: Dict[str, Any], field: str, operation: schemas.PatchOperation):
    target[field] = None


def _copy(target: Dict[str, Any], field: str, operation: schemas.PatchOperation):
    source = resolve_field(operation.from_)
    if source is not None:
        target[field] = target[source]


def _move(target: Dict[str, Any], field: str, operation: schemas.PatchOperation):
    source = resolve_field(operation.from_)
    if source is not None and source != field:
        target[field] = target[source]
        target[source] = None


def _test(target: Dict[str, Any], field: str, operation: schemas.PatchOperation):
    expected = _coerce_value(operation.value)
    if target[field] != expected:
        raise ValueError(f"The current value {target[field]!r} is not equal to the test value {expected!r}.")


OPERATIONS: Dict[schemas.PatchOperationType, Callable[[Dict[str, Any], str, schemas.PatchOperation], None]] = {
    schemas.PatchOperationType.ADD: _add,
    schemas.PatchOperationType.REPLACE: _add,
    schemas.PatchOperationType.REMOVE: _remove,
    schemas.PatchOperationType.COPY: _copy,
    schemas.PatchOperationType.MOVE: _move,
    schemas.PatchOperationType.TEST: _test
}


def apply_operations(
        base: schemas.UserUpdate,
        operations: Sequence[schemas.PatchOperation],
        logger: Optional[logging.Logger] = None
) -> Tuple[schemas.UserUpdate, FieldErrors]:
    """
    Apply all operations in order to a copy of the base representation

    :param base: representation that should be patched (it won't be modified)
    :param operations: ordered sequence of patch operations
    :param logger: optional logger used for DEBUG messages
    :return: tuple of the patched copy and the errors of failed operations
    """

    logger = enforce_logger(logger, "patching")
    target = base.model_dump()
    errors = FieldErrors()
    for operation in operations:
        field = resolve_field(operation.path)
        if field is None:
            logger.debug(f"Ignoring {operation.op.value!r} operation on unknown path {operation.path!r}")
            continue
        try:
            OPERATIONS[operation.op](target, field, operation)
        except ValueError as exc:
            errors.add(PATCH_TARGETS[validation.normalize_path(operation.path)], str(exc))
    return schemas.UserUpdate(**target), errors


def apply_patch(
        base: schemas.UserUpdate,
        operations: List[schemas.PatchOperation],
        logger: Optional[logging.Logger] = None
) -> Tuple[schemas.UserUpdate, FieldErrors]:
    """
    Pre-validate, apply and post-validate a patch on the base representation

    The pre-validation stops at the first rejected operation and reports only
    its error, leaving the base untouched. Otherwise, all operations are applied
    and the result is validated with the narrower patch rules (login only).

    :param base: representation that should be patched (it won't be modified)
    :param operations: ordered sequence of patch operations
    :param logger: optional logger used for DEBUG messages
    :return: tuple of the patched representation and all field errors (empty on success)
    """

    error = pre_validate(operations)
    if error is not None:
        return base, FieldErrors([error])

    patched, errors = apply_operations(base, operations, logger)
    if errors:
        return patched, errors
    return patched, validation.validate_patched(patched)
