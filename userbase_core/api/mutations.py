"""
Userbase coordination of mutating operations on the user resource

The ``UserMutations`` class decides the outcome of every mutating request:
it either returns a ``Created`` result (answered with `201`), returns
None (answered with `204`) or raises one of the API exceptions.
"""

import uuid
import logging
from typing import Callable, List, NamedTuple, Optional

from .base import BadRequest, NotFound, UnprocessableEntity
from .. import schemas
from ..misc import patching, validation
from ..misc.logger import enforce_logger
from ..persistence.models import UserEntity
from ..persistence.repository import UserRepository


class Created(NamedTuple):
    id: uuid.UUID
    location: str


def parse_identity(token: str) -> Optional[uuid.UUID]:
    """
    Parse the identity token of a request path, returning None for malformed tokens
    """

    try:
        return uuid.UUID(token)
    except (ValueError, TypeError, AttributeError):
        return None


class UserMutations:
    """
    Mutation coordinator of the user resource

    :param repository: storage collaborator for user records
    :param link_for: callable returning the location of a user by its ID
    :param logger: optional logger
    """

    def __init__(
            self,
            repository: UserRepository,
            link_for: Callable[[uuid.UUID], str],
            logger: Optional[logging.Logger] = None
    ):
        self.repository = repository
        self.link_for = link_for
        self.logger = enforce_logger(logger, "mutations")

    def find(self, token: str) -> UserEntity:
        user_id = parse_identity(token)
        entity = user_id and self.repository.find_by_id(user_id)
        if entity is None:
            raise NotFound(f"User {token}")
        return entity

    def exists(self, token: str) -> bool:
        user_id = parse_identity(token)
        return user_id is not None and self.repository.find_by_id(user_id) is not None

    def create(self, creation: Optional[schemas.UserCreation]) -> Created:
        """
        Create a new user from its creation representation

        An empty login is checked before every other rule to
        report it with its own dedicated error message.

        :raises BadRequest: when there's no representation at all
        :raises UnprocessableEntity: when the representation violates field rules
        """

        if creation is None:
            raise BadRequest("Missing user representation")

        error = validation.check_login_presence(creation.login)
        if error is not None:
            raise UnprocessableEntity(validation.FieldErrors([error]))
        errors = validation.validate_creation(creation)
        if errors:
            raise UnprocessableEntity(errors)

        entity = self.repository.insert(UserEntity.from_creation(creation))
        self.logger.info(f"Created user {entity.id} with login {entity.login!r}")
        return Created(entity.id, self.link_for(entity.id))

    def replace(self, token: str, update: Optional[schemas.UserUpdate]) -> Optional[Created]:
        """
        Replace the identified user or create a new one if it doesn't exist

        :raises BadRequest: when there's no representation or the token is malformed
        :raises UnprocessableEntity: when the representation violates field rules
        """

        if update is None:
            raise BadRequest("Missing user representation")
        errors = validation.validate_full(update)
        if errors:
            raise UnprocessableEntity(errors)

        user_id = parse_identity(token)
        if user_id is None:
            raise BadRequest("Malformed user ID", detail=token)

        entity = self.repository.find_by_id(user_id)
        if entity is None:
            self.logger.debug(f"User {user_id} doesn't exist, creating a new user instead")
            return self.create(update.as_creation())

        entity.assign(update)
        self.repository.update(entity)
        self.logger.info(f"Replaced user {entity.id}")
        return None

    def patch(self, token: str, operations: Optional[List[schemas.PatchOperation]]) -> None:
        """
        Partially update the identified user by a list of patch operations

        Malformed identity tokens are treated like unknown users here.

        :raises BadRequest: when there's no patch document
        :raises NotFound: when the token is malformed or the user doesn't exist
        :raises UnprocessableEntity: when the patch or its result violates field rules
        """

        if operations is None:
            raise BadRequest("Missing patch document")
        entity = self.find(token)

        patched, errors = patching.apply_patch(entity.update_schema, operations, self.logger)
        if errors:
            raise UnprocessableEntity(errors)

        entity.assign(patched)
        self.repository.update(entity)
        self.logger.info(f"Patched user {entity.id} with {len(operations)} operation(s)")

    def delete(self, token: str) -> None:
        """
        Delete the identified user

        :raises NotFound: when the token is malformed or the user doesn't exist
        """

        entity = self.find(token)
        self.repository.delete(entity.id)
        self.logger.info(f"Deleted user {entity.id}")
