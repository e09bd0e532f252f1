"""
Userbase schemas for the user resource

This module contains the read representation of users, the
representations accepted for creating and replacing users as
well as the schemas of JSON patch operations and the pagination
metadata envelope. All schemas use camelCase names on the wire.
"""

import enum
import uuid
from typing import Any, Optional

import pydantic
from pydantic.alias_generators import to_camel


DEFAULT_FIRST_NAME = "Biba"
DEFAULT_LAST_NAME = "Abobov"


class _CamelModel(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(_CamelModel):
    id: uuid.UUID
    login: str
    full_name: str
    games_played: pydantic.NonNegativeInt
    current_game_id: Optional[uuid.UUID] = None


class UserCreation(_CamelModel):
    """
    Representation of a new user

    Only the login is mandatory. The first and last names are filled
    with default values when they are missing or null in the request.
    """

    login: Optional[str] = None
    first_name: Optional[str] = DEFAULT_FIRST_NAME
    last_name: Optional[str] = DEFAULT_LAST_NAME

    @pydantic.field_validator("first_name", mode="after")
    @classmethod
    def fill_first_name(cls, value: Optional[str]) -> str:
        return DEFAULT_FIRST_NAME if value is None else value

    @pydantic.field_validator("last_name", mode="after")
    @classmethod
    def fill_last_name(cls, value: Optional[str]) -> str:
        return DEFAULT_LAST_NAME if value is None else value


class UserUpdate(_CamelModel):
    """
    Representation of a user that replaces (or patches) an existing user
    """

    login: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    def as_creation(self) -> UserCreation:
        """
        Coerce the update into a creation representation, where defaults fill any gap
        """

        return UserCreation(login=self.login, first_name=self.first_name, last_name=self.last_name)


@enum.unique
class PatchOperationType(str, enum.Enum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    MOVE = "move"
    COPY = "copy"
    TEST = "test"


class PatchOperation(_CamelModel):
    op: PatchOperationType
    path: str
    value: Any = None
    from_: Optional[str] = pydantic.Field(default=None, alias="from")


class PaginationHeader(_CamelModel):
    previous_page_link: Optional[str] = None
    next_page_link: Optional[str] = None
    total_count: pydantic.NonNegativeInt
    page_size: pydantic.PositiveInt
    current_page: pydantic.PositiveInt
    total_pages: pydantic.NonNegativeInt
