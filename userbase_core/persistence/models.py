"""
Userbase core database models
"""

import uuid
import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Uuid, CheckConstraint, Column

from .database import Base
from .. import schemas


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class UserEntity(Base):
    """
    Model representing one stored user record

    Besides the columns, this model provides the mapping between the
    stored record and the request and response representations of users.
    The mapping copies fields only and never validates anything.
    """

    __tablename__ = "users"
    __allow_unmapped__ = True

    id: uuid.UUID = Column(Uuid(as_uuid=True), nullable=False, primary_key=True, default=uuid.uuid4)
    login: str = Column(String(255), nullable=False)
    first_name: str = Column(String(255), nullable=False, default="")
    last_name: str = Column(String(255), nullable=False, default="")
    games_played: int = Column(Integer, nullable=False, default=0)
    current_game_id: Optional[uuid.UUID] = Column(Uuid(as_uuid=True), nullable=True, default=None)
    """Reference to the game session the user currently takes part in, if any"""
    created: datetime.datetime = Column(DateTime, nullable=False, default=_now)
    """Creation timestamp defining the order of users in pages"""

    __table_args__ = (
        CheckConstraint("login != ''", name="non_empty_login"),
        CheckConstraint("games_played >= 0", name="non_negative_games_played"),
    )

    @classmethod
    def from_creation(cls, creation: schemas.UserCreation) -> "UserEntity":
        """
        Construct a new, not yet persisted model from its creation representation
        """

        return cls(
            login=creation.login,
            first_name=creation.first_name,
            last_name=creation.last_name,
            games_played=0,
            current_game_id=None
        )

    def assign(self, update: schemas.UserUpdate) -> "UserEntity":
        """
        Overwrite the mapped fields in place with the values of the update representation
        """

        self.login = update.login
        self.first_name = update.first_name or ""
        self.last_name = update.last_name or ""
        return self

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def schema(self) -> schemas.User:
        """
        Pydantic schema representation of the database model that can be sent to clients
        """

        return schemas.User(
            id=self.id,
            login=self.login,
            full_name=self.full_name,
            games_played=self.games_played,
            current_game_id=self.current_game_id
        )

    @property
    def update_schema(self) -> schemas.UserUpdate:
        """
        Snapshot of the model as update representation, used as base for patches
        """

        return schemas.UserUpdate(
            login=self.login,
            first_name=self.first_name,
            last_name=self.last_name
        )

    def __repr__(self) -> str:
        return f"UserEntity(id={self.id}, login={self.login!r})"
