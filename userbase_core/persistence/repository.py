"""
Userbase storage of user records on top of a database session
"""

import uuid
import logging
from typing import List, NamedTuple, Optional

import sqlalchemy
import sqlalchemy.orm

from .models import UserEntity


class PageList(NamedTuple):
    items: List[UserEntity]
    total_count: int
    has_previous: bool
    has_next: bool


class UserRepository:
    """
    Storage collaborator for user records

    Every mutating method commits the session immediately. There's no
    locking of any kind, so concurrent modifications of the same
    record by different requests may overwrite each other.
    """

    def __init__(self, session: sqlalchemy.orm.Session, logger: Optional[logging.Logger] = None):
        self.session = session
        self.logger = logger or logging.getLogger(__name__)

    def find_by_id(self, user_id: uuid.UUID) -> Optional[UserEntity]:
        return self.session.get(UserEntity, user_id)

    def insert(self, entity: UserEntity) -> UserEntity:
        if entity.id is None:
            entity.id = uuid.uuid4()
        self.session.add(entity)
        self.session.commit()
        self.logger.debug(f"Inserted {entity!r}")
        return entity

    def update(self, entity: UserEntity) -> None:
        self.session.add(entity)
        self.session.commit()
        self.logger.debug(f"Updated {entity!r}")

    def delete(self, user_id: uuid.UUID) -> None:
        entity = self.find_by_id(user_id)
        if entity is None:
            return
        self.session.delete(entity)
        self.session.commit()
        self.logger.debug(f"Deleted {entity!r}")

    def get_page(self, page_number: int, page_size: int) -> PageList:
        """
        Return one page of users ordered by creation time

        The existence of a next page is determined by fetching one
        more row than requested instead of comparing it with the total
        count, since both queries might see different states of the table.
        Pages starting beyond the last record are answered without querying
        rows, which also keeps huge page numbers away from the database.

        :param page_number: number of the page, starting at 1
        :param page_size: maximal number of items on the page
        :return: items of the page together with the page metadata
        """

        if page_number < 1 or page_size < 1:
            raise ValueError(f"Invalid page request: page {page_number} with size {page_size}")

        total_count = self.count()
        offset = (page_number - 1) * page_size
        if offset >= total_count:
            return PageList(items=[], total_count=total_count, has_previous=page_number > 1, has_next=False)

        rows = self.session.scalars(
            sqlalchemy.select(UserEntity)
            .order_by(UserEntity.created, UserEntity.id)
            .offset(offset)
            .limit(page_size + 1)
        ).all()
        return PageList(
            items=list(rows[:page_size]),
            total_count=total_count,
            has_previous=page_number > 1,
            has_next=len(rows) > page_size
        )

    def count(self) -> int:
        return self.session.scalar(sqlalchemy.select(sqlalchemy.func.count()).select_from(UserEntity)) or 0

    def all(self) -> List[UserEntity]:
        return list(self.session.scalars(sqlalchemy.select(UserEntity).order_by(UserEntity.created, UserEntity.id)))
