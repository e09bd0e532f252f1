"""
Userbase database unit tests
"""

import uuid
import datetime
import unittest as _unittest
from typing import Type

import sqlalchemy
import sqlalchemy.exc

from userbase_core import schemas
from userbase_core.persistence import models
from userbase_core.persistence.repository import UserRepository

from . import utils


persistence_suite = _unittest.TestSuite()


def _tested(cls: Type):
    global persistence_suite
    for fixture in filter(lambda f: f.startswith("test_"), dir(cls)):
        persistence_suite.addTest(cls(fixture))
    return cls


@_tested
class DatabaseUsabilityTests(utils.BasePersistenceTests):
    """
    Database test cases checking the correct usability of the models
    """

    def test_create_user_without_orm(self):
        user_id = uuid.uuid4()
        self.session.execute(
            sqlalchemy.insert(models.UserEntity).values(
                id=user_id,
                login="foo",
                first_name="Foo",
                last_name="Bar"
            )
        )
        self.session.commit()
        user = self.session.get(models.UserEntity, user_id)
        self.assertEqual("foo", user.login)
        self.assertEqual(0, user.games_played)
        self.assertIsNone(user.current_game_id)
        self.assertIsInstance(user.created, datetime.datetime)

    def test_sample_users_and_schemas(self):
        self.session.add_all(self.get_sample_users())
        self.session.commit()
        users = self.session.query(models.UserEntity).all()
        self.assertEqual(5, len(users))
        for user in users:
            self.assertIsInstance(user.id, uuid.UUID)
            schema = user.schema
            self.assertIsInstance(schema, schemas.User)
            self.assertEqual(f"{user.first_name} {user.last_name}", schema.full_name)
            self.assertEqual(user.games_played, schema.games_played)

    def test_mapping_roundtrip(self):
        creation = schemas.UserCreation(login="mapper")
        user = models.UserEntity.from_creation(creation)
        self.assertEqual("Biba", user.first_name)
        self.assertEqual("Abobov", user.last_name)
        self.assertEqual(0, user.games_played)

        user.assign(schemas.UserUpdate(login="mapped", first_name=None, last_name="Last"))
        self.assertEqual("mapped", user.login)
        self.assertEqual("", user.first_name)
        self.assertEqual("Last", user.last_name)
        self.assertEqual(
            schemas.UserUpdate(login="mapped", first_name="", last_name="Last"),
            user.update_schema
        )


@_tested
class DatabaseRestrictionTests(utils.BasePersistenceTests):
    """
    Database test cases checking restrictions of the models
    """

    def test_missing_login(self):
        self.session.add(models.UserEntity(first_name="No", last_name="Login"))
        with self.assertRaises(sqlalchemy.exc.IntegrityError):
            self.session.commit()

    def test_empty_login(self):
        self.session.add(models.UserEntity(login=""))
        with self.assertRaises(sqlalchemy.exc.IntegrityError):
            self.session.commit()

    def test_negative_games_played(self):
        self.session.add(models.UserEntity(login="negative", games_played=-1))
        with self.assertRaises(sqlalchemy.exc.IntegrityError):
            self.session.commit()

    def test_duplicate_ids(self):
        user_id = uuid.uuid4()
        self.session.add(models.UserEntity(id=user_id, login="one"))
        self.session.commit()
        with self.assertRaises(sqlalchemy.exc.IntegrityError):
            self.session.execute(sqlalchemy.insert(models.UserEntity).values(id=user_id, login="two"))
            self.session.commit()


@_tested
class RepositoryTests(utils.BasePersistenceTests):
    """
    Test cases for the storage collaborator of user records
    """

    repository: UserRepository

    def setUp(self) -> None:
        super().setUp()
        self.repository = UserRepository(self.session)

    def _fill(self, n: int):
        start = datetime.datetime(2020, 1, 1)
        for i in range(n):
            self.repository.insert(models.UserEntity(
                login=f"user{i}",
                created=start + datetime.timedelta(minutes=i)
            ))

    def test_insert_and_find(self):
        user = self.repository.insert(models.UserEntity(login="found"))
        self.assertIsNotNone(user.id)
        self.assertIs(user, self.repository.find_by_id(user.id))
        self.assertIsNone(self.repository.find_by_id(uuid.uuid4()))
        self.assertEqual(1, self.repository.count())

    def test_update_and_delete(self):
        user = self.repository.insert(models.UserEntity(login="changing"))
        user.login = "changed"
        self.repository.update(user)
        self.session.expire_all()
        self.assertEqual("changed", self.repository.find_by_id(user.id).login)

        self.repository.delete(user.id)
        self.assertIsNone(self.repository.find_by_id(user.id))
        self.assertEqual(0, self.repository.count())
        self.repository.delete(user.id)

    def test_page_windows(self):
        self._fill(7)
        page = self.repository.get_page(1, 3)
        self.assertEqual(["user0", "user1", "user2"], [u.login for u in page.items])
        self.assertEqual(7, page.total_count)
        self.assertFalse(page.has_previous)
        self.assertTrue(page.has_next)

        page = self.repository.get_page(3, 3)
        self.assertEqual(["user6"], [u.login for u in page.items])
        self.assertTrue(page.has_previous)
        self.assertFalse(page.has_next)

        page = self.repository.get_page(2, 7)
        self.assertEqual([], page.items)
        self.assertFalse(page.has_next)

    def test_page_exactly_full(self):
        self._fill(6)
        page = self.repository.get_page(2, 3)
        self.assertEqual(["user3", "user4", "user5"], [u.login for u in page.items])
        self.assertFalse(page.has_next)

    def test_page_beyond_storage_range(self):
        self._fill(2)
        page = self.repository.get_page(10 ** 19, 20)
        self.assertEqual([], page.items)
        self.assertEqual(2, page.total_count)
        self.assertTrue(page.has_previous)
        self.assertFalse(page.has_next)

    def test_all_ordered(self):
        self._fill(4)
        self.assertEqual(["user0", "user1", "user2", "user3"], [u.login for u in self.repository.all()])

    def test_invalid_page_request(self):
        for page_number, page_size in [(0, 1), (1, 0), (-1, 10), (1, -3)]:
            with self.assertRaises(ValueError):
                self.repository.get_page(page_number, page_size)


if __name__ == '__main__':
    _unittest.main()
