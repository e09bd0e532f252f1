"""
Helper functions to make writing unit tests for the userbase core easier
"""

import os
import sys
import random
import string
import secrets
import unittest
from typing import Iterable, List, Mapping, Optional, Union

import httpx
import sqlalchemy.orm
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine as _Engine

from userbase_core import schemas as _schemas, settings as _settings
from userbase_core.api.api import create_app
from userbase_core.persistence import database, models

from . import conf


class BaseTest(unittest.TestCase):
    """
    A base class for unit tests which introduces simple setup and teardown of unit tests

    If a subclass needs special setup or teardown functionality, it **MUST**
    call the superclasses setup and teardown methods: the superclass setup
    method at the beginning of the subclass setup method, the superclass
    teardown method at the end of the subclass teardown method.
    """

    config_file: Optional[str] = None
    database_url: Optional[str] = None
    _database_file: Optional[str] = None

    def setUp(self) -> None:
        self.config_file = os.path.abspath(f"config_{os.getpid()}_{secrets.token_hex(8)}.json")
        _settings.CONFIG_PATHS = [self.config_file]

        if conf.DATABASE_URL is not None:
            self.database_url = conf.DATABASE_URL

        else:
            self._database_file = conf.DATABASE_DEFAULT_FILE_FORMAT.format(
                os.getpid(),
                "".join([random.choice(string.ascii_lowercase) for _ in range(6)])
            )

            try:
                open(self._database_file, "wb").close()
                os.remove(self._database_file)
                self.database_url = conf.DATABASE_URL_FORMAT.format(self._database_file)

            except OSError as exc:
                self.database_url = conf.DATABASE_FALLBACK_URL
                self._database_file = None
                print(
                    f"{exc}: Falling back to in-memory database. This is not recommended!",
                    file=sys.stderr
                )

    def tearDown(self) -> None:
        if self.database_url != conf.DATABASE_FALLBACK_URL and self._database_file:
            if os.path.exists(self._database_file):
                os.remove(self._database_file)

        if self.config_file and os.path.exists(self.config_file):
            os.remove(self.config_file)

    def write_config(self) -> _schemas.config.CoreConfig:
        config = _schemas.config.CoreConfig(**_settings.get_default_config())
        config.database.debug_sql = conf.SQLALCHEMY_ECHOING
        config.database.connection = self.database_url
        with open(self.config_file, "w") as f:
            f.write(config.model_dump_json())
        return config


class BasePersistenceTests(BaseTest):
    engine: _Engine
    session: sqlalchemy.orm.Session

    def setUp(self) -> None:
        super().setUp()
        opts = {"echo": conf.SQLALCHEMY_ECHOING}
        if self.database_url.startswith("sqlite:"):
            opts["connect_args"] = {"check_same_thread": False}
        self.engine = sqlalchemy.create_engine(self.database_url, **opts)
        self.session = sqlalchemy.orm.sessionmaker(autoflush=False, bind=self.engine)()
        models.Base.metadata.create_all(bind=self.engine)
        self.write_config()

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()
        super().tearDown()

    @staticmethod
    def get_sample_users() -> List[models.UserEntity]:
        return [
            models.UserEntity(login="alice", first_name="Alice", last_name="Liddell"),
            models.UserEntity(login="bob42", first_name="Bob", last_name="Builder", games_played=42),
            models.UserEntity(login="carol", first_name="Carol", last_name="Danvers", games_played=3),
            models.UserEntity(login="dave", first_name="Dave", last_name="Grohl"),
            models.UserEntity(login="eve", first_name="Eve", last_name="Moneypenny", games_played=1)
        ]


class BaseAPITests(BaseTest):
    client: TestClient
    settings: _settings.Settings

    def setUp(self) -> None:
        super().setUp()
        self.write_config()
        self.settings = _settings.Settings()
        database.PRINT_SQLITE_WARNING = False
        self.client = TestClient(
            create_app(self.settings, configure_logging=False),
            raise_server_exceptions=False
        )

    def tearDown(self) -> None:
        self.client.close()
        database.get_engine().dispose()
        super().tearDown()

    def assertQuery(
            self,
            method: str,
            path: str,
            status_code: Union[int, Iterable[int]] = 200,
            json: Optional[Union[dict, list, str]] = None,
            headers: Optional[dict] = None,
            r_none: bool = False,
            r_is_json: bool = True,
            r_headers: Optional[Union[Mapping, Iterable]] = None,
            **kwargs
    ) -> httpx.Response:
        """
        Do a query to the specified endpoint and return the response

        Besides also carrying the optional JSON data, headers and other keyword arguments,
        this function asserts that the response has the specified status code. Furthermore,
        the optional asserted response headers are either an iterable to only assert
        certain keys or a mapping to also assert values.

        :param method: HTTP method of the request
        :param path: path of the endpoint, including the query string
        :param status_code: asserted status code(s) of the final server's response
        :param json: optional JSON-compatible request data
        :param headers: optional set of headers to sent in the request
        :param r_none: switch to expect no (=empty) result and skip all other response content checks
        :param r_is_json: switch to check that the response contains JSON data
        :param r_headers optional set of headers which are asserted in the response
        :param kwargs: dict of any further keyword arguments, passed to ``TestClient.request``
        :return: response to the requested resource
        """

        if json is not None:
            kwargs["json"] = json
        response = self.client.request(method.upper(), path, headers=headers, **kwargs)

        if isinstance(status_code, int):
            self.assertEqual(status_code, response.status_code, response.text)
        elif isinstance(status_code, Iterable):
            self.assertTrue(
                response.status_code in status_code,
                (response.text, response.status_code, status_code)
            )

        if r_headers is not None:
            for k in (r_headers if not isinstance(r_headers, Mapping) else r_headers.keys()):
                self.assertIsNotNone(response.headers.get(k), response.headers)
                if isinstance(r_headers, Mapping):
                    self.assertEqual(r_headers[k], response.headers.get(k), response.headers)

        if r_none:
            self.assertEqual("", response.text)

        elif r_is_json:
            try:
                self.assertIsNotNone(response.json())
            except ValueError:
                self.fail(("No JSON content detected", response.headers, response.text))

        return response

    def make_user(self, login: str, **fields) -> str:
        response = self.assertQuery("POST", "/api/users", 201, json={"login": login, **fields})
        return response.json()
