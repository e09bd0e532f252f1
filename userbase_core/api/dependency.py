"""
Userbase API dependency library
"""

import logging
from typing import Any, Dict, Generator, Optional

import sqlalchemy.exc
import fastapi.datastructures
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..persistence import database
from ..persistence.repository import UserRepository


def get_session() -> Generator[Session, None, bool]:
    """
    Return a generator to handle database sessions gracefully
    """

    logger = logging.getLogger(__name__)
    session = database.get_new_session()

    try:
        yield session
        session.flush()
    except sqlalchemy.exc.DBAPIError as exc:
        details = (exc.statement or "").replace("\n", "")
        logger.exception(f"{type(exc).__name__}: {exc} @ {details!r}")
        session.rollback()
        raise
    except sqlalchemy.exc.SQLAlchemyError as exc:
        logger.exception(f"{type(exc).__name__}: {str(exc)}")
        session.rollback()
        raise
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    return True


class LocalRequestData:
    """
    Collection of core dependencies used by all path operations

    This class stores references to various important objects that
    will almost certainly be used by request handlers (path operations).
    Note that any dependency added here will be added to the OpenAPI
    definition, if it refers to a Query, Header, Path or Cookie.
    """

    def __init__(
            self,
            request: Request,
            session: Session = Depends(get_session)
    ):
        self.request = request
        self.session = session

        self._repository: Optional[UserRepository] = None

    @property
    def repository(self) -> UserRepository:
        if self._repository is None:
            self._repository = UserRepository(self.session)
        return self._repository

    def link_for(self, name: str, query: Optional[Dict[str, Any]] = None, **path_params: Any) -> str:
        """
        Resolve the absolute URL of the named path operation

        :param name: name of the path operation (the name of its function by default)
        :param query: optional query parameters that should be added to the URL
        :param path_params: values of the path parameters of the path operation
        :return: absolute URL as string
        """

        url = fastapi.datastructures.URL(str(self.request.url_for(name, **path_params)))
        if query:
            url = url.include_query_params(**query)
        return str(url)
