"""
Userbase core REST API definitions

This API serves the user resource below `/api/users`. Users can be
created, read, replaced (or created via `PUT` to an unknown ID),
patched with JSON patch documents, deleted and listed page by page.

The API encodes response bodies as JSON by default, but clients may ask
for XML using the `Accept` header. Malformed requests (`400`) and unknown
resources (`404`) are answered without a body. Requests violating the
field rules of users are answered with `422` (Unprocessable Entity),
carrying all rejected fields and their messages in the `errors` field.
"""

import logging.config
import contextlib
from typing import Callable, Dict, Optional, Type

import fastapi
from fastapi.exceptions import RequestValidationError, StarletteHTTPException
from fastapi.responses import RedirectResponse

from . import base
from .routers import router
from .. import __version__
from ..persistence import database
from ..settings import Settings


DEFAULT_EXCEPTION_HANDLERS = {
    StarletteHTTPException: base.APIException.handle,
    RequestValidationError: base.handle_request_validation_error,
    Exception: base.handle_generic_exception
}


def _make_app(
        title: str,
        version: str,
        description: str,
        exception_handlers: Optional[Dict[Type[Exception], Callable]] = None,
        root_redirect: bool = True,
        api_class: Optional[Type[fastapi.FastAPI]] = None,
        **kwargs
) -> fastapi.FastAPI:
    if api_class is None:
        api_class = fastapi.FastAPI
    app = api_class(
        title=title,
        version=version,
        description=description,
        **kwargs
    )

    handlers = exception_handlers or DEFAULT_EXCEPTION_HANDLERS
    for exc in handlers:
        app.add_exception_handler(exc, handlers[exc])

    if root_redirect:
        @app.get("/", include_in_schema=False)
        async def redirect_root():
            return RedirectResponse("./docs")

    return app


def create_app(
        settings: Optional[Settings] = None,
        configure_logging: bool = True,
        configure_database: bool = True
) -> fastapi.FastAPI:
    """
    Create a new ``FastAPI`` instance using the specified settings and switches

    This function is conveniently used to allow overwriting the settings
    before launching the application as well as to allow multiple ``FastAPI``
    instances in one program, which in turn makes unit testing much easier.

    :param settings: optional Settings instance (would be created if not present)
    :param configure_logging: switch whether to configure logging
    :param configure_database: switch whether to configure the database
    :return: new ``FastAPI`` instance
    """

    @contextlib.asynccontextmanager
    async def lifespan(_: fastapi.FastAPI):
        logger.info("Starting API...")
        yield
        logger.info("Shutting down...")

    if settings is None:
        settings = Settings()

    if configure_logging:
        logging.config.dictConfig(settings.logging.model_dump())
    logger = logging.getLogger(__name__)
    logger.debug("Starting application...")

    if configure_database:
        database.init(settings.database.connection, settings.database.debug_sql)

    app = _make_app(
        title="Userbase core REST API",
        version=__version__,
        description=__doc__,
        lifespan=lifespan
    )
    app.include_router(router)
    return app


class APIWrapper:
    """
    Wrapper class around the FastAPI main object, accessible via the ``app`` property

    There should be only one global instance of this object, which should only
    export its functionality to hold the ``app`` property. This wrapper can be
    used to allow easy command-line usage via ``uvicorn`` calls. Example:

    .. code-block::

        uvicorn userbase_core.api:api.app
    """

    def __init__(self):
        self._app: Optional[fastapi.FastAPI] = None

    @property
    def app(self) -> fastapi.FastAPI:
        """
        Return the ``app`` instance (or create it with default settings if it doesn't exist)
        """

        if self._app is not None:
            return self._app
        self._app = create_app()
        return self._app


api = APIWrapper()
