"""
Userbase REST API base library
"""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError, StarletteHTTPException
from fastapi.responses import JSONResponse

from .. import schemas
from ..misc.validation import FieldErrors


logger = logging.getLogger(__name__)


async def handle_generic_exception(request: Request, _: Exception):
    logger.exception("Unhandled exception caught in base exception handler!")
    status_code = 500
    msg = "Unexpected server error. The requested action wasn't completed successfully."

    return JSONResponse(jsonable_encoder(schemas.APIError(
        status=status_code,
        method=request.method,
        request=request.url.path,
        repeat=False,
        message=msg,
        details=""
    )), status_code=status_code)


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """
    Treat request bodies or parameters that can't be parsed as malformed requests
    """

    msgs = "; ".join([error["msg"] for error in exc.errors()])
    logger.debug(f"Malformed request @ '{request.method} {request.url.path}': {msgs}")
    return Response(status_code=400)


class APIException(HTTPException):
    """
    Base class for any kind of generic API exception

    Exceptions with the ``empty_body`` flag are answered with their status code
    and headers only, every other exception carries an ``APIError`` model.
    """

    empty_body: bool = False

    def __init__(
            self,
            status_code: int,
            detail: Optional[str],
            repeat: bool = False,
            message: Optional[str] = None,
            headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.repeat = repeat
        self.message = message

    def make_model(self, request: Request) -> schemas.APIError:
        return schemas.APIError(
            status=self.status_code,
            method=request.method,
            request=request.url.path,
            repeat=self.repeat,
            message=self.message or type(self).__name__,
            details=str(self.detail)
        )

    @classmethod
    async def handle(cls, request: Request, exc: StarletteHTTPException) -> Response:
        """
        Handle exceptions in a generic way to produce APIError models
        """

        status_code = getattr(exc, "status_code", 500)
        repeat = getattr(exc, "repeat", False)
        message = getattr(exc, "message", None) or exc.__class__.__name__

        if not isinstance(exc, StarletteHTTPException):
            logger.error("Invalid exception class for base handler")

        logger.debug(
            f"{type(exc).__name__}: {message} @ '{request.method} "
            f"{request.url.path}' (details: {exc.detail})"
        )
        if getattr(exc, "empty_body", False):
            return Response(status_code=status_code, headers=getattr(exc, "headers", None))
        if isinstance(exc, APIException):
            model = exc.make_model(request)
        else:
            model = schemas.APIError(
                status=status_code,
                method=request.method,
                request=request.url.path,
                repeat=repeat,
                message=message,
                details=str(exc.detail)
            )
        from .negotiation import render
        return render(
            request,
            model,
            status_code=status_code,
            headers=getattr(exc, "headers", None),
            root_tag=type(model).__name__,
            item_tag="message",
            strict=False
        )


class BadRequest(APIException):
    """
    Exception when the request body or identity token is malformed
    """

    empty_body = True

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            status_code=400,
            detail=detail,
            repeat=False,
            message=message
        )


class NotFound(APIException):
    """
    Exception when a requested resource was not found in the system
    """

    empty_body = True

    def __init__(self, resource: str, detail: Optional[str] = None):
        super().__init__(
            status_code=404,
            detail=detail,
            repeat=False,
            message=f"{str(resource)!r} was not found."
        )


class NotAcceptable(APIException):
    """
    Exception when no supported media type satisfies the Accept header of the request
    """

    def __init__(self, accept: str):
        super().__init__(
            status_code=406,
            detail=f"Accept: {accept}",
            repeat=False,
            message="None of the accepted media types of the request is supported."
        )


class UnprocessableEntity(APIException):
    """
    Exception when the representation in the request body violates field rules

    The response carries a ``ValidationProblem`` model, which lists every
    rejected field together with the messages explaining the rejection.
    """

    def __init__(self, errors: FieldErrors, detail: Optional[str] = None):
        super().__init__(
            status_code=422,
            detail=detail if detail is not None else ", ".join(errors.fields()),
            repeat=False,
            message="One or more fields of the request are invalid."
        )
        self.errors = errors

    def make_model(self, request: Request) -> schemas.ValidationProblem:
        return schemas.ValidationProblem(
            status=self.status_code,
            method=request.method,
            request=request.url.path,
            repeat=self.repeat,
            message=self.message,
            details=str(self.detail),
            errors=self.errors.as_dict()
        )
