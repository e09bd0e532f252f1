"""
Userbase error schemas
"""

from typing import Dict, List, Optional

import pydantic


class APIError(pydantic.BaseModel):
    """
    APIError: shared model for API failures that carry a response body

    Whenever some kind of problem occurs during request handling and some
    exception handler took over, the answer may be some kind of this model.
    Malformed requests (`400`) and unknown resources (`404`) of the user
    resource are answered without any body, though. The field `error`
    should always contain a true boolean value. The field `status`
    contains the HTTP status code of the response, if possible. The field
    `request` contains the request path without query parameters, while
    the `method` field holds the request method (e.g. `GET`). The field
    `repeat` determines whether executing the exact same request again may
    be successful instead. The field `message` contains a short
    human-readable informational message about the problem. The field
    `details` contains a string of arbitrary length with details about
    the problem source, if available, and should primarily be used for debugging.
    """

    error: bool = True
    status: Optional[pydantic.NonNegativeInt] = None
    method: pydantic.constr(max_length=255)
    request: str
    repeat: bool
    message: str
    details: str


class ValidationProblem(APIError):
    """
    ValidationProblem: answer of `422` (Unprocessable Entity) responses

    The field `errors` maps the name of every rejected field to the list
    of messages explaining why the field was rejected, in the order
    in which the problems were detected.
    """

    errors: Dict[str, List[str]]
