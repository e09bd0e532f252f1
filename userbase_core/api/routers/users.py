"""
Userbase router module for /api/users requests
"""

import logging
from typing import List, Optional

from fastapi import Body, Depends, Query, Response

from ._router import router
from ..dependency import LocalRequestData
from ..mutations import Created, UserMutations
from .. import negotiation
from ...misc import pagination
from ... import schemas


logger = logging.getLogger(__name__)

COLLECTION_PATH = "/api/users"
ITEM_PATH = "/api/users/{user_id}"
ALLOWED_COLLECTION_METHODS = "GET, POST, OPTIONS"


def get_mutations(local: LocalRequestData = Depends(LocalRequestData)) -> UserMutations:
    return UserMutations(
        local.repository,
        lambda user_id: local.link_for("get_user_by_id", user_id=str(user_id)),
        logger
    )


def _created(local: LocalRequestData, created: Created) -> Response:
    return negotiation.render(
        local.request,
        created.id,
        status_code=201,
        headers={"Location": created.location},
        root_tag="guid"
    )


@router.get(
    ITEM_PATH,
    tags=["Users"],
    response_model=schemas.User,
    responses={404: {"description": "Unknown user or malformed user ID"}}
)
async def get_user_by_id(
        user_id: str,
        local: LocalRequestData = Depends(LocalRequestData),
        mutations: UserMutations = Depends(get_mutations)
):
    """
    Return the user identified by its ID

    * `404`: if the user doesn't exist or the user ID is no valid UUID
    """

    return negotiation.render(local.request, mutations.find(user_id).schema, root_tag="User")


@router.head(ITEM_PATH, tags=["Users"], responses={404: {"description": "Unknown user"}})
async def head_user(user_id: str, mutations: UserMutations = Depends(get_mutations)):
    """
    Check whether the user exists, without returning any response body
    """

    return Response(status_code=200 if mutations.exists(user_id) else 404)


@router.post(
    COLLECTION_PATH,
    tags=["Users"],
    status_code=201,
    response_model=str,
    responses={
        400: {"description": "Missing or malformed body"},
        422: {"model": schemas.ValidationProblem}
    }
)
async def create_user(
        user: Optional[schemas.UserCreation] = Body(None, media_type="application/json"),
        local: LocalRequestData = Depends(LocalRequestData),
        mutations: UserMutations = Depends(get_mutations)
):
    """
    Create a new user and return its ID, with its location in the `Location` header

    Missing first or last names are filled with default values.

    * `400`: if the body is missing or malformed
    * `422`: if the login is empty or contains anything else than letters and digits
    """

    return _created(local, mutations.create(user))


@router.put(
    ITEM_PATH,
    tags=["Users"],
    status_code=204,
    responses={
        201: {"description": "The user didn't exist and was created instead", "model": str},
        400: {"description": "Missing or malformed body or malformed user ID"},
        422: {"model": schemas.ValidationProblem}
    }
)
async def update_user(
        user_id: str,
        user: Optional[schemas.UserUpdate] = Body(None, media_type="application/json"),
        local: LocalRequestData = Depends(LocalRequestData),
        mutations: UserMutations = Depends(get_mutations)
):
    """
    Replace the user identified by its ID (or create a new user if it doesn't exist)

    Creating a user this way works exactly like `POST /api/users`, so
    the newly created user gets a new ID, which is returned in the body.

    * `400`: if the body is missing or malformed or the user ID is no valid UUID
    * `422`: if the login is invalid or the first or last name is blank
    """

    created = mutations.replace(user_id, user)
    if created is not None:
        return _created(local, created)
    return Response(status_code=204)


@router.patch(
    ITEM_PATH,
    tags=["Users"],
    status_code=204,
    responses={
        400: {"description": "Missing or malformed patch document"},
        404: {"description": "Unknown user or malformed user ID"},
        422: {"model": schemas.ValidationProblem}
    }
)
async def partially_update_user(
        user_id: str,
        operations: Optional[List[schemas.PatchOperation]] = Body(None, media_type="application/json-patch+json"),
        mutations: UserMutations = Depends(get_mutations)
):
    """
    Apply a JSON patch document to the user identified by its ID

    Only the operations targeting `/login`, `/firstName` or `/lastName`
    are applied and validated, any other path is ignored silently.

    * `400`: if the patch document is missing or malformed
    * `404`: if the user doesn't exist or the user ID is no valid UUID
    * `422`: if an operation or the patched result is invalid
    """

    mutations.patch(user_id, operations)
    return Response(status_code=204)


@router.delete(
    ITEM_PATH,
    tags=["Users"],
    status_code=204,
    responses={404: {"description": "Unknown user or malformed user ID"}}
)
async def delete_user(user_id: str, mutations: UserMutations = Depends(get_mutations)):
    """
    Delete the user identified by its ID

    * `404`: if the user doesn't exist or the user ID is no valid UUID
    """

    mutations.delete(user_id)
    return Response(status_code=204)


@router.get(
    COLLECTION_PATH,
    tags=["Users"],
    response_model=List[schemas.User],
    responses={400: {"description": "Non-integer page number or page size"}}
)
async def get_users(
        page_number: int = Query(pagination.DEFAULT_PAGE_NUMBER, alias="pageNumber"),
        page_size: int = Query(pagination.DEFAULT_PAGE_SIZE, alias="pageSize"),
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return one page of users, with the pagination metadata in the `X-Pagination` header

    The page number is at least 1 and the page size is clamped to the range
    from 1 to 20. The header contains a JSON object with the links to the
    previous and next page (or null if such a page doesn't exist), the total
    count of users, the page size, the current page and the total number of pages.
    """

    page_number, page_size = pagination.clamp_page_request(page_number, page_size)
    page_list = local.repository.get_page(page_number, page_size)
    page = pagination.plan(page_number, page_size, page_list.total_count, page_list.has_next)
    header = pagination.make_header(
        page,
        lambda number, size: local.link_for("get_users", query={"pageNumber": number, "pageSize": size})
    )
    return negotiation.render(
        local.request,
        [entity.schema for entity in page_list.items],
        headers={"X-Pagination": header.model_dump_json(by_alias=True)},
        root_tag="Users",
        item_tag="User"
    )


@router.options(COLLECTION_PATH, tags=["Users"])
async def get_user_options():
    """
    Return the allowed methods of the user collection in the `Allow` header
    """

    return Response(status_code=200, headers={"Allow": ALLOWED_COLLECTION_METHODS})
