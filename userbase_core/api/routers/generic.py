"""
Userbase router module generic functionalities
"""

from typing import Dict

from fastapi import Depends

from ._router import router
from ..dependency import LocalRequestData


@router.get("/health", tags=["Generic"], response_model=Dict[str, str])
async def verify_running_backend(_: LocalRequestData = Depends(LocalRequestData)):
    """
    Return 200 OK with an empty object as body to only verify that the service and the database session work
    """

    return {}
