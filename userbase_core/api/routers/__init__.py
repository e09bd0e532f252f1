"""
Userbase router modules for handling requests to various endpoints

This module exports the ``router`` object which includes all known
endpoints and path operations of the API.
"""

from ._router import router

# The order of the imports defines the order of the endpoints in the OpenAPI documentation
from . import generic, users
