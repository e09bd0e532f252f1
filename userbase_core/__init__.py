"""
Userbase core REST API package

The API serves a single ``user`` resource with create, read, replace,
partial update, delete and paginated list operations. Use the module
``userbase_core.api`` to create the ASGI application or run the package
as a module to get access to the command-line interface.
"""

__version__ = "0.1.0"
