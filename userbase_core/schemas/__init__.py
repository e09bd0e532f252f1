"""
Userbase schema definitions

The user resource has one read representation (``User``) and two
write representations: ``UserCreation`` to create a new instance
and ``UserUpdate`` to replace an existing instance. Partial updates
are expressed as lists of ``PatchOperation`` models, which are
applied to the ``UserUpdate`` snapshot of the stored user.

This package also contains the ``config`` module, but it's not
exported by default, since it's currently only used internally.
"""

from .bases import *
from .errors import *
