"""
Userbase core unit tests
"""

import unittest
from .test_api import (
    GenericEndpointTests,
    UserCreationTests,
    UserDeletionTests,
    UserListingTests,
    UserPatchTests,
    UserReadingTests,
    UserReplacementTests
)
from .test_cli import StandaloneCLITests
from .test_misc import LoggingTests, NegotiationTests, PaginationTests, PatchingTests, ValidationTests
from .test_persistence import DatabaseRestrictionTests, DatabaseUsabilityTests, RepositoryTests


TEST_CLASSES = [
    DatabaseRestrictionTests,
    DatabaseUsabilityTests,
    GenericEndpointTests,
    LoggingTests,
    NegotiationTests,
    PaginationTests,
    PatchingTests,
    RepositoryTests,
    StandaloneCLITests,
    UserCreationTests,
    UserDeletionTests,
    UserListingTests,
    UserPatchTests,
    UserReadingTests,
    UserReplacementTests,
    ValidationTests,
]


def get_suite() -> unittest.TestSuite:
    suite = unittest.TestSuite()
    for cls in TEST_CLASSES:
        for fixture in filter(lambda f: f.startswith("test_"), dir(cls)):
            suite.addTest(cls(fixture))
    return suite
