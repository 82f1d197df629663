"""Shared fixtures for the DexSpectre test suite."""

import io

import pytest

from dexspectre.analysis.mutability import MutabilityOracle
from dexspectre.catalog import AccessFlags, ClassCatalog, ClassDef
from dexspectre.execution.invocation import InvocationDispatcher
from dexspectre.logging import DexSpectreLogger, LogLevel

TOKEN = "Lcom/example/Token;"
BOX = "Lcom/example/Box;"
HELPER = "Lcom/example/Helper;"


@pytest.fixture
def logger():
    """Logger that records everything and writes to an in-memory stream."""
    return DexSpectreLogger(level=LogLevel.TRACE, color=False, stream=io.StringIO())


@pytest.fixture
def catalog():
    """A final value class, a mutable class and a helper with one declared method."""
    helper = ClassDef(HELPER)
    helper.add_method(
        "transform",
        [BOX, "I"],
        "I",
        access_flags=AccessFlags.PUBLIC | AccessFlags.STATIC,
    )
    return ClassCatalog(
        [
            ClassDef(TOKEN, AccessFlags.PUBLIC | AccessFlags.FINAL),
            ClassDef(BOX, AccessFlags.PUBLIC),
            helper,
        ]
    )


@pytest.fixture
def invoker(catalog, logger):
    return InvocationDispatcher(
        catalog,
        oracle=MutabilityOracle(catalog, logger=logger),
        logger=logger,
    )
