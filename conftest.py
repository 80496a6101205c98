"""
Global pytest configuration and fixtures.
"""

import pytest
from django.core.cache import cache

from messaging.services import WorkspaceStore
from messaging.tests.factories import (
    ConnectedAccountFactory,
    MessageChannelFactory,
    WorkspaceDataSourceFactory,
)


@pytest.fixture(autouse=True)
def clear_cache():
    """Start every test without leftover sync locks."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def workspace(db):
    """Create and return a workspace data source on the default database."""
    return WorkspaceDataSourceFactory()


@pytest.fixture
def store(workspace):
    return WorkspaceStore(alias=workspace.database_alias, schema=workspace.schema)


@pytest.fixture
def connected_account(db):
    """Create and return a Gmail account with tokens."""
    return ConnectedAccountFactory()


@pytest.fixture
def message_channel(connected_account):
    """Create and return the single channel of ``connected_account``."""
    return MessageChannelFactory(connected_account=connected_account)
