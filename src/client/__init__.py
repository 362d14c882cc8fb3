"""Python client for the User Accounts API with a persisted session."""

from client.api_client import AccountsClient, ApiError
from client.session import (
    FileSessionStorage,
    MemorySessionStorage,
    SessionEvent,
    SessionState,
    SessionStore,
)

__all__ = [
    'AccountsClient',
    'ApiError',
    'FileSessionStorage',
    'MemorySessionStorage',
    'SessionEvent',
    'SessionState',
    'SessionStore',
]
