"""Expose constructed client wrappers."""

from .cafe24_api import (
    AuthenticatedRequestExecutor,
    Cafe24ApiError,
    Cafe24UnauthorizedError,
)
from .cafe24_auth import (
    Cafe24OAuthClient,
    OAuthRefreshRejectedError,
    OAuthTokenExchangeError,
    TokenGrant,
)
from .dynamodb import DynamoDBClient
from .sqlite_store import SQLiteStore

__all__ = [
    "AuthenticatedRequestExecutor",
    "Cafe24ApiError",
    "Cafe24OAuthClient",
    "Cafe24UnauthorizedError",
    "DynamoDBClient",
    "OAuthRefreshRejectedError",
    "OAuthTokenExchangeError",
    "SQLiteStore",
    "TokenGrant",
]
