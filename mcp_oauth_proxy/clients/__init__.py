"""Expose constructed client wrappers."""

from .github_auth import (
    AuthorizationStateCodec,
    GitHubOAuthClient,
    InvalidStateError,
    UpstreamOAuthError,
)
from .json_snapshot import InMemorySnapshotStore, JsonFileSnapshotStore, SnapshotBackend
from .sqlite_store import SQLiteSnapshotStore

__all__ = [
    "AuthorizationStateCodec",
    "GitHubOAuthClient",
    "InMemorySnapshotStore",
    "InvalidStateError",
    "JsonFileSnapshotStore",
    "SQLiteSnapshotStore",
    "SnapshotBackend",
    "UpstreamOAuthError",
]
