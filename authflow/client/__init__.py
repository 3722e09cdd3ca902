"""
Client-side session handling for the authentication API.

Mirrors what the single-page app keeps in the browser: the stored session,
the API calls, the observable auth state and the inactivity logout.
"""

from authflow.client.api import ApiError, AuthApiClient
from authflow.client.auth_state import AuthState, SubmissionInProgressError
from authflow.client.inactivity import InactivityMonitor, LocalEventSource
from authflow.client.session_store import ClientSession, ClientSessionStore
from authflow.client.storage import JsonFileStore, MemoryStore
from authflow.client.timer import AsyncioScheduler, IdleTimer, ManualClock

__all__ = [
    "ApiError",
    "AsyncioScheduler",
    "AuthApiClient",
    "AuthState",
    "ClientSession",
    "ClientSessionStore",
    "IdleTimer",
    "InactivityMonitor",
    "JsonFileStore",
    "LocalEventSource",
    "ManualClock",
    "MemoryStore",
    "SubmissionInProgressError",
]
