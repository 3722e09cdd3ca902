"""
Observable client auth state.

Holds the logged-in user, whether the stored session is still being
restored, and whether a login/register submission is in flight. The
inactivity monitor runs while a user is logged in.

Logging out always clears the local session, even when the server call
fails: the client must never stay logged in because the network did.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, List, Optional

from authflow.client.api import ApiError, AuthApiClient
from authflow.client.inactivity import InactivityMonitor
from authflow.client.session_store import ClientSessionStore

logger = logging.getLogger(__name__)

StateListener = Callable[["AuthState"], None]


class SubmissionInProgressError(Exception):
    """A login or registration is already pending."""


class AuthState:
    def __init__(
        self,
        api: AuthApiClient,
        sessions: ClientSessionStore,
        monitor: Optional[InactivityMonitor] = None,
    ):
        self.api = api
        self.sessions = sessions
        self.monitor = monitor

        self.user: Optional[Dict[str, Any]] = None
        self.loading = True
        self.submitting = False

        self._listeners: List[StateListener] = []
        self._idle_logout: Optional[asyncio.Task] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    async def restore(self) -> Optional[Dict[str, Any]]:
        """Load the stored session, if any. `loading` stays True until this returns."""
        self.loading = True
        self._notify()

        session = self.sessions.restore()
        self.loading = False
        if session is None:
            self._set_user(None)
        else:
            self._set_user(session.user)
        return self.user

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        async with self._submission():
            user = await self.api.login(email, password)
        self._set_user(user)
        return user

    async def register(self, name: str, email: str, password: str, password_confirmation: str) -> str:
        """Register; the user stays logged out until the email is verified and they log in."""
        async with self._submission():
            return await self.api.register(name, email, password, password_confirmation)

    async def logout(self) -> None:
        try:
            await self.api.logout()
        except Exception as e:
            logger.warning(f"Server logout failed, clearing local session anyway: {e}")
        finally:
            self._clear_local()

    async def load_profile(self) -> Optional[Dict[str, Any]]:
        """Fetch /me. A 401 means the session is gone server-side, so drop it locally."""
        try:
            user = await self.api.me()
        except ApiError as e:
            if e.is_unauthenticated:
                self._clear_local()
                return None
            raise
        token = self.sessions.get_token()
        if token:
            self.sessions.save(user, token)
        self._set_user(user)
        return user

    async def refresh_token(self) -> Optional[str]:
        try:
            return await self.api.refresh()
        except ApiError as e:
            if e.is_unauthenticated:
                self._clear_local()
                return None
            raise

    async def wait_for_idle_logout(self) -> None:
        if self._idle_logout is not None:
            await self._idle_logout

    def _on_idle(self) -> None:
        logger.info("Logging out due to inactivity")
        self._idle_logout = asyncio.get_running_loop().create_task(self.logout())

    @asynccontextmanager
    async def _submission(self):
        if self.submitting:
            raise SubmissionInProgressError()
        self.submitting = True
        self._notify()
        try:
            yield
        finally:
            self.submitting = False
            self._notify()

    def _set_user(self, user: Optional[Dict[str, Any]]) -> None:
        self.user = user
        if self.monitor is not None:
            if user is not None:
                self.monitor.start(self._on_idle)
            else:
                self.monitor.stop()
        self._notify()

    def _clear_local(self) -> None:
        self.sessions.clear()
        self._set_user(None)
