"""
Persisted client session: the bearer token and the logged-in user.

Both live under their own key. If either is missing the client is logged
out.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from authflow.client.storage import KeyValueStore

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


@dataclass(frozen=True)
class ClientSession:
    user: Dict[str, Any]
    token: str


class ClientSessionStore:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def save(self, user: Dict[str, Any], token: str) -> ClientSession:
        self.store.set(TOKEN_KEY, token)
        self.store.set(USER_KEY, json.dumps(user))
        return ClientSession(user=user, token=token)

    def replace_token(self, token: str) -> None:
        self.store.set(TOKEN_KEY, token)

    def get_token(self) -> Optional[str]:
        return self.store.get(TOKEN_KEY) or None

    def get_user(self) -> Optional[Dict[str, Any]]:
        raw = self.store.get(USER_KEY)
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored user is not valid JSON, treating session as logged out")
            return None
        return user if isinstance(user, dict) else None

    def restore(self) -> Optional[ClientSession]:
        token = self.get_token()
        user = self.get_user()
        if token is None or user is None:
            return None
        return ClientSession(user=user, token=token)

    def clear(self) -> None:
        self.store.remove(TOKEN_KEY)
        self.store.remove(USER_KEY)
