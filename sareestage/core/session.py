"""Session context holding the signed-in user and identity-change listeners."""

import json
from dataclasses import asdict, dataclass
from typing import Callable, List, Optional

from sareestage.config import logger
from sareestage.core.store import Store

SESSION_KEY = "sareestage_mock_user"

IdentityListener = Callable[[Optional["User"]], None]


@dataclass(frozen=True)
class User:
    uid: str
    email: str
    display_name: Optional[str] = None


class Session:
    """
    Explicit replacement for ambient login state.

    Created at startup around a ``Store``; listeners registered with
    ``on_identity_changed`` are called after every sign-in and sign-out.
    """

    def __init__(self, store: Store):
        self.store = store
        self._listeners: List[IdentityListener] = []

    @property
    def current_user(self) -> Optional[User]:
        raw = self.store.get(SESSION_KEY)
        if not raw:
            return None
        try:
            payload = json.loads(raw)
            return User(
                uid=payload["uid"],
                email=payload["email"],
                display_name=payload.get("displayName"),
            )
        except (ValueError, KeyError, TypeError):
            logger.warning("Ignoring malformed session blob")
            return None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def sign_in(self, user: User) -> None:
        blob = asdict(user)
        blob["displayName"] = blob.pop("display_name")
        self.store.set(SESSION_KEY, json.dumps(blob))
        logger.info("Session started", extra={"uid": user.uid})
        self._notify(user)

    def sign_out(self) -> None:
        self.store.remove(SESSION_KEY)
        logger.info("Session ended")
        self._notify(None)

    def on_identity_changed(self, callback: IdentityListener) -> Callable[[], None]:
        """Register ``callback``; the returned function unsubscribes it."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def close(self) -> None:
        self._listeners.clear()

    def _notify(self, user: Optional[User]) -> None:
        for listener in list(self._listeners):
            listener(user)


__all__ = ["SESSION_KEY", "Session", "User"]
