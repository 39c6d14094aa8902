# backend/utils/auth_events.py
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

@dataclass(frozen=True)
class AuthEvent:
    type: str
    user_id: Optional[int] = None
    email: Optional[str] = None
    ip: Optional[str] = None

Listener = Callable[[AuthEvent], None]

class AuthEventBus:
    """Publishes sign-in / sign-out notifications to subscribed listeners."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def emit(self, event: AuthEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                # One failing listener must not break the login/logout that triggered it
                logger.exception("Auth event listener failed for %s: %s", event.type, e)

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self):
        return len(self._listeners)

# Listener registered at startup, records session changes in the application log
def log_auth_event(event: AuthEvent) -> None:
    if event.type == SIGNED_IN:
        logger.info("Admin %s signed in from %s", event.email, event.ip)
    elif event.type == SIGNED_OUT:
        logger.info("Admin %s signed out", event.email)
