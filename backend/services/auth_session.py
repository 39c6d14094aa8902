"""
Admin authentication session.

Wraps credential checks and token issuing behind a small session object
exposing ``is_authenticated``, ``is_loading``, ``login``, ``logout`` and a
subscription to sign-in / sign-out events.
"""
import logging
from typing import Callable, List, Optional

from jose import JWTError
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.users import RevokedToken, User
from services.errors import StoreUnavailableError
from utils.auth_events import SIGNED_IN, SIGNED_OUT, AuthEvent, AuthEventBus, Listener
from utils.hashing import verify_password
from utils.tokenJWT import create_access_token, decode_access_token, resolve_user

logger = logging.getLogger(__name__)


class LoginResult(BaseModel):
    success: bool
    error: Optional[str] = None
    access_token: Optional[str] = None


class AuthSession:
    def __init__(self, db: Session, bus: Optional[AuthEventBus] = None):
        self.db = db
        self._bus = bus
        self._listeners: List[Listener] = []
        self.user: Optional[User] = None
        self.token: Optional[str] = None
        self.is_loading = False

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self, event: AuthEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
        if self._bus is not None:
            self._bus.emit(event)

    def restore(self, token: Optional[str]) -> bool:
        """Check an existing token and adopt its user. Emits no event."""
        self.is_loading = True
        try:
            self.user = resolve_user(self.db, token) if token else None
            self.token = token if self.user else None
        except SQLAlchemyError as e:
            logger.exception("Auth check error: %s", e)
            self.user, self.token = None, None
        finally:
            self.is_loading = False
        return self.is_authenticated

    def login(self, email: str, password: str, ip: Optional[str] = None) -> LoginResult:
        normalized = (email or "").strip().lower()
        try:
            user = self.db.query(User).filter(func.lower(User.email) == normalized).first()
        except SQLAlchemyError as e:
            logger.exception("Login lookup failed: %s", e)
            return LoginResult(success=False, error="Something went wrong. Please try again later.")

        if not user or not verify_password(password, user.password_hash):
            return LoginResult(success=False, error="Invalid login credentials")

        self.user = user
        self.token = create_access_token(data={"sub": user.email, "role": user.role})
        self._notify(AuthEvent(SIGNED_IN, user_id=user.id, email=user.email, ip=ip))
        return LoginResult(success=True, access_token=self.token)

    def logout(self, ip: Optional[str] = None) -> None:
        if not self.is_authenticated:
            return
        user = self.user
        try:
            jti = decode_access_token(self.token).get("jti")
        except JWTError:
            jti = None
        if jti:
            try:
                self.db.add(RevokedToken(jti=jti))
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.exception("Failed to revoke token for %s: %s", user.email, e)
                raise StoreUnavailableError() from e

        self.user, self.token = None, None
        self._notify(AuthEvent(SIGNED_OUT, user_id=user.id, email=user.email, ip=ip))
