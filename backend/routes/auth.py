# backend/routes/auth.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from database import get_db
from schemas import user as schemas
from services.auth_session import AuthSession
from services.errors import StoreUnavailableError
from utils.audit import write_log, client_ip
from utils.auth_events import SIGNED_IN, AuthEvent
from utils.tokenJWT import bearer_scheme, optional_bearer_scheme

router = APIRouter(tags=["Auth"])

# Process-wide event bus created by the application lifespan
def get_auth_events(request: Request):
    return getattr(request.app.state, "auth_events", None)

# Per-request session with audit logging of its sign-in / sign-out events
def _session(db: Session, request: Request) -> AuthSession:
    session = AuthSession(db, get_auth_events(request))

    def _audit(event: AuthEvent):
        action = "LOGIN" if event.type == SIGNED_IN else "LOGOUT"
        write_log(db, user_id=event.user_id, action=action, resource="auth",
                  status="SUCCESS", ip=event.ip, meta={"email": event.email})

    session.subscribe(_audit)
    return session


# Authenticate admin and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    session = _session(db, request)
    result = session.login(payload.email, payload.password, ip=client_ip(request))

    if not result.success:
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": payload.email, "reason": result.error})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=result.error)

    return {"access_token": result.access_token, "token_type": "bearer"}


# Revoke the presented token
@router.post("/logout")
def logout(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
):
    session = _session(db, request)
    if not session.restore(credentials.credentials):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        session.logout(ip=client_ip(request))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"message": "Signed out"}


# Session state for the admin panel gate; never fails for anonymous callers
@router.get("/session", response_model=schemas.SessionState)
def current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer_scheme),
    db: Session = Depends(get_db),
):
    session = AuthSession(db, get_auth_events(request))
    session.restore(credentials.credentials if credentials else None)
    return schemas.SessionState(
        is_authenticated=session.is_authenticated,
        is_loading=session.is_loading,
        user=schemas.UserResponse.model_validate(session.user) if session.user else None,
    )
