import logging
from fastapi import APIRouter, Depends, Request
from sqlalchemy import func
from sqlalchemy.orm import Session
from curriculum.db.session import get_db
from curriculum.db.queries import atomic, serialize
from curriculum.core.config import settings
from curriculum.core.response import ok, created
from curriculum.core.errors import auth_invalid_credentials
from curriculum.core.security import create_access_token, hash_password, verify_password
from curriculum.schemas.auth import LoginIn, UserCreateIn
from curriculum.api.deps import get_current_user, require_roles
from curriculum.models.base import utcnow
from curriculum.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


def public_user(u: User) -> dict:
    return serialize(u, exclude=("password_hash",))


@router.post("/login")
def login(payload: LoginIn, request: Request, db: Session = Depends(get_db)):
    u = (
        db.query(User)
        .filter(func.lower(User.email) == payload.email.lower(), User.is_active == True)  # noqa: E712
        .first()
    )
    if not u or not verify_password(payload.password, u.password_hash):
        logger.info("Login rejected for %s", payload.email)
        raise auth_invalid_credentials()
    with atomic(db):
        u.last_login_at = utcnow()
    token = create_access_token(str(u.id), {"role": u.role})
    return ok(
        request,
        {
            "message": "Login successful",
            "user": public_user(u),
            "access_token": token,
            "token_type": "Bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRES_SECONDS,
        },
    )


@router.get("/auth/me")
def me(request: Request, user: User = Depends(get_current_user)):
    return ok(request, public_user(user))


@router.post("/users")
def create_user(
    payload: UserCreateIn,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_roles("admin")),
):
    u = User(
        email=payload.email.lower(),
        password_hash=hash_password(payload.password),
        name=payload.name,
        role=payload.role,
        is_active=True,
    )
    with atomic(db, "Email already registered"):
        db.add(u)
    logger.info("User %s (%s) created by %s", u.email, u.role, admin.email)
    return created(request, {"user": public_user(u)})
