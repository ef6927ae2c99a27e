import jwt
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from curriculum.db.session import get_db
from curriculum.core.security import decode_access_token
from curriculum.core.errors import auth_required, auth_invalid_credentials, permission_denied
from curriculum.models.user import User


def get_token_header(authorization: str | None = Header(default=None)) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise auth_required()
    return authorization.split(" ", 1)[1]


def get_current_user(db: Session = Depends(get_db), token: str = Depends(get_token_header)) -> User:
    try:
        payload = decode_access_token(token)
        uid = payload.get("sub")
    except jwt.PyJWTError:
        raise auth_invalid_credentials()
    if not uid:
        raise auth_invalid_credentials()
    user = db.query(User).filter(User.id == int(uid), User.is_active == True).first()  # noqa: E712
    if not user:
        raise auth_invalid_credentials()
    return user


def require_roles(*roles: str):
    def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise permission_denied()
        return user

    return _guard
