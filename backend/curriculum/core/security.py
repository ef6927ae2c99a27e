import time
import jwt
from passlib.context import CryptContext
from .config import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # stored value is not a recognised hash (e.g. a legacy plaintext row)
        return False


def create_access_token(subject: str, claims: dict | None = None, expires_in_seconds: int | None = None) -> str:
    exp = int(time.time()) + int(expires_in_seconds or settings.ACCESS_TOKEN_EXPIRES_SECONDS)
    payload = {"sub": subject, "exp": exp, **(claims or {})}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
