from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt

from scoped_query.core.config import settings


def create_jwt(payload: dict, secret: str | None = None, expires_delta: timedelta | None = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = expires_delta or timedelta(minutes=settings.JWT_TTL_MINUTES)
    data = payload.copy()
    data.update({"iat": int(now.timestamp()), "exp": int((now + ttl).timestamp())})
    return jwt.encode(data, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str, secret: str | None = None) -> dict:
    return jwt.decode(token, secret or settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


__all__ = ["JWTError", "create_jwt", "decode_jwt"]
