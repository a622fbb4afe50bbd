from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from jose import jwt, JWTError
from core.config import settings

SESSION_COOKIE = "jwt"


def get_user_id(request: Request):
    """
    Rate-limit key: the session's user id when the cookie verifies,
    otherwise the client address.
    """
    token = request.cookies.get(SESSION_COOKIE)
    if token:
        try:
            payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.ALGORITHM])
            user_id = payload.get("user_id")
            if user_id:
                return f"user:{user_id}"
        except JWTError:
            pass

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_user_id,
    default_limits=[settings.RATE_LIMIT],
    enabled=settings.ENV != "testing"
)
