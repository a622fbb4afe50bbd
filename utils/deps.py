from core.database import SessionLocal
from typing import Annotated
from fastapi import Cookie, Depends, Request
from sqlalchemy.orm import Session
from jose import JWTError
from core.exceptions import UnauthorizedError
from services.token_service import TokenService
from utils.logger import get_logger

logger = get_logger(__name__)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


db_dependency = Annotated[Session, Depends(get_db)]


def get_current_user(request: Request, session_jwt: Annotated[str | None, Cookie(alias="jwt")] = None) -> str:
    """
    Resolve the caller from the `jwt` session cookie.

    Stateless: only the signature and expiry are checked, the store is not
    consulted.
    """
    if not session_jwt:
        logger.info("Rejected request - no session cookie", extra={"path": request.url.path})
        raise UnauthorizedError("Unauthorized - no session cookie found")

    try:
        user_id = TokenService.verify_access_token(session_jwt)
    except JWTError as e:
        logger.warning(
            f"Rejected request - invalid session cookie: {e}",
            extra={"path": request.url.path}
        )
        raise UnauthorizedError("Unauthorized - invalid session cookie")

    request.state.user_id = user_id
    return user_id


user_dependency = Annotated[str, Depends(get_current_user)]


def require_refresh_cookie(refresh_jwt: Annotated[str | None, Cookie(alias="refreshJwt")] = None) -> str:
    """
    Return the raw `refreshJwt` cookie. Redemption itself happens in
    TokenService.rotate_refresh_token, in the same blocking call that commits
    the replacement tokens.
    """
    if not refresh_jwt:
        logger.info("Refresh rejected - no refresh cookie")
        raise UnauthorizedError("Unauthorized - no refresh token provided")

    return refresh_jwt


refresh_cookie_dependency = Annotated[str, Depends(require_refresh_cookie)]
