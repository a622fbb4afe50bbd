import hashlib
import secrets
from datetime import datetime, timezone, timedelta
from fastapi import Response
from jose import jwt, JWTError
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from models.refresh_tokens import RefreshToken
from core.config import settings
from core.exceptions import UnauthorizedError, InternalError
from utils.logger import get_logger, mask_token, sanitize_log_data

logger = get_logger(__name__)

ACCESS_COOKIE = "jwt"
REFRESH_COOKIE = "refreshJwt"

INVALID_REFRESH_TOKEN = "Unauthorized - invalid refresh token"


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TokenService:
    """
    Handles all token operations: minting, cookie binding, single-use
    redemption and revocation of refresh tokens.

    Access tokens are stateless and stay valid until they expire, even after
    logout or a password change. Refresh tokens are only redeemable while
    their row exists in refresh_tokens.
    """

    @staticmethod
    def create_access_token(user_id: str, expires_delta: timedelta = None) -> str:
        """
        Creates a signed access token.

        Args:
            user_id: Owner of the session
            expires_delta: Lifetime override (default: ACCESS_TOKEN_EXPIRE_DAYS)

        Returns:
            JWT access token string
        """
        if expires_delta is None:
            expires_delta = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

        now = datetime.now(timezone.utc)
        payload = {
            "user_id": user_id,
            "type": "access",
            "iat": now,
            "exp": now + expires_delta
        }

        return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.ALGORITHM)

    @staticmethod
    def create_refresh_token(user_id: str, expires_delta: timedelta = None):
        """
        Creates a signed refresh token.

        The random jti keeps two tokens minted for the same user in the same
        second distinct, since the token value itself is the store key.

        Returns:
            Tuple of (refresh_token_string, expires_at)
        """
        if expires_delta is None:
            expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

        now = datetime.now(timezone.utc)
        expires_at = now + expires_delta
        payload = {
            "user_id": user_id,
            "type": "refresh",
            "jti": secrets.token_urlsafe(16),
            "iat": now,
            "exp": expires_at
        }

        token = jwt.encode(payload, settings.REFRESH_JWT_SECRET, algorithm=settings.ALGORITHM)
        return token, expires_at

    @staticmethod
    def decode_token(token: str, secret: str, expected_type: str) -> str:
        """
        Verify signature, expiry and token type, and return the user id.

        Raises:
            JWTError: For any invalid, expired or mismatched token
        """
        payload = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])

        if payload.get("type") != expected_type:
            raise JWTError(f"Expected a {expected_type} token")

        user_id = payload.get("user_id")
        if not user_id or not isinstance(user_id, str):
            raise JWTError("Token has no user_id claim")

        return user_id

    @staticmethod
    def verify_access_token(token: str) -> str:
        return TokenService.decode_token(token, settings.JWT_SECRET, "access")

    @staticmethod
    def issue_tokens(response: Response, user_id: str, db: Session) -> str:
        """
        Mint an access + refresh pair, persist the refresh token and bind
        both as cookies.

        The commit here also finalizes any pending work in the session, such
        as the deletion of a refresh token being redeemed. Cookies are set
        only once the commit has succeeded.

        Returns:
            The access token value. The refresh token never leaves the cookie.

        Raises:
            InternalError: If the tokens could not be signed or stored
        """
        try:
            access_token = TokenService.create_access_token(user_id)
            refresh_token, expires_at = TokenService.create_refresh_token(user_id)

            db.add(RefreshToken(
                user_id=user_id,
                token_hash=_hash_token(refresh_token),
                expires_at=expires_at
            ))
            db.commit()
        except (SQLAlchemyError, JWTError) as e:
            db.rollback()
            logger.error(
                f"Error issuing tokens: {e}",
                extra={"user_id": user_id, "error_type": type(e).__name__},
                exc_info=True
            )
            raise InternalError("Failed to issue tokens")

        TokenService.set_auth_cookies(response, access_token, refresh_token)

        logger.debug(
            "Token pair issued",
            extra=sanitize_log_data({"user_id": user_id, "refresh_token": refresh_token})
        )
        return access_token

    @staticmethod
    def set_auth_cookies(response: Response, access_token: str, refresh_token: str):
        cookie_flags = {
            "httponly": True,
            "secure": settings.cookie_secure,
            "samesite": "strict",
            "path": "/",
        }
        response.set_cookie(
            ACCESS_COOKIE,
            access_token,
            max_age=int(timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS).total_seconds()),
            **cookie_flags
        )
        response.set_cookie(
            REFRESH_COOKIE,
            refresh_token,
            max_age=int(timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS).total_seconds()),
            **cookie_flags
        )

    @staticmethod
    def clear_auth_cookies(response: Response):
        for name in (ACCESS_COOKIE, REFRESH_COOKIE):
            response.delete_cookie(
                name,
                path="/",
                httponly=True,
                secure=settings.cookie_secure,
                samesite="strict"
            )

    @staticmethod
    def redeem_refresh_token(refresh_token: str, db: Session) -> str:
        """
        Validate a refresh token and invalidate it.

        Steps:
        1. The token must be present in the store
        2. Its signature, expiry and type must verify against the refresh secret
        3. The row is removed with a conditional delete; if another request
           removed it first, this one fails

        The delete is flushed but not committed. The caller commits it together
        with the replacement tokens (see rotate_refresh_token), so a failed rotation
        leaves the old token redeemable.

        Returns:
            The user id the token was issued to

        Raises:
            UnauthorizedError: Unknown, used, expired or forged token
            InternalError: Store failure
        """
        token_hash = _hash_token(refresh_token)
        masked = mask_token(refresh_token)

        try:
            stored = db.query(RefreshToken).filter(RefreshToken.token_hash == token_hash).one_or_none()
            if not stored:
                logger.warning("Refresh rejected - token not in store", extra={"refresh_token": masked})
                raise UnauthorizedError(INVALID_REFRESH_TOKEN)

            if _as_utc(stored.expires_at) <= datetime.now(timezone.utc):
                owner_id = stored.user_id
                db.delete(stored)
                db.commit()
                logger.warning("Refresh rejected - stored token expired", extra={"user_id": owner_id})
                raise UnauthorizedError(INVALID_REFRESH_TOKEN)

            try:
                user_id = TokenService.decode_token(refresh_token, settings.REFRESH_JWT_SECRET, "refresh")
            except JWTError as e:
                logger.warning(
                    f"Refresh rejected - verification failed: {e}",
                    extra={"refresh_token": masked}
                )
                raise UnauthorizedError(INVALID_REFRESH_TOKEN)

            if user_id != stored.user_id:
                logger.warning("Refresh rejected - owner mismatch", extra={"user_id": user_id})
                raise UnauthorizedError(INVALID_REFRESH_TOKEN)

            result = db.execute(
                delete(RefreshToken)
                .where(RefreshToken.token_hash == token_hash)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                db.rollback()
                logger.warning("Refresh rejected - token already redeemed", extra={"user_id": user_id})
                raise UnauthorizedError(INVALID_REFRESH_TOKEN)

            db.expunge(stored)

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error verifying refresh token: {e}", exc_info=True)
            raise InternalError("Failed to verify refresh token")

        logger.debug("Refresh token redeemed", extra={"user_id": user_id})
        return user_id

    @staticmethod
    def rotate_refresh_token(response: Response, refresh_token: str, db: Session):
        """
        Redeem a refresh token and issue its replacement pair in one blocking
        call.

        The delete of the old row and the insert of the new one share a single
        commit with no await in between, so the write lock is never held while
        the event loop serves other requests. Run it through run_in_threadpool.

        Returns:
            Tuple of (user_id, access_token)
        """
        user_id = TokenService.redeem_refresh_token(refresh_token, db)
        access_token = TokenService.issue_tokens(response, user_id, db)
        return user_id, access_token

    @staticmethod
    def revoke_refresh_token(refresh_token: str, db: Session) -> bool:
        """
        Delete the stored row for a refresh token (logout).

        Unknown or already-used tokens are a no-op.

        Returns:
            True if a row was deleted
        """
        result = db.execute(
            delete(RefreshToken)
            .where(RefreshToken.token_hash == _hash_token(refresh_token))
            .execution_options(synchronize_session=False)
        )
        db.commit()
        return result.rowcount > 0

