from typing import Annotated
from fastapi import APIRouter, Cookie, Request, Response
from starlette import status
from starlette.concurrency import run_in_threadpool
from utils.deps import db_dependency, refresh_cookie_dependency
from schemas.auth_schemas import CreateUserRequest, LoginRequest, AccessTokenResponse
from schemas.user_schemas import UserResponse, UserEnvelope, LoginResponse
from services.auth_service import AuthService
from services.token_service import TokenService
from middleware.rate_limiter import limiter
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/api/v1/user",
    tags=["auth"]
)


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=UserEnvelope)
@limiter.limit("3/minute")
async def sign_up(request: Request, body: CreateUserRequest, db: db_dependency):
    # Hashing is CPU bound, keep it off the event loop
    user = await run_in_threadpool(AuthService.create_user, body, db)

    logger.info("User registered successfully", extra={"user_id": user.id})

    return {
        "status": "success",
        "message": "User created successfully",
        "data": UserResponse.model_validate(user)
    }


@router.post("/login", response_model=LoginResponse)
@limiter.limit("5/minute")
async def login(request: Request, response: Response, body: LoginRequest, db: db_dependency):
    user = await run_in_threadpool(AuthService.authenticate_user, body.email, body.password, db)

    access_token = await run_in_threadpool(TokenService.issue_tokens, response, user.id, db)

    logger.info("User logged in successfully", extra={"user_id": user.id})

    return {
        "status": "success",
        "message": "User logged in successfully",
        "data": UserResponse.model_validate(user),
        "access_token": access_token
    }


@router.post("/logout", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def logout(request: Request, response: Response, db: db_dependency,
                 refresh_jwt: Annotated[str | None, Cookie(alias="refreshJwt")] = None):
    """
    Clear both auth cookies and delete the presented refresh token so it
    cannot be redeemed afterwards. The access token stays valid until it
    expires.
    """
    if refresh_jwt:
        revoked = await run_in_threadpool(TokenService.revoke_refresh_token, refresh_jwt, db)
        logger.info("Refresh token revoked on logout", extra={"revoked": revoked})

    TokenService.clear_auth_cookies(response)

    logger.info("User logged out")

    return {"status": "success", "message": "User logged out successfully"}


@router.post("/refresh-token", response_model=AccessTokenResponse)
@limiter.limit("10/minute")
async def refresh_token(request: Request, response: Response, refresh_jwt: refresh_cookie_dependency, db: db_dependency):
    """
    Exchange a refresh cookie for a new access + refresh pair.

    Redemption and reissue run as one blocking call so the deletion of the
    old row and the insert of the new one commit together off the event loop.
    """
    user_id, access_token = await run_in_threadpool(TokenService.rotate_refresh_token, response, refresh_jwt, db)
    request.state.user_id = user_id

    logger.info("Access token refreshed", extra={"user_id": user_id})

    return {"status": "success", "access_token": access_token}
