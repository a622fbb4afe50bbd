from fastapi import APIRouter, Request, status
from starlette.concurrency import run_in_threadpool
from utils.deps import user_dependency, db_dependency
from schemas.auth_schemas import ChangePasswordRequest
from schemas.user_schemas import UserResponse, UserEnvelope, EditProfileRequest, SessionResponse
from services.auth_service import AuthService
from middleware.rate_limiter import limiter
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/api/v1/user",
    tags=["users"]
)


@router.get("/check-cookie", response_model=SessionResponse)
async def check_cookie(request: Request, user_id: user_dependency):
    """
    Report whether the session cookie is valid (protected endpoint).
    """
    return {"status": "success", "message": "Session cookie is valid", "user_id": user_id}


@router.get("/profile", status_code=status.HTTP_200_OK, response_model=UserEnvelope)
@limiter.limit("30/minute")
async def get_profile(request: Request, user_id: user_dependency, db: db_dependency):
    model = AuthService.get_user_by_id(user_id, db)

    return {
        "status": "success",
        "message": "Profile fetched successfully",
        "data": UserResponse.model_validate(model)
    }


@router.put("/edit-profile", status_code=status.HTTP_200_OK, response_model=UserEnvelope)
@limiter.limit("10/minute")
async def edit_profile(request: Request, body: EditProfileRequest, user_id: user_dependency, db: db_dependency):
    model = AuthService.edit_profile(user_id, body, db)

    return {
        "status": "success",
        "message": "Profile updated successfully",
        "data": UserResponse.model_validate(model)
    }


@router.post("/change-password", status_code=status.HTTP_200_OK, response_model=UserEnvelope)
@limiter.limit("3/minute")
async def change_password(request: Request, body: ChangePasswordRequest, user_id: user_dependency, db: db_dependency):
    """
    Change password after re-verifying the current one (protected endpoint).

    Existing sessions are left as they are.
    """
    model = await run_in_threadpool(AuthService.change_password, user_id, body, db)

    logger.info("Password changed via API", extra={"user_id": user_id})

    return {
        "status": "success",
        "message": "Password changed successfully",
        "data": UserResponse.model_validate(model)
    }
