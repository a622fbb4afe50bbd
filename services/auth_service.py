from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from utils.hashing import verify_password, get_password_hash
from models.users import User
from schemas.auth_schemas import CreateUserRequest, ChangePasswordRequest
from schemas.user_schemas import EditProfileRequest
from core.exceptions import UnauthorizedError, ConflictError, NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    """
    Account operations: signup, credential checks, password and profile changes.

    These methods hash or verify passwords and are blocking; async routes
    should call them through run_in_threadpool.
    """

    @staticmethod
    def get_user_by_email(email: str, db: Session) -> User | None:
        return db.query(User).filter(User.email == email.strip().lower()).one_or_none()

    @staticmethod
    def get_user_by_id(user_id: str, db: Session) -> User:
        user = db.query(User).filter(User.id == user_id).one_or_none()
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def create_user(request: CreateUserRequest, db: Session) -> User:
        """
        Register a new account.

        Flow:
        1. Reject an email that is already registered
        2. Hash the password
        3. Persist and return the user
        """
        if AuthService.get_user_by_email(request.email, db):
            logger.warning(
                "Signup attempt with existing email",
                extra={"email": request.email}
            )
            raise ConflictError("User already exists")

        model = User(
            name=request.name,
            email=request.email,
            hashed_password=get_password_hash(request.password)
        )

        db.add(model)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race against a concurrent signup with the same email
            db.rollback()
            raise ConflictError("User already exists")

        db.refresh(model)

        logger.info("User created", extra={"user_id": model.id})
        return model

    @staticmethod
    def authenticate_user(email: str, password: str, db: Session) -> User:
        user = AuthService.get_user_by_email(email, db)

        if not user:
            logger.warning("Login failed - user not found", extra={"email": email})
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not verify_password(password, user.hashed_password):
            logger.warning(
                "Login failed - invalid password",
                extra={"user_id": user.id, "email": email}
            )
            raise UnauthorizedError(INVALID_CREDENTIALS)

        logger.debug("User authenticated", extra={"user_id": user.id})
        return user

    @staticmethod
    def change_password(user_id: str, request: ChangePasswordRequest, db: Session) -> User:
        """
        Replace the password after re-checking the current one.

        Outstanding access and refresh tokens stay valid.
        """
        user = AuthService.get_user_by_id(user_id, db)

        if not verify_password(request.current_password, user.hashed_password):
            logger.warning("Password change rejected - wrong current password", extra={"user_id": user_id})
            raise UnauthorizedError("Invalid current password")

        user.hashed_password = get_password_hash(request.new_password)
        db.commit()
        db.refresh(user)

        logger.info("Password changed", extra={"user_id": user_id})
        return user

    @staticmethod
    def edit_profile(user_id: str, request: EditProfileRequest, db: Session) -> User:
        user = AuthService.get_user_by_id(user_id, db)

        if request.email != user.email:
            owner = AuthService.get_user_by_email(request.email, db)
            if owner and owner.id != user.id:
                raise ConflictError("Email already in use")

        user.name = request.name
        user.email = request.email
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Email already in use")

        db.refresh(user)

        logger.info("Profile updated", extra={"user_id": user_id})
        return user
