from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from meatmaster.core.dependencies import get_current_active_user, get_db, get_session_context
from meatmaster.core.session import SessionContext
from meatmaster.logger_config import logger
from meatmaster.models.user import User
from meatmaster.schemas.auth import LoginRequest, LoginResponse, Logout, SignupRequest
from meatmaster.schemas.user import PasswordChange, ProfileUpdate, UserResponse
from meatmaster.services.auth_service import AuthService
from meatmaster.services.user_service import change_password, update_user

router = APIRouter()


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def signup(
    signup_data: SignupRequest,
    db: Session = Depends(get_db)
):
    """
    Create an account. The name defaults to the part of the email before '@'.
    """
    return AuthService(db).signup(
        email=signup_data.email,
        password=signup_data.password,
        name=signup_data.name,
        role=signup_data.role,
    )


@router.post("/login", response_model=LoginResponse)
def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Login endpoint - Authenticate user and return JWT token.
    """
    result = AuthService(db).login(login_data.email, login_data.password, role=login_data.role)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    return LoginResponse(
        access_token=result.access_token,
        token_type=result.token_type,
        user=UserResponse.model_validate(result.user),
    )


@router.post("/logout", response_model=Logout)
def logout(
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    AuthService(db, session).logout()
    return Logout(message="Logged out Successfully")


@router.get("/me", response_model=UserResponse)
def read_me(current_user: User = Depends(get_current_active_user)):
    return current_user


@router.put("/me", response_model=UserResponse)
def update_me(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    user = update_user(db, current_user.id, name=profile_data.name)
    logger.info(f"Profile of {current_user.email} updated")
    return user


@router.post("/change-password", response_model=Logout)
def change_my_password(
    password_data: PasswordChange,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    change_password(db, current_user.id, password_data.old_password, password_data.new_password)
    return Logout(message="Password changed successfully")
