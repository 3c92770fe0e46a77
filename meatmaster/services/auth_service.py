from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from meatmaster.core.config import settings
from meatmaster.core.security import create_access_token
from meatmaster.core.session import SessionContext
from meatmaster.logger_config import logger
from meatmaster.models.user import User, UserRole
from meatmaster.services import user_service


@dataclass
class LoginResult:
    user: User
    access_token: str
    token_type: str = "bearer"


def issue_token(user: User) -> str:
    return create_access_token(
        data={"sub": user.email, "user_id": user.user_id, "role": user.role.value},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


class AuthService:
    """Signup, login and logout against an explicit SessionContext."""

    def __init__(self, db: Session, session: Optional[SessionContext] = None):
        self.db = db
        self.session = session or SessionContext()

    def signup(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: UserRole = UserRole.admin,
    ) -> User:
        """Create an account. Raises DuplicateEmailError when the email is taken."""
        user = user_service.create_user(self.db, email=email, password=password, name=name, role=role)
        logger.info(f"User {user.email} signed up")
        return user

    def login(self, email: str, password: str, role: Optional[UserRole] = None) -> Optional[LoginResult]:
        """
        Verify credentials and make the user the active one.

        A role picked at login replaces the stored role. Returns None on bad
        credentials; the session is left untouched in that case.
        """
        logger.info(f"Login attempt for email: {email}")
        user = user_service.verify_user(self.db, email, password)
        if not user:
            logger.warning(f"Failed login for email: {email}")
            return None

        if role is not None and user.role != role:
            user.role = role
            self.db.commit()
            self.db.refresh(user)
            logger.info(f"User {user.email} switched role to {role.value}")

        self.session.set(user)
        logger.info(f"User {user.email} logged in successfully")
        return LoginResult(user=user, access_token=issue_token(user))

    def logout(self) -> None:
        user = self.session.get()
        self.session.clear()
        if user is not None:
            logger.info(f"User {user.email} logged out")

    def current_user(self) -> Optional[User]:
        return self.session.get()
