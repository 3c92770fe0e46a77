from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from meatmaster.common.exceptions import DuplicateEmailError, ValidationError
from meatmaster.core.security import get_password_hash, verify_password
from meatmaster.logger_config import logger
from meatmaster.models.user import User, UserRole

MIN_PASSWORD_LENGTH = 6


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _check_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """Get user by database ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email."""
    return db.query(User).filter(User.email == _normalize_email(email)).first()


def get_user_by_user_id(db: Session, user_id: str) -> Optional[User]:
    """Get user by user_id (e.g., 'STF-ABC12345')."""
    return db.query(User).filter(User.user_id == user_id).first()


def get_all_users(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    role: Optional[UserRole] = None,
    search: Optional[str] = None
) -> tuple[List[User], int]:
    """Get all users with optional filtering."""
    query = db.query(User)

    if role:
        query = query.filter(User.role == role)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            (User.name.ilike(search_term)) |
            (User.email.ilike(search_term)) |
            (User.user_id.ilike(search_term))
        )

    total = query.count()
    users = query.order_by(User.id.asc()).offset(skip).limit(limit).all()

    return users, total


def create_user(
    db: Session,
    email: str,
    password: str,
    name: Optional[str] = None,
    role: UserRole = UserRole.staff
) -> User:
    """Create a new user. Name defaults to the part of the email before '@'."""
    email = _normalize_email(email)
    if not email:
        raise ValidationError("Email is required")
    _check_password(password)

    if get_user_by_email(db, email):
        raise DuplicateEmailError(email)

    user_id = User.generate_user_id(role)
    while get_user_by_user_id(db, user_id):
        user_id = User.generate_user_id(role)

    user = User(
        user_id=user_id,
        email=email,
        password_hash=get_password_hash(password),
        name=(name or "").strip() or email.split("@")[0],
        role=role,
    )
    db.add(user)

    try:
        db.commit()
        db.refresh(user)
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating user: {str(e)}")
        raise DuplicateEmailError(email)

    logger.info(f"User {user.user_id} ({user.email}) created with role {user.role.value}")
    return user


def update_user(
    db: Session,
    user_id: int,
    name: Optional[str] = None,
    email: Optional[str] = None,
    role: Optional[UserRole] = None
) -> Optional[User]:
    """Update user information."""
    user = get_user_by_id(db, user_id)
    if not user:
        return None

    if name is not None:
        if not name.strip():
            raise ValidationError("Name is required")
        user.name = name.strip()
    if email is not None:
        email = _normalize_email(email)
        existing_user = get_user_by_email(db, email)
        if existing_user and existing_user.id != user_id:
            raise DuplicateEmailError(email)
        user.email = email
    if role is not None:
        user.role = role

    try:
        db.commit()
        db.refresh(user)
        return user
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating user: {str(e)}")
        raise ValueError("Failed to update user.")


def change_password(
    db: Session,
    user_id: int,
    old_password: str,
    new_password: str
) -> bool:
    """Change user password. False when the user does not exist."""
    user = get_user_by_id(db, user_id)
    if not user:
        return False

    if not verify_password(old_password, user.password_hash):
        raise ValidationError("Invalid old password")
    _check_password(new_password)

    user.password_hash = get_password_hash(new_password)

    try:
        db.commit()
        logger.info(f"Password changed for user {user.user_id}")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error changing password: {str(e)}")
        raise ValueError("Failed to change password.")


def delete_user(db: Session, user_id: int) -> bool:
    """Delete a user."""
    user = get_user_by_id(db, user_id)
    if not user:
        return False

    db.delete(user)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting user: {str(e)}")
        raise ValueError("Failed to delete user.")


def verify_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user when the email and password match, else None."""
    user = get_user_by_email(db, email)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user
