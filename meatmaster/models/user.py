import enum
import secrets
import string
from sqlalchemy import Column, DateTime, Enum, Integer, String

from meatmaster.core.database import Base
from meatmaster.utils.dates import now


class UserRole(str, enum.Enum):
    admin = "admin"
    staff = "staff"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(20), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.staff)
    created_at = Column(DateTime, default=now)
    updated_at = Column(DateTime, default=now, onupdate=now)

    @staticmethod
    def generate_user_id(role: UserRole) -> str:
        """Generate a short unique user ID based on role"""
        prefix = {
            UserRole.admin: "ADM",
            UserRole.staff: "STF",
        }[role]

        random_part = ''.join(secrets.choice(string.ascii_uppercase + string.digits)
                              for _ in range(8))

        return f"{prefix}-{random_part}"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    def __repr__(self):
        return f"<User(user_id='{self.user_id}', email='{self.email}')>"
