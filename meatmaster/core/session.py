from typing import Optional

from meatmaster.models.user import User


class SessionContext:
    """
    The single active-user slot.

    Set on login, cleared on logout, and passed explicitly to whatever needs
    to know who is acting. The HTTP layer builds one per request from the
    bearer token.
    """

    def __init__(self, user: Optional[User] = None):
        self._user = user

    def set(self, user: User) -> None:
        self._user = user

    def get(self) -> Optional[User]:
        return self._user

    def clear(self) -> None:
        self._user = None

    def is_authenticated(self) -> bool:
        return self._user is not None

    def __repr__(self):
        return f"<SessionContext(user={self._user!r})>"
