"""Users, password hashing and the explicit login session."""

import pytest

from meatmaster.common.exceptions import DuplicateEmailError, ValidationError
from meatmaster.core.security import decode_access_token
from meatmaster.core.session import SessionContext
from meatmaster.models import UserRole
from meatmaster.services import user_service
from meatmaster.services.auth_service import AuthService


@pytest.fixture
def auth(db):
    return AuthService(db, SessionContext())


class TestSignup:
    def test_name_defaults_to_email_prefix(self, auth):
        user = auth.signup("khalid@meatmaster.ae", "secret123")
        assert user.name == "khalid"
        assert user.role == UserRole.admin
        assert user.user_id.startswith("ADM-")

    def test_password_is_hashed(self, auth):
        user = auth.signup("khalid@meatmaster.ae", "secret123")
        assert user.password_hash != "secret123"

    def test_duplicate_email(self, auth):
        auth.signup("khalid@meatmaster.ae", "secret123")
        with pytest.raises(DuplicateEmailError):
            auth.signup("Khalid@MeatMaster.ae", "another123")

    def test_short_password(self, auth):
        with pytest.raises(ValidationError):
            auth.signup("khalid@meatmaster.ae", "123")


class TestLogin:
    def test_sets_session_and_issues_token(self, auth):
        auth.signup("sara@meatmaster.ae", "secret123", role=UserRole.staff)
        result = auth.login("sara@meatmaster.ae", "secret123")

        assert result is not None
        assert auth.session.is_authenticated()
        assert auth.current_user().email == "sara@meatmaster.ae"
        assert decode_access_token(result.access_token)["sub"] == "sara@meatmaster.ae"

    def test_wrong_password(self, auth):
        auth.signup("sara@meatmaster.ae", "secret123")
        assert auth.login("sara@meatmaster.ae", "wrong-pass") is None
        assert not auth.session.is_authenticated()

    def test_role_switch(self, auth):
        auth.signup("sara@meatmaster.ae", "secret123", role=UserRole.staff)
        result = auth.login("sara@meatmaster.ae", "secret123", role=UserRole.admin)
        assert result.user.role == UserRole.admin

    def test_logout_clears_session(self, auth):
        auth.signup("sara@meatmaster.ae", "secret123")
        auth.login("sara@meatmaster.ae", "secret123")
        auth.logout()
        assert auth.current_user() is None


class TestUserService:
    def test_verify_user(self, db):
        user_service.create_user(db, "omar@meatmaster.ae", "secret123", "Omar")
        assert user_service.verify_user(db, "omar@meatmaster.ae", "secret123").name == "Omar"
        assert user_service.verify_user(db, "omar@meatmaster.ae", "nope") is None
        assert user_service.verify_user(db, "nobody@meatmaster.ae", "secret123") is None

    def test_change_password(self, db):
        user = user_service.create_user(db, "omar@meatmaster.ae", "secret123", "Omar")
        with pytest.raises(ValidationError):
            user_service.change_password(db, user.id, "wrong", "newsecret")
        assert user_service.change_password(db, user.id, "secret123", "newsecret") is True
        assert user_service.verify_user(db, "omar@meatmaster.ae", "newsecret") is not None
        assert user_service.change_password(db, 9999, "a", "b") is False

    def test_update_email_conflict(self, db):
        user_service.create_user(db, "omar@meatmaster.ae", "secret123", "Omar")
        other = user_service.create_user(db, "huda@meatmaster.ae", "secret123", "Huda")
        with pytest.raises(DuplicateEmailError):
            user_service.update_user(db, other.id, email="omar@meatmaster.ae")

    def test_delete(self, db):
        user = user_service.create_user(db, "omar@meatmaster.ae", "secret123", "Omar")
        assert user_service.delete_user(db, user.id) is True
        assert user_service.delete_user(db, user.id) is False
