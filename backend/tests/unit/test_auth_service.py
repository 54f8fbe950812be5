"""Tests for authentication service and token helpers."""

import pytest
from pydantic import ValidationError

from invest_tracker.core.exceptions import AuthenticationError, ConflictError, DomainValidationError
from invest_tracker.core.security import decode_token, verify_password
from invest_tracker.schemas.auth import RegisterRequest
from invest_tracker.services.auth_service import AuthService


class TestRegisterSchema:
    @pytest.mark.parametrize("username", ["ab", "has space", "semi;colon"])
    def test_invalid_usernames(self, username):
        with pytest.raises(ValidationError):
            RegisterRequest(username=username, password="password123")

    def test_short_password(self):
        with pytest.raises(ValidationError):
            RegisterRequest(username="alice", password="short")

    def test_allowed_punctuation(self):
        assert RegisterRequest(username="a.b_c-d", password="password123").username == "a.b_c-d"


class TestAuthService:
    """Test suite for authentication service."""

    @pytest.mark.asyncio
    async def test_register_defaults_display_name(self, db):
        user = await AuthService(db).register("alice", "password123")

        assert user.display_name == "alice"
        assert user.password_hash != "password123"
        assert verify_password("password123", user.password_hash)

    @pytest.mark.asyncio
    async def test_register_duplicate(self, db, test_user):
        with pytest.raises(ConflictError):
            await AuthService(db).register("tester", "password123")

    @pytest.mark.asyncio
    async def test_login_issues_token(self, db, test_user):
        token, user = await AuthService(db).login("tester", "password123")

        payload = decode_token(token)
        assert user.id == test_user.id
        assert payload["sub"] == str(test_user.id)
        assert payload["username"] == "tester"
        assert payload["display_name"] == "Test User"
        assert payload["type"] == "access"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, db, test_user):
        with pytest.raises(AuthenticationError) as exc_info:
            await AuthService(db).login("tester", "wrong-password")

        assert exc_info.value.message == "Invalid username or password"

    @pytest.mark.asyncio
    async def test_login_unknown_user_same_message(self, db):
        """Should not reveal whether the username exists."""
        with pytest.raises(AuthenticationError) as exc_info:
            await AuthService(db).login("nobody", "password123")

        assert exc_info.value.message == "Invalid username or password"

    @pytest.mark.asyncio
    async def test_change_password(self, db, test_user):
        service = AuthService(db)

        await service.change_password(test_user, "password123", "new-password-456")

        token, _ = await service.login("tester", "new-password-456")
        assert token
        with pytest.raises(AuthenticationError):
            await service.login("tester", "password123")

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(self, db, test_user):
        with pytest.raises(DomainValidationError):
            await AuthService(db).change_password(test_user, "nope", "new-password-456")
