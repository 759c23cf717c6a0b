"""Tests for authentication services."""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from community_rewards.services.auth import JWTService, get_current_member


class TestJWTService:
    """Tests for JWT service."""

    def setup_method(self):
        """Set up test fixtures."""
        self.jwt_service = JWTService(
            secret_key="test-secret-key-for-testing-only",
            access_token_expire_minutes=30,
        )

    def test_create_and_verify_access_token(self):
        """Test round-tripping a member token."""
        token = self.jwt_service.create_access_token(42)

        payload = self.jwt_service.verify_access_token(token)

        assert payload is not None
        assert payload.sub == "42"
        assert payload.member_id == 42
        assert payload.type == "access"

    def test_wrong_secret_rejected(self):
        """Test a token signed with another key."""
        other = JWTService(secret_key="another-secret")
        token = other.create_access_token(42)

        assert self.jwt_service.verify_access_token(token) is None

    def test_expired_token_rejected(self):
        """Test an expired token."""
        token = self.jwt_service.create_access_token(42, expires_delta=timedelta(seconds=-1))

        assert self.jwt_service.verify_access_token(token) is None

    def test_refresh_token_rejected(self):
        """Test a token of another type."""
        token = self.jwt_service.create_access_token(42, extra_claims={"type": "refresh"})

        assert self.jwt_service.verify_access_token(token) is None

    def test_non_numeric_subject_rejected(self):
        """Test a token whose subject is not a member id."""
        token = self.jwt_service.create_access_token(42, extra_claims={"sub": "alice"})

        assert self.jwt_service.verify_access_token(token) is None

    def test_garbage_token_rejected(self):
        """Test a malformed token."""
        assert self.jwt_service.verify_access_token("not-a-jwt") is None

    def test_token_is_hs256(self):
        """Test the signing algorithm."""
        token = self.jwt_service.create_access_token(1)

        assert jwt.get_unverified_header(token)["alg"] == "HS256"


class TestGetCurrentMember:
    """Tests for the get_current_member dependency."""

    def setup_method(self):
        """Set up test fixtures."""
        self.jwt_service = JWTService(secret_key="test-secret-key-for-testing-only")

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        """Test a request without a bearer token."""
        with pytest.raises(HTTPException) as exc_info:
            await get_current_member(None, self.jwt_service)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self):
        """Test a request with an invalid token."""
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="bad")

        with pytest.raises(HTTPException) as exc_info:
            await get_current_member(credentials, self.jwt_service)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_token(self):
        """Test a request with a valid token."""
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer",
            credentials=self.jwt_service.create_access_token(5),
        )

        member = await get_current_member(credentials, self.jwt_service)

        assert member.member_id == 5
        assert member.privilege is None
