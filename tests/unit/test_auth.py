"""
Unit tests for backend/auth.py
"""

import time

import jwt
import pytest
from fastapi import HTTPException

from backend.auth import get_current_user, validate_api_key, validate_jwt
from backend.settings import Settings

SECRET = "test-jwt-secret-with-enough-length-for-hs256"


def _token(sub="user-1", aud="authenticated", exp_offset=3600, secret=SECRET):
    payload = {"sub": sub, "aud": aud, "exp": int(time.time()) + exp_offset}
    return jwt.encode(payload, secret, algorithm="HS256")


def _settings(**kwargs) -> Settings:
    kwargs.setdefault("environment", "test")
    return Settings(_env_file=None, **kwargs)


@pytest.mark.unit
class TestValidateJwt:

    def test_valid_supabase_token(self):
        settings = _settings(supabase_jwt_secret=SECRET)
        assert validate_jwt(f"Bearer {_token()}", settings) == "user-1"

    def test_expired_token(self):
        settings = _settings(supabase_jwt_secret=SECRET)
        with pytest.raises(HTTPException) as exc:
            validate_jwt(f"Bearer {_token(exp_offset=-60)}", settings)
        assert exc.value.status_code == 401
        assert exc.value.detail == "Token expired"

    def test_wrong_audience(self):
        settings = _settings(supabase_jwt_secret=SECRET)
        with pytest.raises(HTTPException) as exc:
            validate_jwt(f"Bearer {_token(aud='anon')}", settings)
        assert exc.value.status_code == 401

    def test_bad_signature(self):
        settings = _settings(supabase_jwt_secret=SECRET)
        with pytest.raises(HTTPException):
            validate_jwt(f"Bearer {_token(secret='some-other-secret-of-sufficient-size')}", settings)

    def test_missing_subject(self):
        settings = _settings(supabase_jwt_secret=SECRET)
        with pytest.raises(HTTPException) as exc:
            validate_jwt(f"Bearer {_token(sub='')}", settings)
        assert exc.value.detail == "Token missing user ID"

    def test_requires_bearer_scheme(self):
        with pytest.raises(HTTPException) as exc:
            validate_jwt("Token abc", _settings())
        assert exc.value.status_code == 401

    def test_unverified_token_in_test_environment(self):
        token = _token(sub="user-9", secret="unknown-secret-of-sufficient-size-0")
        assert validate_jwt(f"Bearer {token}", _settings()) == "user-9"

    def test_opaque_token_is_user_id_in_test_environment(self):
        assert validate_jwt("Bearer user-2", _settings()) == "user-2"

    def test_production_requires_secret(self):
        with pytest.raises(HTTPException) as exc:
            validate_jwt("Bearer user-2", _settings(environment="production"))
        assert exc.value.status_code == 500


@pytest.mark.unit
class TestValidateApiKey:

    def test_key_with_embedded_user(self):
        settings = _settings(api_keys="sk_one,sk_two")
        assert validate_api_key("sk_two:user-7", settings) == "user-7"

    def test_key_with_header_user(self):
        settings = _settings(api_keys="sk_one")
        assert validate_api_key("sk_one", settings, "user-3") == "user-3"

    def test_key_without_user_is_admin(self):
        assert validate_api_key("sk_one", _settings(api_keys="sk_one")) == "admin"

    def test_unknown_key(self):
        with pytest.raises(HTTPException) as exc:
            validate_api_key("sk_nope", _settings(api_keys="sk_one"))
        assert exc.value.detail == "Invalid API key"

    def test_no_keys_configured(self):
        with pytest.raises(HTTPException) as exc:
            validate_api_key("sk_one", _settings(api_keys=""))
        assert exc.value.status_code == 401


@pytest.mark.unit
class TestGetCurrentUser:

    @pytest.mark.asyncio
    async def test_api_key_takes_precedence(self, monkeypatch):
        monkeypatch.setattr("backend.auth.get_settings", lambda: _settings(api_keys="sk_one"))
        user = await get_current_user(
            authorization="Bearer user-1", x_api_key="sk_one:user-5", x_user_id=None
        )
        assert user == "user-5"

    @pytest.mark.asyncio
    async def test_missing_credentials(self, monkeypatch):
        monkeypatch.setattr("backend.auth.get_settings", lambda: _settings())
        with pytest.raises(HTTPException) as exc:
            await get_current_user(authorization=None, x_api_key=None, x_user_id=None)
        assert exc.value.status_code == 401
