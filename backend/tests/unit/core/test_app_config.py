"""
Unit Tests for configuration, startup validation and error formatting
"""
import pytest

from app.core.config import settings, parse_cors_origins
from app.core.exceptions import (
    ComplaintNotFoundError,
    ConflictError,
    IdentityProviderError,
    ValidationError,
    error_response,
)
from app.main import validate_critical_config


class TestCorsParsing:

    def test_comma_separated(self):
        assert parse_cors_origins("http://a.test, http://b.test") == ["http://a.test", "http://b.test"]

    def test_json_list(self):
        assert parse_cors_origins('["http://a.test"]') == ["http://a.test"]

    def test_empty(self):
        assert parse_cors_origins("") == []


class TestStartupValidation:

    async def test_local_provider_ok(self, monkeypatch):
        monkeypatch.setattr(settings, "IDENTITY_PROVIDER", "local")

        assert await validate_critical_config() is True

    async def test_default_secret_rejected(self, monkeypatch):
        monkeypatch.setattr(settings, "JWT_SECRET_KEY", "CHANGE_ME")

        with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
            await validate_critical_config()

    async def test_supabase_requires_url(self, monkeypatch):
        monkeypatch.setattr(settings, "IDENTITY_PROVIDER", "supabase")
        monkeypatch.setattr(settings, "SUPABASE_URL", "")
        monkeypatch.setattr(settings, "SUPABASE_ANON_KEY", "key")

        with pytest.raises(RuntimeError, match="SUPABASE_URL"):
            await validate_critical_config()

    async def test_unknown_provider(self, monkeypatch):
        monkeypatch.setattr(settings, "IDENTITY_PROVIDER", "ldap")

        with pytest.raises(RuntimeError, match="IDENTITY_PROVIDER"):
            await validate_critical_config()


class TestErrorResponse:

    def test_not_found_shape(self):
        body = error_response(ComplaintNotFoundError("c-1"))

        assert body == {
            "success": False,
            "error": {
                "code": "COMPLAINT_NOT_FOUND",
                "message": "Complaint not found",
                "details": {"resource_type": "Complaint", "resource_id": "c-1"},
            },
            "detail": "Complaint not found",
        }

    @pytest.mark.parametrize("error,status", [
        (ValidationError("bad", field="title"), 422),
        (ConflictError(), 409),
        (IdentityProviderError("down", provider="supabase"), 502),
    ])
    def test_status_codes(self, error, status):
        assert error.status_code == status

    def test_validation_field_detail(self):
        assert ValidationError("bad", field="title").details == {"field": "title"}
