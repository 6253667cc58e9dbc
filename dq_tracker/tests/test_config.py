"""Tests for Settings parsing and derived values."""

from dq_tracker.core.config import Settings
from dq_tracker.core.identity import IdentityClient


def _settings(**overrides) -> Settings:
    values = {
        "database_url": "postgresql://localhost/test",
        "supabase_url": "https://abc.supabase.co/",
        "supabase_anon_key": "anon-key",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_defaults() -> None:
    settings = _settings(rate_limit_max_requests=100)

    assert settings.rate_limit_window_seconds == 900
    assert settings.rate_limit_max_requests == 100
    assert settings.default_page_size == 10
    assert settings.max_page_size == 100
    assert settings.export_filename == "data-quality-issues.csv"


def test_cors_origin_list_splits_and_trims() -> None:
    settings = _settings(cors_origins="https://app.example.com, http://localhost:3000,")

    assert settings.cors_origin_list == ["https://app.example.com", "http://localhost:3000"]


def test_auth_base_url_strips_trailing_slash() -> None:
    assert _settings().auth_base_url == "https://abc.supabase.co/auth/v1"


def test_identity_client_from_settings() -> None:
    client = IdentityClient.from_settings(_settings())

    assert client.base_url == "https://abc.supabase.co/auth/v1"
    assert client._client.headers["apikey"] == "anon-key"
