from __future__ import annotations

from tracker.core.settings import Settings


def test_comma_separated_lists_and_normalization(monkeypatch):
    monkeypatch.setenv("TRACKER_LIVE_TRACKING_ROLES", "Admin, Ops Lead ,")
    monkeypatch.setenv("ALLOW_ORIGINS", "https://a.example,https://b.example")
    monkeypatch.setenv("TRACKER_TIMEZONE", "Not/AZone")
    monkeypatch.setenv("TRACKER_SEARCH_LIMIT", "0")

    settings = Settings(_env_file=None)

    assert settings.live_tracking_roles == ["admin", "ops lead"]
    assert settings.allow_origins == ["https://a.example", "https://b.example"]
    assert settings.timezone == "UTC"
    assert settings.search_limit == 50


def test_defaults(monkeypatch):
    for name in ("TRACKER_LIVE_TRACKING_ROLES", "LIVE_TRACKING_ROLES", "TRACKER_TIMEZONE", "TIMEZONE", "ENV", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.live_tracking_roles == ["admin", "superadmin", "super admin"]
    assert settings.timezone == "UTC"
    assert settings.is_production is False
