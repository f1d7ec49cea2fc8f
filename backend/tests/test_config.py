from timetabler.core.config import DEFAULT_ROOM_CATALOG, Settings


def test_room_catalog_defaults():
    settings = Settings(_env_file=None)
    assert settings.room_catalog == DEFAULT_ROOM_CATALOG
    assert settings.api_prefix == "/api"
    assert settings.random_seed is None


def test_list_settings_accept_comma_separated_env(monkeypatch):
    monkeypatch.setenv("TIMETABLER_ROOM_CATALOG", "Room-1, Lab-Z ,")
    monkeypatch.setenv("TIMETABLER_CORS_ORIGINS", '["http://example.test"]')
    monkeypatch.setenv("TIMETABLER_RANDOM_SEED", "99")

    settings = Settings(_env_file=None)

    assert settings.room_catalog == ["Room-1", "Lab-Z"]
    assert settings.cors_origins == ["http://example.test"]
    assert settings.random_seed == 99
