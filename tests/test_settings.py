import json

from config import Settings, load_settings, save_settings


def test_missing_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("CHUB_SEARCH_ENABLE_TRANSLATION", raising=False)
    settings = load_settings(tmp_path / "settings.json")

    assert settings.provider == "chub"
    assert settings.find_count == 10
    assert settings.nsfw is False
    assert settings.enable_translation is False
    assert settings.translate_api_endpoint == "http://localhost:7009/translate"
    assert settings.sort_for("janitor") == "popular"


def test_partial_file_is_merged_with_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"nsfw": True, "find_count": 25}), encoding="utf-8")

    settings = load_settings(path, use_env=False)

    assert settings.nsfw is True
    assert settings.find_count == 25
    assert settings.translate_api_key == "sk-*"


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"enable_translation": False}), encoding="utf-8")
    monkeypatch.setenv("CHUB_SEARCH_ENABLE_TRANSLATION", "true")
    monkeypatch.setenv("CHUB_SEARCH_SCRAPE_API_KEY", "fc-123")

    settings = load_settings(path)

    assert settings.enable_translation is True
    assert settings.scrape_api_key == "fc-123"


def test_save_then_load(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    save_settings(Settings(provider="janitor", translate_target="ko"), path)

    settings = load_settings(path, use_env=False)

    assert settings.provider == "janitor"
    assert settings.translate_target == "ko"
