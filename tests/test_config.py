from core.config import AppSettings, write_user_env_vars
from core.logging_config import configure_logging


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("FACEOFF_AI_MODEL", "gpt-4o-mini-search-preview")
    monkeypatch.setenv("FACEOFF_AI_WEB_SEARCH", "true")
    monkeypatch.setenv("FACEOFF_AI_TIMEOUT_SECONDS", "12.5")

    settings = AppSettings(_env_file=None)

    assert settings.ai_model == "gpt-4o-mini-search-preview"
    assert settings.ai_web_search is True
    assert settings.ai_timeout_seconds == 12.5


def test_defaults_point_at_hosted_provider(monkeypatch):
    for name in ("FACEOFF_AI_BASE_URL", "FACEOFF_AI_API_KEY"):
        monkeypatch.delenv(name, raising=False)

    settings = AppSettings(_env_file=None)

    assert settings.ai_base_url == "https://api.openai.com/v1"
    assert settings.is_local_provider() is False
    assert AppSettings(_env_file=None, ai_base_url="http://127.0.0.1:1234/v1").is_local_provider() is True


def test_write_user_env_vars_merges_and_skips_none(tmp_path):
    env_path = tmp_path / "cfg" / ".env"
    env_path.parent.mkdir()
    env_path.write_text("# old\nFACEOFF_AI_MODEL=old-model\nFACEOFF_LOG_LEVEL='INFO'\n", encoding="utf-8")

    write_user_env_vars(
        {"FACEOFF_AI_MODEL": "gpt-4o-mini", "FACEOFF_AI_API_KEY": None},
        env_path=env_path,
    )

    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert "FACEOFF_AI_MODEL=gpt-4o-mini" in lines
    assert "FACEOFF_LOG_LEVEL=INFO" in lines
    assert not any(line.startswith("FACEOFF_AI_API_KEY") for line in lines)


def test_configure_logging_is_idempotent():
    root = configure_logging("DEBUG")
    configure_logging("info")

    handlers = [h for h in root.handlers if h.get_name() == "faceoff-rich"]
    assert len(handlers) == 1
    assert root.level == 20
    configure_logging("WARNING")
