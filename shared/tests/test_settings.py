from shared.config.settings import (DatabaseSettings, ExtractionSettings,
                                    Settings, XAISettings)


def test_database_url_assembled_from_parts(monkeypatch):
    monkeypatch.delenv("POSTGRES_URL", raising=False)
    monkeypatch.setenv("POSTGRES_USER", "rz")
    monkeypatch.setenv("POSTGRES_PASSWORD", "secret")
    monkeypatch.setenv("POSTGRES_HOST", "db")
    monkeypatch.setenv("POSTGRES_DB", "readzero")

    assert DatabaseSettings().postgres_url == "postgresql://rz:secret@db:5432/readzero"


def test_reader_first_sites_accepts_comma_separated_env(monkeypatch):
    monkeypatch.setenv("READER_FIRST_SITES", "medium.com, youtube.com ,")
    assert ExtractionSettings().reader_first_sites == ["medium.com", "youtube.com"]


def test_sections_can_be_built_by_field_name():
    settings = Settings(xai=XAISettings(api_key="k"))
    assert settings.xai.api_key == "k"
    assert settings.extraction.analysis_min_length == 200
    assert settings.completion.max_tokens == 1024
