import pytest
import yaml

from trendfeed.config import Config, ConfigModel, load_config, save_config
from trendfeed.errors import ConfigurationError
from trendfeed.query import Period


def test_defaults():
    config = ConfigModel()
    assert config.sources.qiita.per_page == 100
    assert config.sources.zenn.order == "daily"
    assert config.sources.note.max_keywords == 6
    assert config.sources.note.blocked_authors == ["enginner_skill"]
    assert len(config.sources.hatena.feeds) == 7
    assert config.collection.timeout_seconds == 60
    assert config.live.sources == ["qiita", "zenn"]
    assert config.query.default_limit == 12


def test_round_trip(tmp_path):
    path = tmp_path / "config.yaml"
    config = ConfigModel(postgres={"database": "feeds"})
    save_config(config, path)

    loaded = load_config(path)

    assert loaded.postgres.database == "feeds"
    assert loaded.sources.note.keywords == config.sources.note.keywords


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_invalid_values_raise_configuration_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"sources": {"zenn": {"order": "hourly"}}}))
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("postgres: [unclosed")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path).postgres.database == "trendfeed"


def test_secrets_come_from_environment(monkeypatch):
    monkeypatch.setenv("QIITA_ACCESS_TOKEN", "from-env")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("FEED_DB_PASSWORD", "pw")
    config = Config(model=ConfigModel(postgres={"password_env": "FEED_DB_PASSWORD"}))

    assert config.get_qiita_token() == "from-env"
    assert config.get_llm_config()["api_key"] == "sk-test"
    assert config.get_db_config()["password"] == "pw"


def test_qiita_token_falls_back_to_file_value(monkeypatch):
    monkeypatch.delenv("QIITA_ACCESS_TOKEN", raising=False)
    config = Config(model=ConfigModel(sources={"qiita": {"access_token": "from-file"}}))
    assert config.get_qiita_token() == "from-file"


def test_live_default_period_is_validated_on_load(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"live": {"default_period": "fortnight"}}))
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_live_default_period_round_trips(tmp_path):
    path = tmp_path / "config.yaml"
    save_config(ConfigModel(live={"default_period": "week"}), path)

    assert load_config(path).live.default_period == Period.WEEK
