"""Tests for configuration loading."""

from trinketbot.config import load_config


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.setenv("TRINKETBOT_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.delenv("MARKETPLACE_TOKEN", raising=False)
    monkeypatch.delenv("TRINKETBOT_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    config = load_config()
    assert config.token is None
    assert config.database_url is None
    assert config.marketplace.cooldown_days == 14
    assert config.marketplace.max_items == 10
    assert config.iso.bump_cooldown_hours == 72
    assert len(config.iso.thread_ids) == 12
    assert config.gateway.reconnect_delay == 5.0


def test_load_config_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
gateway:
  backend: inmemory
  reconnect_delay: 1.5
marketplace:
  forum_id: "123"
  tag_ids: ["a", "b"]
  cooldown_days: 7
iso:
  thread_ids: ["x"]
database_url: sqlite:///tmp/bot.db
"""
    )
    monkeypatch.setenv("TRINKETBOT_CONFIG", str(config_path))
    monkeypatch.delenv("TRINKETBOT_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    config = load_config()
    assert config.gateway.backend == "inmemory"
    assert config.gateway.reconnect_delay == 1.5
    assert config.marketplace.forum_id == "123"
    assert config.marketplace.tag_ids == ["a", "b"]
    assert config.marketplace.cooldown_days == 7
    assert config.marketplace.max_photos == 10
    assert config.iso.thread_ids == ["x"]
    assert config.database_url == "sqlite:///tmp/bot.db"


def test_environment_overrides_file(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("token: from-file\ndatabase_url: sqlite:///a.db\n")
    monkeypatch.setenv("MARKETPLACE_TOKEN", "from-env")
    monkeypatch.setenv("DATABASE_URL", "file:///tmp/docs")
    monkeypatch.delenv("TRINKETBOT_DATABASE_URL", raising=False)

    config = load_config(str(config_path))
    assert config.token == "from-env"
    assert config.database_url == "file:///tmp/docs"


def test_empty_file_gives_defaults(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("")
    monkeypatch.delenv("MARKETPLACE_TOKEN", raising=False)
    config = load_config(str(config_path))
    assert config.token is None
    assert config.marketplace.session_ttl == 1800.0
