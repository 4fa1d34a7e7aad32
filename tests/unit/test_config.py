"""Unit tests for configuration loading."""

import pytest

from condosplit.services.config import AppConfig, load_config


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults_without_env(self, monkeypatch, tmp_path):
        """Defaults apply when neither environment nor .env set anything."""
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("LOG_FILE", raising=False)

        config = load_config(tmp_path / "missing.env")

        assert config == AppConfig()
        assert config.database_url == "sqlite:///./condosplit.db"
        assert config.log_file == "logs/condosplit.log"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATABASE_URL", "postgresql://user:pw@localhost/condo")
        monkeypatch.setenv("LOG_FILE", str(tmp_path / "split.log"))

        config = load_config(tmp_path / "missing.env")

        assert config.database_url == "postgresql://user:pw@localhost/condo"
        assert config.log_file == str(tmp_path / "split.log")

    def test_env_file_loaded(self, monkeypatch, tmp_path):
        # setenv first so monkeypatch removes what load_dotenv writes
        for name in ("DATABASE_URL", "LOG_FILE"):
            monkeypatch.setenv(name, "unset")
            monkeypatch.delenv(name)
        env_file = tmp_path / ".env"
        env_file.write_text("DATABASE_URL=sqlite:///from-env-file.db\nLOG_FILE=custom.log\n")

        config = load_config(env_file)

        assert config.database_url == "sqlite:///from-env-file.db"
        assert config.log_file == "custom.log"

    def test_environment_wins_over_env_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///from-environment.db")
        env_file = tmp_path / ".env"
        env_file.write_text("DATABASE_URL=sqlite:///from-env-file.db\n")

        config = load_config(env_file)

        assert config.database_url == "sqlite:///from-environment.db"

    def test_unsupported_backend(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATABASE_URL", "mongodb://localhost/condo")

        with pytest.raises(ValueError, match="Unsupported DATABASE_URL"):
            load_config(tmp_path / "missing.env")
