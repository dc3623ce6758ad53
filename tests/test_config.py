"""Tests for environment loading and the script runner."""

import pytest

from sanity_ops import config
from sanity_ops.config import ConfigError


class TestRequireEnv:

    def test_returns_values(self, monkeypatch):
        monkeypatch.setenv("SANITY_PROJECT_ID", "proj")
        monkeypatch.setenv("SANITY_DATASET", "production")
        assert config.require_env("SANITY_PROJECT_ID", "SANITY_DATASET") == {
            "SANITY_PROJECT_ID": "proj",
            "SANITY_DATASET": "production",
        }

    def test_lists_missing_names(self, monkeypatch):
        monkeypatch.setenv("SANITY_PROJECT_ID", "proj")
        monkeypatch.delenv("SANITY_DATASET", raising=False)
        monkeypatch.setenv("SANITY_TOKEN", "")
        with pytest.raises(ConfigError, match="SANITY_DATASET, SANITY_TOKEN"):
            config.require_env(*config.SANITY_ENV_VARS)


class TestStoreClientFactory:

    def test_builds_client_from_env(self, monkeypatch):
        monkeypatch.setenv("SANITY_PROJECT_ID", "proj")
        monkeypatch.setenv("SANITY_DATASET", "staging")
        monkeypatch.setenv("SANITY_TOKEN", "tok")
        monkeypatch.setenv("SANITY_API_VERSION", "2025-02-19")

        client = config.get_store_client()

        assert client.dataset == "staging"
        assert client.base_url == "https://proj.api.sanity.io/v2025-02-19"

    def test_explicit_api_version_wins(self, monkeypatch):
        monkeypatch.setenv("SANITY_PROJECT_ID", "proj")
        monkeypatch.setenv("SANITY_DATASET", "production")
        monkeypatch.setenv("SANITY_TOKEN", "tok")
        assert config.get_store_client(api_version="2023-05-03").api_version == "2023-05-03"


class TestLoadEnv:

    def test_first_existing_file_wins(self, tmp_path, monkeypatch):
        first = tmp_path / "missing" / ".env"
        second = tmp_path / ".env"
        second.write_text("SANITY_OPS_TEST_VALUE=from-file\n")
        monkeypatch.setattr(config, "ENV_PATHS", [first, second])
        monkeypatch.delenv("SANITY_OPS_TEST_VALUE", raising=False)

        assert config.load_env() == second
        assert config.os.getenv("SANITY_OPS_TEST_VALUE") == "from-file"
        monkeypatch.delenv("SANITY_OPS_TEST_VALUE")

    def test_no_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "ENV_PATHS", [tmp_path / ".env"])
        assert config.load_env() is None


class TestRunScript:

    def test_returns_result(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(config, "ENV_PATHS", [tmp_path / ".env"])
        assert config.run_script(lambda x, y=0: x + y, 1, y=2) == 3
        assert "WARNING: No .env file found" in capsys.readouterr().out

    def test_error_exits_non_zero(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(config, "ENV_PATHS", [tmp_path / ".env"])

        def boom():
            raise ConfigError("Missing SANITY_TOKEN")

        with pytest.raises(SystemExit) as exc:
            config.run_script(boom)
        assert exc.value.code == 1
        assert "ERROR: Missing SANITY_TOKEN" in capsys.readouterr().out


def test_data_dir_override(tmp_path, monkeypatch):
    monkeypatch.setenv("SANITY_OPS_DATA_DIR", str(tmp_path))
    assert config.get_data_dir() == tmp_path
