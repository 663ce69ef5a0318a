# tests/config/test_settings.py
from __future__ import annotations

import os

import pytest

from config.settings import Config

ENV_KEYS = [
    "DB_HOST", "DB_DATABASE", "DB_USER", "DB_PASSWORD", "DB_PORT", "DB_PREFIX",
    "ORM_CACHE_OBJECTS", "ORM_CACHE_TTL", "LOG_LEVEL", "LOG_DIR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    saved = dict(os.environ)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    os.environ.clear()
    os.environ.update(saved)


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.database.host == "localhost"
        assert config.database.port == 5432
        assert config.orm.table_prefix == "tb_"
        assert config.orm.cache_objects is True
        assert config.orm.cache_ttl == 3600

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DB_PREFIX", "ps_")
        monkeypatch.setenv("ORM_CACHE_OBJECTS", "no")
        monkeypatch.setenv("DB_PORT", "6432")

        config = Config()

        assert config.orm.table_prefix == "ps_"
        assert config.orm.cache_objects is False
        assert config.database.port == 6432

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("DB_DATABASE=catalog\nORM_CACHE_TTL=60\n", encoding="utf-8")

        config = Config(str(env_file))

        assert config.database.database == "catalog"
        assert config.orm.cache_ttl == 60

    def test_invalid_int_falls_back(self, monkeypatch):
        monkeypatch.setenv("ORM_CACHE_TTL", "soon")
        assert Config().orm.cache_ttl == 3600

    def test_validate(self, monkeypatch):
        assert Config().validate() is True
        monkeypatch.setenv("DB_PORT", "0")
        assert Config().validate() is False

    def test_required_variable(self):
        with pytest.raises(ValueError, match="DB_SCHEMA"):
            Config()._get_env_var("DB_SCHEMA", required=True)

    def test_to_dict_hides_password(self, monkeypatch):
        monkeypatch.setenv("DB_PASSWORD", "secret")
        data = Config().to_dict()
        assert "password" not in data["database"]
        assert data["orm"]["table_prefix"] == "tb_"
