"""Tests for the secrets preload configuration."""

from unittest.mock import MagicMock

import pytest
import yaml

from docqa.secret_fetcher import SecretFetchError
from docqa.secrets_config import (
    SecretsPreloadConfig,
    dump_preload_config,
    extension_environment,
    load_preload_config,
    warm_cache,
)


class TestSecretsPreloadConfig:
    def test_defaults(self):
        config = SecretsPreloadConfig(secrets=["prod/openai"])
        assert config.cache_ttl_minutes == 10
        assert config.max_items == 1000
        assert config.port == 2773

    def test_secret_ids_are_cleaned(self):
        config = SecretsPreloadConfig(secrets=[" prod/a ", "prod/b", "prod/a", ""])
        assert config.secrets == ["prod/a", "prod/b"]

    @pytest.mark.parametrize("secrets", [[], ["  "]])
    def test_needs_a_secret(self, secrets):
        with pytest.raises(ValueError):
            SecretsPreloadConfig(secrets=secrets)


class TestYamlFile:
    def test_dump_then_load(self, tmp_path):
        path = tmp_path / "conf" / "secrets.yaml"
        dump_preload_config(SecretsPreloadConfig(secrets=["prod/openai"], cache_ttl_minutes=5), path)

        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert raw["secrets"] == ["prod/openai"]
        assert load_preload_config(path).cache_ttl_minutes == 5

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "secrets.yaml"
        path.write_text("cache_ttl_minutes: 10\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid secrets config"):
            load_preload_config(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "secrets.yaml"
        path.write_text("secrets: [prod/a\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid secrets config"):
            load_preload_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_preload_config(tmp_path / "absent.yaml")


class TestExtensionEnvironment:
    def test_ttl_in_seconds(self):
        env = extension_environment(SecretsPreloadConfig(secrets=["s"]))
        assert env == {
            "PARAMETERS_SECRETS_EXTENSION_CACHE_ENABLED": "true",
            "PARAMETERS_SECRETS_EXTENSION_CACHE_SIZE": "1000",
            "PARAMETERS_SECRETS_EXTENSION_HTTP_PORT": "2773",
            "SECRETS_MANAGER_TTL": "600",
        }


class TestWarmCache:
    def test_reports_each_secret(self):
        client = MagicMock()

        def get_secret(secret_id):
            if secret_id == "prod/broken":
                raise SecretFetchError("boom", secret_id=secret_id, status_code=400)
            return MagicMock()

        client.get_secret.side_effect = get_secret
        status = warm_cache(SecretsPreloadConfig(secrets=["prod/ok", "prod/broken"]), client)

        assert status == {"prod/ok": "ok", "prod/broken": "error: SecretFetchError"}
        assert client.get_secret.call_count == 2
