"""
Tests for configuration management.

Tests config loading from:
1. Environment variables
2. YAML files
3. Combined (env overrides YAML)
"""

import tempfile
from pathlib import Path

import pytest
import yaml

from codegraph.config import ChatConfig, ComparisonConfig, Config, LLMConfig

ENV_VARS = [
    "CODEGRAPH_LLM_PROVIDER",
    "CODEGRAPH_LLM_MODEL",
    "CODEGRAPH_LLM_API_KEY",
    "CODEGRAPH_LLM_BASE_URL",
    "CODEGRAPH_STORE_BACKEND",
    "CODEGRAPH_STORE_DB_PATH",
    "CODEGRAPH_SNAPSHOT_DIR",
    "CODEGRAPH_CHAT_HISTORY_LIMIT",
    "CODEGRAPH_CHAT_SUMMARY_CHARS",
    "CODEGRAPH_CHAT_TIMEOUT",
    "CODEGRAPH_COMPARE_MAX_ENTRIES",
    "CODEGRAPH_LOG_LEVEL",
    "CODEGRAPH_LOG_TO_FILE",
    "OPENAI_API_KEY",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the loader reads, including ones a .env file sets later."""
    for name in ENV_VARS:
        # setenv records the original state so teardown restores it
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_creation(self):
        """Test creating config with defaults."""
        config = Config()

        # LLM defaults
        assert config.llm.provider == "openai"
        assert config.llm.model == "gpt-4o"
        assert config.llm.api_key is None

        # Store defaults
        assert config.store.backend == "sqlite"
        assert config.store.db_path == "data/codegraph.db"
        assert Path(config.snapshots.base_dir) == (
            Path(tempfile.gettempdir()) / "codegraph-snapshots"
        )

        # Chat defaults
        assert config.chat.history_limit == 10
        assert config.chat.summary_char_budget == 1500
        assert config.chat.title_max_length == 50
        assert config.chat.message_fetch_limit == 20
        assert config.chat.completion_timeout is None

        # Explain and comparison defaults
        assert config.explain.max_tokens == 2000
        assert config.comparison.max_diff_entries == 50
        assert config.comparison.prompt_path_sample == 20
        assert config.comparison.prompt_change_sample == 10
        assert config.comparison.temperature == 0.3

    def test_invalid_values_rejected(self):
        """Test field constraints."""
        with pytest.raises(ValueError):
            ChatConfig(history_limit=-1)
        with pytest.raises(ValueError):
            ComparisonConfig(max_diff_entries=0)

    def test_llm_config_creation(self):
        """Test creating LLM config."""
        llm_config = LLMConfig(provider="ollama", model="llama3.1:8b", temperature=0.7)

        assert llm_config.provider == "ollama"
        assert llm_config.temperature == 0.7


class TestConfigFromEnv:
    """Test loading configuration from environment variables."""

    def test_from_env_basic(self, clean_env):
        """Test loading basic config from environment."""
        clean_env.setenv("CODEGRAPH_LLM_PROVIDER", "ollama")
        clean_env.setenv("CODEGRAPH_LLM_MODEL", "llama3.1:8b")
        clean_env.setenv("CODEGRAPH_STORE_BACKEND", "memory")
        clean_env.setenv("CODEGRAPH_SNAPSHOT_DIR", "/var/lib/codegraph")

        config = Config.from_env()

        assert config.llm.provider == "ollama"
        assert config.llm.model == "llama3.1:8b"
        assert config.store.backend == "memory"
        assert config.snapshots.base_dir == "/var/lib/codegraph"

    def test_from_env_with_numbers(self, clean_env):
        """Test numeric values are converted."""
        clean_env.setenv("CODEGRAPH_CHAT_HISTORY_LIMIT", "4")
        clean_env.setenv("CODEGRAPH_CHAT_SUMMARY_CHARS", "800")
        clean_env.setenv("CODEGRAPH_CHAT_TIMEOUT", "30")
        clean_env.setenv("CODEGRAPH_COMPARE_MAX_ENTRIES", "25")

        config = Config.from_env()

        assert config.chat.history_limit == 4
        assert config.chat.summary_char_budget == 800
        assert config.chat.completion_timeout == 30.0
        assert config.comparison.max_diff_entries == 25

    def test_from_env_with_booleans(self, clean_env):
        """Test boolean values are converted."""
        clean_env.setenv("CODEGRAPH_LOG_TO_FILE", "yes")

        assert Config.from_env().logging.log_to_file is True

    def test_api_key_fallback(self, clean_env):
        """Test OPENAI_API_KEY is used when no CodeGraph key is set."""
        clean_env.setenv("OPENAI_API_KEY", "sk-openai")
        assert Config.from_env().llm.api_key == "sk-openai"

        clean_env.setenv("CODEGRAPH_LLM_API_KEY", "sk-codegraph")
        assert Config.from_env().llm.api_key == "sk-codegraph"

    def test_from_env_missing_optional_values(self, clean_env):
        """Test unset variables fall back to defaults."""
        config = Config.from_env()

        assert config.llm.api_key is None
        assert config.llm.base_url is None
        assert config.chat.completion_timeout is None

    def test_from_env_with_dotenv_file(self, clean_env, tmp_path):
        """Test loading from a .env file."""
        env_file = tmp_path / ".env.test"
        env_file.write_text("CODEGRAPH_LLM_MODEL=gpt-4o-mini\nCODEGRAPH_STORE_BACKEND=memory\n")

        config = Config.from_env(env_file=env_file)

        assert config.llm.model == "gpt-4o-mini"
        assert config.store.backend == "memory"


class TestConfigFromYaml:
    """Test loading configuration from YAML files."""

    def test_from_yaml_basic(self, tmp_path):
        """Test loading sections from YAML."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(
            yaml.safe_dump(
                {
                    "llm": {"provider": "ollama", "model": "qwen2.5"},
                    "chat": {"history_limit": 6},
                    "comparison": {"max_diff_entries": 10},
                }
            )
        )

        config = Config.from_yaml(yaml_file)

        assert config.llm.provider == "ollama"
        assert config.llm.model == "qwen2.5"
        assert config.chat.history_limit == 6
        assert config.chat.summary_char_budget == 1500
        assert config.comparison.max_diff_entries == 10

    def test_from_yaml_empty_file(self, tmp_path):
        """Test an empty file yields defaults."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("")

        assert Config.from_yaml(yaml_file) == Config()

    def test_from_yaml_missing_file(self, tmp_path):
        """Test a missing file is reported."""
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "missing.yaml")


class TestConfigPriority:
    """Test environment variables override YAML."""

    def test_env_overrides_yaml_section(self, clean_env, tmp_path):
        """Test only sections set in the environment replace YAML values."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(
            yaml.safe_dump(
                {
                    "llm": {"provider": "ollama", "model": "from-yaml"},
                    "store": {"backend": "sqlite", "db_path": "yaml.db"},
                }
            )
        )
        clean_env.setenv("CODEGRAPH_STORE_BACKEND", "memory")

        config = Config.from_env_or_yaml(yaml_path=yaml_file)

        assert config.llm.model == "from-yaml"
        assert config.store.backend == "memory"

    def test_no_yaml(self, clean_env):
        """Test env-only loading when no YAML file exists."""
        clean_env.setenv("CODEGRAPH_LLM_MODEL", "env-model")

        config = Config.from_env_or_yaml(yaml_path="does-not-exist.yaml")

        assert config.llm.model == "env-model"
