"""
Configuration for CodeGraph.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
import tempfile
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _default_snapshot_dir() -> str:
    return str(Path(tempfile.gettempdir()) / "codegraph-snapshots")


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = "openai"  # openai, ollama
    model: str = "gpt-4o"
    base_url: str | None = None
    api_key: str | None = None
    temperature: float = 0.2
    max_tokens: int = 2000
    timeout: float = 120.0


class StoreConfig(BaseModel):
    """Key-value store backing analysis records and chat sessions."""

    backend: str = "sqlite"  # sqlite, memory
    db_path: str = "data/codegraph.db"


class SnapshotConfig(BaseModel):
    """Snapshot persistence configuration."""

    base_dir: str = Field(default_factory=_default_snapshot_dir)


class ChatConfig(BaseModel):
    """Chat context assembly configuration."""

    history_limit: int = Field(default=10, ge=0)
    summary_char_budget: int = Field(default=1500, ge=1)
    title_max_length: int = Field(default=50, ge=1)
    message_fetch_limit: int = Field(default=20, ge=1)
    # None waits for the provider's own timeout
    completion_timeout: float | None = None
    max_tokens: int = 1500
    temperature: float = 0.2


class ExplainConfig(BaseModel):
    """Architecture explanation configuration."""

    max_tokens: int = 2000
    temperature: float = 0.2


class ComparisonConfig(BaseModel):
    """Snapshot comparison configuration."""

    max_diff_entries: int = Field(default=50, ge=1)
    prompt_path_sample: int = Field(default=20, ge=1)
    prompt_change_sample: int = Field(default=10, ge=1)
    max_tokens: int = 1000
    temperature: float = 0.3


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class Config(BaseModel):
    """Main configuration."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    snapshots: SnapshotConfig = Field(default_factory=SnapshotConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    explain: ExplainConfig = Field(default_factory=ExplainConfig)
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            CODEGRAPH_LLM_PROVIDER: LLM provider (openai, ollama)
            CODEGRAPH_LLM_MODEL: LLM model name
            CODEGRAPH_LLM_BASE_URL: LLM base URL
            CODEGRAPH_LLM_API_KEY: LLM API key (falls back to OPENAI_API_KEY)
            CODEGRAPH_STORE_BACKEND: Record store backend (sqlite, memory)
            CODEGRAPH_STORE_DB_PATH: SQLite database path
            CODEGRAPH_SNAPSHOT_DIR: Snapshot base directory
            CODEGRAPH_CHAT_HISTORY_LIMIT: Prior messages kept in chat context
            CODEGRAPH_CHAT_SUMMARY_CHARS: Per-file summary character budget
            CODEGRAPH_CHAT_TIMEOUT: Chat completion timeout in seconds
            CODEGRAPH_COMPARE_MAX_ENTRIES: Cap on diff lists sent to the LLM
        """
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None:
                return default
            if value == "":
                return default
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        chat_timeout = get_env("CODEGRAPH_CHAT_TIMEOUT")

        return cls(
            llm=LLMConfig(
                provider=get_env("CODEGRAPH_LLM_PROVIDER", "openai"),
                model=get_env("CODEGRAPH_LLM_MODEL", "gpt-4o"),
                base_url=get_env("CODEGRAPH_LLM_BASE_URL"),
                api_key=get_env("CODEGRAPH_LLM_API_KEY", os.getenv("OPENAI_API_KEY") or None),
                temperature=get_env("CODEGRAPH_LLM_TEMPERATURE", 0.2),
                max_tokens=get_env("CODEGRAPH_LLM_MAX_TOKENS", 2000),
                timeout=get_env("CODEGRAPH_LLM_TIMEOUT", 120.0),
            ),
            store=StoreConfig(
                backend=get_env("CODEGRAPH_STORE_BACKEND", "sqlite"),
                db_path=get_env("CODEGRAPH_STORE_DB_PATH", "data/codegraph.db"),
            ),
            snapshots=SnapshotConfig(
                base_dir=get_env("CODEGRAPH_SNAPSHOT_DIR", _default_snapshot_dir()),
            ),
            chat=ChatConfig(
                history_limit=get_env("CODEGRAPH_CHAT_HISTORY_LIMIT", 10),
                summary_char_budget=get_env("CODEGRAPH_CHAT_SUMMARY_CHARS", 1500),
                completion_timeout=float(chat_timeout) if chat_timeout is not None else None,
            ),
            comparison=ComparisonConfig(
                max_diff_entries=get_env("CODEGRAPH_COMPARE_MAX_ENTRIES", 50),
            ),
            logging=LoggingConfig(
                level=get_env("CODEGRAPH_LOG_LEVEL", "INFO"),
                log_to_file=get_env("CODEGRAPH_LOG_TO_FILE", False),
                log_dir=get_env("CODEGRAPH_LOG_DIR", "logs"),
                file_rotation=get_env("CODEGRAPH_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("CODEGRAPH_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("CODEGRAPH_LOG_COMPRESSION", "zip"),
                serialize=get_env("CODEGRAPH_LOG_SERIALIZE", True),
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        return cls(**(data or {}))

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file=env_file)

        final_dict = {**config_dict}

        # Only sections that differ from defaults count as env overrides
        default = cls()
        for section in ("llm", "store", "snapshots", "chat", "comparison", "logging"):
            env_section = getattr(env_config, section)
            if env_section != getattr(default, section):
                final_dict[section] = env_section.model_dump()

        return cls(**final_dict) if final_dict else env_config


# Default config instance
default_config = Config()
