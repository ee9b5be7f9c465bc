from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AgentSettings(BaseSettings):
    """
    Agent configuration.
    Loads from environment variables (prefix OLLAMA_AGENT_) and a local .env file.
    """

    # Inference backend
    base_url: str = Field(default="http://localhost:11434")
    model: str = Field(default="qwen3:8b")
    timeout_s: Optional[float] = Field(default=None, description="Backend request timeout; None waits forever")

    # Tools
    workspace: Path = Field(default_factory=Path.cwd)
    restrict_to_workspace: bool = Field(default=False)

    log_level: str = Field(default="WARNING")

    model_config = SettingsConfigDict(
        env_prefix="OLLAMA_AGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def load_settings(**overrides) -> AgentSettings:
    """Build settings, letting explicit (non-None) overrides win over the environment."""
    return AgentSettings(**{key: value for key, value in overrides.items() if value is not None})
