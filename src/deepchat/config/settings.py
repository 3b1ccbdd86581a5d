"""Configuration loading for deepchat.

Hides where settings come from (process environment, a `.env` file or
command-line overrides) behind a single frozen `ChatConfig`.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.deepseek.com"
DEFAULT_MODEL = "deepseek-chat"
DEFAULT_SYSTEM_PROMPT = (
    "You are DeepSeek, a helpful AI assistant. Provide clear, informative, "
    "and engaging responses. Be concise but thorough in your explanations."
)

# Field name -> environment variables, checked in order
ENV_VARS: dict[str, tuple[str, ...]] = {
    "api_key": ("DEEPSEEK_API_KEY", "API_KEY"),
    "api_base": ("DEEPSEEK_API_BASE", "API_BASE"),
    "model": ("DEEPSEEK_MODEL", "MODEL"),
    "max_tokens": ("DEEPSEEK_MAX_TOKENS", "MAX_TOKENS"),
    "temperature": ("DEEPSEEK_TEMPERATURE", "TEMPERATURE"),
    "timeout": ("DEEPSEEK_TIMEOUT", "TIMEOUT"),
    "system_prompt": ("DEEPSEEK_SYSTEM_PROMPT", "SYSTEM_PROMPT"),
    "history_limit": ("DEEPSEEK_HISTORY_LIMIT", "HISTORY_LIMIT"),
    "stream": ("DEEPSEEK_STREAM", "STREAM"),
}


class ChatConfig(BaseModel):
    """Immutable settings shared by every request of a session."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_key: str = Field(min_length=1, repr=False, description="Bearer credential for the API")
    api_base: str = Field(default=DEFAULT_API_BASE, min_length=1, description="API base URL")
    model: str = Field(default=DEFAULT_MODEL, min_length=1, description="Model identifier")
    max_tokens: int = Field(default=4096, gt=0, description="Maximum tokens per reply")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    timeout: float = Field(default=300, gt=0, description="Request timeout in seconds")
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System message seeded at the start of the conversation; empty disables it"
    )
    history_limit: int = Field(
        default=0,
        ge=0,
        description="Non-system messages kept between turns; 0 keeps everything"
    )
    stream: bool = Field(default=False, description="Request incremental (streamed) replies")

    @property
    def masked_api_key(self) -> str:
        """API key with everything but the last four characters hidden."""
        if len(self.api_key) <= 4:
            return "*" * len(self.api_key)
        return "*" * (len(self.api_key) - 4) + self.api_key[-4:]


def _read_env(env: Mapping[str, str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for field, names in ENV_VARS.items():
        for name in names:
            raw = env.get(name)
            if raw is None:
                continue
            # An explicitly empty system prompt means "no system message"
            if raw.strip() or field == "system_prompt":
                values[field] = raw.strip() if field != "system_prompt" else raw
                break
    return values


def _describe(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        field = str(item["loc"][0]) if item["loc"] else "config"
        names = " / ".join(ENV_VARS.get(field, (field,)))
        if field == "api_key" and item["type"] in ("missing", "string_too_short"):
            problems.append(f"{names} environment variable is required")
        else:
            problems.append(f"{names}: {item['msg']}")
    return "; ".join(problems)


def load_config(
    env: Mapping[str, str] | None = None,
    env_file: str | Path | None = None,
    **overrides: Any
) -> ChatConfig:
    """Build and validate the session configuration.

    Args:
        env: Environment mapping to read (default: `os.environ` after
            loading `.env`)
        env_file: Explicit dotenv file to load before reading `os.environ`
        **overrides: Field values that take precedence over the environment.
            `None` values are ignored so unset CLI options fall through.

    Returns:
        Validated, frozen ChatConfig

    Raises:
        ConfigError: If a required value is missing or a value is invalid
    """
    if env is None:
        if env_file is not None and not Path(env_file).is_file():
            raise ConfigError(f"Env file not found: {env_file}")
        load_dotenv(dotenv_path=env_file)
        env = os.environ

    values: dict[str, Any] = _read_env(env)
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = ChatConfig(**values)
    except ValidationError as e:
        raise ConfigError(_describe(e)) from e

    logger.debug(
        "Loaded config: model=%s api_base=%s max_tokens=%d temperature=%.2f timeout=%ss",
        config.model, config.api_base, config.max_tokens, config.temperature, config.timeout
    )
    return config
