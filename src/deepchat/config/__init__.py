from .settings import DEFAULT_API_BASE, DEFAULT_MODEL, DEFAULT_SYSTEM_PROMPT, ChatConfig, load_config

__all__ = [
    "ChatConfig",
    "load_config",
    "DEFAULT_API_BASE",
    "DEFAULT_MODEL",
    "DEFAULT_SYSTEM_PROMPT",
]
