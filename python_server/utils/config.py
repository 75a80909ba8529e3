import json
import os
from typing import List, Optional

from pydantic import BaseModel, Field

from utils.logger import get_logger

logger = get_logger("config")

SERVER_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(SERVER_ROOT), "config.json")


class GenerationConfig(BaseModel):
    provider: str = "gemini"  # gemini | ollama
    model: str = "gemini-2.5-pro"
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "gpt-oss:20b"
    ollama_timeout: int = 300


class AppConfig(BaseModel):
    data_dir: str = Field(default_factory=lambda: os.path.join(os.path.dirname(SERVER_ROOT), "data"))
    log_dir: Optional[str] = None
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000
    allowed_origins: List[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
        "http://127.0.0.1:8000",
        "http://localhost:8000",
    ]
    # Ambient key; a key saved through /api/settings takes precedence
    default_api_key: Optional[str] = None
    generation: GenerationConfig = Field(default_factory=GenerationConfig)


# env var -> (section, field); section None means top level
_ENV_OVERRIDES = {
    "EXTFORGE_DATA_DIR": (None, "data_dir"),
    "EXTFORGE_LOG_DIR": (None, "log_dir"),
    "EXTFORGE_LOG_LEVEL": (None, "log_level"),
    "EXTFORGE_HOST": (None, "host"),
    "EXTFORGE_PORT": (None, "port"),
    "GENERATION_PROVIDER": ("generation", "provider"),
    "GEMINI_MODEL": ("generation", "model"),
    "OLLAMA_HOST": ("generation", "ollama_host"),
    "OLLAMA_MODEL": ("generation", "ollama_model"),
}


def _read_config_file(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: top level must be an object")
        return {}
    return data


def load_config(path: str = None, environ=None) -> AppConfig:
    """
    Build the app config: defaults <- config.json <- environment.
    The config file path comes from the argument, EXTFORGE_CONFIG, or
    config.json next to python_server/.
    """
    environ = os.environ if environ is None else environ
    path = path or environ.get("EXTFORGE_CONFIG") or DEFAULT_CONFIG_PATH

    data = _read_config_file(path)
    generation = dict(data.get("generation") or {})

    for env_name, (section, field) in _ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if not value:
            continue
        if section == "generation":
            generation[field] = value
        else:
            data[field] = value

    data["generation"] = generation
    config = AppConfig.model_validate(data)
    logger.info(f"Config loaded (provider={config.generation.provider}, data_dir={config.data_dir})")
    return config
