import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional, cast

from pydantic import BaseModel, ConfigDict, Field

from .utils import load_settings

DEFAULT_URI = "mongodb://localhost:27017"
DEFAULT_CONNECT_TIMEOUT = 10.0

# Environment variables that override values from the config file
ENV_OVERRIDES = {
    'MONGOTEXT_URI': 'mongo_uri',
    'MONGOTEXT_DB_NAME': 'db_name',
    'MONGOTEXT_CONNECT_TIMEOUT': 'connect_timeout',
    'MONGOTEXT_LOG_LEVEL': 'log_level',
}


class ClientSettings(BaseModel):
    """Validated connection settings used by the bootstrap"""
    model_config = ConfigDict(extra='allow')

    mongo_uri: str = DEFAULT_URI
    db_name: str = 'test'
    connect_timeout: float = Field(default=DEFAULT_CONNECT_TIMEOUT, gt=0)
    log_level: str = 'info'


class Config:
    """Static configuration class - no instances, only class methods"""
    _config: Dict[str, Any] = {}
    _settings: Optional[ClientSettings] = None

    @classmethod
    def initialize(cls, config_file: str = '') -> Dict[str, Any]:
        """Initialize the config with values from config file and environment"""
        values = cls._load_system_config(config_file)
        for env_name, key in ENV_OVERRIDES.items():
            env_value = os.getenv(env_name)
            if env_value:
                values[key] = env_value

        cls._settings = ClientSettings(**values)
        cls._config = cls._settings.model_dump()
        return cls._config

    @classmethod
    def reset(cls) -> None:
        """Forget loaded configuration (mainly for testing)"""
        cls._config = {}
        cls._settings = None

    @classmethod
    def settings(cls) -> ClientSettings:
        if cls._settings is None:
            cls.initialize()
        return cast(ClientSettings, cls._settings)

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """Get a configuration value by key"""
        cls.settings()
        return cls._config.get(key, default)

    @classmethod
    def mongo_uri(cls) -> str:
        return cls.settings().mongo_uri

    @classmethod
    def db_name(cls) -> str:
        return cls.settings().db_name

    @classmethod
    def connect_timeout(cls) -> float:
        """Bootstrap timeout in seconds for connect and the liveness ping"""
        return cls.settings().connect_timeout

    @classmethod
    def log_level(cls) -> int:
        """Log level as a logging module constant, INFO when unrecognized"""
        level = logging.getLevelName(cls.settings().log_level.upper())
        return level if isinstance(level, int) else logging.INFO

    @classmethod
    def _load_system_config(cls, config_file: str) -> Dict[str, Any]:
        """
        Load the configuration from a JSON file.
        If no file is given or it is not found, return an empty dict so the defaults apply.
        """
        if len(config_file) > 0:
            config_path = Path(config_file)
            if config_path.exists():
                return load_settings(config_path)
            logging.warning(f'Configuration file "{config_file}" not found. Using defaults.')
        return {}
