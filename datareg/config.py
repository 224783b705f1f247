import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self

from datareg.util.paths import RegistryPaths


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by DATAREG_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        yaml_data = self._load_yaml_config()
        return yaml_data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("DATAREG_CONFIG_FILE")
        if config_file:
            path = Path(config_file).expanduser()
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "Dataset Registry"
    version: str = "0.1.0"
    description: str = "Registry of content-addressed datasets and their analyses"


class DatabaseConfig(BaseModel):
    """Database configuration (nested in Config, uses env_nested_delimiter).

    An empty url means "derive from RegistryPaths"; Config fills it in with a
    SQLite file under the data directory.
    """

    url: str = ""
    echo: bool = False
    auto_migrate: bool = True  # SQLite only; PostgreSQL is migrated by hand


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from DATAREG_LOG_FILE env var."""
        return os.environ.get("DATAREG_LOG_FILE")


class WorkerConfig(BaseModel):
    """Notification worker configuration."""

    poll_interval: float = Field(default=0.5, gt=0)  # Seconds between outbox polls
    stale_claim_interval: float = Field(default=60.0, gt=0)


class AuthConfig(BaseModel):
    """Where the caller's identity comes from.

    datareg does not authenticate anyone itself. An upstream gateway does,
    and passes the actor id on in this header.
    """

    actor_header: str = "X-Actor-Id"


class NotificationConfig(BaseModel):
    """Where committed notifications are delivered."""

    sink: Literal["log", "webhook"] = "log"
    webhook_urls: list[str] = []
    timeout: float = Field(default=10.0, gt=0)

    @model_validator(mode="after")
    def require_webhook_urls(self) -> Self:
        if self.sink == "webhook" and not self.webhook_urls:
            raise ValueError("notifications.webhook_urls is required when sink is 'webhook'")
        return self


class Config(BaseSettings):
    server: Server = Server()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    worker: WorkerConfig = WorkerConfig()
    auth: AuthConfig = AuthConfig()
    notifications: NotificationConfig = NotificationConfig()

    model_config = {
        "env_prefix": "DATAREG_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows DATAREG_DATABASE__URL override
    }

    @model_validator(mode="after")
    def derive_database_url(self) -> Self:
        """Point an unset database url at the SQLite file under DATAREG_DATA_DIR."""
        if not self.database.url:
            paths = RegistryPaths()
            self.database = DatabaseConfig(
                url=f"sqlite+aiosqlite:///{paths.database_file}",
                echo=self.database.echo,
                auto_migrate=self.database.auto_migrate,
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init kwargs, environment, .env, DATAREG_CONFIG_FILE yaml, secrets."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called once, early in application startup.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    for noisy in ("httpx", "httpcore", "asyncio", "aiosqlite", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
