"""Database connection configuration."""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..core.errors import ConfigurationError

_SQLITE_DRIVERS = {"sqlite", "sqlite3"}
_URL_SCHEMES = {
    "postgres": "postgresql",
    "postgresql": "postgresql",
    "mysql": "mysql+pymysql",
}


class DBConfig(BaseModel):
    """Where the certificate database lives.

    Accepts either a full SQLAlchemy ``url`` or a ``driver`` plus
    ``data_source`` pair, e.g.::

        {"driver": "sqlite3", "data_source": "certs.db"}
    """

    driver: str = Field(default="sqlite3", description="Database driver name")
    data_source: str = Field(default="", description="Driver-specific data source")
    url: Optional[str] = Field(default=None, description="SQLAlchemy URL, overrides driver")

    def sqlalchemy_url(self) -> str:
        """Build the SQLAlchemy URL for this configuration.

        Raises:
            ConfigurationError: If the driver is unknown or the data source is empty
        """
        if self.url:
            return self.url
        if not self.data_source:
            raise ConfigurationError("database config needs a data_source or url")
        if "://" in self.data_source:
            return self.data_source

        driver = self.driver.lower()
        if driver in _SQLITE_DRIVERS:
            if self.data_source == ":memory:":
                return "sqlite://"
            return f"sqlite:///{self.data_source}"
        if driver in _URL_SCHEMES:
            return f"{_URL_SCHEMES[driver]}://{self.data_source}"
        raise ConfigurationError(f"unsupported database driver: {self.driver}")

    @classmethod
    def from_file(cls, config_path: str | Path) -> "DBConfig":
        """Load a database config from a YAML or JSON file.

        Args:
            config_path: Path to the config file

        Returns:
            DBConfig instance

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(f"config file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"failed to load database config: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"database config must be a mapping: {config_path}")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"invalid database config: {e}") from e
