"""
Settings for ff-reporting database connections.

Values are read from the environment (prefix ``FF_REPORTING_DB_``) or a
``.env`` file, e.g. ``FF_REPORTING_DB_HOST=db.internal``.
"""

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Connection settings for the reporting database."""

    model_config = SettingsConfigDict(
        env_prefix="FF_REPORTING_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    dbname: str = "postgres"
    user: str = "postgres"
    password: SecretStr = SecretStr("")
    host: str = "localhost"
    port: int = 5432
    connect_timeout: int = 30

    @field_validator("port")
    @classmethod
    def _validate_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"Invalid port: {value}")
        return value
