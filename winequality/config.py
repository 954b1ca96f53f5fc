"""
Database configuration for the wine quality loader.

A single DatabaseConfig is built at process start (from the environment or
from explicit arguments) and handed to every component that talks to
PostgreSQL.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from psycopg.conninfo import make_conninfo
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

TRUE_VALUES = ("true", "1", "yes", "on")


class ConfigurationError(ValueError):
    """Raised when database configuration is missing or inconsistent."""
    pass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'") from e


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got '{value}'") from e


class DatabaseConfig(BaseModel):
    """
    Connection settings for the wines database.

    Attributes:
        host: Database host
        port: Database port
        database: Database name
        user: Database user
        password: Database password (required, never rendered in repr)
        min_size: Minimum pool size
        max_size: Maximum pool size
        timeout: Connect and pool acquisition timeout in seconds
        statement_timeout_ms: Server-side statement timeout (0 disables)
        ssl_enabled: Whether to require SSL
        ssl_ca_cert: CA certificate used to verify the server
        ssl_reject_unauthorized: Verify the server certificate and host name
    """

    host: str = "localhost"
    port: int = Field(5432, ge=1, le=65535)
    database: str = "wine_quality"
    user: str = "postgres"
    password: str = Field(..., repr=False)
    min_size: int = Field(1, ge=0)
    max_size: int = Field(10, ge=1)
    timeout: float = Field(30.0, gt=0)
    statement_timeout_ms: int = Field(60_000, ge=0)
    ssl_enabled: bool = False
    ssl_ca_cert: Path | None = None
    ssl_reject_unauthorized: bool = True

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        """Require the password to be explicitly set."""
        if not v:
            raise ValueError(
                "Database password must be provided. "
                "Set DB_PASSWORD environment variable or pass it explicitly."
            )
        return v

    @model_validator(mode="after")
    def check_pool_and_ssl(self) -> "DatabaseConfig":
        """Check pool bounds and refuse SSL without a readable CA certificate."""
        if self.min_size > self.max_size:
            raise ValueError(
                f"min_size ({self.min_size}) cannot exceed max_size ({self.max_size})"
            )

        if self.ssl_enabled:
            if self.ssl_ca_cert is None:
                raise ValueError("ssl_enabled requires ssl_ca_cert")
            if not self.ssl_ca_cert.is_file():
                # Fail closed: never downgrade to an unencrypted connection
                raise ValueError(f"SSL CA certificate not found at path: {self.ssl_ca_cert}")
        return self

    @classmethod
    def from_env(cls, env_file: str | Path | None = None, **overrides) -> "DatabaseConfig":
        """
        Build configuration from environment variables.

        Args:
            env_file: Optional dotenv file loaded before reading the environment
                (existing variables are not overridden)
            **overrides: Explicit values that win over the environment

        Returns:
            Validated DatabaseConfig

        Raises:
            ConfigurationError: If a variable is malformed or required settings are missing
        """
        if env_file is not None:
            env_path = Path(env_file)
            if not env_path.is_file():
                raise ConfigurationError(f"Environment file not found: {env_path}")
            load_dotenv(env_path, override=False)

        ca_cert = os.getenv("DB_SSL_CA_CERT")
        values = {
            "host": os.getenv("DB_HOST", "localhost"),
            "port": _env_int("DB_PORT", 5432),
            "database": os.getenv("DB_DATABASE", "wine_quality"),
            "user": os.getenv("DB_USER", "postgres"),
            "password": os.getenv("DB_PASSWORD", ""),
            "min_size": _env_int("DB_POOL_MIN_SIZE", 1),
            "max_size": _env_int("DB_POOL_MAX_SIZE", 10),
            "timeout": _env_float("DB_TIMEOUT", 30.0),
            "statement_timeout_ms": _env_int("DB_STATEMENT_TIMEOUT_MS", 60_000),
            "ssl_enabled": _env_bool("DB_SSL_ENABLED", False),
            "ssl_ca_cert": Path(ca_cert) if ca_cert else None,
            "ssl_reject_unauthorized": _env_bool("DB_SSL_REJECT_UNAUTHORIZED", True),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        return cls.build(**values)

    @classmethod
    def build(cls, **values) -> "DatabaseConfig":
        """Construct and validate, reporting problems as ConfigurationError."""
        try:
            return cls(**values)
        except ValidationError as e:
            messages = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid database configuration: {messages}") from e

    def conninfo(self) -> str:
        """
        Render the libpq connection string.

        With SSL on, ssl_reject_unauthorized selects verify-full against
        ssl_ca_cert; without it the connection is encrypted (require) but the
        server certificate is not checked.

        Returns:
            Connection string for psycopg / psycopg_pool
        """
        params = {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "user": self.user,
            "password": self.password,
            "connect_timeout": max(1, int(self.timeout)),
        }

        if self.statement_timeout_ms:
            params["options"] = f"-c statement_timeout={self.statement_timeout_ms}"

        if self.ssl_enabled and self.ssl_reject_unauthorized:
            params["sslmode"] = "verify-full"
            params["sslrootcert"] = str(self.ssl_ca_cert)
        elif self.ssl_enabled:
            # libpq upgrades require to verify-ca when a root cert is given
            params["sslmode"] = "require"
        else:
            params["sslmode"] = "disable"

        return make_conninfo(**params)

    def describe(self) -> str:
        """Connection target without credentials, for logs."""
        ssl = "ssl" if self.ssl_enabled else "no-ssl"
        return f"{self.user}@{self.host}:{self.port}/{self.database} ({ssl})"
