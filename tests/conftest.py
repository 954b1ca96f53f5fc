"""
Pytest configuration and fixtures for wine-quality-loader tests

Integration and e2e tests share one PostgreSQL container per session, built from
docker/init-db.sql. Unit tests use the sample data, logging and config/test.env fixtures.
"""
import logging
import os
from typing import AsyncGenerator, Generator

import psycopg
import pytest
import pytest_asyncio
from dotenv import dotenv_values
from testcontainers.postgres import PostgresContainer

from winequality.config import DatabaseConfig
from winequality.warehouse import DatabaseConnectionPool

ROOT_DIR = os.path.dirname(os.path.dirname(__file__))
FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")
TEST_ENV_PATH = os.path.join(ROOT_DIR, "config", "test.env")


# =======================
# PYTEST CONFIGURATION
# =======================

MARKERS = {
    "unit": "no database or Docker needed",
    "integration": "warehouse code against a PostgreSQL container",
    "e2e": "full reload from CSV files to the wines table",
}


def pytest_configure(config):
    """Register the test tiers so -m unit / -m 'not e2e' work without warnings"""
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")


# =======================
# DATABASE FIXTURES
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    One PostgreSQL container for the whole session, schema already applied

    Yields:
        Running PostgresContainer
    """
    with PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_loader",
        password="test_password",
        dbname="test_wine_quality"
    ) as postgres:
        schema_path = os.path.join(ROOT_DIR, "docker", "init-db.sql")
        with open(schema_path, encoding="utf-8") as f:
            schema = f.read()

        with psycopg.connect(**_connect_kwargs(postgres)) as conn:
            with conn.cursor() as cur:
                cur.execute(schema)
            conn.commit()

        yield postgres


def _connect_kwargs(postgres: PostgresContainer) -> dict:
    return {
        "host": postgres.get_container_host_ip(),
        "port": int(postgres.get_exposed_port(5432)),
        "dbname": postgres.dbname,
        "user": postgres.username,
        "password": postgres.password,
    }


@pytest.fixture(scope="function")
def db_config(postgres_container) -> DatabaseConfig:
    """
    DatabaseConfig pointing at the test container

    Args:
        postgres_container: PostgreSQL container fixture

    Returns:
        Validated configuration with a small pool
    """
    kwargs = _connect_kwargs(postgres_container)
    return DatabaseConfig(
        host=kwargs["host"],
        port=kwargs["port"],
        database=kwargs["dbname"],
        user=kwargs["user"],
        password=kwargs["password"],
        min_size=1,
        max_size=4,
        timeout=10.0,
    )


@pytest.fixture(scope="function")
def db_connection(postgres_container) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a synchronous autocommit connection for assertions

    No transaction stays open between statements, so it never holds a lock
    on the wines table.

    Yields:
        psycopg Connection object
    """
    with psycopg.connect(**_connect_kwargs(postgres_container), autocommit=True) as conn:
        yield conn


@pytest.fixture(scope="function")
def clean_db(db_connection) -> Generator[psycopg.Connection, None, None]:
    """
    Empty wines and wine_audit_log, with identities reset to 1

    Yields:
        The assertion connection
    """
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE wines RESTART IDENTITY CASCADE")
        cur.execute("TRUNCATE TABLE wine_audit_log RESTART IDENTITY CASCADE")

    yield db_connection


@pytest_asyncio.fixture
async def db_pool(db_config, clean_db) -> AsyncGenerator[DatabaseConnectionPool, None]:
    """
    Open connection pool against a clean database

    Yields:
        Open DatabaseConnectionPool (closed after the test)
    """
    pool = DatabaseConnectionPool(db_config)
    await pool.open()
    yield pool
    await pool.close()


# =======================
# SAMPLE DATA
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> str:
    """
    Directory holding the sample red and white CSV files

    Returns:
        Absolute path of tests/fixtures
    """
    return FIXTURES_DIR


@pytest.fixture(scope="session")
def red_csv(test_data_dir) -> str:
    return os.path.join(test_data_dir, "winequality-red.csv")


@pytest.fixture(scope="session")
def white_csv(test_data_dir) -> str:
    return os.path.join(test_data_dir, "winequality-white.csv")


# =======================
# LOGGING FIXTURES
# =======================

@pytest.fixture
def app_caplog(caplog):
    """
    caplog that also sees records from the "winequality" logger hierarchy

    The application logger does not propagate to the root logger, so the
    capture handler is attached to it directly.
    """
    app_logger = logging.getLogger("winequality")
    app_logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="winequality")
    yield caplog
    app_logger.removeHandler(caplog.handler)


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture
def test_env_vars(monkeypatch) -> dict[str, str]:
    """
    Apply config/test.env to the environment for one test

    Values win over anything already set, and everything is restored afterwards.

    Returns:
        The variables read from the file
    """
    values = {k: v for k, v in dotenv_values(TEST_ENV_PATH).items() if v is not None}
    for name, value in values.items():
        monkeypatch.setenv(name, value)
    return values
