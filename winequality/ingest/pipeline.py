"""
Full reload pipeline orchestration.

Coordinates the flow: connect → clear → read both files → insert → close
"""

import asyncio
import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from winequality.core.models import LoadResult, WineRecord, WineType
from winequality.core.rules import RuleEngine
from winequality.observability import metrics
from winequality.observability.logger import get_logger
from winequality.warehouse.connection import DatabaseConnectionPool
from winequality.warehouse.wine_store import DEFAULT_PROGRESS_INTERVAL, WineStore

from .file_reader import WineFileReader

logger = get_logger(__name__)


class LoadState(str, Enum):
    """Lifecycle of one reload run."""
    IDLE = "idle"
    CONNECTED = "connected"
    CLEARED = "cleared"
    READING = "reading"
    READING_COMPLETE = "reading_complete"
    INSERTING = "inserting"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    CLOSED = "closed"


class WineLoadPipeline:
    """
    Orchestrates a full reload of the wines table.

    Flow:
    1. Acquire a connection from the pool
    2. Truncate wines and wine_audit_log
    3. Read the red and white files concurrently
    4. Stop with a logged error if no row was accepted
    5. Insert every record in one transaction
    6. Close the pool, whatever happened

    A pipeline instance performs a single run: the pool is closed at the end.
    """

    def __init__(
        self,
        pool: DatabaseConnectionPool,
        red_path: str | Path,
        white_path: str | Path,
        reader: WineFileReader | None = None,
        rule_engine: RuleEngine | None = None,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        read_timeout: float | None = None,
        store_factory: Callable[..., WineStore] = WineStore,
    ):
        """
        Initialize the pipeline.

        Args:
            pool: Database connection pool (opened on demand, always closed)
            red_path: CSV file with red wines
            white_path: CSV file with white wines
            reader: File reader (defaults to one built from rule_engine)
            rule_engine: Row validation rules for the default reader
            progress_interval: Log insert progress every N records
            read_timeout: Per-file read timeout in seconds (None waits forever)
            store_factory: Builds the store gateway from a connection
        """
        if progress_interval < 1:
            raise ValueError(f"progress_interval must be >= 1, got {progress_interval}")
        if read_timeout is not None and read_timeout <= 0:
            raise ValueError(f"read_timeout must be positive, got {read_timeout}")

        self.pool = pool
        self.sources: dict[str, Path] = {
            WineType.RED.value: Path(red_path),
            WineType.WHITE.value: Path(white_path),
        }
        self.reader = reader or WineFileReader(rule_engine=rule_engine)
        self.progress_interval = progress_interval
        self.read_timeout = read_timeout
        self.store_factory = store_factory

        self.state = LoadState.IDLE
        self.history: list[LoadState] = [LoadState.IDLE]

    def _transition(self, state: LoadState) -> None:
        logger.debug(f"Load state {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    async def run(self) -> LoadResult:
        """
        Run one full reload.

        Returns:
            LoadResult with status "committed" or "empty"

        Raises:
            OSError: If either input file cannot be read (nothing inserted)
            asyncio.TimeoutError: If a file read exceeds read_timeout
            psycopg.Error: If clearing or inserting fails (insert rolled back)
        """
        started = time.monotonic()
        status = "failed"
        inserted = 0

        logger.info(
            "Starting wine data population...",
            extra={"sources": {k: str(v) for k, v in self.sources.items()}},
        )

        try:
            await self.pool.open()
            async with self.pool.get_connection() as conn:
                self._transition(LoadState.CONNECTED)
                store = self.store_factory(conn)

                await store.clear()
                self._transition(LoadState.CLEARED)

                self._transition(LoadState.READING)
                by_type = await self._read_all()
                self._transition(LoadState.READING_COMPLETE)

                records = [r for wine_type in self.sources for r in by_type[wine_type]]
                accepted_by_type = {k: len(v) for k, v in by_type.items()}

                if not records:
                    logger.error("No valid data found in CSV files. Aborting population.")
                    status = "empty"
                    return LoadResult(
                        status=status,
                        accepted_by_type=accepted_by_type,
                        duration_seconds=time.monotonic() - started,
                    )

                self._transition(LoadState.INSERTING)
                try:
                    inserted = await store.insert_all(records, self.progress_interval)
                except Exception:
                    self._transition(LoadState.ROLLED_BACK)
                    raise
                self._transition(LoadState.COMMITTED)

                status = "committed"
                logger.info(
                    f"Successfully populated database with {inserted} wine records.",
                    extra={"inserted": inserted, "accepted_by_type": accepted_by_type},
                )
                return LoadResult(
                    status=status,
                    accepted_by_type=accepted_by_type,
                    inserted=inserted,
                    duration_seconds=time.monotonic() - started,
                )

        except Exception as e:
            logger.error(
                "Error during data population",
                extra={
                    "state": self.state.value,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            raise

        finally:
            await self.pool.close()
            self._transition(LoadState.CLOSED)
            metrics.record_load_run(status, inserted, time.monotonic() - started)

    async def _read_all(self) -> dict[str, list[WineRecord]]:
        """
        Read both files concurrently; each reader returns its own list.

        If one read fails the other is cancelled and the error propagates.
        """
        tasks = {
            wine_type: asyncio.create_task(self._read_one(path, wine_type))
            for wine_type, path in self.sources.items()
        }
        try:
            results = await asyncio.gather(*tasks.values())
        except BaseException:
            for task in tasks.values():
                task.cancel()
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            raise

        return dict(zip(tasks.keys(), results))

    async def _read_one(self, path: Path, wine_type: str) -> list[WineRecord]:
        read = self.reader.read(path, wine_type)
        if self.read_timeout is None:
            return await read
        return await asyncio.wait_for(read, timeout=self.read_timeout)
