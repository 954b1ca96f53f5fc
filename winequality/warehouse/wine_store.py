"""
Bulk load operations on the wines table.

WineStore is bound to a single connection owned by the loader: it clears the
previous dataset and writes a new one in one all-or-nothing transaction.
"""

from collections.abc import Sequence

import psycopg
from psycopg import sql

from winequality.core.models import WINE_COLUMNS, WineRecord
from winequality.observability.logger import get_logger

logger = get_logger(__name__)

WINES_TABLE = "wines"
AUDIT_TABLE = "wine_audit_log"

# Tables emptied before a full reload, in order
RELOAD_TABLES: tuple[str, ...] = (WINES_TABLE, AUDIT_TABLE)

DEFAULT_PROGRESS_INTERVAL = 1000

INSERT_WINE_SQL = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values})").format(
    table=sql.Identifier(WINES_TABLE),
    columns=sql.SQL(", ").join(sql.Identifier(c) for c in WINE_COLUMNS),
    values=sql.SQL(", ").join(sql.Placeholder() for _ in WINE_COLUMNS),
)


class WineStore:
    """
    Store gateway for a full reload of the wines table.
    """

    def __init__(self, conn: psycopg.AsyncConnection):
        """
        Args:
            conn: Connection used exclusively by this store for the whole run
        """
        self.conn = conn

    async def clear(self) -> None:
        """
        Truncate the wines table and its audit log, resetting identity sequences.

        The truncation is committed immediately: a full reload replaces all
        prior state even if the later insert phase fails.
        """
        async with self.conn.cursor() as cur:
            for table in RELOAD_TABLES:
                await cur.execute(
                    sql.SQL("TRUNCATE TABLE {} RESTART IDENTITY CASCADE").format(
                        sql.Identifier(table)
                    )
                )
        await self.conn.commit()
        logger.info("Existing data cleared.", extra={"tables": list(RELOAD_TABLES)})

    async def insert_all(
        self,
        records: Sequence[WineRecord],
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    ) -> int:
        """
        Insert every record inside one transaction.

        Statements are issued one at a time. If any insert fails the whole
        transaction is rolled back and the error propagates; no record from
        this call survives.

        Args:
            records: Records to insert, in order
            progress_interval: Log progress every N records (and at completion)

        Returns:
            Number of records inserted and committed

        Raises:
            psycopg.Error: If any statement fails (after rollback)
        """
        if progress_interval < 1:
            raise ValueError(f"progress_interval must be >= 1, got {progress_interval}")

        total = len(records)
        inserted = 0
        logger.info(f"Starting bulk insert of {total} records...")

        try:
            async with self.conn.transaction():
                async with self.conn.cursor() as cur:
                    for record in records:
                        await cur.execute(INSERT_WINE_SQL, record.as_params())
                        inserted += 1
                        if inserted % progress_interval == 0 or inserted == total:
                            logger.info(
                                f"Inserted {inserted}/{total}...",
                                extra={"inserted": inserted, "total": total},
                            )
        except psycopg.Error as e:
            logger.error(
                "Error during bulk insert, transaction rolled back",
                extra={
                    "failed_at_index": inserted,
                    "total": total,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            raise

        logger.info(f"Successfully inserted {inserted} records.")
        return inserted
