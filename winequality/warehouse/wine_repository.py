"""
Data access operations for individual wines.

List, get, create, update and delete rows of the wines table, and compute
the average quality through the calculate_average_quality() stored function.
"""

from typing import Any

from psycopg import sql
from psycopg.errors import UndefinedFunction

from winequality.core.models import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    WINE_COLUMNS,
    Pagination,
    StoredWine,
    WinePage,
    WinePatch,
    WineRecord,
)
from winequality.observability.logger import get_logger

from .connection import DatabaseConnectionPool
from .wine_store import INSERT_WINE_SQL, WINES_TABLE

logger = get_logger(__name__)

# Patch field -> column; the only names that ever reach an UPDATE statement
PATCH_COLUMNS: dict[str, str] = {name: name for name in WINE_COLUMNS}

AVERAGE_QUALITY_FUNCTION = "calculate_average_quality"


class StoredProcedureMissing(RuntimeError):
    """Raised when the calculate_average_quality() function is not installed."""
    pass


def build_update(wine_id: int, patch: WinePatch) -> tuple[sql.Composed, list[Any]]:
    """
    Build a parameterized UPDATE for the fields set on a patch.

    Args:
        wine_id: Row to update
        patch: Partial update; must set at least one field

    Returns:
        (statement, params) with params in placeholder order, wine_id last

    Raises:
        ValueError: If the patch sets no fields
    """
    changes = patch.changes()
    if not changes:
        raise ValueError("No fields provided for update.")

    assignments = []
    params: list[Any] = []
    for field_name, value in changes.items():
        column = PATCH_COLUMNS[field_name]
        assignments.append(
            sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder())
        )
        params.append(value)
    params.append(wine_id)

    statement = sql.SQL(
        "UPDATE {table} SET {assignments}, updated_at = CURRENT_TIMESTAMP "
        "WHERE id = {id} RETURNING *"
    ).format(
        table=sql.Identifier(WINES_TABLE),
        assignments=sql.SQL(", ").join(assignments),
        id=sql.Placeholder(),
    )
    return statement, params


class WineRepository:
    """
    CRUD access to the wines table through the shared connection pool.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Args:
            pool: Open database connection pool
        """
        self.pool = pool

    async def list_wines(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> WinePage:
        """
        List wines ordered by id, one page at a time.

        Args:
            page: 1-based page number
            limit: Page size

        Returns:
            WinePage with the rows and pagination metadata

        Raises:
            ValueError: If page or limit is less than 1
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        count_row = await self.pool.fetch_one(
            sql.SQL("SELECT COUNT(*) AS total FROM {}").format(sql.Identifier(WINES_TABLE))
        )
        total = int(count_row["total"]) if count_row else 0

        rows = await self.pool.fetch_all(
            sql.SQL("SELECT * FROM {} ORDER BY id ASC LIMIT %s OFFSET %s").format(
                sql.Identifier(WINES_TABLE)
            ),
            (limit, Pagination.offset(page, limit)),
        )

        return WinePage(
            data=[StoredWine.model_validate(row) for row in rows],
            pagination=Pagination.compute(page, limit, total),
        )

    async def get_wine(self, wine_id: int) -> StoredWine | None:
        """
        Fetch one wine by id.

        Returns:
            The wine, or None if no row has that id
        """
        row = await self.pool.fetch_one(
            sql.SQL("SELECT * FROM {} WHERE id = %s").format(sql.Identifier(WINES_TABLE)),
            (wine_id,),
        )
        return StoredWine.model_validate(row) if row else None

    async def create_wine(self, record: WineRecord) -> StoredWine:
        """
        Insert a new wine.

        Args:
            record: Validated wine (quality already checked by the model)

        Returns:
            The stored row, including its id and timestamps
        """
        row = await self.pool.fetch_one(
            INSERT_WINE_SQL + sql.SQL(" RETURNING *"),
            record.as_params(),
        )
        wine = StoredWine.model_validate(row)
        logger.info("Created wine", extra={"wine_id": wine.id, "wine_type": wine.wine_type})
        return wine

    async def update_wine(self, wine_id: int, patch: WinePatch) -> StoredWine | None:
        """
        Apply a partial update and bump updated_at.

        Args:
            wine_id: Row to update
            patch: Fields to change

        Returns:
            The updated row, or None if no row has that id

        Raises:
            ValueError: If the patch sets no fields
        """
        statement, params = build_update(wine_id, patch)
        row = await self.pool.fetch_one(statement, params)
        if row is None:
            return None

        logger.info(
            "Updated wine",
            extra={"wine_id": wine_id, "fields": sorted(patch.changes())},
        )
        return StoredWine.model_validate(row)

    async def delete_wine(self, wine_id: int) -> bool:
        """
        Delete one wine.

        Returns:
            True if a row was deleted, False if no row has that id
        """
        deleted = await self.pool.execute_command(
            sql.SQL("DELETE FROM {} WHERE id = %s").format(sql.Identifier(WINES_TABLE)),
            (wine_id,),
        )
        if deleted:
            logger.info("Deleted wine", extra={"wine_id": wine_id})
        return deleted > 0

    async def average_quality(self, min_alcohol: float = 0.0) -> float | None:
        """
        Average quality of wines with alcohol >= min_alcohol.

        Delegates to the calculate_average_quality() stored function.

        Args:
            min_alcohol: Minimum alcohol level to include

        Returns:
            Average rounded to 2 decimals, or None when no wine matches

        Raises:
            StoredProcedureMissing: If the stored function is not installed
        """
        query = sql.SQL("SELECT {}(%s::real) AS average_quality").format(
            sql.Identifier(AVERAGE_QUALITY_FUNCTION)
        )
        try:
            row = await self.pool.fetch_one(query, (min_alcohol,))
        except UndefinedFunction as e:
            logger.error(
                "Stored procedure calculate_average_quality not found",
                extra={"error_message": str(e)},
            )
            raise StoredProcedureMissing(
                "Stored procedure not found. Ensure docker/init-db.sql has been executed."
            ) from e

        if row is None or row["average_quality"] is None:
            return None
        return round(float(row["average_quality"]), 2)
