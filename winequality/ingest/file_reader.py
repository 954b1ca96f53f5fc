"""
Streaming reader for one wine quality CSV file.

Reads the file row by row without blocking the event loop, normalizes and
validates each row, and returns the accepted records for that file.
"""

import csv
import json
from pathlib import Path
from typing import Any

import aiofiles
from pydantic import ValidationError as ModelValidationError

from winequality.core.models import EXPECTED_FIELDS, WineRecord, WineType
from winequality.core.rules import RuleEngine, load_rule_engine
from winequality.observability import metrics
from winequality.observability.logger import get_logger, log_operation

from .normalizer import normalize_row

logger = get_logger(__name__)

DEFAULT_DELIMITER = ";"
# utf-8-sig strips a leading byte order mark from the header
DEFAULT_ENCODING = "utf-8-sig"
# Rule name reported when a row passes the rules but not WineRecord validation
MODEL_RULE = "wine_record_model"


class WineFileReader:
    """
    Reads one delimited wine file into validated WineRecords.

    Each call to read() returns its own list, so two reads can run
    concurrently without sharing state.
    """

    def __init__(
        self,
        rule_engine: RuleEngine | None = None,
        delimiter: str = DEFAULT_DELIMITER,
        encoding: str = DEFAULT_ENCODING,
    ):
        """
        Args:
            rule_engine: Row validation rules (defaults to the quality rules)
            delimiter: Field separator
            encoding: File encoding
        """
        self.rule_engine = rule_engine or load_rule_engine()
        self.delimiter = delimiter
        self.encoding = encoding

    async def read(self, file_path: str | Path, wine_type: WineType | str) -> list[WineRecord]:
        """
        Stream-parse a file and collect its accepted records.

        Args:
            file_path: Path to the CSV file (header row required)
            wine_type: Tag applied to every record from this file

        Returns:
            Accepted records in file order

        Raises:
            OSError: If the file cannot be opened or read
            UnicodeDecodeError: If the file is not valid text in the configured encoding
        """
        wine_type = WineType(wine_type).value
        records: list[WineRecord] = []

        with log_operation(
            f"Processing {wine_type} wine file",
            logger=logger,
            wine_type=wine_type,
            file_path=str(file_path),
        ):
            async with aiofiles.open(file_path, mode="r", encoding=self.encoding, newline="") as f:
                header_line = await f.readline()
                if not header_line.strip():
                    logger.warning(
                        f"{wine_type} wine file is empty: {file_path}",
                        extra={"wine_type": wine_type},
                    )
                    return records

                headers = self._split(header_line)
                line_number = 1

                async for line in f:
                    line_number += 1
                    if not line.strip():
                        continue

                    raw = self._to_raw_row(headers, self._split(line))
                    metrics.increment_counter(metrics.rows_read_total, wine_type=wine_type)

                    record = self._accept(raw, wine_type, f"{wine_type}:{line_number}")
                    if record is not None:
                        records.append(record)

        logger.info(
            f"{wine_type} wine file processing complete. Found {len(records)} valid records.",
            extra={"wine_type": wine_type, "accepted": len(records)},
        )
        return records

    def _split(self, line: str) -> list[str]:
        """Split one line into cells, honouring quotes."""
        return next(csv.reader([line], delimiter=self.delimiter))

    @staticmethod
    def _to_raw_row(headers: list[str], values: list[str]) -> dict[str | None, Any]:
        """
        Pair cells with headers the way csv.DictReader does: missing cells are
        None, surplus cells are collected under the None key.
        """
        raw: dict[str | None, Any] = {
            header: values[idx] if idx < len(values) else None
            for idx, header in enumerate(headers)
        }
        if len(values) > len(headers):
            raw[None] = values[len(headers):]
        return raw

    def _accept(self, raw: dict[str | None, Any], wine_type: str, record_id: str) -> WineRecord | None:
        """
        Normalize, validate and backfill one row.

        Returns:
            The record, or None if the row was rejected (already logged)
        """
        normalized = normalize_row(raw, wine_type)
        result = self.rule_engine.validate_row(normalized, record_id)

        if not result.passed:
            self._reject(raw, wine_type, record_id, result.failed_rules, result.messages)
            return None

        if result.warnings:
            logger.warning(
                f"Row {record_id} accepted with warnings",
                extra={"record_id": record_id, "rules": result.warnings, "messages": result.messages},
            )

        for column in EXPECTED_FIELDS:
            normalized.setdefault(column, None)

        try:
            record = WineRecord.model_validate(normalized)
        except ModelValidationError as e:
            self._reject(raw, wine_type, record_id, [MODEL_RULE], [str(e)])
            return None

        metrics.increment_counter(metrics.rows_accepted_total, wine_type=wine_type)
        return record

    def _reject(
        self,
        raw: dict[str | None, Any],
        wine_type: str,
        record_id: str,
        failed_rules: list[str],
        messages: list[str],
    ) -> None:
        dump = json.dumps({k if k is not None else "_extra": v for k, v in raw.items()})
        logger.warning(
            f"Skipping row in {wine_type} file due to {self._reject_reason(failed_rules)}: {dump}",
            extra={"record_id": record_id, "failed_rules": failed_rules, "messages": messages},
        )
        for rule_name in failed_rules:
            metrics.increment_counter(
                metrics.rows_rejected_total, wine_type=wine_type, rule_name=rule_name
            )

    def _reject_reason(self, failed_rules: list[str]) -> str:
        if failed_rules == [MODEL_RULE]:
            return "an invalid wine record"
        fields = sorted({self.rule_engine.rule_fields.get(name, name) for name in failed_rules})
        if fields == ["quality"]:
            return "invalid or missing quality"
        return f"invalid {', '.join(fields)} (rules: {', '.join(failed_rules)})"
