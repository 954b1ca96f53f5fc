"""
Prometheus metrics for the wine quality loader

Counts rows through the ingestion pipeline and times load runs. Metrics live
in a private registry so tests and embedding applications don't collide with
the default global one.
"""
from pathlib import Path

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()


# =======================
# INGESTION METRICS
# =======================

rows_read_total = Counter(
    name="winequality_rows_read_total",
    documentation="Total number of data rows read from source files",
    labelnames=["wine_type"],
    registry=REGISTRY,
)

rows_accepted_total = Counter(
    name="winequality_rows_accepted_total",
    documentation="Total number of rows that passed validation",
    labelnames=["wine_type"],
    registry=REGISTRY,
)

rows_rejected_total = Counter(
    name="winequality_rows_rejected_total",
    documentation="Total number of rows dropped by validation",
    labelnames=["wine_type", "rule_name"],
    registry=REGISTRY,
)

field_parse_failures_total = Counter(
    name="winequality_field_parse_failures_total",
    documentation="Total number of numeric values that could not be parsed and were nulled",
    labelnames=["wine_type", "field_name"],
    registry=REGISTRY,
)

# =======================
# WAREHOUSE METRICS
# =======================

records_inserted_total = Counter(
    name="winequality_records_inserted_total",
    documentation="Total number of wine records committed to the store",
    registry=REGISTRY,
)

load_runs_total = Counter(
    name="winequality_load_runs_total",
    documentation="Total number of loader runs by outcome",
    labelnames=["status"],  # status: committed, empty, failed
    registry=REGISTRY,
)

load_duration_seconds = Histogram(
    name="winequality_load_duration_seconds",
    documentation="Wall-clock duration of a full reload in seconds",
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def _series(metric, labels: dict):
    return metric.labels(**labels) if labels else metric


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """Add value to counter, selecting the labelled series when labels are given"""
    _series(counter, labels).inc(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    """Record one observation in histogram"""
    _series(histogram, labels).observe(value)


def get_sample_value(name: str, labels: dict[str, str] | None = None) -> float:
    """
    Current value of one sample, 0.0 when the series has not been touched yet

    Args:
        name: Sample name, e.g. "winequality_rows_accepted_total"
        labels: Label values identifying the series
    """
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def generate_metrics() -> bytes:
    """All loader metrics in the Prometheus text exposition format"""
    return generate_latest(REGISTRY)


def write_metrics(path: str | Path) -> None:
    """
    Write the exposition to a file, e.g. for node_exporter's textfile collector

    The file is replaced atomically so a scrape never sees a partial write.
    """
    target = Path(path)
    tmp = target.with_name(target.name + ".tmp")
    try:
        tmp.write_bytes(generate_metrics())
        tmp.replace(target)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def record_load_run(status: str, inserted: int, duration_seconds: float) -> None:
    """
    Record the outcome of one loader run

    Args:
        status: committed, empty or failed
        inserted: Records committed by the run
        duration_seconds: Wall-clock duration of the run
    """
    increment_counter(load_runs_total, status=status)
    if inserted > 0:
        increment_counter(records_inserted_total, inserted)
    observe_histogram(load_duration_seconds, duration_seconds)
