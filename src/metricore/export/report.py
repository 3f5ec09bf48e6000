"""Tabular and log-based views over a registry snapshot."""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from ..metrics.counter import CounterValue
from ..metrics.histogram import HistogramValue
from ..metrics.meter import MeterValue
from ..metrics.timer import TimerValue
from ..registry.snapshot import MetricValueSource, RegistrySnapshot

logger = logging.getLogger(__name__)

COLUMNS = [
    "context", "type", "name", "base_name", "tags", "unit",
    "count", "sum", "min", "max", "mean", "std_dev",
    "median", "p75", "p95", "p98", "p99", "p999",
    "mean_rate", "m1_rate", "m5_rate", "m15_rate", "value",
]


def _histogram_columns(value: HistogramValue) -> Dict[str, Any]:
    return {
        "count": value.count,
        "sum": value.sum,
        "min": value.min,
        "max": value.max,
        "mean": value.mean,
        "std_dev": value.std_dev,
        "median": value.median,
        "p75": value.percentile_75,
        "p95": value.percentile_95,
        "p98": value.percentile_98,
        "p99": value.percentile_99,
        "p999": value.percentile_999,
    }


def _rate_columns(value: MeterValue) -> Dict[str, Any]:
    return {
        "mean_rate": value.mean_rate,
        "m1_rate": value.one_minute_rate,
        "m5_rate": value.five_minute_rate,
        "m15_rate": value.fifteen_minute_rate,
    }


def _row(context: str, source: MetricValueSource) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "context": context,
        "type": source.metric_type.value,
        "name": source.name,
        "base_name": source.base_name,
        "tags": ",".join(f"{k}:{v}" for k, v in source.tags) or None,
        "unit": source.unit,
    }

    value = source.value
    if isinstance(value, TimerValue):
        row.update(_histogram_columns(value.histogram))
        row.update(_rate_columns(value.rate))
    elif isinstance(value, HistogramValue):
        row.update(_histogram_columns(value))
    elif isinstance(value, MeterValue):
        row["count"] = value.count
        row.update(_rate_columns(value))
    elif isinstance(value, CounterValue):
        row["count"] = value.count
    else:
        row["value"] = value
    return row


def snapshot_to_dataframe(snapshot: RegistrySnapshot) -> pd.DataFrame:
    """Flatten a snapshot into one row per metric."""
    rows: List[Dict[str, Any]] = [
        _row(context.context, source)
        for context in snapshot.contexts
        for source in context
    ]
    if not rows:
        return pd.DataFrame(columns=COLUMNS)
    return pd.DataFrame(rows, columns=COLUMNS)


def log_snapshot_summary(snapshot: RegistrySnapshot, log: Optional[logging.Logger] = None) -> None:
    """Log one line per metric in the snapshot."""
    log = log or logger

    log.info("=" * 60)
    log.info(f"METRICS SNAPSHOT {snapshot.timestamp.isoformat()}")
    log.info("=" * 60)
    for context in snapshot.contexts:
        log.info(f"[{context.context}]")
        for source in context:
            log.info(f"  {source.metric_type.value:<9} {source.name}: {_describe(source.value)}")
    log.info("=" * 60)


def _describe(value: Any) -> str:
    if isinstance(value, TimerValue):
        h = value.histogram
        unit = value.duration_unit.abbreviation
        return (
            f"count={h.count}, mean={h.mean:.2f}{unit}, P50={h.median:.2f}{unit}, "
            f"P99={h.percentile_99:.2f}{unit}, rate={value.rate.one_minute_rate:.2f}/{value.rate.rate_unit.abbreviation}"
        )
    if isinstance(value, HistogramValue):
        return f"count={value.count}, mean={value.mean:.2f}, P50={value.median:.2f}, P99={value.percentile_99:.2f}"
    if isinstance(value, MeterValue):
        return f"count={value.count}, m1={value.one_minute_rate:.2f}/{value.rate_unit.abbreviation}"
    if isinstance(value, CounterValue):
        return f"count={value.count}"
    return f"value={value}"
