"""Views over registry snapshots for exporters and reports."""

from .report import log_snapshot_summary, snapshot_to_dataframe

__all__ = ["log_snapshot_summary", "snapshot_to_dataframe"]
