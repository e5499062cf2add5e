"""Results writing domain exports."""

from .report_models import RunMetadata, RunVerdict
from .run_report_writer import (
    NODE_COLUMNS,
    NODES_SHEET_NAME,
    RUN_INFO_SHEET_NAME,
    write_run_report,
)

__all__ = [
    "NODE_COLUMNS",
    "NODES_SHEET_NAME",
    "RUN_INFO_SHEET_NAME",
    "RunMetadata",
    "RunVerdict",
    "write_run_report",
]
