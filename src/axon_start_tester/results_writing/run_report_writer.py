"""Run report workbook writer service."""

from __future__ import annotations

from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from axon_start_tester.liveness_probe.liveness_outcomes import LivenessReport

from .report_models import RunMetadata, RunVerdict

NODES_SHEET_NAME = "Nodes"
RUN_INFO_SHEET_NAME = "RunInfo"
NODE_COLUMNS = ("Node", "Log", "Status", "Matched line", "Detail")
_COLUMN_WIDTHS = (10, 30, 16, 80, 40)


def write_run_report(
    output_path: Path | str,
    report: LivenessReport,
    run_metadata: RunMetadata,
) -> Path:
    """Write the per-node liveness results and run metadata to an xlsx workbook."""
    workbook = Workbook()
    nodes_sheet = workbook.active
    nodes_sheet.title = NODES_SHEET_NAME
    _write_nodes_sheet(nodes_sheet, report)
    _write_run_info_sheet(workbook.create_sheet(RUN_INFO_SHEET_NAME), report, run_metadata)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output)
    return output.resolve()


def _write_nodes_sheet(sheet, report: LivenessReport) -> None:
    for column, (label, width) in enumerate(zip(NODE_COLUMNS, _COLUMN_WIDTHS), start=1):
        sheet.cell(row=1, column=column, value=label)
        sheet.cell(row=1, column=column).style = "Headline 1"
        sheet.column_dimensions[get_column_letter(column)].width = width

    for row, result in enumerate(report.results, start=2):
        values = (
            result.node_name,
            str(result.log_path),
            result.status.value,
            result.matched_line,
            result.detail,
        )
        for column, value in enumerate(values, start=1):
            sheet.cell(row=row, column=column, value=value)


def _write_run_info_sheet(sheet, report: LivenessReport, run_metadata: RunMetadata) -> None:
    verdict = RunVerdict.PASSED if report.passed else RunVerdict.FAILED
    entries = (
        ("run_id", run_metadata.run_id),
        ("run_start", run_metadata.run_start.isoformat()),
        ("image_tag", run_metadata.image_tag),
        ("workspace", str(run_metadata.workspace)),
        ("marker", report.marker),
        ("tail_lines", run_metadata.tail_lines),
        ("readiness_mode", run_metadata.readiness_mode),
        ("timeout_seconds", run_metadata.timeout_seconds),
        ("nodes", len(report.results)),
        ("healthy_nodes", report.healthy_count),
        ("quorum", report.quorum),
        ("verdict", verdict.value),
        ("teardown_error", run_metadata.teardown_error or ""),
    )
    for row, (key, value) in enumerate(entries, start=1):
        sheet.cell(row=row, column=1, value=key)
        sheet.cell(row=row, column=2, value=value)
