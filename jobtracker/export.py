"""
Tabular export of an owner's jobs as CSV text or an XLSX workbook.

Rows are ordered newest first by creation timestamp, and month grouping uses
the same timestamp, even though the date column is labelled "Applied Date".
"""

import csv
import io
from datetime import datetime
from typing import List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font

from .database import Job
from .enums import MODE_LABELS, JobMode, JobStatus

TITLE = "Job Application History"
SHEET_NAME = "Job Applications"
HEADER = ["No.", "Applied Date", "Job Title", "Company Name", "Job Location", "Role", "Status"]
ROW_DATE_FORMAT = "%d-%b-%Y"
GENERATED_FORMAT = "%d-%b-%Y %H:%M"


def summary_text(jobs: Sequence[Job], generated_at: datetime) -> str:
    counts = {status: 0 for status in JobStatus}
    for job in jobs:
        counts[JobStatus(job.status)] += 1
    return (
        f"Total Applied: {len(jobs)}, "
        f"Screening: {counts[JobStatus.SCREENING]}, "
        f"Interview: {counts[JobStatus.INTERVIEW]}, "
        f"Offer: {counts[JobStatus.OFFER]}, "
        f"Rejected: {counts[JobStatus.REJECTED]}"
        f"      Report Generated: {generated_at.strftime(GENERATED_FORMAT)}"
    )


def build_rows(jobs: Sequence[Job], generated_at: Optional[datetime] = None) -> List[list]:
    """
    Build the report as a list of rows.

    Layout: title, summary, blank, header, then numbered data rows with a
    blank row wherever the month changes. Blank rows take no number.
    """
    generated_at = generated_at or datetime.now()
    rows: List[list] = [[TITLE], [summary_text(jobs, generated_at)], [], list(HEADER)]

    ordered = sorted(jobs, key=lambda j: j.created_at, reverse=True)
    serial = 1
    last_month = None
    for job in ordered:
        month = (job.created_at.year, job.created_at.month)
        if last_month is not None and month != last_month:
            rows.append([])
        last_month = month
        rows.append([
            serial,
            job.created_at.strftime(ROW_DATE_FORMAT),
            job.position,
            job.company,
            job.location,
            MODE_LABELS[JobMode(job.mode)],
            job.status.capitalize(),
        ])
        serial += 1
    return rows


def to_csv(rows: List[list]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(rows)
    return buf.getvalue()


def to_xlsx(rows: List[list]) -> bytes:
    """Render rows into a workbook; title and summary span all columns."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME
    for row in rows:
        ws.append(row)

    last_col = len(HEADER)
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=last_col)
    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=last_col)
    ws.cell(row=1, column=1).font = Font(bold=True, size=14)
    for cell in ws[4]:
        cell.font = Font(bold=True)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def export_filename(extension: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"job-applications-{now.strftime('%Y-%m')}.{extension}"
