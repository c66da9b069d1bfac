"""
Service for exporting analytics reports to Excel workbooks.
"""

import io
import logging
import os
from typing import Dict

import pandas as pd

from feedback_analytics.models.records import AnalyticsReport

logger = logging.getLogger(__name__)

# Excel caps sheet names at 31 characters
MAX_SHEET_NAME = 31

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

SHEET_NAMES = {
    'overallStats': 'Overall Stats',
    'subjectRatings': 'Subject Ratings',
    'semesterTrends': 'Semester Trends',
    'divisionComparisons': 'Division Comparisons',
    'facultyPerformance': 'Faculty Performance',
    'lectureLabComparison': 'Lecture vs Lab',
}


def report_to_frames(report: AnalyticsReport) -> Dict[str, pd.DataFrame]:
    """
    Convert a report into one DataFrame per sheet.

    List views become one row per record; the single-record views
    become one-row frames.
    """
    data = report.to_dict()
    frames = {}
    for key, sheet_name in SHEET_NAMES.items():
        value = data[key]
        rows = value if isinstance(value, list) else [value]
        frames[sheet_name[:MAX_SHEET_NAME]] = pd.DataFrame(rows)
    return frames


def write_report_excel(report: AnalyticsReport, target) -> None:
    """Write every report view to its own sheet of *target*, a path or a binary file object."""
    frames = report_to_frames(report)
    with pd.ExcelWriter(target, engine='openpyxl') as writer:
        for sheet_name, frame in frames.items():
            frame.to_excel(writer, sheet_name=sheet_name, index=False)


def export_report_excel(report: AnalyticsReport, output_path: str) -> str:
    """Write the workbook to *output_path*, creating its folder if needed."""
    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    write_report_excel(report, output_path)
    logger.info(f"Analytics workbook created: {output_path}")
    return output_path


def report_to_excel_buffer(report: AnalyticsReport) -> io.BytesIO:
    """Build the workbook in memory; the buffer is rewound for reading."""
    buf = io.BytesIO()
    write_report_excel(report, buf)
    buf.seek(0)
    return buf
