"""Date-scoped report generation from the worklog.

Two-phase pipeline: deterministic extraction of the requested date window
(testable without LLM) followed by style-specific LLM synthesis.
"""

from worklog.reports.config import ReportRequest, ReportStyle
from worklog.reports.context import (
    ReportContext,
    extract_date_range,
    prepare_report_context,
)
from worklog.reports.synthesizer import ReportSynthesizer

__all__ = [
    "ReportContext",
    "ReportRequest",
    "ReportStyle",
    "ReportSynthesizer",
    "extract_date_range",
    "prepare_report_context",
]
