"""Worklog: a running log of work achievements kept tidy by an LLM.

The engine owns one markdown document, merges new entries into it through
a language model, keeps a single backup for undo, and derives date-scoped
reports without touching the document.
"""

__version__ = "0.1.0"

from worklog.core import Worklog
from worklog.models import EntryBatch
from worklog.reports.config import ReportRequest, ReportStyle

__all__ = [
    "EntryBatch",
    "ReportRequest",
    "ReportStyle",
    "Worklog",
    "__version__",
]
