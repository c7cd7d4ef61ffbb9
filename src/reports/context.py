"""Date-window extraction from the worklog (report phase 1).

Picks the lines of the worklog document that belong to a date window and
packs them into a ReportContext for the LLM. Fully deterministic and
testable without any LLM calls.

Dating rules:

- A line carrying its own day date, e.g. ``(Jul 29, 2025)``,
  ``29 Jul 2025`` or ``2025-07-29``, is dated by it. A parenthesized
  stamp at the end of the entry wins over dates in the entry text.
- A heading may name a day, a month (``January 2024``, ``2024-01``) or a
  year (``2024``). Headings without a date inherit their parent's period.
- An undated line inherits the period of its innermost heading and is
  included when that period overlaps the window.
- An indented line with no date of its own follows the line it continues.
- Lines with no date and no dated heading are left out.
"""

from __future__ import annotations

import calendar
import re
from datetime import date

from pydantic import BaseModel, Field

from worklog.reports.config import ReportStyle

Period = tuple[date, date]

_MONTHS: dict[str, int] = {
    name.lower(): index
    for index, name in enumerate(calendar.month_name)
    if name
}
_MONTHS.update(
    {name.lower(): index for index, name in enumerate(calendar.month_abbr) if name}
)
_MONTHS["sept"] = 9

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
_MONTH_DAY_YEAR_RE = re.compile(
    r"\b([A-Za-z]{3,9})\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})\b"
)
_DAY_MONTH_YEAR_RE = re.compile(r"\b(\d{1,2})\s+([A-Za-z]{3,9})\.?,?\s+(\d{4})\b")
_ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
_MONTH_YEAR_RE = re.compile(r"\b([A-Za-z]{3,9})\.?,?\s+(\d{4})\b")
_ISO_MONTH_RE = re.compile(r"\b(\d{4})-(\d{2})\b(?!-\d)")
_YEAR_ONLY_RE = re.compile(r"^\W*(\d{4})\W*$")
_PAREN_RE = re.compile(r"\(([^()]*)\)")


def _month_number(name: str) -> int | None:
    return _MONTHS.get(name.lower())


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def find_date(text: str) -> date | None:
    """Return the date a line is stamped with.

    Entries end with a parenthesized stamp such as ``(Jan 15, 2024)``. The
    last parenthesized date wins, so a deadline mentioned in the entry text
    does not move the entry. Without a stamp, the first day-precision date
    in ``text`` is used.
    """
    for group in reversed(_PAREN_RE.findall(text)):
        stamp = _first_date(group)
        if stamp is not None:
            return stamp
    return _first_date(text)


def _first_date(text: str) -> date | None:
    found: list[tuple[int, date]] = []

    for m in _MONTH_DAY_YEAR_RE.finditer(text):
        month = _month_number(m.group(1))
        if month:
            d = _safe_date(int(m.group(3)), month, int(m.group(2)))
            if d:
                found.append((m.start(), d))

    for m in _DAY_MONTH_YEAR_RE.finditer(text):
        month = _month_number(m.group(2))
        if month:
            d = _safe_date(int(m.group(3)), month, int(m.group(1)))
            if d:
                found.append((m.start(), d))

    for m in _ISO_DATE_RE.finditer(text):
        d = _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        if d:
            found.append((m.start(), d))

    if not found:
        return None
    return min(found, key=lambda item: item[0])[1]


def _month_period(year: int, month: int) -> Period:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def find_heading_period(text: str) -> Period | None:
    """Return the period a heading names: a day, a month, or a year."""
    day = find_date(text)
    if day:
        return day, day

    for m in _MONTH_YEAR_RE.finditer(text):
        month = _month_number(m.group(1))
        if month:
            return _month_period(int(m.group(2)), month)

    for m in _ISO_MONTH_RE.finditer(text):
        month = int(m.group(2))
        if 1 <= month <= 12:
            return _month_period(int(m.group(1)), month)

    m = _YEAR_ONLY_RE.match(text)
    if m:
        year = int(m.group(1))
        return date(year, 1, 1), date(year, 12, 31)

    return None


class _Heading(BaseModel):
    level: int
    line: str
    period: Period | None
    emitted: bool = False


class _Extraction(BaseModel):
    start: date
    end: date
    lines: list[str] = Field(default_factory=list)
    entry_count: int = 0

    def in_window(self, day: date) -> bool:
        return self.start <= day <= self.end

    def overlaps(self, period: Period) -> bool:
        return period[0] <= self.end and period[1] >= self.start


def extract_date_range(document: str, start: date, end: date) -> tuple[str, int]:
    """Keep the parts of ``document`` attributable to ``[start, end]``.

    Headings are kept only above included lines, in document order.

    Returns:
        Tuple of (extracted markdown, number of included content lines).
    """
    result = _Extraction(start=start, end=end)
    stack: list[_Heading] = []
    last_included: bool | None = None

    for raw_line in document.splitlines():
        line = raw_line.rstrip()
        if not line.strip():
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            level = len(heading.group(1))
            while stack and stack[-1].level >= level:
                stack.pop()
            inherited = stack[-1].period if stack else None
            own = find_heading_period(heading.group(2))
            stack.append(_Heading(level=level, line=line, period=own or inherited))
            last_included = None
            continue

        own_date = find_date(line)
        if own_date is not None:
            include = result.in_window(own_date)
        elif line[0].isspace() and last_included is not None:
            include = last_included
        else:
            period = stack[-1].period if stack else None
            include = period is not None and result.overlaps(period)

        last_included = include
        if not include:
            continue

        for h in stack:
            if not h.emitted:
                if result.lines and not _HEADING_RE.match(result.lines[-1]):
                    result.lines.append("")
                result.lines.append(h.line)
                h.emitted = True
        result.lines.append(line)
        result.entry_count += 1

    return "\n".join(result.lines), result.entry_count


class ReportContext(BaseModel):
    """Worklog slice plus framing for one report."""

    start_date: date
    end_date: date
    style: ReportStyle
    content: str
    entry_count: int

    @property
    def is_empty(self) -> bool:
        return self.entry_count == 0

    def render_text(self) -> str:
        """Render as the user prompt for report synthesis."""
        lines: list[str] = []
        lines.append(
            "Please create a summary report for the period "
            f"from {self.start_date.isoformat()} to {self.end_date.isoformat()}."
        )
        lines.append(f"Style: {self.style.value}")
        lines.append(f"Entries in range: {self.entry_count}")
        lines.append("")
        lines.append("Here is the filtered worklog content:")
        lines.append("")
        lines.append(self.content)
        lines.append("")
        lines.append(
            "Generate a well-formatted, professional report in Markdown format."
        )
        return "\n".join(lines)


def prepare_report_context(
    document: str, start: date, end: date, style: ReportStyle
) -> ReportContext:
    """Extract the window from ``document`` into a ReportContext."""
    content, count = extract_date_range(document, start, end)
    return ReportContext(
        start_date=start,
        end_date=end,
        style=style,
        content=content,
        entry_count=count,
    )
