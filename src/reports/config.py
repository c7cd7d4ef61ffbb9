"""Report styles and request model."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel

from worklog.errors import InvalidRange, InvalidStyle


class ReportStyle(str, Enum):
    """Available report styles."""

    EXECUTIVE = "executive"
    DETAILED = "detailed"
    CHRONOLOGICAL = "chronological"
    ACCOMPLISHMENTS = "accomplishments"


class ReportRequest(BaseModel):
    """A date window and a style. Never persisted."""

    start_date: date
    end_date: date
    style: ReportStyle = ReportStyle.EXECUTIVE

    @classmethod
    def parse(
        cls,
        start_date: str | date,
        end_date: str | date,
        style: str | ReportStyle = ReportStyle.EXECUTIVE,
    ) -> ReportRequest:
        """Build a request from user input, mapping bad values to typed errors.

        Dates may be ``date`` objects or ``YYYY-MM-DD`` strings. The window
        order is checked by the synthesizer, not here.

        Raises:
            InvalidRange: If a date string is not ``YYYY-MM-DD``.
            InvalidStyle: If the style is not one of the four supported.
        """
        try:
            report_style = ReportStyle(style)
        except ValueError as exc:
            choices = ", ".join(s.value for s in ReportStyle)
            raise InvalidStyle(
                f"Unknown report style {style!r}. Choose one of: {choices}"
            ) from exc
        return cls(
            start_date=_parse_date(start_date, "start"),
            end_date=_parse_date(end_date, "end"),
            style=report_style,
        )

    @property
    def default_filename(self) -> str:
        """File name used when the report is exported."""
        return (
            f"worklog-report-{self.start_date.isoformat()}"
            f"-to-{self.end_date.isoformat()}.md"
        )


def _parse_date(value: str | date, label: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidRange(
            f"Invalid {label} date format: {value!r}. Use YYYY-MM-DD."
        ) from exc
