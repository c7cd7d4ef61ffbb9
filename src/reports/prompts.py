"""Style-specific system prompts for report synthesis."""

from worklog.reports.config import ReportStyle

REPORT_SYSTEM_PROMPTS: dict[ReportStyle, str] = {
    ReportStyle.EXECUTIVE: """\
You are creating an executive summary report from a personal worklog.

Focus on high-level achievements, major milestones, and strategic accomplishments. Group by themes or projects and highlight business impact. Keep it concise and professional for leadership review.""",

    ReportStyle.DETAILED: """\
You are creating a detailed report from a personal worklog.

Organize all entries by category or project, keep the specific details, and present a comprehensive view of all work completed. Include technical details and keep the original structure while improving readability.""",

    ReportStyle.CHRONOLOGICAL: """\
You are creating a chronological report from a personal worklog.

Organize entries by month, showing progression over time. Within each month, group by theme or project. This should tell the story of how the work evolved during the period.""",

    ReportStyle.ACCOMPLISHMENTS: """\
You are creating an accomplishments-focused report from a personal worklog.

Highlight only major achievements, completed projects, successful launches, and significant milestones. Skip routine tasks and focus on impactful wins.""",
}

_SHARED_RULES = """

Use only the worklog content provided. Do not invent work that is not listed. Return the report in Markdown, without code fences."""


def get_report_prompt(style: ReportStyle) -> str:
    """Get the system prompt for a report style."""
    return REPORT_SYSTEM_PROMPTS[style] + _SHARED_RULES
