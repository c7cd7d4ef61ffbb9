"""Prompts for merging new entries into the worklog."""

from datetime import date

ORGANIZE_SYSTEM_PROMPT = """\
You are an AI journaling assistant that maintains a yearly worklog in Markdown format.

You will receive:
1. The current worklog
2. A list of new work wins (tasks, accomplishments)

Update the worklog as follows:

- Keep every existing entry exactly as it is. Never drop or reword prior content.
- Group all tasks under relevant **topic headers** (e.g., "Products", "Get Started Page", etc.).
- If a topic already exists in the log, append the new entries to that section.
- If the topic is new, create a new section header and add entries underneath it.
- For each new entry:
  - Use the exact phrasing provided by the user.
  - Add the date in parentheses at the end, like ({today}).
- Do not group tasks under "Today's entries" or any date-based header.
- Do not generate summaries or sub-bullets.
- Maintain a clean, organized, topical structure.

Only return the full updated Markdown document. No commentary, no code fences."""

EMPTY_WORKLOG_PLACEHOLDER = "(The worklog is empty. Start a new document with a top-level title.)"


def format_entry_date(day: date) -> str:
    """Render ``day`` the way entries are stamped, e.g. ``Jul 29, 2025``."""
    return f"{day:%b} {day.day}, {day.year}"


def get_organize_system_prompt(today: date) -> str:
    return ORGANIZE_SYSTEM_PROMPT.format(today=format_entry_date(today))


def render_organize_user_prompt(current_log: str, entries_text: str) -> str:
    """Render the user prompt carrying the current log and the new entries."""
    log = current_log if current_log.strip() else EMPTY_WORKLOG_PLACEHOLDER
    return (
        f"Here is the current worklog:\n\n{log}\n\n"
        f"Here are new work entries to add:\n\n{entries_text}"
    )
