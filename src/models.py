"""Value objects passed between the engine components."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field

from worklog.errors import EmptyBatch, OversizedBatch

MAX_BATCH_SIZE = 3


class EntryBatch(BaseModel):
    """Raw achievement lines submitted together for merging.

    Never persisted; only its organized effect on the document is kept.
    """

    entries: list[str] = Field(default_factory=list)

    @classmethod
    def from_lines(
        cls, lines: Iterable[str], *, limit: int = MAX_BATCH_SIZE
    ) -> EntryBatch:
        """Trim and validate submitted lines.

        Blank lines are dropped. Raises ``EmptyBatch`` when nothing is left
        and ``OversizedBatch`` when more than ``limit`` entries remain.
        """
        entries = [line.strip() for line in lines]
        entries = [e for e in entries if e]
        if not entries:
            raise EmptyBatch("Please enter at least one work win.")
        if len(entries) > limit:
            raise OversizedBatch(len(entries), limit)
        return cls(entries=entries)

    def render_text(self) -> str:
        return "\n".join(f"- {entry}" for entry in self.entries)


class Prompt(BaseModel):
    """System instructions plus the user-side context and task."""

    system: str
    user: str

    def render(self) -> str:
        """Flatten into a single prompt for backends without message roles."""
        return f"{self.system}\n\n---\n\n{self.user}"
