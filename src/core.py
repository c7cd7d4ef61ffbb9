"""Worklog engine facade.

Wires the store, credential vault, gateway, organizer and report
synthesizer together and exposes the boundary operations used by the CLI
(or any other control surface).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date

from worklog.config import WorklogConfig
from worklog.gateway import LanguageModelGateway, build_gateway
from worklog.models import MAX_BATCH_SIZE, EntryBatch
from worklog.organizer import EntryOrganizer
from worklog.reports.config import ReportRequest, ReportStyle
from worklog.reports.synthesizer import ReportSynthesizer
from worklog.store import WorklogStore
from worklog.vault import CredentialVault, FileCredentialVault

logger = logging.getLogger(__name__)


class Worklog:
    """One worklog document with its vault and language model gateway."""

    def __init__(
        self,
        store: WorklogStore,
        vault: CredentialVault,
        gateway: LanguageModelGateway,
        *,
        max_entries: int = MAX_BATCH_SIZE,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.vault = vault
        self.gateway = gateway
        self._organizer = EntryOrganizer(
            store, vault, gateway, max_entries=max_entries, today=today
        )
        self._reports = ReportSynthesizer(store, vault, gateway)

    @classmethod
    def from_config(cls, config: WorklogConfig) -> Worklog:
        """Build a Worklog from loaded configuration."""
        vault = FileCredentialVault(
            config.credential_path, env_var=config.vault.api_key_env
        )
        store = WorklogStore(config.data_dir, config.storage.document_name)
        gateway = build_gateway(config.llm, vault)
        logger.debug(
            "Worklog at %s using %s gateway", store.document_path, config.llm.provider
        )
        return cls(
            store, vault, gateway, max_entries=config.organizer.max_entries
        )

    def organize(self, entries: EntryBatch | Iterable[str]) -> None:
        """Merge new entries into the document."""
        self._organizer.organize(entries)

    def read(self) -> str:
        """Full document text; empty string if nothing was recorded yet."""
        return self.store.read()

    def undo(self) -> str:
        """Restore the document from before the last change."""
        return self.store.undo()

    def can_undo(self) -> bool:
        return self.store.has_backup()

    def generate_report(
        self,
        start_date: str | date,
        end_date: str | date,
        style: str | ReportStyle = ReportStyle.EXECUTIVE,
    ) -> str:
        """Generate a report over ``[start_date, end_date]``.

        Accepts ``YYYY-MM-DD`` strings or dates.
        """
        return self.generate(ReportRequest.parse(start_date, end_date, style))

    def generate(self, request: ReportRequest) -> str:
        return self._reports.generate(request)
