"""LLM synthesis of date-scoped reports (report phase 2).

Reads the worklog, never writes it. One gateway call per report.
"""

from __future__ import annotations

import logging

from worklog.errors import (
    InvalidRange,
    MissingCredential,
    NoEntriesInRange,
    ProviderError,
)
from worklog.gateway import LanguageModelGateway, strip_code_fence
from worklog.models import Prompt
from worklog.reports.config import ReportRequest
from worklog.reports.context import prepare_report_context
from worklog.reports.prompts import get_report_prompt
from worklog.store import WorklogStore
from worklog.vault import CredentialVault

logger = logging.getLogger(__name__)


class ReportSynthesizer:
    """Generates standalone reports over a window of the worklog."""

    def __init__(
        self,
        store: WorklogStore,
        vault: CredentialVault,
        gateway: LanguageModelGateway,
    ) -> None:
        self._store = store
        self._vault = vault
        self._gateway = gateway

    def generate(self, request: ReportRequest) -> str:
        """Produce a report for ``request``.

        Args:
            request: Date window and style.

        Returns:
            Raw report markdown from the model.

        Raises:
            InvalidRange: If the window ends before it starts.
            MissingCredential: If the gateway needs a key and none is stored.
            NoEntriesInRange: If nothing in the worklog falls in the window.
            GatewayError: If the model call fails.
        """
        if request.start_date > request.end_date:
            raise InvalidRange(
                f"Start date {request.start_date.isoformat()} is after "
                f"end date {request.end_date.isoformat()}."
            )
        if self._gateway.needs_credential and not self._vault.status():
            raise MissingCredential()

        context = prepare_report_context(
            self._store.read(),
            request.start_date,
            request.end_date,
            request.style,
        )
        if context.is_empty:
            raise NoEntriesInRange("No entries found in the specified date range.")

        logger.debug(
            "Generating %s report for %s..%s from %d entries",
            request.style.value,
            request.start_date,
            request.end_date,
            context.entry_count,
        )

        prompt = Prompt(
            system=get_report_prompt(request.style),
            user=context.render_text(),
        )
        report = strip_code_fence(self._gateway.complete(prompt))
        if not report.strip():
            raise ProviderError("Model returned an empty report")
        return report
