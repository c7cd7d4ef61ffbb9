"""Merge new achievement lines into the worklog via the language model.

The model regenerates the whole document on every submission; the result
replaces the stored document in one commit, so a failed call leaves the
worklog exactly as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date

from worklog.errors import MissingCredential, ProviderError
from worklog.gateway import LanguageModelGateway, strip_code_fence
from worklog.models import MAX_BATCH_SIZE, EntryBatch, Prompt
from worklog.prompts import get_organize_system_prompt, render_organize_user_prompt
from worklog.store import WorklogStore
from worklog.vault import CredentialVault

logger = logging.getLogger(__name__)


class EntryOrganizer:
    """Applies entry batches to the worklog document."""

    def __init__(
        self,
        store: WorklogStore,
        vault: CredentialVault,
        gateway: LanguageModelGateway,
        *,
        max_entries: int = MAX_BATCH_SIZE,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._vault = vault
        self._gateway = gateway
        self._max_entries = max_entries
        self._today = today

    def organize(self, entries: EntryBatch | Iterable[str]) -> None:
        """Merge ``entries`` into the worklog and commit the result.

        Args:
            entries: An EntryBatch, or raw lines to be trimmed into one.

        Raises:
            EmptyBatch: If no non-empty entries were given.
            OversizedBatch: If more entries than allowed were given.
            MissingCredential: If the gateway needs a key and none is stored.
            GatewayError: If the model call fails. The store is untouched.
            StorageError: If the commit fails. The old document is kept.
        """
        if isinstance(entries, EntryBatch):
            batch = EntryBatch.from_lines(entries.entries, limit=self._max_entries)
        else:
            batch = EntryBatch.from_lines(entries, limit=self._max_entries)

        if self._gateway.needs_credential and not self._vault.status():
            raise MissingCredential()

        with self._store.locked():
            current = self._store.read()
            prompt = Prompt(
                system=get_organize_system_prompt(self._today()),
                user=render_organize_user_prompt(current, batch.render_text()),
            )

            logger.debug("Organizing %d entries into worklog", len(batch.entries))
            reply = strip_code_fence(self._gateway.complete(prompt))
            if not reply.strip():
                raise ProviderError("Model returned an empty worklog")

            self._store.commit(reply)

        logger.info("Merged %d entries into worklog", len(batch.entries))
