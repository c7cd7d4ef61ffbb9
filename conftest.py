"""Root conftest — runs before any test module imports."""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path

import pytest

# GitHub Actions sets FORCE_COLOR=1, which makes Rich inject ANSI escape
# codes into CLI output and breaks plain-substring assertions.
os.environ.pop("FORCE_COLOR", None)
os.environ["NO_COLOR"] = "1"

from worklog.core import Worklog  # noqa: E402
from worklog.gateway import LanguageModelGateway  # noqa: E402
from worklog.models import Prompt  # noqa: E402
from worklog.store import WorklogStore  # noqa: E402
from worklog.vault import MemoryCredentialVault  # noqa: E402

VALID_KEY = "sk-" + "A1b2_C3d4-" * 4


class FakeGateway(LanguageModelGateway):
    """Gateway double that replays canned replies and records prompts."""

    def __init__(
        self,
        replies: list[str] | None = None,
        error: Exception | None = None,
        needs_credential: bool = True,
    ) -> None:
        self.replies = list(replies or [])
        self.error = error
        self.prompts: list[Prompt] = []
        self._needs_credential = needs_credential

    @property
    def needs_credential(self) -> bool:
        return self._needs_credential

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def complete(self, prompt: Prompt) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.replies.pop(0)


@pytest.fixture
def store(tmp_path: Path) -> WorklogStore:
    return WorklogStore(tmp_path / "data")


@pytest.fixture
def vault() -> MemoryCredentialVault:
    return MemoryCredentialVault(VALID_KEY)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def worklog(store, vault, gateway) -> Worklog:
    return Worklog(store, vault, gateway, today=lambda: date(2024, 1, 15))
