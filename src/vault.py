"""Credential vault for the language model API key.

The engine only depends on :class:`CredentialVault`. Two backends ship
here: a permission-restricted file and an in-memory vault for tests and
embedding. Either can be fronted by an environment variable that
supplies the key read-only.
"""

from __future__ import annotations

import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path

from worklog.errors import InvalidFormat, MissingCredential, StorageError
from worklog.store import atomic_write

logger = logging.getLogger(__name__)

KEY_PREFIX = "sk-"
KEY_MIN_LENGTH = 40
_KEY_PATTERN = re.compile(r"^sk-[A-Za-z0-9_-]+$")


def validate_api_key(candidate: str) -> str:
    """Return the stripped key, or raise ``InvalidFormat``."""
    key = candidate.strip()
    if (
        not key.startswith(KEY_PREFIX)
        or len(key) < KEY_MIN_LENGTH
        or not _KEY_PATTERN.match(key)
    ):
        raise InvalidFormat(
            f"Invalid API key format. Keys should start with '{KEY_PREFIX}' "
            f"and be at least {KEY_MIN_LENGTH} characters."
        )
    return key


class CredentialVault(ABC):
    """Stores a single secret: the language model API key."""

    def __init__(self, env_var: str = "") -> None:
        self._env_var = env_var

    def status(self) -> bool:
        """True iff a credential is available. Never raises."""
        if self._from_env():
            return True
        try:
            return self._load() is not None
        except Exception:
            logger.warning("Credential backend check failed", exc_info=True)
            return False

    def save(self, candidate: str) -> None:
        """Validate and store ``candidate``, replacing any previous key.

        Raises:
            InvalidFormat: If the candidate is not a well-formed key.
        """
        self._store(validate_api_key(candidate))
        logger.info("Saved API key")

    def delete(self) -> None:
        """Remove the stored key. Succeeds when nothing is stored."""
        self._erase()
        logger.info("Deleted API key")

    def get(self) -> str:
        """Return the key for a single gateway call.

        Raises:
            MissingCredential: If no key is available.
        """
        key = self._from_env() or self._load()
        if not key:
            raise MissingCredential()
        return key

    def _from_env(self) -> str | None:
        if not self._env_var:
            return None
        return os.environ.get(self._env_var) or None

    @abstractmethod
    def _load(self) -> str | None: ...

    @abstractmethod
    def _store(self, key: str) -> None: ...

    @abstractmethod
    def _erase(self) -> None: ...


class FileCredentialVault(CredentialVault):
    """Keeps the key in a file readable only by the current user."""

    def __init__(self, path: Path, env_var: str = "") -> None:
        super().__init__(env_var)
        self._path = path

    def _load(self) -> str | None:
        try:
            key = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Failed to read credential: {exc}") from exc
        return key or None

    def _store(self, key: str) -> None:
        try:
            atomic_write(self._path, key)
            os.chmod(self._path, 0o600)
        except OSError as exc:
            raise StorageError(f"Failed to save API key: {exc}") from exc

    def _erase(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete API key: {exc}") from exc


class MemoryCredentialVault(CredentialVault):
    """Process-local vault; forgets the key on exit."""

    def __init__(self, key: str | None = None, env_var: str = "") -> None:
        super().__init__(env_var)
        self._key = key

    def _load(self) -> str | None:
        return self._key

    def _store(self, key: str) -> None:
        self._key = key

    def _erase(self) -> None:
        self._key = None
