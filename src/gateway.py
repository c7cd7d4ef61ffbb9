"""Language model gateways.

A gateway turns a :class:`~worklog.models.Prompt` into completion text
and reports failures as :class:`~worklog.errors.GatewayError` subclasses.
Two backends are available:

- ``OpenAIGateway``: chat completions over HTTPS using urllib.request.
- ``ClaudeCLIGateway``: shells out to ``claude -p``.
"""

from __future__ import annotations

import contextlib
import http.client
import json
import logging
import subprocess
import urllib.request
from abc import ABC, abstractmethod
from urllib.error import HTTPError, URLError

from worklog.config import LLMConfig
from worklog.errors import (
    NetworkError,
    ProviderError,
    RateLimited,
    Unauthorized,
)
from worklog.models import Prompt
from worklog.vault import CredentialVault

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-4o"


class LanguageModelGateway(ABC):
    """Sends a prompt to a text generation service and returns its reply."""

    @abstractmethod
    def complete(self, prompt: Prompt) -> str:
        """Return the completion text for ``prompt``.

        Raises:
            Unauthorized, RateLimited, NetworkError, ProviderError
        """

    @property
    def needs_credential(self) -> bool:
        """Whether callers must check the vault before calling."""
        return True


class OpenAIGateway(LanguageModelGateway):
    """Chat completions client.

    The API key is fetched from the vault for each call and dropped when
    the call returns.
    """

    def __init__(self, config: LLMConfig, vault: CredentialVault) -> None:
        self._config = config
        self._vault = vault
        self._url = f"{config.base_url.rstrip('/')}/chat/completions"

    def complete(self, prompt: Prompt) -> str:
        body = {
            "model": self._config.model or DEFAULT_OPENAI_MODEL,
            "messages": [
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
            "max_tokens": self._config.max_tokens,
            "temperature": self._config.temperature,
        }
        req = urllib.request.Request(
            self._url,
            data=json.dumps(body).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {self._vault.get()}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            method="POST",
        )

        logger.debug("Calling %s (model=%s)", self._url, body["model"])

        try:
            with urllib.request.urlopen(req, timeout=self._config.timeout) as resp:
                raw = resp.read().decode("utf-8")
        except HTTPError as exc:
            raise _translate_http_error(exc) from exc
        except TimeoutError as exc:
            raise NetworkError(
                f"Request timed out after {self._config.timeout}s"
            ) from exc
        except URLError as exc:
            raise NetworkError(f"Connection error: {exc.reason}") from exc
        except (OSError, http.client.HTTPException) as exc:
            raise NetworkError(f"Connection error: {exc!r}") from exc

        return _extract_content(raw)


def _translate_http_error(exc: HTTPError) -> Exception:
    body = ""
    with contextlib.suppress(Exception):
        body = exc.read().decode("utf-8")

    if exc.code in (401, 403):
        return Unauthorized(f"API key rejected ({exc.code}): {_error_message(body)}")
    if exc.code == 429:
        retry_after: float | None = None
        header = exc.headers.get("Retry-After") if exc.headers else None
        if header:
            with contextlib.suppress(ValueError):
                retry_after = float(header)
        return RateLimited(
            f"Rate limited by the API: {_error_message(body)}",
            retry_after=retry_after,
        )
    return ProviderError(
        f"API error: {exc.code} {exc.reason}", status=exc.code, body=body
    )


def _error_message(body: str) -> str:
    """Pull ``error.message`` out of an API error body, if present."""
    try:
        data = json.loads(body)
        return str(data["error"]["message"])
    except (json.JSONDecodeError, KeyError, TypeError):
        return body.strip() or "no details"


def _extract_content(raw: str) -> str:
    try:
        data = json.loads(raw)
        content = data["choices"][0]["message"]["content"]
    except (json.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
        raise ProviderError(
            "Invalid response format from the API", body=raw
        ) from exc
    if not isinstance(content, str):
        raise ProviderError("Invalid response format from the API", body=raw)
    return content


class ClaudeCLIGateway(LanguageModelGateway):
    """Runs ``claude -p`` and returns its stdout.

    The CLI manages its own authentication, so no vault key is needed.
    """

    def __init__(self, config: LLMConfig) -> None:
        self._config = config

    @property
    def needs_credential(self) -> bool:
        return False

    def complete(self, prompt: Prompt) -> str:
        cmd: list[str] = ["claude", "-p"]
        if self._config.model:
            cmd.extend(["--model", self._config.model])
        cmd.append(prompt.render())

        logger.debug("Calling Claude CLI")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._config.timeout,
            )
        except FileNotFoundError as e:
            raise ProviderError(
                "Claude CLI not found -- is 'claude' on the PATH?"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise NetworkError(
                f"Claude CLI timed out after {self._config.timeout}s"
            ) from e
        except OSError as e:
            raise ProviderError(f"Failed to run Claude CLI: {e}") from e

        if result.returncode != 0:
            err_text = result.stderr.strip() if result.stderr else ""
            raise ProviderError(
                f"Claude CLI exited {result.returncode}: {err_text}",
                status=result.returncode,
                body=err_text,
            )

        return result.stdout.strip()


def build_gateway(config: LLMConfig, vault: CredentialVault) -> LanguageModelGateway:
    """Construct the gateway named by ``config.provider``."""
    if config.provider == "openai":
        return OpenAIGateway(config, vault)
    if config.provider == "claude-cli":
        return ClaudeCLIGateway(config)
    raise ValueError(f"Unknown LLM provider: {config.provider!r}")


def strip_code_fence(text: str) -> str:
    """Remove a markdown code fence wrapped around a whole reply."""
    raw = text.strip()
    if not (raw.startswith("```") and raw.endswith("```")) or "\n" not in raw:
        return text
    fence_lines = [line for line in raw.splitlines() if line.lstrip().startswith("```")]
    if len(fence_lines) != 2:
        return text
    inner = raw.split("\n", 1)[1]
    return inner[:-3].rstrip()
