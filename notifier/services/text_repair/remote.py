# notifier/services/text_repair/remote.py
"""
Optional remote enrichment through a LanguageTool-compatible service.

The remote service only widens vocabulary coverage. Text is always repaired
locally first; the locally repaired text is sent for checking and the
service's suggestions are applied on top. Any failure (network, timeout,
non-2xx, malformed body, open circuit) returns the local result unchanged.

Wire contract:
    POST form {text, language, enabledOnly}
    200 {"matches": [{"offset": int, "length": int,
                      "replacements": [{"value": str}, ...]}, ...]}
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from notifier.logging_config import log_remote_call
from notifier.services.resilience import (
    CircuitBreaker,
    CircuitOpenError,
    OperationTimeoutError,
    with_timeout,
)
from notifier.services.text_repair.engine import LocalRepairer
from notifier.services.text_repair.errors import RemoteUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteSuggestion:
    """One suggested edit: replace text[offset:offset + length]."""

    offset: int
    length: int
    replacements: tuple[str, ...]


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def parse_suggestions(body: Any) -> list[RemoteSuggestion]:
    """
    Validate a response body and turn its matches into suggestions.

    Raises:
        RemoteUnavailable: If the body does not follow the wire contract
    """
    if not isinstance(body, dict) or not isinstance(body.get("matches"), list):
        raise RemoteUnavailable("Response body has no 'matches' list")

    suggestions: list[RemoteSuggestion] = []
    for match in body["matches"]:
        if not isinstance(match, dict):
            raise RemoteUnavailable(f"Malformed match: {match!r}")

        offset = match.get("offset")
        length = match.get("length")
        if not _is_index(offset) or not _is_index(length):
            raise RemoteUnavailable(f"Malformed match position: offset={offset!r} length={length!r}")

        replacements = match.get("replacements", [])
        if not isinstance(replacements, list):
            raise RemoteUnavailable("Malformed replacements list")

        values = []
        for replacement in replacements:
            if not isinstance(replacement, dict) or not isinstance(replacement.get("value"), str):
                raise RemoteUnavailable(f"Malformed replacement: {replacement!r}")
            values.append(replacement["value"])

        suggestions.append(RemoteSuggestion(offset=offset, length=length, replacements=tuple(values)))

    return suggestions


def apply_suggestions(text: str, suggestions: list[RemoteSuggestion]) -> str:
    """
    Apply the first candidate of each suggestion.

    Edits are applied from the highest offset down, so an edit never moves
    the position of one still to be applied. Suggestions without candidates
    are skipped.

    Raises:
        RemoteUnavailable: If a suggestion points outside text
    """
    result = text
    for suggestion in sorted(suggestions, key=lambda s: s.offset, reverse=True):
        if not suggestion.replacements:
            continue
        end = suggestion.offset + suggestion.length
        if end > len(text):
            raise RemoteUnavailable(f"Suggestion at {suggestion.offset}+{suggestion.length} is out of range")
        result = result[: suggestion.offset] + suggestion.replacements[0] + result[end:]
    return result


class LanguageToolRepairer:
    """
    Remote repair strategy with local fallback.

    Usage:
        repairer = LanguageToolRepairer("https://api.languagetool.org/v2/check", LocalRepairer())
        corrected = await repairer.repair("voce tem uma reuniao")
        await repairer.aclose()
    """

    name = "languagetool"
    DEFAULT_TIMEOUT = 3.0

    def __init__(
        self,
        url: str,
        local: LocalRepairer,
        language: str = "pt-BR",
        timeout: float = DEFAULT_TIMEOUT,
        breaker: CircuitBreaker | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            url: Full URL of the check endpoint
            local: Strategy used first and as the fallback
            language: Language code sent with every request
            timeout: Hard limit for one remote call, in seconds
            breaker: Circuit breaker shared by all calls
            client: Preconfigured HTTP client (tests)
        """
        self.url = url
        self.local = local
        self.language = language
        self.timeout = timeout
        self.breaker = breaker or CircuitBreaker(name=self.name)
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def check(self, text: str) -> list[RemoteSuggestion]:
        """Send text to the service and return its suggestions."""
        response = await self.client.post(
            self.url,
            data={"text": text, "language": self.language, "enabledOnly": "false"},
        )
        response.raise_for_status()
        try:
            body = response.json()
        except ValueError as e:
            raise RemoteUnavailable(f"Response is not JSON: {e}") from e
        return parse_suggestions(body)

    async def _check_within_timeout(self, text: str) -> list[RemoteSuggestion]:
        with log_remote_call(self.name, "check") as metrics:
            suggestions = await with_timeout(self.check(text), self.timeout, "LanguageTool check")
            metrics["suggestions"] = len(suggestions)
        return suggestions

    async def repair(self, text: str) -> str:
        """Local repair, enriched with remote suggestions when the service answers."""
        base = self.local.repair(text)
        if not base.strip():
            return base

        try:
            suggestions = await self.breaker.call(self._check_within_timeout, base)
            return apply_suggestions(base, suggestions)
        except (httpx.HTTPError, RemoteUnavailable, OperationTimeoutError, CircuitOpenError) as e:
            logger.debug(f"Remote enrichment unavailable, using local repair: {e}")
            return base
        except Exception as e:
            # CancelledError is a BaseException and still propagates
            logger.warning(
                f"Unexpected remote enrichment error, using local repair: {e}",
                extra={"event": "remote_enrichment_error", "error_type": type(e).__name__},
            )
            return base

    async def aclose(self) -> None:
        await self.client.aclose()
