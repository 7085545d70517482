"""Shared parsing and LLM utilities for capability responses."""

import logging
import re

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)
_MARKUP_FENCE_RE = re.compile(
    r"```(?:html|tsx|jsx|javascript|typescript|react)?\s*(.*?)\s*```", re.DOTALL
)


def strip_fences(text: str) -> str:
    """Strip markdown code fences from LLM output if present."""
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def extract_markup(text: str) -> str:
    """Pull the markup out of an assembler response.

    Takes the first fenced block's content if there is one, otherwise the span
    from the first ``<`` to the last ``>``, otherwise the trimmed text.
    """
    match = _MARKUP_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()

    first_open = text.find("<")
    last_close = text.rfind(">")
    if first_open != -1 and last_close > first_open:
        return text[first_open:last_close + 1]
    return text.strip()


def message_text(content) -> str:
    """Flatten a chat message's content (plain string or list of parts) to text."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


def _is_transient(exc: BaseException) -> bool:
    """Return True if the exception is a transient HTTP/network error worth retrying."""
    if isinstance(exc, httpx.TimeoutException):
        return True
    if isinstance(exc, httpx.ConnectError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in (429, 500, 502, 503)
    return False


async def ainvoke_with_retry(llm, messages, max_retries: int = 2, **kwargs):
    """Await llm.ainvoke(messages) with exponential backoff on transient errors.

    Retries on HTTP 429/500/502/503, connection errors, and timeouts.
    Non-transient errors (auth failures, safety blocks) are raised immediately.
    Extra keyword arguments are forwarded to ``ainvoke``.
    """
    from sketchui.config import get_config

    config = get_config()
    retries = config.get("llm_max_retries", max_retries)

    @retry(
        stop=stop_after_attempt(retries + 1),  # +1 because first attempt counts
        wait=wait_exponential(multiplier=1, min=2, max=16),
        retry=retry_if_exception(_is_transient),
        reraise=True,
        before_sleep=lambda state: logger.warning(
            "Transient error: %r. Retrying in %.0fs (attempt %d/%d)...",
            state.outcome.exception(),
            state.next_action.sleep,
            state.attempt_number,
            retries,
        ),
    )
    async def _ainvoke():
        return await llm.ainvoke(messages, **kwargs)

    return await _ainvoke()
