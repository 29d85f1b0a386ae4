"""
ziva/model_client.py
=====================
Generative Model Client — Ziva

Provides the single capability the adapters depend on::

    generate(prompt: str) -> str

backed by the OpenAI chat completions API, plus a strict JSON parser for
the model's answer.

Usage::

    from ziva.model_client import build_generator, parse_json_object

    generate = build_generator()          # None when no credentials
    if generate is not None:
        payload = parse_json_object(generate(prompt))

Failure contract:
    - Every provider error is translated into the ziva.errors taxonomy:
      ExternalTimeout, ExternalRateLimited, ExternalUnavailable,
      MalformedExternalOutput.
    - Exactly one attempt is made. The OpenAI client is built with
      max_retries=0 and no back-off loop runs here; callers fall straight
      to deterministic logic instead.

This module does NOT:
    - Decide what to do on failure (that is the adapters' job)
    - Build prompts or interpret fields of the parsed JSON
    - Extract JSON fragments from surrounding prose
"""

import json
import logging
from typing import Any, Callable

import openai
from openai import OpenAI

from ziva.config import Settings, load_settings
from ziva.errors import (
    ExternalRateLimited,
    ExternalTimeout,
    ExternalUnavailable,
    MalformedExternalOutput,
    ModelError,
)

logger = logging.getLogger("ziva.model_client")

# Signature of the injected capability
Generator = Callable[[str], str]

# HTTP status codes that mean "the provider is unavailable right now"
_UNAVAILABLE_STATUS_CODES: set[int] = {500, 502, 503, 504}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _classify_error(exc: Exception) -> ModelError:
    """Translate an OpenAI SDK exception into the ziva error taxonomy."""
    # APITimeoutError subclasses APIConnectionError, so it is checked first
    if isinstance(exc, openai.APITimeoutError):
        return ExternalTimeout("Model call timed out", cause=exc)

    if isinstance(exc, openai.RateLimitError):
        return ExternalRateLimited("Model provider rate limit hit", cause=exc)

    if isinstance(exc, openai.APIConnectionError):
        return ExternalUnavailable("Model provider unreachable", cause=exc)

    if isinstance(exc, openai.APIStatusError):
        if exc.status_code in _UNAVAILABLE_STATUS_CODES:
            return ExternalUnavailable(
                f"Model provider returned HTTP {exc.status_code}", cause=exc,
            )
        return ExternalUnavailable(
            f"Model call rejected with HTTP {exc.status_code}", cause=exc,
        )

    return ExternalUnavailable(f"Model call failed: {exc}", cause=exc)


# ---------------------------------------------------------------------------
# OpenAI-backed capability
# ---------------------------------------------------------------------------


class OpenAIGenerator:
    """
    Callable ``generate(prompt) -> str`` backed by OpenAI chat completions.

    The model is asked for a JSON object (``response_format=json_object``)
    so that the strict parser below has a realistic chance of succeeding.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout_s: float,
        client: Any = None,
    ) -> None:
        self.model = model
        self.timeout_s = timeout_s
        self._client = client or OpenAI(
            api_key=api_key, timeout=timeout_s, max_retries=0,
        )

    def __call__(self, prompt: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                response_format={"type": "json_object"},
                temperature=0.2,
                max_tokens=400,
            )
        except openai.OpenAIError as exc:
            error = _classify_error(exc)
            logger.warning("Model call failed: %s (%s)", error.message, exc)
            raise error from exc

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise MalformedExternalOutput("Model returned an empty response")

        logger.debug("Model raw response: %s", content)
        return content

    def __repr__(self) -> str:
        return f"OpenAIGenerator(model={self.model!r}, timeout_s={self.timeout_s})"


def build_generator(settings: Settings | None = None) -> OpenAIGenerator | None:
    """
    Build the live model capability from configuration.

    Returns None when no API key is configured — callers then run on the
    deterministic path without attempting any external call.
    """
    settings = settings or load_settings()

    if not settings.openai_api_key:
        logger.warning(
            "OPENAI_API_KEY not set — assistant and profile detection will "
            "use rule-based logic only."
        )
        return None

    logger.info(
        "Model client configured: model=%s, timeout=%.1fs",
        settings.model, settings.timeout_s,
    )
    return OpenAIGenerator(
        api_key=settings.openai_api_key,
        model=settings.model,
        timeout_s=settings.timeout_s,
    )


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def parse_json_object(raw: str) -> dict[str, Any]:
    """
    Parse the full model response as one JSON object.

    Args:
        raw: Text returned by the model.

    Returns:
        The decoded JSON object.

    Raises:
        MalformedExternalOutput: If the text is not exactly one JSON object.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedExternalOutput("Model response is empty")

    try:
        parsed = json.loads(raw.strip())
    except json.JSONDecodeError as exc:
        raise MalformedExternalOutput(
            f"Model response is not valid JSON: {raw[:120]!r}", cause=exc,
        ) from exc

    if not isinstance(parsed, dict):
        raise MalformedExternalOutput(
            f"Expected JSON object, got {type(parsed).__name__}"
        )

    return parsed
