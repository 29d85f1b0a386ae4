"""
ziva/profile/signals.py
========================
Signal Validator — Ziva

Responsibility:
    - Accept raw, user-supplied onboarding signals (wire dicts from the
      onboarding flow, camelCase or snake_case keys)
    - Normalize and clamp them into the canonical UserSignals container

Correction policy:
    - Nothing is rejected. Unknown disability tags are dropped, the
      cognitive score is clamped to [1, 10] (non-numeric → 5), unknown
      languages fall back to "en", unknown interaction modes to "voice".
    - A truthy ``microInteractions.preferVoice`` forces voice mode.
    - Every correction is logged as a warning.

This module does NOT:
    - Call any LLM or external API
    - Resolve accessibility settings (that is rules.py / ai_adapter.py)
    - Persist anything
"""

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from ziva.errors import InvalidInputSignal
from ziva.profile.models import (
    COGNITIVE_SCORE_MAX,
    COGNITIVE_SCORE_MIN,
    DEFAULT_COGNITIVE_SCORE,
    Disability,
    InteractionMode,
    Language,
    UserSignals,
)

logger = logging.getLogger("ziva.profile.signals")

_VALID_DISABILITIES: set[str] = {member.value for member in Disability}
_VALID_LANGUAGES: set[str] = {member.value for member in Language}
_VALID_MODES: set[str] = {member.value for member in InteractionMode}


# ---------------------------------------------------------------------------
# Field normalizers
# ---------------------------------------------------------------------------


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the first present key's value (wire and Python spellings)."""
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _normalize_disabilities(value: Any) -> frozenset[Disability]:
    if value is None:
        return frozenset()

    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, Iterable):
        logger.warning("Disabilities %r is not a list — treating as none.", value)
        return frozenset()

    tags: set[Disability] = set()
    for item in value:
        tag = str(item).strip().lower()
        if tag in _VALID_DISABILITIES:
            tags.add(Disability(tag))
        elif tag and tag != "none":
            logger.warning("Unknown disability tag %r dropped.", item)
    return frozenset(tags)


def _parse_cognitive_score(value: Any) -> int:
    """
    Strictly parse a cognitive score and clamp it into range.

    Raises:
        InvalidInputSignal: If the value is missing or not a finite number.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInputSignal("cognitiveScore", value)

    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as exc:
            raise InvalidInputSignal("cognitiveScore", value) from exc

    # Integers are clamped as-is; arbitrarily large JSON ints overflow float
    if isinstance(value, int):
        score = value
    elif isinstance(value, float) and math.isfinite(value):
        score = int(round(value))
    else:
        raise InvalidInputSignal("cognitiveScore", value)

    clamped = min(max(score, COGNITIVE_SCORE_MIN), COGNITIVE_SCORE_MAX)
    if clamped != score:
        logger.warning(
            "Cognitive score outside [%d, %d] — clamped to %d.",
            COGNITIVE_SCORE_MIN, COGNITIVE_SCORE_MAX, clamped,
        )
    return clamped


def _normalize_cognitive_score(value: Any) -> int:
    try:
        return _parse_cognitive_score(value)
    except InvalidInputSignal as exc:
        if value is not None:
            logger.warning("%s — using default %d.", exc, DEFAULT_COGNITIVE_SCORE)
        return DEFAULT_COGNITIVE_SCORE


def _normalize_language(value: Any) -> Language:
    code = str(value).strip().lower() if value is not None else ""
    if code in _VALID_LANGUAGES:
        return Language(code)
    if code:
        logger.warning("Unsupported language %r — defaulting to 'en'.", value)
    return Language.EN


def _normalize_mode(value: Any, micro_interactions: Any) -> InteractionMode:
    if isinstance(micro_interactions, Mapping) and micro_interactions.get("preferVoice"):
        return InteractionMode.VOICE

    mode = str(value).strip().lower() if value is not None else ""
    if mode in _VALID_MODES:
        return InteractionMode(mode)
    if mode:
        logger.warning("Unknown interaction mode %r — defaulting to 'voice'.", value)
    return InteractionMode.VOICE


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_signals(raw: Mapping[str, Any] | None) -> UserSignals:
    """
    Build a validated UserSignals container from raw onboarding data.

    Args:
        raw:
            Dict with any of: disabilities, cognitiveScore / cognitive_score,
            language, interactionMode / interaction_mode, microInteractions /
            micro_interactions. Missing keys take their defaults.

    Returns:
        Canonical UserSignals. Never raises for bad values.
    """
    raw = raw or {}

    signals = UserSignals(
        disabilities=_normalize_disabilities(raw.get("disabilities")),
        cognitive_score=_normalize_cognitive_score(
            _pick(raw, "cognitiveScore", "cognitive_score")
        ),
        language=_normalize_language(raw.get("language")),
        interaction_mode=_normalize_mode(
            _pick(raw, "interactionMode", "interaction_mode"),
            _pick(raw, "microInteractions", "micro_interactions"),
        ),
    )

    logger.info("UserSignals normalized: %s", signals.to_dict())
    return signals
