"""
ziva/profile/ai_adapter.py
===========================
Model-Refined Profile Adapter — Ziva

Responsibility:
    - Build a fixed instructional prompt from validated UserSignals
    - Invoke the injected model capability exactly once
    - Strictly parse the JSON answer
    - Clamp or default every field against the rule-based profile
    - On ANY model failure, return the rule-based profile verbatim

Merge contract (per field, against the rule-based result):
    uiComplexity / contrast / confirmMode   recognized member, else rule value
    fontSize                                numeric → rounded, clamped [14, 24];
                                            otherwise rule value
    ttsSpeed                                numeric → clamped [0.5, 2.0];
                                            otherwise rule value
    largeTargets / captions                 booleans, default false
                                            (captions always on for hearing)
    reasoning                               model text, or a fixed note

No partial model values are ever surfaced on the failure path: callers see
either the fully merged profile or exactly resolve_rule_based(signals).

This module does NOT:
    - Retry the model call
    - Scrape JSON out of surrounding prose
    - Re-derive the accessibility rules (rules.py is the source of truth)
"""

import logging
import math
from enum import Enum
from typing import Any, TypeVar

from ziva.errors import ModelError, OutOfRangeValue
from ziva.model_client import Generator, parse_json_object
from ziva.profile.models import (
    FONT_SIZE_MAX,
    FONT_SIZE_MIN,
    TTS_SPEED_MAX,
    TTS_SPEED_MIN,
    AccessibilityProfile,
    ConfirmMode,
    Contrast,
    Disability,
    UiComplexity,
    UserSignals,
)
from ziva.profile.rules import resolve_rule_based

logger = logging.getLogger("ziva.profile.ai_adapter")

_NO_REASONING_NOTE: str = "Recommended by the accessibility model (no reasoning supplied)."

_E = TypeVar("_E", bound=Enum)


# ---------------------------------------------------------------------------
# Prompt (same qualitative guidance as rules.py)
# ---------------------------------------------------------------------------

_PROMPT_TEMPLATE: str = (
    "You are an accessibility expert AI for an inclusive banking application.\n\n"
    "User Profile Data:\n"
    "- Language: {language}\n"
    "- Disabilities: {disabilities}\n"
    "- Cognitive Score: {cognitive_score}/10 (1=low, 10=high)\n"
    "- Preferred Interaction: {interaction_mode}\n\n"
    "Based on this profile, recommend optimal accessibility settings. "
    "Respond ONLY with a JSON object (no markdown, no explanation) with "
    "these exact fields:\n"
    "{{\n"
    '  "uiComplexity": "simplified" | "moderate" | "detailed",\n'
    '  "fontSize": 14-24,\n'
    '  "contrast": "normal" | "high",\n'
    '  "largeTargets": true | false,\n'
    '  "confirmMode": "pin" | "voice" | "biometric",\n'
    '  "ttsSpeed": 0.5-2.0,\n'
    '  "captions": true | false,\n'
    '  "reasoning": "brief explanation"\n'
    "}}\n\n"
    "Guidelines:\n"
    "- Visual impairment: fontSize >= 20, high contrast, large targets\n"
    "- Motor impairment: voice confirm, large targets\n"
    "- Cognitive impairment or score < 4: simplified UI, fontSize >= 18\n"
    "- Hearing impairment: captions true, avoid voice confirm\n"
    "- High cognitive score (>7): detailed UI, smaller fontSize (14-16)"
)


def build_profile_prompt(signals: UserSignals) -> str:
    """Render the profile prompt for the given signals."""
    disabilities = sorted(d.value for d in signals.disabilities)
    return _PROMPT_TEMPLATE.format(
        language=signals.language.value,
        disabilities=", ".join(disabilities) or "none",
        cognitive_score=signals.cognitive_score,
        interaction_mode=signals.interaction_mode.value,
    )


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------


def _number(field: str, value: Any) -> float:
    """
    Coerce a model value to a finite number.

    Raises:
        OutOfRangeValue: If the value is missing, boolean or non-numeric.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OutOfRangeValue(field, value)
    if not math.isfinite(value):
        raise OutOfRangeValue(field, value)
    return float(value)


def _clamped_font_size(value: Any, fallback: int, source: str) -> int:
    try:
        size = int(round(_number("fontSize", value)))
    except OutOfRangeValue as exc:
        logger.debug("%s — keeping rule value %d.", exc, fallback)
        return fallback

    clamped = min(max(size, FONT_SIZE_MIN), FONT_SIZE_MAX)
    if clamped != size:
        logger.warning("%s fontSize %r clamped to %d.", source, value, clamped)
    return clamped


def _clamped_tts_speed(value: Any, fallback: float, source: str) -> float:
    try:
        speed = _number("ttsSpeed", value)
    except OutOfRangeValue as exc:
        logger.debug("%s — keeping rule value %.1f.", exc, fallback)
        return fallback

    clamped = min(max(speed, TTS_SPEED_MIN), TTS_SPEED_MAX)
    if clamped != speed:
        logger.warning("%s ttsSpeed %r clamped to %.1f.", source, value, clamped)
    return round(clamped, 2)


def _member(enum_cls: type[_E], value: Any, fallback: _E, source: str) -> _E:
    try:
        return enum_cls(value)
    except ValueError:
        if value is not None:
            logger.warning(
                "%s has unrecognized %s %r — keeping rule value %r.",
                source, enum_cls.__name__, value, fallback.value,
            )
        return fallback


def merge_model_profile(
    recommendation: dict[str, Any],
    signals: UserSignals,
    rule_profile: AccessibilityProfile,
    source: str = "Model",
) -> AccessibilityProfile:
    """
    Merge a parsed recommendation with the rule-based profile.

    ``source`` labels clamp warnings ("Model" or "Stored profile").

    Every field of the result is within its declared bound.
    """
    reasoning = recommendation.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        reasoning = _NO_REASONING_NOTE

    large_targets = recommendation.get("largeTargets")
    captions = recommendation.get("captions")

    return AccessibilityProfile(
        ui_complexity=_member(
            UiComplexity, recommendation.get("uiComplexity"),
            rule_profile.ui_complexity, source,
        ),
        font_size=_clamped_font_size(
            recommendation.get("fontSize"), rule_profile.font_size, source,
        ),
        contrast=_member(
            Contrast, recommendation.get("contrast"), rule_profile.contrast, source,
        ),
        large_targets=large_targets if isinstance(large_targets, bool) else False,
        confirm_mode=_member(
            ConfirmMode, recommendation.get("confirmMode"),
            rule_profile.confirm_mode, source,
        ),
        tts_speed=_clamped_tts_speed(
            recommendation.get("ttsSpeed"), rule_profile.tts_speed, source,
        ),
        captions=(captions is True) or signals.has(Disability.HEARING),
        reasoning=reasoning.strip(),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_with_model(
    signals: UserSignals,
    generate: Generator | None,
) -> AccessibilityProfile:
    """
    Resolve an accessibility profile, refined by the model when available.

    Args:
        signals:  Validated UserSignals.
        generate: Model capability, or None to skip the model entirely.

    Returns:
        The merged profile (with reasoning) on success, otherwise exactly
        ``resolve_rule_based(signals)``.
    """
    rule_profile = resolve_rule_based(signals)

    if generate is None:
        logger.info("No model capability configured — using rule-based profile.")
        return rule_profile

    try:
        raw = generate(build_profile_prompt(signals))
        recommendation = parse_json_object(raw)
    except ModelError as exc:
        logger.warning(
            "Model profile recommendation failed (%s) — falling back to "
            "rule-based profile.",
            exc,
        )
        return rule_profile

    profile = merge_model_profile(recommendation, signals, rule_profile)
    logger.info("Model-refined profile resolved: %s", profile.to_dict())
    return profile
