"""
ziva/profile/rules.py
======================
Rule-Based Profile Resolver — Ziva

Responsibility:
    - Accept validated UserSignals (from signals.py)
    - Derive an AccessibilityProfile DETERMINISTICALLY with fixed precedence
    - Serve as the single source of truth for the accessibility rules; every
      fallback path in the system delegates here

Pass order (later passes may only tighten earlier decisions):
    1. Baseline       moderate UI, 16px, normal contrast, PIN confirmation
    2. Cognitive      cognitive disability or score < 4 → simplified, ≥ 18px
                      else score > 7 → detailed, 14px
    3. Visual         ≥ 20px, high contrast, large targets
    4. Motor          voice confirmation, large targets
    5. Hearing        captions on; voice confirmation reverts to PIN

The hearing pass is the one place a value set earlier is undone: a user
with both motor and hearing impairments loses voice confirmation. This is
a policy decision carried over unchanged and is worth revisiting with
accessibility reviewers before changing it.

This module does NOT:
    - Call any LLM or external API
    - Validate or clamp raw input (that is signals.py)
    - Store data
"""

import logging

from ziva.profile.models import (
    AccessibilityProfile,
    ConfirmMode,
    Contrast,
    Disability,
    UiComplexity,
    UserSignals,
)

logger = logging.getLogger("ziva.profile.rules")


# ---------------------------------------------------------------------------
# Rule thresholds and baseline values
# ---------------------------------------------------------------------------

LOW_COGNITIVE_THRESHOLD: int = 4    # score strictly below → simplified UI
HIGH_COGNITIVE_THRESHOLD: int = 7   # score strictly above → detailed UI

BASELINE_FONT_SIZE: int = 16
SIMPLIFIED_MIN_FONT_SIZE: int = 18
DETAILED_FONT_SIZE: int = 14
VISUAL_MIN_FONT_SIZE: int = 20
BASELINE_TTS_SPEED: float = 1.0


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_rule_based(signals: UserSignals) -> AccessibilityProfile:
    """
    Resolve accessibility settings from signals with the fixed rule set.

    Pure function: identical signals always produce an identical profile,
    and every field is within its declared bound.

    Args:
        signals: Validated UserSignals.

    Returns:
        AccessibilityProfile with ``reasoning=None``.
    """
    # --- Pass 1: baseline ---
    ui_complexity = UiComplexity.MODERATE
    font_size = BASELINE_FONT_SIZE
    contrast = Contrast.NORMAL
    confirm_mode = ConfirmMode.PIN
    large_targets = False

    # --- Pass 2: cognitive (disability always wins over a high score) ---
    if (
        signals.has(Disability.COGNITIVE)
        or signals.cognitive_score < LOW_COGNITIVE_THRESHOLD
    ):
        ui_complexity = UiComplexity.SIMPLIFIED
        font_size = max(font_size, SIMPLIFIED_MIN_FONT_SIZE)
    elif signals.cognitive_score > HIGH_COGNITIVE_THRESHOLD:
        ui_complexity = UiComplexity.DETAILED
        font_size = DETAILED_FONT_SIZE

    # --- Pass 3: visual ---
    if signals.has(Disability.VISUAL):
        font_size = max(font_size, VISUAL_MIN_FONT_SIZE)
        contrast = Contrast.HIGH
        large_targets = True

    # --- Pass 4: motor ---
    if signals.has(Disability.MOTOR):
        confirm_mode = ConfirmMode.VOICE
        large_targets = True

    # --- Pass 5: hearing ---
    captions = signals.has(Disability.HEARING)
    if captions and confirm_mode is ConfirmMode.VOICE:
        confirm_mode = ConfirmMode.PIN

    profile = AccessibilityProfile(
        ui_complexity=ui_complexity,
        font_size=font_size,
        contrast=contrast,
        large_targets=large_targets,
        confirm_mode=confirm_mode,
        tts_speed=BASELINE_TTS_SPEED,
        captions=captions,
    )

    logger.info("Rule-based profile resolved: %s", profile.to_dict())
    return profile
