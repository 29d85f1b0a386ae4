# ziva/profile/__init__.py
# =========================
# Accessibility Profile Resolution — Ziva
#
# Responsibility:
#   - Normalize raw onboarding signals (signals.py)
#   - Resolve settings with the deterministic rule set (rules.py)
#   - Refine settings with the generative model, clamped and merged
#     against the rule result (ai_adapter.py)
#
# Public API:
#   - normalize_signals()   — raw dict → UserSignals
#   - resolve_rule_based()  — UserSignals → AccessibilityProfile (pure)
#   - resolve_with_model()  — UserSignals → AccessibilityProfile (best-effort)

from ziva.profile.models import (  # noqa: F401
    AccessibilityProfile,
    ConfirmMode,
    Contrast,
    Disability,
    InteractionMode,
    Language,
    UiComplexity,
    UserSignals,
)
from ziva.profile.signals import normalize_signals  # noqa: F401
from ziva.profile.rules import resolve_rule_based  # noqa: F401
from ziva.profile.ai_adapter import resolve_with_model  # noqa: F401
