"""
ziva/services.py
=================
Service Facades — Ziva Integration Layer

Responsibility:
    - ProfileService: raw onboarding signals → validated AccessibilityProfile
      and the profile document returned to the onboarding flow
    - ConversationService: stored profile + history + transactions →
      ConversationContext → AssistantResponse, plus proactive guidance
    - Keep both entry points TOTAL: no error ever reaches the caller

These facades are the only things the HTTP layer calls. They hold no
mutable state; the injected model capability is the only collaborator.

Step order for a profile resolution:
    1. Signal validation     (profile/signals.py)
    2. Rule-based profile    (profile/rules.py — always computed)
    3. Model refinement      (profile/ai_adapter.py — best-effort)

Step order for a message:
    1. Context assembly      (history, financial snapshot, profile)
    2. Model reply           (conversation/ai_adapter.py — best-effort)
    3. Rule-based router     (conversation/intent_router.py — fallback)

This layer MUST NOT:
    - Re-derive accessibility rules or intent phrases itself
    - Retry model calls
    - Persist anything
"""

import dataclasses
import logging
import time
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from ziva.config import DEFAULT_OPENING_BALANCE, Settings, load_settings
from ziva.conversation.ai_adapter import respond_with_model
from ziva.conversation.guidance import analyze_spending, build_guidance, derive_balance
from ziva.conversation.intent_router import route_by_rules
from ziva.conversation.models import (
    AssistantResponse,
    ConversationContext,
    FinancialSnapshot,
    HistoryTurn,
    UserProfile,
)
from ziva.model_client import Generator, build_generator
from ziva.profile.ai_adapter import merge_model_profile, resolve_with_model
from ziva.profile.models import AccessibilityProfile, UserSignals
from ziva.profile.rules import resolve_rule_based
from ziva.profile.signals import normalize_signals

logger = logging.getLogger("ziva.services")

DEFAULT_FONT: str = "inter"


# =====================================================================
# Profile documents: wire format shared with the onboarding flow
# =====================================================================


def build_profile_document(
    signals: UserSignals,
    profile: AccessibilityProfile,
    profile_id: str | None = None,
    include_reasoning: bool = False,
) -> dict[str, Any]:
    """
    Assemble the profile document returned by profile detection.

    Args:
        signals:           Validated signals the profile was resolved from.
        profile:           Resolved accessibility profile.
        profile_id:        Existing id; a new ``p_<millis>`` id otherwise.
        include_reasoning: Add ``_aiReasoning`` when the model supplied one.
    """
    document: dict[str, Any] = {
        "profileId": profile_id or f"p_{int(time.time() * 1000)}",
        **signals.to_dict(),
        "uiComplexity": profile.ui_complexity.value,
        "accessibilityPreferences": {
            "fontSize": profile.font_size,
            "contrast": profile.contrast.value,
            "ttsSpeed": profile.tts_speed,
            "largeTargets": profile.large_targets,
            "captions": profile.captions,
            "font": DEFAULT_FONT,
        },
        "confirmMode": profile.confirm_mode.value,
        "isOnboardingComplete": False,
    }

    if include_reasoning and profile.reasoning:
        document["_aiReasoning"] = profile.reasoning

    return document


def profile_from_document(document: Mapping[str, Any]) -> UserProfile:
    """
    Rebuild a UserProfile from a stored profile document.

    Stored settings pass through the same clamps as model output, so a
    hand-edited document can never carry an out-of-bounds value.
    """
    signals = normalize_signals(document)
    rule_profile = resolve_rule_based(signals)

    preferences = document.get("accessibilityPreferences")
    stored: dict[str, Any] = dict(preferences) if isinstance(preferences, Mapping) else {}
    for key in ("uiComplexity", "confirmMode"):
        if key in document:
            stored[key] = document[key]

    accessibility = rule_profile
    if stored:
        stored.setdefault("largeTargets", rule_profile.large_targets)
        stored.setdefault("captions", rule_profile.captions)
        accessibility = dataclasses.replace(
            merge_model_profile(stored, signals, rule_profile, source="Stored profile"),
            reasoning=None,
        )

    name = document.get("name")
    return UserProfile(
        name=name if isinstance(name, str) else None,
        language=signals.language,
        disabilities=signals.disabilities,
        cognitive_score=signals.cognitive_score,
        interaction_mode=signals.interaction_mode,
        accessibility=accessibility,
    )


def _history_turns(history: Iterable[Any] | None) -> tuple[HistoryTurn, ...]:
    turns: list[HistoryTurn] = []
    for item in history or ():
        if not isinstance(item, Mapping):
            continue
        content = str(item.get("content") or "").strip()
        if content:
            turns.append(HistoryTurn(role=str(item.get("role") or "user"), content=content))
    return tuple(turns)


# =====================================================================
# Profile facade
# =====================================================================


class ProfileService:
    """Resolve accessibility profiles; never raises."""

    def __init__(
        self,
        generate: Generator | None = None,
        expose_reasoning: bool = False,
    ) -> None:
        self.generate = generate
        self.expose_reasoning = expose_reasoning

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ProfileService":
        settings = settings or load_settings()
        return cls(
            generate=build_generator(settings),
            expose_reasoning=settings.expose_reasoning,
        )

    def resolve_profile(self, signals: UserSignals) -> AccessibilityProfile:
        """Resolve a bounded-valid profile for validated signals."""
        try:
            return resolve_with_model(signals, self.generate)
        except Exception as exc:
            # Custom capabilities may raise outside the ModelError taxonomy
            logger.error(
                "Profile resolution failed unexpectedly (%s) — using rule-based "
                "profile.",
                exc,
                exc_info=True,
            )
            return resolve_rule_based(signals)

    def detect_profile(
        self,
        payload: Mapping[str, Any],
        profile_id: str | None = None,
    ) -> dict[str, Any]:
        """Validate raw onboarding data and return the full profile document."""
        signals = normalize_signals(payload)
        profile = self.resolve_profile(signals)
        document = build_profile_document(
            signals, profile, profile_id, include_reasoning=self.expose_reasoning,
        )
        logger.info(
            "Profile detected: %s (uiComplexity=%s, confirmMode=%s)",
            document["profileId"], document["uiComplexity"], document["confirmMode"],
        )
        return document


# =====================================================================
# Conversation facade
# =====================================================================


class ConversationService:
    """Route assistant messages and compute guidance; never raises."""

    def __init__(
        self,
        generate: Generator | None = None,
        opening_balance: float = DEFAULT_OPENING_BALANCE,
    ) -> None:
        self.generate = generate
        self.opening_balance = opening_balance

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ConversationService":
        settings = settings or load_settings()
        return cls(
            generate=build_generator(settings),
            opening_balance=settings.opening_balance,
        )

    def build_context(
        self,
        message: str,
        profile_document: Mapping[str, Any] | None = None,
        history: Iterable[Any] | None = None,
        transactions: Iterable[Mapping[str, Any]] | None = None,
        emotional_state: str | None = None,
    ) -> ConversationContext:
        """Assemble a read-only context from stored documents and request data."""
        transactions = list(transactions or ())
        if not isinstance(emotional_state, str):
            emotional_state = None
        financial = FinancialSnapshot(
            balance=derive_balance(transactions, self.opening_balance),
            recent_transaction_count=len(transactions),
            emotional_state=(emotional_state or "neutral").strip() or "neutral",
        )
        profile = (
            profile_from_document(profile_document)
            if profile_document is not None
            else None
        )
        return ConversationContext(
            user_message=message,
            profile=profile,
            history=_history_turns(history),
            financial=financial,
        )

    def route_message(self, context: ConversationContext) -> AssistantResponse:
        """Produce the assistant reply; always has a non-empty message."""
        try:
            return respond_with_model(context, self.generate)
        except Exception as exc:
            logger.error(
                "Conversation routing failed unexpectedly (%s) — using "
                "rule-based router.",
                exc,
                exc_info=True,
            )
            return route_by_rules(context.user_message, context.profile, context.financial)

    def proactive_guidance(
        self,
        transactions: Iterable[Mapping[str, Any]],
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Analyze recent spending and return guidance items with a summary."""
        analysis = analyze_spending(transactions, now)
        return {
            "guidance": build_guidance(analysis),
            "analysis": {
                "totalSpending": analysis["total_spending"],
                "averageTransaction": round(analysis["average_transaction"], 2),
                "spendingTrend": (
                    "increasing" if analysis["spending_increase"] > 0 else "decreasing"
                ),
            },
        }
