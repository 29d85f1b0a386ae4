"""
ziva/conversation/ai_adapter.py
================================
Model-Backed Conversation Adapter — Ziva

Responsibility:
    - Build one prompt from the user message, profile, last 3 history turns
      and financial snapshot
    - Invoke the injected model capability exactly once
    - Strictly parse and validate the JSON answer into an AssistantResponse
    - On ANY failure, delegate the whole request to the rule-based router

Validation of the model answer (any violation → MalformedExternalOutput):
    message      non-empty string (required)
    action       null / missing, or a recognized Action
    data         null / missing, or a JSON object
    emotion      missing → "neutral", otherwise a recognized Emotion
    suggestions  missing → [], otherwise a list of strings (first 4 kept)

Unlike the profile adapter there is no per-field merge: free text cannot be
clamped, so the fallback is all-or-nothing.

This module does NOT:
    - Retry the model call
    - Execute banking actions
    - Store conversation history
"""

import logging
from typing import Any

from ziva.conversation.intent_router import format_naira, route_by_rules
from ziva.conversation.models import (
    MAX_SUGGESTIONS,
    Action,
    AssistantResponse,
    ConversationContext,
    Emotion,
)
from ziva.errors import MalformedExternalOutput, ModelError
from ziva.model_client import Generator, parse_json_object
from ziva.profile.models import InteractionMode, UiComplexity

logger = logging.getLogger("ziva.conversation.ai_adapter")

SIMPLE_LANGUAGE_THRESHOLD: int = 5  # cognitive score strictly below → plain words

_VALID_ACTIONS: set[str] = {member.value for member in Action}
_VALID_EMOTIONS: set[str] = {member.value for member in Emotion}


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


def _style_instructions(context: ConversationContext) -> list[str]:
    """Tone and verbosity instructions driven by the profile."""
    profile = context.profile
    instructions = [
        "Be warm, empathetic, and supportive.",
        "Adapt tone to the user's emotional state and cognitive profile.",
    ]

    if profile is None:
        return instructions

    if profile.cognitive_score < SIMPLE_LANGUAGE_THRESHOLD:
        instructions.append(
            "Use short sentences and simple, everyday words. One idea per sentence."
        )
    else:
        instructions.append("Use clear, plain language.")

    settings = profile.accessibility
    if settings is not None and settings.ui_complexity is UiComplexity.SIMPLIFIED:
        instructions.append(
            "Offer at most one next step: the user has a simplified interface."
        )
    if settings is not None and settings.captions:
        instructions.append("Do not rely on sound cues: the reply is shown as captions.")

    if profile.interaction_mode is InteractionMode.VOICE:
        instructions.append("Be concise: the reply will be read aloud.")
    else:
        instructions.append("You may be a little more detailed: the reply is shown as text.")

    return instructions


def build_conversation_prompt(context: ConversationContext) -> str:
    """Render the assistant prompt for one message."""
    profile = context.profile
    financial = context.financial

    if profile is not None:
        disabilities = ", ".join(sorted(d.value for d in profile.disabilities)) or "none"
        profile_lines = [
            f"- Name: {profile.display_name}",
            f"- Language: {profile.language.value}",
            f"- Disabilities: {disabilities}",
            f"- Cognitive Score: {profile.cognitive_score}/10",
            f"- Interaction Mode: {profile.interaction_mode.value}",
        ]
        settings = profile.accessibility
        if settings is not None:
            profile_lines += [
                f"- Interface: {settings.ui_complexity.value}",
                f"- Speech Rate: {settings.tts_speed}x",
                f"- Captions: {'on' if settings.captions else 'off'}",
            ]
    else:
        profile_lines = ["- Name: there", "- No stored profile"]

    history_lines = [
        f"{turn.role}: {turn.content}" for turn in context.recent_history()
    ] or ["(no previous messages)"]

    instructions = _style_instructions(context) + [
        "Detect the user's intent (check balance, transfer, pay bills, view "
        "transactions, get advice, emotional support).",
        "Provide actionable suggestions when appropriate (at most 4).",
        "Show financial empathy - never judge spending or financial struggles.",
    ]

    return "\n".join([
        "You are Ziva, an empathetic AI banking assistant for an inclusive bank.",
        "",
        "USER PROFILE:",
        *profile_lines,
        f"- Emotional State: {financial.emotional_state}",
        "",
        "CONTEXT:",
        f"- Account Balance: {format_naira(financial.balance)}",
        f"- Recent Activity: {financial.recent_transaction_count} transactions",
        "",
        "CONVERSATION HISTORY:",
        *history_lines,
        "",
        f'USER MESSAGE: "{context.user_message}"',
        "",
        "INSTRUCTIONS:",
        *(f"{i}. {text}" for i, text in enumerate(instructions, start=1)),
        "",
        "Respond ONLY with a JSON object (no markdown):",
        "{",
        '  "message": "your reply",',
        '  "action": "check_balance" | "transfer" | "pay_bill" | '
        '"view_transactions" | "financial_advice" | "emotional_support" | null,',
        '  "data": { } | null,',
        '  "emotion": "supportive" | "encouraging" | "calm" | "celebratory" | '
        '"concerned" | "neutral",',
        '  "suggestions": ["suggestion 1", "suggestion 2"]',
        "}",
    ])


# ---------------------------------------------------------------------------
# Response validation
# ---------------------------------------------------------------------------


def _parse_assistant_payload(payload: dict[str, Any]) -> AssistantResponse:
    """
    Validate a parsed model payload into an AssistantResponse.

    Raises:
        MalformedExternalOutput: If any field violates the response contract.
    """
    message = payload.get("message")
    if not isinstance(message, str) or not message.strip():
        raise MalformedExternalOutput("Model reply has no message text")

    action = payload.get("action")
    if action is not None and (
        not isinstance(action, str) or action not in _VALID_ACTIONS
    ):
        raise MalformedExternalOutput(f"Unrecognized action: {action!r}")

    data = payload.get("data")
    if data is not None and not isinstance(data, dict):
        raise MalformedExternalOutput(
            f"data must be an object, got {type(data).__name__}"
        )

    emotion = payload.get("emotion")
    if emotion is None:
        emotion = Emotion.NEUTRAL.value
    elif not isinstance(emotion, str) or emotion not in _VALID_EMOTIONS:
        raise MalformedExternalOutput(f"Unrecognized emotion: {emotion!r}")

    suggestions = payload.get("suggestions")
    if suggestions is None:
        suggestions = []
    if not isinstance(suggestions, list) or not all(
        isinstance(item, str) for item in suggestions
    ):
        raise MalformedExternalOutput("suggestions must be a list of strings")

    cleaned = [item.strip() for item in suggestions if item.strip()]
    if len(cleaned) > MAX_SUGGESTIONS:
        logger.debug(
            "Model returned %d suggestions — keeping the first %d.",
            len(cleaned), MAX_SUGGESTIONS,
        )

    return AssistantResponse(
        message=message.strip(),
        action=Action(action) if action is not None else None,
        data=data,
        emotion=Emotion(emotion),
        suggestions=tuple(cleaned[:MAX_SUGGESTIONS]),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def respond_with_model(
    context: ConversationContext,
    generate: Generator | None,
) -> AssistantResponse:
    """
    Produce the assistant reply, using the model when available.

    Args:
        context:  Read-only conversation context for this message.
        generate: Model capability, or None to skip the model entirely.

    Returns:
        The validated model reply, otherwise exactly the rule-based reply
        for the same message, profile and financial snapshot.
    """
    if generate is None:
        logger.info("No model capability configured — using rule-based router.")
        return route_by_rules(context.user_message, context.profile, context.financial)

    try:
        raw = generate(build_conversation_prompt(context))
        response = _parse_assistant_payload(parse_json_object(raw))
    except ModelError as exc:
        logger.warning(
            "Model conversation reply failed (%s) — falling back to "
            "rule-based router.",
            exc,
        )
        return route_by_rules(context.user_message, context.profile, context.financial)

    logger.info(
        "Model reply accepted: action=%s, emotion=%s, suggestions=%d",
        response.action.value if response.action else None,
        response.emotion.value,
        len(response.suggestions),
    )
    return response
