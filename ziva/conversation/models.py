"""
ziva/conversation/models.py
============================
Conversation Value Objects — Ziva

Responsibility:
    - Enumerate assistant actions and emotional tones
    - Define the read-only ConversationContext handed to the router
    - Define the AssistantResponse produced for every message

All containers are frozen and created fresh per request.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ziva.profile.models import (
    DEFAULT_COGNITIVE_SCORE,
    AccessibilityProfile,
    Disability,
    InteractionMode,
    Language,
)

MAX_SUGGESTIONS: int = 4
HISTORY_WINDOW: int = 3  # most recent turns included in a model prompt


class Action(str, Enum):
    """Structured actions the client UI can act on."""

    CHECK_BALANCE = "check_balance"
    TRANSFER = "transfer"
    PAY_BILL = "pay_bill"
    VIEW_TRANSACTIONS = "view_transactions"
    FINANCIAL_ADVICE = "financial_advice"
    EMOTIONAL_SUPPORT = "emotional_support"


class Emotion(str, Enum):
    """Tone the assistant should be rendered with."""

    SUPPORTIVE = "supportive"
    ENCOURAGING = "encouraging"
    CALM = "calm"
    CELEBRATORY = "celebratory"
    CONCERNED = "concerned"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class UserProfile:
    """The stored user profile, carrying its resolved accessibility settings."""

    name: str | None = None
    language: Language = Language.EN
    disabilities: frozenset[Disability] = frozenset()
    cognitive_score: int = DEFAULT_COGNITIVE_SCORE
    interaction_mode: InteractionMode = InteractionMode.VOICE
    accessibility: AccessibilityProfile | None = None

    @property
    def display_name(self) -> str:
        return self.name.strip() if self.name and self.name.strip() else "there"


@dataclass(frozen=True)
class FinancialSnapshot:
    balance: float = 0.0
    recent_transaction_count: int = 0
    emotional_state: str = "neutral"


@dataclass(frozen=True)
class HistoryTurn:
    role: str
    content: str


@dataclass(frozen=True)
class ConversationContext:
    """Everything the router may read for one message. History is oldest-first."""

    user_message: str
    profile: UserProfile | None = None
    history: tuple[HistoryTurn, ...] = ()
    financial: FinancialSnapshot = field(default_factory=FinancialSnapshot)

    def recent_history(self, window: int = HISTORY_WINDOW) -> tuple[HistoryTurn, ...]:
        return self.history[-window:] if window > 0 else ()


@dataclass(frozen=True)
class AssistantResponse:
    """
    Structured assistant reply.

    Invariants (checked on construction):
        - message is a non-empty string
        - at most MAX_SUGGESTIONS suggestions
    """

    message: str
    action: Action | None = None
    data: dict[str, Any] | None = None
    emotion: Emotion = Emotion.NEUTRAL
    suggestions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.message, str) or not self.message.strip():
            raise ValueError("AssistantResponse.message must be a non-empty string")
        if len(self.suggestions) > MAX_SUGGESTIONS:
            raise ValueError(
                f"AssistantResponse allows at most {MAX_SUGGESTIONS} suggestions, "
                f"got {len(self.suggestions)}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "action": self.action.value if self.action else None,
            "data": self.data,
            "emotion": self.emotion.value,
            "suggestions": list(self.suggestions),
        }
