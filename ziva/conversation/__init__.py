# ziva/conversation/__init__.py
# ==============================
# Assistant Conversation Routing — Ziva
#
# Responsibility:
#   - Route a user message to a structured assistant reply
#     (model-backed, with the ordered phrase router as fallback)
#   - Derive the financial snapshot and proactive guidance from
#     recent transactions
#
# Public API:
#   - route_by_rules()      — deterministic phrase router
#   - respond_with_model()  — model reply, all-or-nothing fallback
#   - derive_balance(), analyze_spending(), build_guidance()

from ziva.conversation.models import (  # noqa: F401
    Action,
    AssistantResponse,
    ConversationContext,
    Emotion,
    FinancialSnapshot,
    HistoryTurn,
    UserProfile,
)
from ziva.conversation.intent_router import route_by_rules  # noqa: F401
from ziva.conversation.ai_adapter import respond_with_model  # noqa: F401
from ziva.conversation.guidance import (  # noqa: F401
    analyze_spending,
    build_guidance,
    derive_balance,
)
