"""
ziva/conversation/intent_router.py
===================================
Rule-Based Intent Router — Ziva

Responsibility:
    - Accept a raw user message, the user profile and a financial snapshot
    - Classify the message DETERMINISTICALLY by ordered phrase matching
    - Return a fully-formed AssistantResponse for the matched intent

Rule order (first match wins; later rules are never evaluated):
    1. "balance", "how much"            → check_balance
    2. "send", "transfer"               → transfer
    3. "bill", "pay"                    → pay_bill
    4. "stress", "worried", "help"      → emotional_support
    5. anything else                    → greeting, no action

The order is the tie-break: "help me check my balance" resolves to
check_balance because rule 1 is evaluated before rule 4.

Matching is case-insensitive substring containment, so "payday" matches
the bill rule exactly as "pay" would.

This module does NOT:
    - Call any LLM or external API
    - Understand language beyond phrase containment
    - Execute any banking action
"""

import logging
from collections.abc import Callable

from ziva.conversation.models import (
    Action,
    AssistantResponse,
    Emotion,
    FinancialSnapshot,
    UserProfile,
)

logger = logging.getLogger("ziva.conversation.intent_router")


# ---------------------------------------------------------------------------
# Phrase tables
# ---------------------------------------------------------------------------

_BALANCE_PHRASES: tuple[str, ...] = ("balance", "how much")
_TRANSFER_PHRASES: tuple[str, ...] = ("send", "transfer")
_BILL_PHRASES: tuple[str, ...] = ("bill", "pay")
_SUPPORT_PHRASES: tuple[str, ...] = ("stress", "worried", "help")

BILL_CATEGORIES: tuple[str, ...] = ("Electricity", "Water", "Internet", "Phone")

DEFAULT_SUGGESTIONS: tuple[str, ...] = (
    "Check balance",
    "Transfer money",
    "Pay bills",
    "View transactions",
)


def format_naira(amount: float) -> str:
    """Format an amount as Naira with thousands separators (₦120,000)."""
    if float(amount).is_integer():
        return f"₦{int(amount):,}"
    return f"₦{amount:,.2f}"


# ---------------------------------------------------------------------------
# Response builders, one per intent
# ---------------------------------------------------------------------------


def _balance_response(name: str, financial: FinancialSnapshot) -> AssistantResponse:
    return AssistantResponse(
        message=(
            f"Hi {name}, your current balance is {format_naira(financial.balance)}. "
            "Would you like to see your recent transactions?"
        ),
        action=Action.CHECK_BALANCE,
        data={"balance": financial.balance},
        emotion=Emotion.SUPPORTIVE,
        suggestions=("View transactions", "Transfer money", "Pay bills"),
    )


def _transfer_response(name: str, financial: FinancialSnapshot) -> AssistantResponse:
    return AssistantResponse(
        message="I can help you transfer money. Who would you like to send money to?",
        action=Action.TRANSFER,
        data=None,
        emotion=Emotion.SUPPORTIVE,
        suggestions=("Send to saved contact", "New recipient"),
    )


def _bill_response(name: str, financial: FinancialSnapshot) -> AssistantResponse:
    return AssistantResponse(
        message="I can help you pay your bills. Which bill would you like to pay?",
        action=Action.PAY_BILL,
        data=None,
        emotion=Emotion.SUPPORTIVE,
        suggestions=BILL_CATEGORIES,
    )


def _support_response(name: str, financial: FinancialSnapshot) -> AssistantResponse:
    return AssistantResponse(
        message=(
            "I understand this can be stressful. I'm here to help make banking "
            "easier for you. What would you like assistance with?"
        ),
        action=Action.EMOTIONAL_SUPPORT,
        data=None,
        emotion=Emotion.CONCERNED,
        suggestions=("Check my finances", "Get budgeting advice", "Talk to support"),
    )


def _greeting_response(name: str) -> AssistantResponse:
    return AssistantResponse(
        message=(
            f"Hello {name}! I'm Ziva, your banking assistant. I can check your "
            "balance, send money, pay bills or go through your transactions. "
            "What would you like to do?"
        ),
        action=None,
        data=None,
        emotion=Emotion.SUPPORTIVE,
        suggestions=DEFAULT_SUGGESTIONS,
    )


_Builder = Callable[[str, FinancialSnapshot], AssistantResponse]

# Evaluated top to bottom; first match wins
_RULES: tuple[tuple[Action, tuple[str, ...]], ...] = (
    (Action.CHECK_BALANCE, _BALANCE_PHRASES),
    (Action.TRANSFER, _TRANSFER_PHRASES),
    (Action.PAY_BILL, _BILL_PHRASES),
    (Action.EMOTIONAL_SUPPORT, _SUPPORT_PHRASES),
)

_BUILDERS: dict[Action, _Builder] = {
    Action.CHECK_BALANCE: _balance_response,
    Action.TRANSFER: _transfer_response,
    Action.PAY_BILL: _bill_response,
    Action.EMOTIONAL_SUPPORT: _support_response,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify_message(message: str) -> Action | None:
    """
    Return the action of the first matching rule, or None for the greeting.

    Args:
        message: Raw user message (case-folded here).
    """
    folded = (message or "").casefold()
    for action, phrases in _RULES:
        if any(phrase in folded for phrase in phrases):
            return action
    return None


def route_by_rules(
    message: str,
    profile: UserProfile | None,
    financial: FinancialSnapshot | None,
) -> AssistantResponse:
    """
    Route a message to a structured response with the ordered rule table.

    Args:
        message:   Raw user message.
        profile:   Stored user profile, or None for an anonymous user.
        financial: Financial snapshot, or None (treated as zero balance).

    Returns:
        AssistantResponse with a non-empty message. Never raises.
    """
    name = profile.display_name if profile else "there"
    financial = financial or FinancialSnapshot()

    action = classify_message(message)
    if action is None:
        logger.info("No intent phrase matched — returning greeting.")
        return _greeting_response(name)

    logger.info("Rule-based intent matched: %s", action.value)
    return _BUILDERS[action](name, financial)
