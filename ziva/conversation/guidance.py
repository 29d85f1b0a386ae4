"""
ziva/conversation/guidance.py
==============================
Financial Snapshot & Proactive Guidance — Ziva

Responsibility:
    - Derive the account balance handed to the assistant from recent
      transactions (opening balance + deposits − transfers/withdrawals)
    - Analyze 30-day spending against the previous 30 days
    - Turn that analysis into proactive guidance items

Transactions are plain dicts as stored by the transaction collaborator:
    {"type": "deposit" | "transfer" | "withdrawal" | ..., "amount": number,
     "timestamp": epoch milliseconds | ISO-8601 string | datetime}

Guidance thresholds:
    spending_alert        spending up by more than 40 %          (medium)
    savings_opportunity   income exceeds spending                (low)
    overdraft_warning     spending above 90 % of income          (high)

This module does NOT:
    - Call any LLM or external API
    - Fetch or persist transactions
"""

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from ziva.conversation.intent_router import format_naira

logger = logging.getLogger("ziva.conversation.guidance")

CREDIT_TYPES: set[str] = {"deposit"}
DEBIT_TYPES: set[str] = {"transfer", "withdrawal"}

WINDOW: timedelta = timedelta(days=30)
SPENDING_ALERT_THRESHOLD: int = 40      # percent increase
OVERDRAFT_RATIO: float = 0.9            # spending / income


# ---------------------------------------------------------------------------
# Transaction helpers
# ---------------------------------------------------------------------------


def _amount(txn: Mapping[str, Any]) -> float:
    value = txn.get("amount")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value) if math.isfinite(value) else 0.0


def _kind(txn: Mapping[str, Any]) -> str:
    return str(txn.get("type", "")).strip().lower()


def _timestamp(txn: Mapping[str, Any]) -> datetime | None:
    value = txn.get("timestamp", txn.get("createdAt"))
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def _total(transactions: Iterable[Mapping[str, Any]], kinds: set[str]) -> float:
    return sum(_amount(t) for t in transactions if _kind(t) in kinds)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def derive_balance(
    transactions: Iterable[Mapping[str, Any]],
    opening_balance: float,
) -> float:
    """Opening balance plus deposits minus transfers and withdrawals."""
    transactions = list(transactions)
    balance = (
        opening_balance
        + _total(transactions, CREDIT_TYPES)
        - _total(transactions, DEBIT_TYPES)
    )
    return round(balance, 2)


def analyze_spending(
    transactions: Iterable[Mapping[str, Any]],
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Compare the last 30 days of spending with the 30 days before.

    Transactions without a readable timestamp are ignored.

    Returns:
        {
            "total_spending": float,       # last 30 days, debits only
            "previous_spending": float,
            "income": float,               # last 30 days, deposits only
            "spending_increase": int,      # percent; 0 with no previous spending
            "savings_opportunity": float,  # max(0, income − spending)
            "overdraft_risk": bool,        # spending > 90 % of income
            "average_transaction": float,
        }
    """
    now = now or datetime.now(timezone.utc)
    recent_start = now - WINDOW
    previous_start = now - 2 * WINDOW

    transactions = list(transactions)
    recent: list[Mapping[str, Any]] = []
    previous: list[Mapping[str, Any]] = []
    for txn in transactions:
        ts = _timestamp(txn)
        if ts is None:
            continue
        if ts > recent_start:
            recent.append(txn)
        elif ts > previous_start:
            previous.append(txn)

    recent_spending = _total(recent, DEBIT_TYPES)
    previous_spending = _total(previous, DEBIT_TYPES)
    income = _total(recent, CREDIT_TYPES)

    if previous_spending > 0:
        increase = round((recent_spending - previous_spending) / previous_spending * 100)
    else:
        increase = 0

    analysis = {
        "total_spending": recent_spending,
        "previous_spending": previous_spending,
        "income": income,
        "spending_increase": int(increase),
        "savings_opportunity": max(0.0, income - recent_spending),
        "overdraft_risk": recent_spending > income * OVERDRAFT_RATIO,
        "average_transaction": (
            recent_spending / len(transactions) if transactions else 0.0
        ),
    }

    logger.info("Spending analysis: %s", analysis)
    return analysis


def build_guidance(analysis: Mapping[str, Any]) -> list[dict[str, str]]:
    """Turn a spending analysis into ordered guidance items."""
    guidance: list[dict[str, str]] = []

    if analysis["spending_increase"] > SPENDING_ALERT_THRESHOLD:
        guidance.append({
            "type": "spending_alert",
            "severity": "medium",
            "message": (
                f"I noticed your spending increased by {analysis['spending_increase']}% "
                "recently. Would you like me to help you create a budget?"
            ),
            "action": "create_budget",
            "icon": "alert",
        })

    if analysis["savings_opportunity"] > 0:
        guidance.append({
            "type": "savings_opportunity",
            "severity": "low",
            "message": (
                "Based on your income, you could save "
                f"{format_naira(analysis['savings_opportunity'])} this month. "
                "Would you like to set up automatic savings?"
            ),
            "action": "setup_savings",
            "icon": "piggy-bank",
        })

    if analysis["overdraft_risk"]:
        guidance.append({
            "type": "overdraft_warning",
            "severity": "high",
            "message": (
                "Your balance is running low. Would you like to explore overdraft "
                "protection or payment plan options?"
            ),
            "action": "overdraft_protection",
            "icon": "warning",
        })

    return guidance
