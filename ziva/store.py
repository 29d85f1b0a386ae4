"""
ziva/store.py
==============
In-Memory Document Store — Ziva

Stands in for the external key-addressed persistence collaborator so the
HTTP layer can run without a database. Documents are plain dicts keyed by
profile id; transactions are kept per profile, most recent last.

This module does NOT:
    - Persist across process restarts
    - Enforce any schema beyond the presence of a key
"""

import copy
import logging
from threading import Lock
from typing import Any

logger = logging.getLogger("ziva.store")


class InMemoryStore:
    """Thread-safe dict-backed store for profiles and transactions."""

    def __init__(self) -> None:
        self._profiles: dict[str, dict[str, Any]] = {}
        self._transactions: dict[str, list[dict[str, Any]]] = {}
        self._lock = Lock()

    def get_profile(self, profile_id: str) -> dict[str, Any] | None:
        with self._lock:
            document = self._profiles.get(profile_id)
            return copy.deepcopy(document) if document is not None else None

    def save_profile(self, document: dict[str, Any]) -> dict[str, Any]:
        profile_id = document["profileId"]
        with self._lock:
            merged = {**self._profiles.get(profile_id, {}), **copy.deepcopy(document)}
            self._profiles[profile_id] = merged
        logger.info("Profile saved: %s", profile_id)
        return copy.deepcopy(merged)

    def add_transactions(self, profile_id: str, transactions: list[dict[str, Any]]) -> None:
        with self._lock:
            self._transactions.setdefault(profile_id, []).extend(
                copy.deepcopy(transactions)
            )

    def recent_transactions(self, profile_id: str, limit: int) -> list[dict[str, Any]]:
        """Return up to ``limit`` most recent transactions, newest first."""
        with self._lock:
            stored = self._transactions.get(profile_id, [])
            return copy.deepcopy(list(reversed(stored[-limit:]))) if limit > 0 else []
