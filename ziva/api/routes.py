"""
ziva/api/routes.py
===================
HTTP API — Ziva

Responsibility:
    - Expose profile detection, profile storage, transactions and the
      assistant over JSON
    - Reject requests missing their required field or carrying it with the
      wrong type (400) and unknown profile ids (404)
    - Delegate ALL decision logic to ziva.services facades

Endpoints:
    POST /api/profile/detect      onboarding signals → profile document
    POST /api/profile             save a profile document
    GET  /api/profile/{profileId} fetch a stored profile document
    POST /api/transactions        record a transaction for a profile
    GET  /api/transactions        list a profile's transactions, newest first
    POST /api/ziva                message → assistant reply
    POST /api/ziva/guidance       proactive spending guidance

Model calls block, so the facades run in a worker thread via
asyncio.to_thread.
"""

import asyncio
import logging
import math
import time
from typing import Any

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ziva.services import ConversationService, ProfileService
from ziva.store import InMemoryStore

logger = logging.getLogger("ziva.api")

CONTEXT_TRANSACTION_LIMIT: int = 5
GUIDANCE_TRANSACTION_LIMIT: int = 30
DEFAULT_TRANSACTION_PAGE: int = 10
DEFAULT_TRANSACTION_TYPE: str = "transfer"


def _require_profile_id(payload: dict[str, Any]) -> str:
    profile_id = payload.get("profileId")
    if not profile_id or not isinstance(profile_id, str):
        raise HTTPException(status_code=400, detail="Profile ID is required.")
    return profile_id


def _optional_profile_id(payload: dict[str, Any]) -> str | None:
    profile_id = payload.get("profileId")
    if profile_id is None or profile_id == "":
        return None
    if not isinstance(profile_id, str):
        raise HTTPException(status_code=400, detail="Profile ID must be a string.")
    return profile_id


def create_app(
    profile_service: ProfileService | None = None,
    conversation_service: ConversationService | None = None,
    store: InMemoryStore | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Services default to configuration from the environment; tests inject
    their own.
    """
    profiles = profile_service or ProfileService.from_settings()
    conversations = conversation_service or ConversationService.from_settings()
    documents = store or InMemoryStore()

    app = FastAPI(
        title="Ziva",
        description="Adaptive accessibility profiles and assistant routing.",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.store = documents

    # -----------------------------------------------------------------
    # Profiles
    # -----------------------------------------------------------------

    @app.post("/api/profile/detect")
    async def detect_profile(payload: dict[str, Any] = Body(...)):
        if not payload.get("language"):
            raise HTTPException(status_code=400, detail="Language is required.")

        document = await asyncio.to_thread(profiles.detect_profile, payload)
        return JSONResponse(status_code=200, content=document)

    @app.post("/api/profile")
    async def save_profile(payload: dict[str, Any] = Body(...)):
        profile_id = _require_profile_id(payload)

        documents.save_profile(payload)
        return {
            "success": True,
            "profileId": profile_id,
            "message": "Profile saved successfully",
        }

    @app.get("/api/profile/{profile_id}")
    async def get_profile(profile_id: str):
        document = documents.get_profile(profile_id)
        if document is None:
            raise HTTPException(
                status_code=404, detail=f"No profile found with ID: {profile_id}",
            )
        return document

    # -----------------------------------------------------------------
    # Transactions
    # -----------------------------------------------------------------

    @app.post("/api/transactions")
    async def create_transaction(payload: dict[str, Any] = Body(...)):
        profile_id = _require_profile_id(payload)

        amount = payload.get("amount")
        if (
            isinstance(amount, bool)
            or not isinstance(amount, (int, float))
            or not math.isfinite(amount)
            or amount <= 0
        ):
            raise HTTPException(
                status_code=400, detail="Amount must be a number greater than 0.",
            )

        kind = payload.get("type")
        timestamp = int(time.time() * 1000)
        transaction = {
            "transactionId": f"txn_{timestamp}",
            "type": kind.strip().lower() if isinstance(kind, str) and kind.strip()
            else DEFAULT_TRANSACTION_TYPE,
            "amount": float(amount),
            "currency": "NGN",
            "description": str(payload.get("description") or ""),
            "timestamp": timestamp,
        }
        documents.add_transactions(profile_id, [transaction])
        logger.info(
            "Transaction recorded for %s: %s %.2f",
            profile_id, transaction["type"], transaction["amount"],
        )
        return {"success": True, "transaction": transaction}

    @app.get("/api/transactions")
    async def list_transactions(
        profileId: str = Query(..., min_length=1),
        limit: int = Query(DEFAULT_TRANSACTION_PAGE, ge=1, le=100),
    ):
        transactions = documents.recent_transactions(profileId, limit)
        return {"transactions": transactions, "total": len(transactions)}

    # -----------------------------------------------------------------
    # Assistant
    # -----------------------------------------------------------------

    @app.post("/api/ziva")
    async def process_message(payload: dict[str, Any] = Body(...)):
        message = payload.get("message")
        if not message or not isinstance(message, str):
            raise HTTPException(status_code=400, detail="Message is required.")

        profile_id = _optional_profile_id(payload)
        profile_document = None
        transactions: list[dict[str, Any]] = []
        if profile_id:
            profile_document = documents.get_profile(profile_id)
            transactions = documents.recent_transactions(
                profile_id, CONTEXT_TRANSACTION_LIMIT,
            )
            if profile_document is None:
                logger.warning("Unknown profileId %r — answering anonymously.", profile_id)

        history = payload.get("conversationHistory")
        emotional_state = payload.get("emotionalState")
        context = conversations.build_context(
            message,
            profile_document=profile_document,
            history=history if isinstance(history, list) else None,
            transactions=transactions,
            emotional_state=emotional_state if isinstance(emotional_state, str) else None,
        )

        response = await asyncio.to_thread(conversations.route_message, context)
        reply = response.to_dict()
        return {
            "success": True,
            "response": reply["message"],
            "action": reply["action"],
            "data": reply["data"],
            "emotion": reply["emotion"],
            "suggestions": reply["suggestions"],
            "timestamp": int(time.time() * 1000),
        }

    @app.post("/api/ziva/guidance")
    async def proactive_guidance(payload: dict[str, Any] = Body(...)):
        profile_id = _require_profile_id(payload)

        if documents.get_profile(profile_id) is None:
            raise HTTPException(status_code=404, detail="Profile not found.")

        transactions = documents.recent_transactions(
            profile_id, GUIDANCE_TRANSACTION_LIMIT,
        )
        result = conversations.proactive_guidance(transactions)
        return {"success": True, **result}

    return app
