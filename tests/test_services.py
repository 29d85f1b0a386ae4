"""
tests/test_services.py
=======================
Service Facade Tests

Test categories:
    1. ProfileService — totality and the profile document shape
    2. profile_from_document — stored settings are clamped
    3. ConversationService — context assembly, routing totality, guidance
    4. Settings loaded from the environment

Model capabilities are plain callables. No network access.
"""

import json
import os
import sys
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from ziva.config import DEFAULT_OPENING_BALANCE, load_settings
from ziva.conversation.models import Action, Emotion
from ziva.profile.models import ConfirmMode, Disability, InteractionMode
from ziva.profile.rules import resolve_rule_based
from ziva.profile.signals import normalize_signals
from ziva.services import ConversationService, ProfileService, profile_from_document

ONBOARDING_PAYLOAD = {
    "language": "en",
    "disabilities": ["visual"],
    "cognitiveScore": 5,
    "interactionMode": "text",
}

MODEL_PROFILE = json.dumps({
    "uiComplexity": "moderate",
    "fontSize": 21,
    "contrast": "high",
    "largeTargets": True,
    "confirmMode": "pin",
    "ttsSpeed": 1.2,
    "captions": False,
    "reasoning": "Larger text for low vision.",
})


def _broken_model(prompt):
    raise RuntimeError("capability bug")


def _fixed_model(reply):
    return lambda prompt: reply


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class TestProfileService(unittest.TestCase):

    def test_without_model_matches_rules(self):
        signals = normalize_signals(ONBOARDING_PAYLOAD)
        self.assertEqual(
            ProfileService().resolve_profile(signals), resolve_rule_based(signals)
        )

    def test_unexpected_capability_error_is_absorbed(self):
        signals = normalize_signals(ONBOARDING_PAYLOAD)
        service = ProfileService(generate=_broken_model)
        self.assertEqual(service.resolve_profile(signals), resolve_rule_based(signals))

    def test_document_shape(self):
        document = ProfileService().detect_profile(ONBOARDING_PAYLOAD)
        self.assertTrue(document["profileId"].startswith("p_"))
        self.assertEqual(document["disabilities"], ["visual"])
        self.assertEqual(document["interactionMode"], "text")
        self.assertEqual(document["uiComplexity"], "moderate")
        self.assertEqual(document["confirmMode"], "pin")
        self.assertFalse(document["isOnboardingComplete"])
        self.assertEqual(
            document["accessibilityPreferences"],
            {
                "fontSize": 20,
                "contrast": "high",
                "ttsSpeed": 1.0,
                "largeTargets": True,
                "captions": False,
                "font": "inter",
            },
        )
        self.assertNotIn("_aiReasoning", document)

    def test_existing_profile_id_kept(self):
        document = ProfileService().detect_profile(ONBOARDING_PAYLOAD, profile_id="p_42")
        self.assertEqual(document["profileId"], "p_42")

    def test_reasoning_hidden_by_default(self):
        service = ProfileService(generate=_fixed_model(MODEL_PROFILE))
        document = service.detect_profile(ONBOARDING_PAYLOAD)
        self.assertEqual(document["accessibilityPreferences"]["fontSize"], 21)
        self.assertNotIn("_aiReasoning", document)

    def test_reasoning_exposed_when_enabled(self):
        service = ProfileService(generate=_fixed_model(MODEL_PROFILE), expose_reasoning=True)
        document = service.detect_profile(ONBOARDING_PAYLOAD)
        self.assertEqual(document["_aiReasoning"], "Larger text for low vision.")

    def test_prefer_voice_forces_voice_mode(self):
        payload = dict(ONBOARDING_PAYLOAD, microInteractions={"preferVoice": True})
        self.assertEqual(ProfileService().detect_profile(payload)["interactionMode"], "voice")


class TestProfileFromDocument(unittest.TestCase):

    def test_round_trip_of_detected_document(self):
        document = dict(ProfileService().detect_profile(ONBOARDING_PAYLOAD), name="Ada")
        profile = profile_from_document(document)
        self.assertEqual(profile.name, "Ada")
        self.assertEqual(profile.disabilities, frozenset({Disability.VISUAL}))
        self.assertEqual(profile.interaction_mode, InteractionMode.TEXT)
        self.assertEqual(profile.accessibility.font_size, 20)
        self.assertTrue(profile.accessibility.large_targets)
        self.assertIsNone(profile.accessibility.reasoning)

    def test_stored_values_are_clamped(self):
        document = {
            "disabilities": ["hearing"],
            "cognitiveScore": 99,
            "accessibilityPreferences": {"fontSize": 99, "ttsSpeed": -1},
            "confirmMode": "voice",
        }
        profile = profile_from_document(document)
        self.assertEqual(profile.cognitive_score, 10)
        self.assertEqual(profile.accessibility.font_size, 24)
        self.assertEqual(profile.accessibility.tts_speed, 0.5)
        self.assertTrue(profile.accessibility.captions)
        self.assertEqual(profile.accessibility.confirm_mode, ConfirmMode.VOICE)

    def test_clamp_warning_names_stored_profile(self):
        document = {"accessibilityPreferences": {"fontSize": 99}}
        with self.assertLogs("ziva.profile.ai_adapter", level="WARNING") as logs:
            profile_from_document(document)
        self.assertTrue(any("Stored profile fontSize 99" in line for line in logs.output))
        self.assertFalse(any("Model" in line for line in logs.output))

    def test_stored_settings_reach_the_prompt(self):
        document = ProfileService().detect_profile(
            {"language": "en", "disabilities": ["hearing"], "cognitiveScore": 2},
        )
        prompts = []

        def recording_model(prompt):
            prompts.append(prompt)
            return json.dumps({"message": "Hello"})

        service = ConversationService(generate=recording_model)
        service.route_message(service.build_context("hi", profile_document=document))
        self.assertIn("Interface: simplified", prompts[0])
        self.assertIn("Captions: on", prompts[0])

    def test_document_without_preferences_uses_rules(self):
        document = {"disabilities": ["motor"], "cognitiveScore": 5}
        profile = profile_from_document(document)
        self.assertEqual(
            profile.accessibility, resolve_rule_based(normalize_signals(document))
        )


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------


class TestConversationService(unittest.TestCase):

    def test_context_derives_balance(self):
        service = ConversationService(opening_balance=1000.0)
        context = service.build_context(
            "balance",
            transactions=[
                {"type": "deposit", "amount": 500},
                {"type": "withdrawal", "amount": 200},
            ],
        )
        self.assertEqual(context.financial.balance, 1300.0)
        self.assertEqual(context.financial.recent_transaction_count, 2)
        self.assertEqual(context.financial.emotional_state, "neutral")
        self.assertIsNone(context.profile)

    def test_context_history_skips_junk(self):
        context = ConversationService().build_context(
            "hi",
            history=[
                {"role": "user", "content": "first"},
                "not a turn",
                {"role": "assistant", "content": "  "},
                {"content": "second"},
            ],
            emotional_state="anxious",
        )
        self.assertEqual([t.content for t in context.history], ["first", "second"])
        self.assertEqual(context.history[1].role, "user")
        self.assertEqual(context.financial.emotional_state, "anxious")

    def test_context_ignores_non_string_emotional_state(self):
        context = ConversationService().build_context("hi", emotional_state=5)
        self.assertEqual(context.financial.emotional_state, "neutral")

    def test_context_survives_huge_stored_score(self):
        context = ConversationService().build_context(
            "balance", profile_document={"cognitiveScore": 10**400},
        )
        self.assertEqual(context.profile.cognitive_score, 10)

    def test_default_opening_balance(self):
        context = ConversationService().build_context("balance")
        self.assertEqual(context.financial.balance, DEFAULT_OPENING_BALANCE)

    def test_route_without_model(self):
        service = ConversationService()
        response = service.route_message(service.build_context("xyz random text"))
        self.assertIsNone(response.action)
        self.assertEqual(len(response.suggestions), 4)

    def test_route_absorbs_unexpected_errors(self):
        service = ConversationService(generate=_broken_model)
        context = service.build_context(
            "help me check my balance",
            profile_document={"name": "Ada", "disabilities": []},
        )
        response = service.route_message(context)
        self.assertEqual(response.action, Action.CHECK_BALANCE)
        self.assertIn("Hi Ada", response.message)

    def test_route_uses_model_reply(self):
        reply = json.dumps({"message": "Well done!", "emotion": "celebratory"})
        service = ConversationService(generate=_fixed_model(reply))
        response = service.route_message(service.build_context("I got paid"))
        self.assertEqual(response.message, "Well done!")
        self.assertEqual(response.emotion, Emotion.CELEBRATORY)

    def test_proactive_guidance(self):
        now = datetime(2024, 6, 30, tzinfo=timezone.utc)
        transactions = [
            {"type": "transfer", "amount": 3000, "timestamp": now - timedelta(days=2)},
            {"type": "transfer", "amount": 1000, "timestamp": now - timedelta(days=45)},
        ]
        result = ConversationService().proactive_guidance(transactions, now=now)
        self.assertEqual(
            [item["type"] for item in result["guidance"]],
            ["spending_alert", "overdraft_warning"],
        )
        self.assertEqual(
            result["analysis"],
            {"totalSpending": 3000, "averageTransaction": 1500, "spendingTrend": "increasing"},
        )


class TestSettings(unittest.TestCase):

    @patch.dict(os.environ, {"OPENAI_API_KEY": ""}, clear=True)
    def test_defaults(self):
        settings = load_settings()
        self.assertIsNone(settings.openai_api_key)
        self.assertEqual(settings.opening_balance, DEFAULT_OPENING_BALANCE)
        self.assertFalse(settings.expose_reasoning)

    @patch.dict(
        os.environ,
        {
            "OPENAI_API_KEY": "sk-test",
            "ZIVA_MODEL": "gpt-4o",
            "ZIVA_MODEL_TIMEOUT_S": "oops",
            "ZIVA_OPENING_BALANCE": "5000",
            "ZIVA_EXPOSE_REASONING": "True",
        },
        clear=True,
    )
    def test_overrides(self):
        settings = load_settings()
        self.assertEqual(settings.openai_api_key, "sk-test")
        self.assertEqual(settings.model, "gpt-4o")
        self.assertEqual(settings.timeout_s, 10.0)
        self.assertEqual(settings.opening_balance, 5000.0)
        self.assertTrue(settings.expose_reasoning)

    @patch.dict(os.environ, {}, clear=True)
    def test_from_settings_without_key_has_no_model(self):
        self.assertIsNone(ProfileService.from_settings().generate)
        self.assertIsNone(ConversationService.from_settings().generate)


if __name__ == "__main__":
    unittest.main()
