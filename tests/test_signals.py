"""
tests/test_signals.py
======================
Signal Validator Tests

Test categories:
    1. Cognitive score clamping and defaults
    2. Disability tag normalization
    3. Language and interaction mode defaults
    4. Wire (camelCase) and Python (snake_case) key spellings
    5. Immutability of the canonical container

All tests are OFFLINE — no LLM, no API.
"""

import dataclasses
import os
import sys
import unittest

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from ziva.errors import InvalidInputSignal
from ziva.profile.models import Disability, InteractionMode, Language, UserSignals
from ziva.profile.signals import _parse_cognitive_score, normalize_signals


class TestCognitiveScore(unittest.TestCase):
    """Scores are clamped to [1, 10]; unusable values become 5."""

    def test_huge_integer_clamped(self):
        self.assertEqual(normalize_signals({"cognitiveScore": 10**400}).cognitive_score, 10)
        self.assertEqual(normalize_signals({"cognitiveScore": -(10**400)}).cognitive_score, 1)

    def test_overflowing_numeric_string_defaults_to_five(self):
        self.assertEqual(
            normalize_signals({"cognitiveScore": "9" * 400}).cognitive_score, 5
        )

    def test_in_range_kept(self):
        self.assertEqual(normalize_signals({"cognitiveScore": 6}).cognitive_score, 6)

    def test_below_range_clamped(self):
        self.assertEqual(normalize_signals({"cognitiveScore": 0}).cognitive_score, 1)
        self.assertEqual(normalize_signals({"cognitiveScore": -12}).cognitive_score, 1)

    def test_above_range_clamped(self):
        self.assertEqual(normalize_signals({"cognitiveScore": 42}).cognitive_score, 10)

    def test_float_rounded(self):
        self.assertEqual(normalize_signals({"cognitiveScore": 7.6}).cognitive_score, 8)

    def test_numeric_string_accepted(self):
        self.assertEqual(normalize_signals({"cognitiveScore": " 3 "}).cognitive_score, 3)

    def test_non_numeric_defaults_to_five(self):
        self.assertEqual(normalize_signals({"cognitiveScore": "abc"}).cognitive_score, 5)

    def test_missing_defaults_to_five(self):
        self.assertEqual(normalize_signals({}).cognitive_score, 5)

    def test_boolean_rejected(self):
        self.assertEqual(normalize_signals({"cognitiveScore": True}).cognitive_score, 5)

    def test_nan_rejected(self):
        self.assertEqual(
            normalize_signals({"cognitiveScore": float("nan")}).cognitive_score, 5
        )

    def test_strict_parser_raises(self):
        with self.assertRaises(InvalidInputSignal):
            _parse_cognitive_score("high")
        with self.assertRaises(InvalidInputSignal):
            _parse_cognitive_score(None)


class TestDisabilities(unittest.TestCase):

    def test_case_and_whitespace_normalized(self):
        signals = normalize_signals({"disabilities": ["Visual", " MOTOR "]})
        self.assertEqual(
            signals.disabilities, frozenset({Disability.VISUAL, Disability.MOTOR})
        )

    def test_unknown_tags_dropped(self):
        signals = normalize_signals({"disabilities": ["hearing", "telepathy", "none"]})
        self.assertEqual(signals.disabilities, frozenset({Disability.HEARING}))

    def test_single_string_accepted(self):
        signals = normalize_signals({"disabilities": "cognitive"})
        self.assertEqual(signals.disabilities, frozenset({Disability.COGNITIVE}))

    def test_none_is_empty(self):
        self.assertEqual(normalize_signals({"disabilities": None}).disabilities, frozenset())

    def test_non_iterable_is_empty(self):
        self.assertEqual(normalize_signals({"disabilities": 7}).disabilities, frozenset())

    def test_duplicates_collapse(self):
        signals = normalize_signals({"disabilities": ["speech", "Speech", "speech"]})
        self.assertEqual(signals.disabilities, frozenset({Disability.SPEECH}))


class TestLanguageAndMode(unittest.TestCase):

    def test_supported_language(self):
        self.assertEqual(normalize_signals({"language": "YO"}).language, Language.YO)
        self.assertEqual(normalize_signals({"language": "pcm"}).language, Language.PCM)

    def test_unsupported_language_defaults_to_english(self):
        self.assertEqual(normalize_signals({"language": "fr"}).language, Language.EN)

    def test_text_mode(self):
        signals = normalize_signals({"interactionMode": "text"})
        self.assertEqual(signals.interaction_mode, InteractionMode.TEXT)

    def test_unknown_mode_defaults_to_voice(self):
        signals = normalize_signals({"interactionMode": "gesture"})
        self.assertEqual(signals.interaction_mode, InteractionMode.VOICE)

    def test_prefer_voice_micro_interaction_wins(self):
        signals = normalize_signals({
            "interactionMode": "text",
            "microInteractions": {"preferVoice": True},
        })
        self.assertEqual(signals.interaction_mode, InteractionMode.VOICE)

    def test_prefer_voice_false_keeps_mode(self):
        signals = normalize_signals({
            "interactionMode": "text",
            "microInteractions": {"preferVoice": False},
        })
        self.assertEqual(signals.interaction_mode, InteractionMode.TEXT)


class TestKeySpellings(unittest.TestCase):

    def test_snake_case_keys(self):
        signals = normalize_signals({
            "cognitive_score": 9,
            "interaction_mode": "text",
        })
        self.assertEqual(signals.cognitive_score, 9)
        self.assertEqual(signals.interaction_mode, InteractionMode.TEXT)

    def test_camel_case_preferred_when_both_present(self):
        signals = normalize_signals({"cognitiveScore": 2, "cognitive_score": 9})
        self.assertEqual(signals.cognitive_score, 2)

    def test_none_payload_gives_defaults(self):
        signals = normalize_signals(None)
        self.assertEqual(
            signals,
            UserSignals(
                disabilities=frozenset(),
                cognitive_score=5,
                language=Language.EN,
                interaction_mode=InteractionMode.VOICE,
            ),
        )


class TestImmutability(unittest.TestCase):

    def test_signals_are_frozen(self):
        signals = normalize_signals({"cognitiveScore": 5})
        with self.assertRaises(dataclasses.FrozenInstanceError):
            signals.cognitive_score = 9

    def test_to_dict_is_sorted_wire_format(self):
        signals = normalize_signals({
            "disabilities": ["visual", "hearing"],
            "cognitiveScore": 4,
            "language": "ha",
        })
        self.assertEqual(
            signals.to_dict(),
            {
                "disabilities": ["hearing", "visual"],
                "cognitiveScore": 4,
                "language": "ha",
                "interactionMode": "voice",
            },
        )


if __name__ == "__main__":
    unittest.main()
