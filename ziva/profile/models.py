"""
ziva/profile/models.py
=======================
Profile Value Objects — Ziva

Responsibility:
    - Enumerate every accepted signal and setting value
    - Declare the numeric bounds of the accessibility settings
    - Define the immutable UserSignals and AccessibilityProfile containers

Both containers are created per resolution call and never mutated.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Signal enums
# ---------------------------------------------------------------------------


class Disability(str, Enum):
    """Declared disability tags."""

    VISUAL = "visual"
    MOTOR = "motor"
    COGNITIVE = "cognitive"
    HEARING = "hearing"
    SPEECH = "speech"


class Language(str, Enum):
    """Supported interface languages (English, Pidgin, Yoruba, Igbo, Hausa)."""

    EN = "en"
    PCM = "pcm"
    YO = "yo"
    IG = "ig"
    HA = "ha"


class InteractionMode(str, Enum):
    """Preferred way of talking to the app."""

    VOICE = "voice"
    TEXT = "text"


# ---------------------------------------------------------------------------
# Setting enums
# ---------------------------------------------------------------------------


class UiComplexity(str, Enum):
    SIMPLIFIED = "simplified"
    MODERATE = "moderate"
    DETAILED = "detailed"


class Contrast(str, Enum):
    NORMAL = "normal"
    HIGH = "high"


class ConfirmMode(str, Enum):
    PIN = "pin"
    VOICE = "voice"
    BIOMETRIC = "biometric"


# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------

COGNITIVE_SCORE_MIN: int = 1
COGNITIVE_SCORE_MAX: int = 10
DEFAULT_COGNITIVE_SCORE: int = 5

FONT_SIZE_MIN: int = 14
FONT_SIZE_MAX: int = 24

TTS_SPEED_MIN: float = 0.5
TTS_SPEED_MAX: float = 2.0


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserSignals:
    """Canonical, validated input to profile resolution."""

    disabilities: frozenset[Disability]
    cognitive_score: int
    language: Language = Language.EN
    interaction_mode: InteractionMode = InteractionMode.VOICE

    def has(self, disability: Disability) -> bool:
        return disability in self.disabilities

    def to_dict(self) -> dict[str, Any]:
        return {
            "disabilities": sorted(d.value for d in self.disabilities),
            "cognitiveScore": self.cognitive_score,
            "language": self.language.value,
            "interactionMode": self.interaction_mode.value,
        }


@dataclass(frozen=True)
class AccessibilityProfile:
    """
    Resolved UI and interaction settings.

    Every field is within its declared bound whichever path produced it
    (rule engine or model). ``reasoning`` is set only when the model path
    succeeded.
    """

    ui_complexity: UiComplexity
    font_size: int
    contrast: Contrast
    large_targets: bool
    confirm_mode: ConfirmMode
    tts_speed: float
    captions: bool
    reasoning: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire format."""
        return {
            "uiComplexity": self.ui_complexity.value,
            "fontSize": self.font_size,
            "contrast": self.contrast.value,
            "largeTargets": self.large_targets,
            "confirmMode": self.confirm_mode.value,
            "ttsSpeed": self.tts_speed,
            "captions": self.captions,
            "reasoning": self.reasoning,
        }
