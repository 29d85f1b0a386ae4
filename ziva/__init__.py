# ziva/__init__.py
# =================
# Adaptive Decision Pipeline — Ziva Inclusive Banking
#
# Responsibility:
#   - Resolve an accessibility profile from declared user signals
#     (rule engine + optional generative-model refinement)
#   - Route a free-text user message to a structured assistant response
#     (generative model + deterministic intent router)
#
# Both entry points are total: every model failure degrades silently to
# the deterministic path.
#
# Public API:
#   - ProfileService.resolve_profile()      — signals → AccessibilityProfile
#   - ConversationService.route_message()   — context → AssistantResponse

from ziva.services import ConversationService, ProfileService  # noqa: F401

__all__ = [
    "ConversationService",
    "ProfileService",
]
