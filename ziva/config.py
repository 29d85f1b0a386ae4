"""
ziva/config.py
===============
Runtime Configuration — Ziva

All settings come from environment variables. main.py loads ``.env``
through python-dotenv before anything in this module is read, so values
set there behave exactly like exported variables.

Variables:
    OPENAI_API_KEY          Credentials for the generative model. When unset
                            the services run on the deterministic path only.
    ZIVA_MODEL              Chat model name (default: gpt-4o-mini).
    ZIVA_MODEL_TIMEOUT_S    Per-call timeout in seconds (default: 10).
    ZIVA_OPENING_BALANCE    Account balance before recent transactions are
                            applied (default: 120000).
    ZIVA_EXPOSE_REASONING   "true" to include the model's reasoning in the
                            profile document (default: false).
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger("ziva.config")

DEFAULT_MODEL: str = "gpt-4o-mini"
DEFAULT_TIMEOUT_S: float = 10.0
DEFAULT_OPENING_BALANCE: float = 120000.0

_TRUTHY: set[str] = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    openai_api_key: str | None
    model: str = DEFAULT_MODEL
    timeout_s: float = DEFAULT_TIMEOUT_S
    opening_balance: float = DEFAULT_OPENING_BALANCE
    expose_reasoning: bool = False


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("%s=%r is not a number — using %s.", name, raw, default)
        return default
    if value <= 0:
        logger.warning("%s=%r must be positive — using %s.", name, raw, default)
        return default
    return value


def load_settings() -> Settings:
    """Read settings from the current environment."""
    api_key = os.environ.get("OPENAI_API_KEY") or None
    return Settings(
        openai_api_key=api_key,
        model=os.environ.get("ZIVA_MODEL") or DEFAULT_MODEL,
        timeout_s=_float_env("ZIVA_MODEL_TIMEOUT_S", DEFAULT_TIMEOUT_S),
        opening_balance=_float_env("ZIVA_OPENING_BALANCE", DEFAULT_OPENING_BALANCE),
        expose_reasoning=(
            os.environ.get("ZIVA_EXPOSE_REASONING", "").strip().lower() in _TRUTHY
        ),
    )
