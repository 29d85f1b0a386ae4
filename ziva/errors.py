"""
ziva/errors.py
===============
Error Taxonomy — Ziva Adaptive Decision Pipeline

Responsibility:
    - Define the failures the generative-model boundary may raise
    - Define the internal value errors used while clamping signals and
      model output

Propagation policy:
    - Every ModelError is absorbed at the adapter boundary and converted
      into the deterministic result. Nothing here reaches the caller of
      resolve_profile() or route_message().
    - OutOfRangeValue and InvalidInputSignal are raised by strict coercion
      helpers and caught by the code that clamps or defaults the value.
"""


class ModelError(Exception):
    """Base class for every failure of the generative-model capability."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class ExternalUnavailable(ModelError):
    """The model could not be reached or is not configured."""


class ExternalRateLimited(ExternalUnavailable):
    """The model provider rejected the call with a rate limit."""


class ExternalTimeout(ModelError):
    """The model call exceeded its configured timeout."""


class MalformedExternalOutput(ModelError):
    """The model answered, but the text is not a usable JSON object."""


class OutOfRangeValue(ValueError):
    """A value is missing, non-numeric or outside its declared bounds."""

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"{field}: unusable value {value!r}")


class InvalidInputSignal(ValueError):
    """A raw user signal could not be interpreted."""

    def __init__(self, signal: str, value: object):
        self.signal = signal
        self.value = value
        super().__init__(f"Invalid {signal} signal: {value!r}")
