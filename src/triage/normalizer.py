import dataclasses
import math
from collections.abc import Mapping
from typing import Any

from .types import NormalizedResponse

DEFAULT_REPLY = "I apologize, but I encountered a temporary issue. Please try again in a moment."
DEFAULT_ESCALATED = True
DEFAULT_CONFIDENCE = 0.0

FALLBACK_REPLY = "Our system is experiencing difficulties. A human agent will assist you shortly."

FALLBACK_RESPONSE = NormalizedResponse(reply=FALLBACK_REPLY, escalated=True, confidence=0.0)


def normalize(candidate: Any) -> NormalizedResponse:
    """Coerce any upstream value into the ``{reply, escalated, confidence}`` contract.

    Accepts mappings and dataclass instances; everything else (including None)
    becomes FALLBACK_RESPONSE. Never raises.
    """
    try:
        fields = _as_fields(candidate)
        if fields is None:
            return FALLBACK_RESPONSE
        reply = fields.get("reply")
        escalated = fields.get("escalated")
        confidence = fields.get("confidence")
    except Exception:
        # mappings with broken accessors
        return FALLBACK_RESPONSE

    if not isinstance(reply, str) or not reply.strip():
        reply = DEFAULT_REPLY

    if not isinstance(escalated, bool):
        escalated = DEFAULT_ESCALATED

    confidence = clamp_confidence(confidence)

    return NormalizedResponse(reply=reply, escalated=escalated, confidence=confidence)


def _as_fields(candidate: Any) -> Any:
    if isinstance(candidate, Mapping):
        return candidate
    if dataclasses.is_dataclass(candidate) and not isinstance(candidate, type):
        return {f.name: getattr(candidate, f.name, None) for f in dataclasses.fields(candidate)}
    return None


def clamp_confidence(value: Any, default: float = DEFAULT_CONFIDENCE) -> float:
    """Clamp a numeric confidence to [0.0, 1.0]; non-numbers give ``default``.

    Ints are compared before conversion since very large ones overflow float().
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if isinstance(value, float) and math.isnan(value):
        return default
    return float(max(0, min(1, value)))
