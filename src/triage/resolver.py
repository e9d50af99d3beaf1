import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Optional

from .config import NO_MATCH_REPLY
from .text import is_blank
from .types import AIResult, FallbackResult, Matched, MatchResult, Resolution, RuleResult

logger = logging.getLogger(__name__)

DEFAULT_AI_TIMEOUT_SEC = 8.0


class FallbackPolicy:
    """Turns a match result into the pipeline's resolution.

    A match always wins. Without one, the optional AI responder is consulted
    exactly once; anything short of a usable answer from it settles on the
    fixed escalated fallback.
    """

    def __init__(
        self,
        reply: str = NO_MATCH_REPLY,
        responder: Optional[Any] = None,
        timeout_sec: float = DEFAULT_AI_TIMEOUT_SEC,
    ) -> None:
        self.reply = reply if not is_blank(reply) else NO_MATCH_REPLY
        self.responder = responder
        self.timeout_sec = timeout_sec

    async def resolve(self, match: MatchResult, message: str) -> Resolution:
        if isinstance(match, Matched):
            return RuleResult(reply=match.reply, escalated=match.escalated, confidence=match.confidence)

        if self.responder is not None:
            consulted = await self._consult(message)
            if consulted is not None:
                return consulted

        return self.fixed_fallback()

    def fixed_fallback(self) -> FallbackResult:
        return FallbackResult(reply=self.reply, escalated=True, confidence=0.0)

    async def _consult(self, message: str) -> Optional[AIResult]:
        try:
            data = await asyncio.wait_for(self.responder.consult(message), timeout=self.timeout_sec)
            if not isinstance(data, Mapping) or is_blank(data.get("reply")):
                logger.warning("AI fallback returned an unusable result: %r", data)
                return None
            return AIResult(
                reply=data.get("reply"),
                escalated=data.get("escalated"),
                confidence=data.get("confidence"),
            )
        except asyncio.TimeoutError:
            logger.warning("AI fallback timed out after %.1fs", self.timeout_sec)
        except Exception as exc:
            logger.warning("AI fallback failed: %s", exc)
        return None
