from pathlib import Path
from typing import Any, Dict, Optional, Union

from .loader import load_knowledge_base
from .matcher import match_intent
from .resolver import DEFAULT_AI_TIMEOUT_SEC, FallbackPolicy
from .types import KnowledgeBase, Resolution


class ChatPipeline:
    def __init__(
        self,
        config: Dict[str, Any],
        knowledge_base: KnowledgeBase,
        responder: Optional[Any] = None,
    ) -> None:
        self.config = config
        self._kb = knowledge_base
        fallback_cfg = config.get("fallback", {})
        self.policy = FallbackPolicy(
            reply=fallback_cfg.get("reply", ""),
            responder=responder,
            timeout_sec=fallback_cfg.get("ai", {}).get("timeout_sec", DEFAULT_AI_TIMEOUT_SEC),
        )

    @property
    def knowledge_base(self) -> KnowledgeBase:
        return self._kb

    async def respond(self, message: str) -> Resolution:
        # Bind once so a concurrent reload cannot change the KB mid-request.
        kb = self._kb
        match = match_intent(message, kb)
        return await self.policy.resolve(match, message)

    def reload(self, source: Union[str, Path]) -> KnowledgeBase:
        """Load ``source`` and swap it in whole; a failed load swaps in an empty KB."""
        kb = load_knowledge_base(source)
        self._kb = kb
        return kb
