from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple, Union


@dataclass(frozen=True)
class Intent:
    patterns: Tuple[str, ...]
    responses: Tuple[str, ...] = ()
    escalate: bool = False
    confidence: float = 0.7
    tag: Optional[str] = None


@dataclass(frozen=True)
class KnowledgeBase:
    intents: Tuple[Intent, ...] = ()

    def __len__(self) -> int:
        return len(self.intents)

    def __iter__(self) -> Iterator[Intent]:
        return iter(self.intents)


@dataclass(frozen=True)
class Matched:
    reply: str
    escalated: bool
    confidence: float
    tag: Optional[str] = None


@dataclass(frozen=True)
class NoMatch:
    pass


MatchResult = Union[Matched, NoMatch]


@dataclass(frozen=True)
class RuleResult:
    reply: str
    escalated: bool
    confidence: float
    reason: str = "rule_match"


@dataclass(frozen=True)
class FallbackResult:
    reply: str
    escalated: bool = True
    confidence: float = 0.0
    reason: str = "no_match"


@dataclass(frozen=True)
class AIResult:
    """Fields come straight from the AI responder and are not trusted."""

    reply: Any
    escalated: Any = None
    confidence: Any = None
    reason: str = "ai_fallback"


Resolution = Union[RuleResult, FallbackResult, AIResult]


@dataclass(frozen=True)
class NormalizedResponse:
    reply: str
    escalated: bool
    confidence: float


@dataclass
class EscalationRecord:
    question: str
    reply: str
    confidence: float
    reason: str
    user: Any = None
