from .text import normalize_text
from .types import Intent, KnowledgeBase, Matched, MatchResult, NoMatch

GENERIC_REPLY = "I understand your issue."


def match_intent(message: str, kb: KnowledgeBase) -> MatchResult:
    """Return the first intent with a pattern contained in ``message``.

    Intents are tried in stored order and patterns in stored order within each
    intent, so earlier entries win ties.
    """
    normalized = normalize_text(message)
    for intent in kb:
        for pattern in intent.patterns:
            if normalize_text(pattern) in normalized:
                return _to_match(intent)
    return NoMatch()


def _to_match(intent: Intent) -> Matched:
    reply = intent.responses[0] if intent.responses else GENERIC_REPLY
    return Matched(
        reply=reply,
        escalated=intent.escalate,
        confidence=intent.confidence,
        tag=intent.tag,
    )
