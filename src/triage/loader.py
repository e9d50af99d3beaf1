import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml

from .normalizer import clamp_confidence
from .text import is_blank, normalize_text
from .types import Intent, KnowledgeBase

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.7


class KnowledgeBaseError(Exception):
    """Raised while reading or parsing a knowledge base source."""


def load_knowledge_base(source: Union[str, Path]) -> KnowledgeBase:
    """Load intents from a JSON or YAML file.

    Never raises: any read or parse problem, or an ``intents`` field that is not
    a list, is logged once and yields an empty knowledge base.
    """
    try:
        data = _read_source(Path(source))
        kb = parse_knowledge_base(data)
    except Exception as exc:
        logger.error("Failed to load knowledge base from %s: %s", source, exc)
        return KnowledgeBase()
    logger.info("Loaded %d intents from %s", len(kb), source)
    return kb


def parse_knowledge_base(data: Any) -> KnowledgeBase:
    if not isinstance(data, Mapping):
        raise KnowledgeBaseError("knowledge base must be an object with an 'intents' list")
    raw_intents = data.get("intents")
    if not isinstance(raw_intents, list):
        raise KnowledgeBaseError("invalid knowledge base format: intents must be a list")

    intents: List[Intent] = []
    for idx, raw in enumerate(raw_intents):
        intent = _build_intent(raw)
        if intent is None:
            logger.debug("Skipping intent #%d: no usable patterns", idx)
            continue
        intents.append(intent)
    return KnowledgeBase(intents=tuple(intents))


def _read_source(path: Path) -> Any:
    if not path.exists():
        raise KnowledgeBaseError(f"knowledge base not found: {path}")

    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as f:
        if suffix in {".yml", ".yaml"}:
            return yaml.safe_load(f)
        return json.load(f)


def _build_intent(raw: Any) -> Optional[Intent]:
    if not isinstance(raw, Mapping):
        return None

    raw_patterns = raw.get("patterns")
    if not isinstance(raw_patterns, (list, tuple)):
        return None
    patterns = tuple(normalize_text(p) for p in raw_patterns if not is_blank(p))
    if not patterns:
        return None

    raw_responses = raw.get("responses")
    if not isinstance(raw_responses, (list, tuple)):
        raw_responses = []
    responses = tuple(r for r in raw_responses if not is_blank(r))

    escalate = raw.get("escalate", False)
    tag = raw.get("tag")
    return Intent(
        patterns=patterns,
        responses=responses,
        escalate=escalate if isinstance(escalate, bool) else False,
        confidence=clamp_confidence(raw.get("confidence"), default=DEFAULT_CONFIDENCE),
        tag=str(tag) if tag is not None else None,
    )
