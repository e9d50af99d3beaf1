from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union

from .types import EscalationRecord

logger = logging.getLogger(__name__)


class LoggingEscalationSink:
    def record(self, record: EscalationRecord) -> None:
        logger.info(
            "Escalation: reason=%s confidence=%.2f question=%r",
            record.reason,
            record.confidence,
            record.question[:80],
        )


class JsonlEscalationSink:
    """Appends one JSON line per escalated query."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def record(self, record: EscalationRecord) -> None:
        entry = asdict(record)
        entry.update(
            timestamp=datetime.now(timezone.utc).isoformat(),
            status="open",
            source="chatbot",
        )
        line = json.dumps(entry, ensure_ascii=False, default=str)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")


def dispatch_escalation(sink: Any, record: EscalationRecord) -> None:
    try:
        sink.record(record)
    except Exception as exc:
        logger.error("Escalation logging failed: %s", exc)


def build_escalation_sink(config: Dict[str, Any]) -> Any:
    esc_cfg = config.get("escalation", {})
    kind = esc_cfg.get("sink", "log")
    if kind == "jsonl":
        return JsonlEscalationSink(esc_cfg.get("path", "data/escalations.jsonl"))
    if kind != "log":
        raise ValueError(f"Unsupported escalation sink: {kind}")
    return LoggingEscalationSink()
