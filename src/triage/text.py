import re
from typing import Any

SPACE_RE = re.compile(r"\s+")


def normalize_text(text: Any) -> str:
    """Fold a message or pattern into the form the matcher compares: casefolded, single-spaced."""
    if not isinstance(text, str):
        return ""
    return SPACE_RE.sub(" ", text).strip().casefold()


def is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()
