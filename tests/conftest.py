# FILE: tests/conftest.py
"""
Pytest configuration for the triage test suite.

Provides:
- src/ on sys.path so `triage` and `gateway` import without installation
- shared knowledge-base fixtures
"""
import json
import sys
from pathlib import Path

import pytest

_src_root = Path(__file__).parent.parent / "src"
if str(_src_root) not in sys.path:
    sys.path.insert(0, str(_src_root))

from triage.loader import parse_knowledge_base  # noqa: E402


RESET_PASSWORD_INTENT = {
    "tag": "reset_password",
    "patterns": ["reset password"],
    "responses": ["Go to settings to reset your password."],
    "escalate": False,
    "confidence": 0.9,
}


@pytest.fixture
def scenario_kb():
    """Knowledge base with the single reset-password intent."""
    return parse_knowledge_base({"intents": [RESET_PASSWORD_INTENT]})


@pytest.fixture
def write_kb(tmp_path):
    """Write a knowledge base dict (or raw text) to a file and return its path."""

    def _write(content, name="knowledge.json"):
        path = tmp_path / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return path

    return _write
