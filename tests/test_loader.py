# FILE: tests/test_loader.py
"""
Tests for triage/loader.py
Knowledge base loading - parsing, defaults, and fail-safe behaviour.
"""

import logging

import pytest

from triage.loader import DEFAULT_CONFIDENCE, load_knowledge_base, parse_knowledge_base
from triage.types import KnowledgeBase


class TestLoadFromFile:
    """Test loading a well-formed knowledge base file."""

    def test_loads_json_intents_in_order(self, write_kb):
        path = write_kb({
            "intents": [
                {"tag": "a", "patterns": ["hello"], "responses": ["Hi"]},
                {"tag": "b", "patterns": ["refund"], "responses": ["Refund"], "escalate": True},
            ]
        })
        kb = load_knowledge_base(path)
        assert [intent.tag for intent in kb] == ["a", "b"]
        assert kb.intents[1].escalate is True

    def test_loads_yaml(self, write_kb):
        path = write_kb(
            "intents:\n"
            "  - patterns: [\"Track Order\"]\n"
            "    responses: [\"Use the Orders page.\"]\n"
            "    confidence: 0.6\n",
            name="knowledge.yaml",
        )
        kb = load_knowledge_base(path)
        assert len(kb) == 1
        assert kb.intents[0].patterns == ("track order",)
        assert kb.intents[0].confidence == 0.6

    def test_success_logs_no_errors(self, write_kb, caplog):
        path = write_kb({"intents": [{"patterns": ["hi"], "responses": ["Hello"]}]})
        with caplog.at_level(logging.DEBUG, logger="triage.loader"):
            load_knowledge_base(path)
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_bundled_knowledge_base_loads(self):
        from pathlib import Path

        path = Path(__file__).parent.parent / "data" / "knowledge.json"
        kb = load_knowledge_base(path)
        assert len(kb) > 0


class TestFailSafe:
    """Test that load failures yield an empty knowledge base and one log entry."""

    @pytest.mark.parametrize("content", [
        "{not json",
        "[]",
        '{"intents": {"patterns": ["x"]}}',
        '{"intents": null}',
        '{"other": []}',
    ])
    def test_bad_content_returns_empty(self, write_kb, caplog, content):
        path = write_kb(content)
        with caplog.at_level(logging.INFO, logger="triage.loader"):
            kb = load_knowledge_base(path)
        assert isinstance(kb, KnowledgeBase)
        assert len(kb) == 0
        errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
        assert len(errors) == 1

    def test_missing_file_returns_empty(self, tmp_path, caplog):
        with caplog.at_level(logging.ERROR, logger="triage.loader"):
            kb = load_knowledge_base(tmp_path / "nope.json")
        assert len(kb) == 0
        assert len(caplog.records) == 1


class TestIntentParsing:
    """Test per-intent defaults and skipping rules."""

    def test_intent_without_patterns_is_skipped(self):
        kb = parse_knowledge_base({
            "intents": [
                {"responses": ["no patterns"]},
                {"patterns": [], "responses": ["empty patterns"]},
                {"patterns": "reset", "responses": ["not a list"]},
                {"patterns": ["   ", 7], "responses": ["blank patterns"]},
                "not a mapping",
                {"patterns": ["ok"], "responses": ["kept"]},
            ]
        })
        assert len(kb) == 1
        assert kb.intents[0].responses == ("kept",)

    def test_patterns_are_normalized(self):
        kb = parse_knowledge_base({"intents": [{"patterns": ["  Need   HELP "]}]})
        assert kb.intents[0].patterns == ("need help",)

    @pytest.mark.parametrize("raw", [None, "0.9", True, float("nan")])
    def test_non_numeric_confidence_defaults(self, raw):
        kb = parse_knowledge_base({"intents": [{"patterns": ["x"], "confidence": raw}]})
        assert kb.intents[0].confidence == DEFAULT_CONFIDENCE

    def test_missing_confidence_defaults(self):
        kb = parse_knowledge_base({"intents": [{"patterns": ["x"]}]})
        assert kb.intents[0].confidence == 0.7

    @pytest.mark.parametrize("raw,expected", [(3, 1.0), (-0.5, 0.0), (0.4, 0.4)])
    def test_confidence_is_clamped(self, raw, expected):
        kb = parse_knowledge_base({"intents": [{"patterns": ["x"], "confidence": raw}]})
        assert kb.intents[0].confidence == expected

    def test_escalate_defaults_false(self):
        kb = parse_knowledge_base({
            "intents": [
                {"patterns": ["a"]},
                {"patterns": ["b"], "escalate": "yes"},
            ]
        })
        assert [intent.escalate for intent in kb] == [False, False]

    def test_huge_integer_confidence_keeps_other_intents(self):
        kb = parse_knowledge_base({
            "intents": [
                {"patterns": ["hello"], "responses": ["Hi"], "confidence": 0.9},
                {"patterns": ["x"], "confidence": 10 ** 400},
                {"patterns": ["y"], "confidence": -(10 ** 400)},
            ]
        })
        assert [intent.confidence for intent in kb] == [0.9, 1.0, 0.0]

    def test_huge_integer_confidence_in_file(self, write_kb):
        path = write_kb('{"intents": [{"patterns": ["hello"]}, {"patterns": ["x"], "confidence": 1' + "0" * 400 + "}]}")
        kb = load_knowledge_base(path)
        assert len(kb) == 2
        assert kb.intents[1].confidence == 1.0

    def test_blank_responses_are_dropped(self):
        kb = parse_knowledge_base({"intents": [{"patterns": ["x"], "responses": ["", "  ", None, "real"]}]})
        assert kb.intents[0].responses == ("real",)

    def test_knowledge_base_is_immutable(self, scenario_kb):
        with pytest.raises(AttributeError):
            scenario_kb.intents = ()
        assert isinstance(scenario_kb.intents, tuple)
