# tests/test_content_classifier.py
# How to run: from repo root, pytest -q
#
# What this covers:
#   - Rule order: api-key > code > json > url/email/color > image > number > password > text
#   - Confidence values per rule and the reasoning trace carried into the code result
#   - User rules run first; invalid user rules are dropped, not raised
#   - classify() never raises, even if a rule blows up

import pytest

from clipflow.app.analysis.content_classifier import (
    ContentClassifier, ContentType, ClassificationResult, Rule, DEFAULT_RULES,
    classify, compile_user_rule,
)
from clipflow.app.config import CustomDetectionRule


@pytest.mark.parametrize("text, expected, conf", [
    ("sk-" + "a1B2" * 12, ContentType.API_KEY, 95),
    ("ghp_" + "A" * 36, ContentType.API_KEY, 95),
    ("AKIA" + "ABCDEFGHIJKLMNOP", ContentType.API_KEY, 95),
    ('{"name": "clip", "n": 1}', ContentType.JSON, 90),
    ("[1, 2, 3]", ContentType.JSON, 90),
    ("https://example.com/path", ContentType.URL, 95),
    ("user@example.com", ContentType.EMAIL, 95),
    ("#FF5733", ContentType.COLOR, 95),
    ("#abc", ContentType.COLOR, 95),
    ("data:image/png;base64,iVBORw0KGgo=", ContentType.IMAGE, 95),
    ("iVBORw0KGgoAAAANSUhEUgAAAAEAAAAB", ContentType.IMAGE, 90),
    ("42", ContentType.NUMBER, 95),
    ("-1,234.56", ContentType.NUMBER, 95),
    ("Xk9#mQ2$vL7!pR4z", ContentType.PASSWORD, 70),
    ("Meeting notes about the quarterly budget", ContentType.TEXT, 60),
])
def test_builtin_rules_pick_expected_type(text, expected, conf):
    r = classify(text)
    assert r.type == expected, r.patterns
    assert r.confidence == conf


def test_code_detection_accumulates_indicators():
    snippet = "def load(path):\n    return open(path).read()"
    r = classify(snippet)
    assert r.type == ContentType.CODE
    assert 30 <= r.confidence <= 95
    assert "Python keywords" in r.patterns


def test_code_confidence_is_capped():
    snippet = "public static int x = 1;\n// TODO {\nreturn x; }\nimport foo from 'a.js:'"
    r = classify(snippet)
    assert r.type == ContentType.CODE
    assert r.confidence <= 95


def test_invalid_json_falls_through_to_text():
    r = classify("{not json}")
    assert r.type == ContentType.TEXT
    assert r.confidence == 60


def test_whitespace_is_trimmed_before_matching():
    assert classify("   https://example.com   \n").type == ContentType.URL


def test_empty_content_is_text():
    r = classify("")
    assert r.type == ContentType.TEXT
    assert r.patterns == ("No specific patterns detected",)


def test_confidence_is_clamped():
    assert ClassificationResult(ContentType.TEXT, 250).confidence == 100
    assert ClassificationResult(ContentType.TEXT, -5).confidence == 0


def test_user_rule_runs_before_builtins():
    rule = CustomDetectionRule(id="cc", name="Card", pattern=r"^4[0-9]{15}$", type="credit-card", enabled=True)
    clf = ContentClassifier(user_rules=[rule])
    # would otherwise be a number
    r = clf.classify("4111111111111111")
    assert r.type == ContentType.CREDIT_CARD
    assert r.confidence == 90
    assert r.patterns == ("Custom rule: Card",)


def test_invalid_user_rules_are_skipped():
    bad_type = CustomDetectionRule(id="x", name="X", pattern=".*", type="not-a-type", enabled=True)
    bad_rx = CustomDetectionRule(id="y", name="Y", pattern="([", type="text", enabled=True)
    assert compile_user_rule(bad_type) is None
    assert compile_user_rule(bad_rx) is None

    clf = ContentClassifier(user_rules=[bad_type, bad_rx])
    assert clf.rules == DEFAULT_RULES
    assert clf.classify("42").type == ContentType.NUMBER


def test_set_user_rules_replaces_previous_set():
    rule = CustomDetectionRule(id="t", name="Ticket", pattern=r"^JIRA-\d+$", type="text", enabled=True)
    clf = ContentClassifier(user_rules=[rule])
    assert clf.classify("JIRA-12").patterns == ("Custom rule: Ticket",)
    clf.set_user_rules([])
    assert clf.classify("JIRA-12").patterns != ("Custom rule: Ticket",)


def test_failing_rule_is_skipped():
    def _boom(text, trace):
        raise RuntimeError("boom")

    clf = ContentClassifier(rules=(Rule("boom", _boom),) + DEFAULT_RULES)
    assert clf.classify("user@example.com").type == ContentType.EMAIL


AWKWARD = [
    "\x00",
    "{",
    "[",
    "\ud800",
    "#",
    "sk-",
    "line one\r\nline two\r\n",
    "data:image/png;base64,",
    "🎉" * 50,
    "a" * 200_000,
    "{\"k\": " * 1_000,
]


@pytest.mark.parametrize("content", AWKWARD, ids=lambda c: repr(c[:12]))
def test_classify_is_total_and_deterministic(content):
    first = classify(content)
    assert first == classify(content)
    assert first.type in ContentType
    assert 0 <= first.confidence <= 100


def test_set_rules_replaces_builtins_but_keeps_user_rules():
    def _everything_is_code(text, trace):
        return ClassificationResult(ContentType.CODE, 50, ("forced",))

    rule = CustomDetectionRule(id="t", name="Ticket", pattern=r"^JIRA-\d+$", type="text", enabled=True)
    clf = ContentClassifier(user_rules=[rule])
    clf.set_rules([Rule("code-only", _everything_is_code)])

    assert clf.classify("user@example.com").type == ContentType.CODE
    assert clf.classify("JIRA-7").patterns == ("Custom rule: Ticket",)

    clf.set_rules([])
    assert clf.classify("user@example.com").type == ContentType.TEXT
