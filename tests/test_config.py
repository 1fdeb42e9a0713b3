# tests/test_config.py
# How to run: from repo root, pytest -q
#
# What this covers:
#   - Settings defaults and their retention/rule projections
#   - JSON load/save, including broken files falling back to defaults
#   - Event serialization schema

import json

from clipflow.app.config import (
    Settings, CustomDetectionRule, RetentionConfig, default_detection_rules,
    load_settings, save_settings,
)
from clipflow.core.events import CaptureEvent, FocusEvent, EventType


def test_defaults():
    s = Settings()
    assert s.max_items == 100
    assert s.auto_delete_days == 30
    assert [r.id for r in s.custom_detection_rules] == ["password-1", "credit-card-1", "phone-1"]
    # shipped rules are disabled until the user opts in
    assert s.active_rules() == []
    assert s.retention() == RetentionConfig(100, 30)
    assert RetentionConfig(auto_delete_days=1).max_age_ms == 86_400_000


def test_active_rules_respect_master_switch():
    rules = default_detection_rules()
    rules[1].enabled = True
    s = Settings(custom_detection_rules=rules)
    assert [r.id for r in s.active_rules()] == ["credit-card-1"]
    s.custom_rules_enabled = False
    assert s.active_rules() == []


def test_save_then_load(tmp_path):
    path = tmp_path / "settings.json"
    rule = CustomDetectionRule(id="t", name="Ticket", pattern=r"^JIRA-\d+$", type="text", enabled=True)
    save_settings(Settings(max_items=250, auto_delete_days=7, custom_detection_rules=[rule]), path)

    loaded = load_settings(path)
    assert loaded.max_items == 250
    assert loaded.auto_delete_days == 7
    assert loaded.custom_detection_rules == [rule]


def test_missing_or_broken_file_gives_defaults(tmp_path):
    assert load_settings(tmp_path / "absent.json") == Settings()

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_settings(broken) == Settings()

    wrong_root = tmp_path / "list.json"
    wrong_root.write_text("[1, 2]", encoding="utf-8")
    assert load_settings(wrong_root) == Settings()


def test_partial_file_keeps_other_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "max_items": 10,
        "custom_detection_rules": [{"id": "x", "name": "X", "pattern": "x", "type": "text"}, {"bogus": 1}],
    }), encoding="utf-8")
    s = load_settings(path)
    assert s.max_items == 10
    assert s.auto_delete_days == 30
    assert [r.id for r in s.custom_detection_rules] == ["x"]


def test_capture_event_record():
    ev = CaptureEvent(content="abc", timestamp=5, content_type="url", source="Chrome",
                      confidence=60, reasoning=("Using detected app: Chrome",))
    assert ev.etype == EventType.CAPTURE
    assert ev.to_record() == {
        "content": "abc",
        "timestamp": 5,
        "type": "url",
        "source": "Chrome",
        "confidence": 60,
        "reasoning": ["Using detected app: Chrome"],
    }


def test_focus_event_record():
    ev = FocusEvent(app_name="Slack", previous="Chrome", dwell_prev_s=1.5)
    rec = ev.to_record()
    assert rec["etype"] == "FOCUS"
    assert rec["app_name"] == "Slack" and rec["previous"] == "Chrome"
    assert ev.t_mono > 0
