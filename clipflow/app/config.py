# clipflow/app/config.py
from __future__ import annotations
import json
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Optional, Dict, Any
import structlog

log = structlog.get_logger()

DATA_DIR = Path(os.environ.get("CLIPFLOW_DATA_DIR", Path.home() / ".local" / "share" / "clipflow"))
DB_PATH = DATA_DIR / "clipflow.db"
SETTINGS_PATH = DATA_DIR / "settings.json"

@dataclass(frozen=True)
class CaptureConfig:
    # tick intervals (seconds)
    clipboard_poll_s: float = 1.0
    focus_poll_s: float = 0.5

    # OS query bound; a hung query resolves to the default label
    query_timeout_s: float = 2.0

    # duplicate read debounce
    debounce_s: float = 0.5
    fingerprint_edge: int = 50

    # own-copy suppression window
    self_write_window_s: float = 1.0

    # rolling active-app history
    app_history_size: int = 10

@dataclass(frozen=True)
class RetentionConfig:
    max_items: int = 100
    auto_delete_days: int = 30

    @property
    def max_age_ms(self) -> int:
        return self.auto_delete_days * 24 * 60 * 60 * 1000

@dataclass
class CustomDetectionRule:
    id: str
    name: str
    pattern: str
    type: str
    enabled: bool = False
    description: Optional[str] = None

def default_detection_rules() -> List[CustomDetectionRule]:
    return [
        CustomDetectionRule(
            id="password-1",
            name="Strong Password",
            pattern=r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$",
            type="password",
            description="At least 8 characters with upper, lower, digit and special character",
        ),
        CustomDetectionRule(
            id="credit-card-1",
            name="Credit Card Number",
            pattern=r"^(?:4[0-9]{12}(?:[0-9]{3})?|5[1-5][0-9]{14}|3[47][0-9]{13}|3[0-9]{13}|6(?:011|5[0-9]{2})[0-9]{12})$",
            type="credit-card",
            description="Major card numbers (Visa, MasterCard, Amex, ...)",
        ),
        CustomDetectionRule(
            id="phone-1",
            name="Phone Number",
            pattern=r"^[+]?[(]?[0-9\s\-\(\)]{10,}$",
            type="phone",
            description="Phone numbers in various formats",
        ),
    ]

@dataclass
class Settings:
    """User-editable settings, persisted as JSON next to the database."""
    max_items: int = 100
    auto_delete_days: int = 30
    custom_rules_enabled: bool = True
    custom_detection_rules: List[CustomDetectionRule] = field(default_factory=default_detection_rules)

    def retention(self) -> RetentionConfig:
        return RetentionConfig(max_items=self.max_items, auto_delete_days=self.auto_delete_days)

    def active_rules(self) -> List[CustomDetectionRule]:
        if not self.custom_rules_enabled:
            return []
        return [r for r in self.custom_detection_rules if r.enabled]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        base = cls()
        rules_raw = data.get("custom_detection_rules")
        rules = base.custom_detection_rules
        if isinstance(rules_raw, list):
            rules = []
            for raw in rules_raw:
                try:
                    rules.append(CustomDetectionRule(**raw))
                except TypeError as e:
                    log.warning("settings.rule.invalid", err=str(e))
        return cls(
            max_items=int(data.get("max_items", base.max_items)),
            auto_delete_days=int(data.get("auto_delete_days", base.auto_delete_days)),
            custom_rules_enabled=bool(data.get("custom_rules_enabled", base.custom_rules_enabled)),
            custom_detection_rules=rules,
        )

def ensure_dirs() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)

def load_settings(path: Optional[Path] = None) -> Settings:
    p = Path(path) if path else SETTINGS_PATH
    if not p.exists():
        return Settings()
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("settings root must be an object")
        return Settings.from_dict(data)
    except (OSError, ValueError, TypeError) as e:
        log.warning("settings.load.error", path=str(p), err=str(e))
        return Settings()

def save_settings(settings: Settings, path: Optional[Path] = None) -> None:
    p = Path(path) if path else SETTINGS_PATH
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
    log.info("settings.saved", path=str(p))
