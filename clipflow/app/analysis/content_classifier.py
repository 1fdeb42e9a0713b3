# clipflow/app/analysis/content_classifier.py
from __future__ import annotations
import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
import structlog

from clipflow.app.analysis.patterns import shannon_entropy, has_mixed_charsets
from clipflow.app.config import CustomDetectionRule

log = structlog.get_logger()

class ContentType(str, Enum):
    TEXT = "text"
    CODE = "code"
    JSON = "json"
    URL = "url"
    EMAIL = "email"
    COLOR = "color"
    IMAGE = "image"
    NUMBER = "number"
    PASSWORD = "password"
    API_KEY = "api-key"
    CREDIT_CARD = "credit-card"
    PHONE = "phone"

@dataclass(frozen=True)
class ClassificationResult:
    type: ContentType
    confidence: int
    patterns: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "confidence", max(0, min(100, int(self.confidence))))

# A rule sees the trimmed content plus the trace collected by earlier rules.
# It returns a result to stop evaluation, or None to fall through.
RuleCheck = Callable[[str, List[str]], Optional[ClassificationResult]]

@dataclass(frozen=True)
class Rule:
    name: str
    check: RuleCheck

    def __call__(self, text: str, trace: List[str]) -> Optional[ClassificationResult]:
        return self.check(text, trace)

# --- built-in rules, most specific first ---

API_KEY_FORMATS: Sequence[Tuple[re.Pattern, str]] = (
    (re.compile(r"^sk-[a-zA-Z0-9-]{40,}$"), "OpenAI API key format"),
    (re.compile(r"^sk-proj-[a-zA-Z0-9_-]{20,}$"), "OpenAI project key format"),
    (re.compile(r"^(?:pk|sk)_test_[a-zA-Z0-9]{24}$"), "Stripe API key format"),
    (re.compile(r"^(?:pk|sk|rk)_live_[a-zA-Z0-9]{24,}$"), "Stripe API key format"),
    (re.compile(r"^ghp_[a-zA-Z0-9]{36}$"), "GitHub personal access token"),
    (re.compile(r"^github_pat_[a-zA-Z0-9_]{22,}$"), "GitHub fine-grained token"),
    (re.compile(r"^AKIA[A-Z0-9]{16}$"), "AWS access key"),
    (re.compile(r"^xox[baprs]-[a-zA-Z0-9-]{10,}$"), "Slack token"),
    (re.compile(r"^AIza[a-zA-Z0-9_-]{35}$"), "Google API key"),
)
BASE64_TOKEN = re.compile(r"^[A-Za-z0-9+/]{40,}={0,2}$")

def _api_key(text: str, trace: List[str]) -> Optional[ClassificationResult]:
    for pattern, desc in API_KEY_FORMATS:
        if pattern.search(text):
            return ClassificationResult(ContentType.API_KEY, 95, (desc,))
    if BASE64_TOKEN.search(text) and len(text) > 40:
        trace.append("Base64 pattern (possible token)")
    return None

CODE_INDICATORS: Sequence[Tuple[re.Pattern, str]] = (
    (re.compile(r"\b(function|const|let|var|class|import|export|if|else|for|while|return)\b"), "JavaScript keywords"),
    (re.compile(r"\b(def|class|import|from|if|elif|else|for|while|return|try|except)\b"), "Python keywords"),
    (re.compile(r"^\s*[\w.]+\s*[=:]\s*"), "Assignment pattern"),
    (re.compile(r"\{[\s\S]*\}"), "Code block braces"),
    (re.compile(r"^\s*//.*|^\s*/\*.*\*/|^\s*#.*"), "Code comments"),
    (re.compile(r";\s*$"), "Statement terminator"),
    (re.compile(r"^\s*(public|private|protected|static)\s+"), "Access modifiers"),
    (re.compile(r"\.(js|ts|py|java|cpp|cs|php|rb|go|rs)[:.]"), "File extension in content"),
)
CODE_WEIGHT = 15
CODE_THRESHOLD = 30

def _code(text: str, trace: List[str]) -> Optional[ClassificationResult]:
    score = 0
    fired: List[str] = []
    for pattern, desc in CODE_INDICATORS:
        if pattern.search(text):
            score += CODE_WEIGHT
            fired.append(desc)
    trace.extend(fired)
    if score >= CODE_THRESHOLD:
        return ClassificationResult(ContentType.CODE, min(95, score), tuple(trace))
    return None

def _json(text: str, trace: List[str]) -> Optional[ClassificationResult]:
    bounded = (text.startswith("{") and text.endswith("}")) or (text.startswith("[") and text.endswith("]"))
    if not bounded:
        return None
    try:
        json.loads(text)
    except ValueError:
        trace.append("JSON-like structure but invalid")
        return None
    return ClassificationResult(ContentType.JSON, 90, ("Valid JSON structure",))

URL = re.compile(r"^https?://[^\s/$.?#].[^\s]*$")
EMAIL = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
HEX_COLOR = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")

def _exact_formats(text: str, trace: List[str]) -> Optional[ClassificationResult]:
    if URL.search(text):
        return ClassificationResult(ContentType.URL, 95, ("HTTP/HTTPS URL format",))
    if EMAIL.search(text):
        return ClassificationResult(ContentType.EMAIL, 95, ("Email format",))
    if HEX_COLOR.search(text):
        return ClassificationResult(ContentType.COLOR, 95, ("Hex color code",))
    return None

DATA_URI_IMAGE = re.compile(r"^data:image/(png|jpeg|jpg|gif|webp|svg\+xml);base64,")
BASE64_IMAGE_MAGIC = re.compile(r"^(iVBORw0KGgoAAAANSUhEUgAA|/9j/|R0lGODlh)")

def _image(text: str, trace: List[str]) -> Optional[ClassificationResult]:
    if DATA_URI_IMAGE.search(text):
        return ClassificationResult(ContentType.IMAGE, 95, ("Data URI image format",))
    if BASE64_IMAGE_MAGIC.search(text):
        return ClassificationResult(ContentType.IMAGE, 90, ("Base64 image signature (PNG/JPEG/GIF)",))
    return None

NUMBER = re.compile(r"^-?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?$")

def _number(text: str, trace: List[str]) -> Optional[ClassificationResult]:
    if NUMBER.search(text):
        return ClassificationResult(ContentType.NUMBER, 95, ("Numeric value",))
    return None

ENTROPY_THRESHOLD = 3.5
PASSWORD_LEN = (8, 128)

def _password(text: str, trace: List[str]) -> Optional[ClassificationResult]:
    if not (PASSWORD_LEN[0] <= len(text) <= PASSWORD_LEN[1]):
        return None
    if shannon_entropy(text) > ENTROPY_THRESHOLD and has_mixed_charsets(text):
        return ClassificationResult(ContentType.PASSWORD, 70, ("High entropy with mixed character types",))
    return None

FALLBACK = ClassificationResult(ContentType.TEXT, 60, ("No specific patterns detected",))

DEFAULT_RULES: Tuple[Rule, ...] = (
    Rule("api-key", _api_key),
    Rule("code", _code),
    Rule("json", _json),
    Rule("exact-format", _exact_formats),
    Rule("image", _image),
    Rule("number", _number),
    Rule("password", _password),
)

# --- user-defined rules ---

USER_RULE_CONFIDENCE = 90

def compile_user_rule(rule: CustomDetectionRule) -> Optional[Rule]:
    """Turn a settings rule into a classifier Rule; None if it cannot be used."""
    try:
        ctype = ContentType(rule.type)
    except ValueError:
        log.warning("classifier.user_rule.unknown_type", rule=rule.id, type=rule.type)
        return None
    try:
        rx = re.compile(rule.pattern)
    except re.error as e:
        log.warning("classifier.user_rule.bad_pattern", rule=rule.id, err=str(e))
        return None

    label = f"Custom rule: {rule.name}"

    def _check(text: str, trace: List[str]) -> Optional[ClassificationResult]:
        if rx.search(text):
            return ClassificationResult(ctype, USER_RULE_CONFIDENCE, (label,))
        return None

    return Rule(f"user:{rule.id}", _check)

class ContentClassifier:
    """
    Ordered first-match-wins rule list. User rules run ahead of the built-ins;
    both lists can be swapped at runtime (settings changes) without locking,
    since the evaluation order is read once per call as an immutable tuple.
    """
    def __init__(self, rules: Optional[Iterable[Rule]] = None, user_rules: Optional[Iterable[CustomDetectionRule]] = None):
        self._builtin: Tuple[Rule, ...] = tuple(rules) if rules is not None else DEFAULT_RULES
        self._user: Tuple[Rule, ...] = ()
        if user_rules:
            self.set_user_rules(user_rules)

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._user + self._builtin

    def set_rules(self, rules: Iterable[Rule]) -> None:
        self._builtin = tuple(rules)

    def set_user_rules(self, rules: Iterable[CustomDetectionRule]) -> None:
        compiled = [compile_user_rule(r) for r in rules]
        self._user = tuple(r for r in compiled if r is not None)
        log.info("classifier.user_rules", count=len(self._user))

    def classify(self, content: str) -> ClassificationResult:
        text = (content or "").strip()
        trace: List[str] = []
        for rule in self.rules:
            try:
                result = rule(text, trace)
            except Exception as e:
                log.debug("classifier.rule.error", rule=rule.name, err=str(e))
                continue
            if result is not None:
                return result
        return FALLBACK

_default = ContentClassifier()

def classify(content: str) -> ClassificationResult:
    return _default.classify(content)
