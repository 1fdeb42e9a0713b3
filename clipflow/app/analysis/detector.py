# clipflow/app/analysis/detector.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple

from clipflow.app.analysis.content_classifier import ContentClassifier, ClassificationResult
from clipflow.app.analysis.platform_heuristic import detect_platform
from clipflow.app.policy.app_labels import AppLabelPolicy


@dataclass(frozen=True)
class DetectionResult:
    content_type: str
    type_confidence: int
    source_app: str
    confidence: int
    reasoning: Tuple[str, ...]

class EnhancedDetector:
    """
    Fuses the platform heuristic with the OS-tracked foreground app, and
    attaches the content classification. Both halves are always populated.
    """
    platform_threshold = 70
    tracked_app_confidence = 60
    fallback_floor = 30

    def __init__(self, classifier: Optional[ContentClassifier] = None, labels: Optional[AppLabelPolicy] = None):
        self.classifier = classifier or ContentClassifier()
        self.labels = labels or AppLabelPolicy()

    def detect(self, content: str, os_detected_app: Optional[str]) -> DetectionResult:
        platform = detect_platform(content)
        classification: ClassificationResult = self.classifier.classify(content)
        reasoning: List[str] = []

        if platform.confidence > self.platform_threshold:
            source, confidence = platform.platform, platform.confidence
            reasoning.append(f"Content analysis suggests {platform.platform} ({platform.confidence}% confidence)")
            reasoning.extend(platform.indicators)
        elif self.labels.is_evidence(os_detected_app):
            source, confidence = str(os_detected_app), self.tracked_app_confidence
            reasoning.append(f"Using detected app: {os_detected_app}")
        else:
            source, confidence = platform.platform, max(self.fallback_floor, platform.confidence)
            reasoning.append(f"Fallback to content analysis: {platform.platform}")

        reasoning.append(f"Content type: {classification.type.value} ({classification.confidence}% confidence)")
        reasoning.extend(classification.patterns)

        return DetectionResult(
            content_type=classification.type.value,
            type_confidence=classification.confidence,
            source_app=source,
            confidence=confidence,
            reasoning=tuple(reasoning),
        )
