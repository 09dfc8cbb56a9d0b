from typing import Iterable, List, Optional

from techprobe.core.constants import (
    HIGH_CONFIDENCE_THRESHOLD,
    INCLUSION_THRESHOLD,
    MAX_CONFIDENCE,
    METHOD_HIGH_CONFIDENCE,
    METHOD_PATTERN_MATCHING,
)
from techprobe.engine.extractors import EXTRACTORS, VERSIONED_SIGNALS, ArtifactView, enabled_signal_types
from techprobe.engine.models import DetectionFinding, FeatureFlags, Signature
from techprobe.engine.version import extract_version


def detection_method(confidence: float) -> str:
    return METHOD_HIGH_CONFIDENCE if confidence > HIGH_CONFIDENCE_THRESHOLD else METHOD_PATTERN_MATCHING


def score_signature(view: ArtifactView, signature: Signature, flags: FeatureFlags) -> Optional[DetectionFinding]:
    """Sum the weights of every enabled, matching rule.

    Returns ``None`` when the clamped total does not exceed the inclusion
    threshold. Disabled signal types are skipped outright.
    """
    enabled = set(enabled_signal_types(flags))
    confidence = 0.0
    evidence = []
    version = None

    for rule in signature.rules:
        if rule.signal_type not in enabled:
            continue
        result = EXTRACTORS[rule.signal_type](view, rule)
        if not result.matched:
            continue
        confidence += rule.weight
        evidence.append(result.evidence_text)
        # First version found wins
        if version is None and rule.signal_type in VERSIONED_SIGNALS:
            version = extract_version(result.value)

    # Float sums like 0.3 + 0.4 must not drift past the clamp or threshold
    confidence = min(round(confidence, 6), MAX_CONFIDENCE)
    if confidence <= INCLUSION_THRESHOLD:
        return None

    return DetectionFinding(
        name=signature.name,
        category=signature.category,
        version=version,
        confidence=confidence,
        detection_method=detection_method(confidence),
        evidence=tuple(evidence),
    )


def scan_signatures(view: ArtifactView, signatures: Iterable[Signature], flags: FeatureFlags) -> List[DetectionFinding]:
    findings = []
    for signature in signatures:
        finding = score_signature(view, signature, flags)
        if finding is not None:
            findings.append(finding)
    return findings
