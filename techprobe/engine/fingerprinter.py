from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from techprobe.core.constants import DEFAULT_SUGGEST_TIMEOUT, SUGGESTION_SAMPLE_CHARS
from techprobe.core.logging import log
from techprobe.engine.artifact import PageArtifact
from techprobe.engine.behavior import behavior_registry
from techprobe.engine.custom import match_custom_patterns
from techprobe.engine.extractors import ArtifactView
from techprobe.engine.merge import merge_findings
from techprobe.engine.models import DetectionFinding, FeatureFlags, SocialIntegrationFinding
from techprobe.engine.scoring import scan_signatures
from techprobe.engine.signatures import SignatureRegistry, default_registry
from techprobe.engine.social import classify_social, total_platforms


class PatternSuggester(Protocol):
    """External collaborator that proposes extra regex patterns for a page."""

    def suggest(self, sample_html: str, detected_names: Sequence[str]) -> List[str]:
        ...


@dataclass(frozen=True)
class EngineReport:
    technologies: Tuple[DetectionFinding, ...] = ()
    social: Tuple[SocialIntegrationFinding, ...] = ()
    suggested_patterns: Tuple[str, ...] = ()

    @property
    def total_platforms(self) -> int:
        return total_platforms(self.social)


class Fingerprinter:
    """
    Identifies technologies and social integrations on one page artifact.
    Stateless per call: safe to share across worker threads.
    """

    def __init__(
        self,
        registry: Optional[SignatureRegistry] = None,
        suggester: Optional[PatternSuggester] = None,
        suggest_timeout: float = DEFAULT_SUGGEST_TIMEOUT,
        behavioral_registry: Optional[SignatureRegistry] = None,
        merge_evidence: bool = False,
    ):
        self.registry = registry if registry is not None else default_registry()
        self.behavioral_registry = behavioral_registry if behavioral_registry is not None else behavior_registry()
        self.suggester = suggester
        self.suggest_timeout = suggest_timeout
        self.merge_evidence = merge_evidence

    def detect(
        self,
        artifact: PageArtifact,
        flags: Optional[FeatureFlags] = None,
        custom_patterns: Iterable[str] = (),
    ) -> List[DetectionFinding]:
        """Technology findings only (signature, behavioral and custom passes)."""
        return list(self.analyze(artifact, flags, custom_patterns, include_social=False).technologies)

    def analyze(
        self,
        artifact: PageArtifact,
        flags: Optional[FeatureFlags] = None,
        custom_patterns: Iterable[str] = (),
        include_social: bool = True,
    ) -> EngineReport:
        flags = flags or FeatureFlags()
        view = ArtifactView(artifact)

        signature_findings = scan_signatures(view, self.registry, flags)
        behavior_findings = []
        if flags.detect_behavioral_patterns:
            behavior_findings = scan_signatures(view, self.behavioral_registry, flags)

        suggested: List[str] = []
        if flags.ai_pattern_detection and self.suggester is not None:
            detected = [f.name for f in signature_findings + behavior_findings]
            suggested = self._suggest_patterns(artifact.html, detected)

        custom_findings = match_custom_patterns(artifact, list(custom_patterns) + suggested)
        technologies = merge_findings(
            signature_findings, behavior_findings, custom_findings, merge_evidence=self.merge_evidence
        )
        social = classify_social(artifact) if include_social else []

        log(
            f"Detected {len(technologies)} technologies, {len(social)} social integrations",
            level="debug",
            url=artifact.url,
            technology_count=len(technologies),
            social_count=len(social),
            suggested_count=len(suggested),
        )
        return EngineReport(
            technologies=tuple(technologies),
            social=tuple(social),
            suggested_patterns=tuple(suggested),
        )

    def _suggest_patterns(self, html: str, detected_names: List[str]) -> List[str]:
        """Single-shot, time-boxed call to the suggester. Failure yields no patterns."""
        sample = html[:SUGGESTION_SAMPLE_CHARS]
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="techprobe-suggest")
        future = executor.submit(self.suggester.suggest, sample, tuple(detected_names))
        try:
            raw = future.result(timeout=self.suggest_timeout)
        except FutureTimeout:
            future.cancel()
            log(f"Pattern suggester timed out after {self.suggest_timeout}s", level="warning")
            return []
        except Exception as e:
            log(f"Pattern suggester failed: {type(e).__name__}: {e}", level="warning")
            return []
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        patterns = []
        for item in raw or []:
            if isinstance(item, str) and item.strip() and item.strip() not in patterns:
                patterns.append(item.strip())
        return patterns
