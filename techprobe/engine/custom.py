import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern

from techprobe.core.constants import (
    CUSTOM_PATTERN_CATEGORY,
    CUSTOM_PATTERN_CONFIDENCE,
    CUSTOM_PATTERN_PREFIX,
    METHOD_CUSTOM_PATTERN,
)
from techprobe.core.errors import PatternCompileError
from techprobe.core.logging import log
from techprobe.engine.artifact import PageArtifact
from techprobe.engine.models import DetectionFinding


@dataclass(frozen=True)
class CompiledPattern:
    """Outcome of compiling one user or AI supplied pattern."""
    source: str
    regex: Optional[Pattern] = None
    error: Optional[PatternCompileError] = None

    @property
    def ok(self) -> bool:
        return self.regex is not None


def compile_pattern(source: str) -> CompiledPattern:
    """Compile ``source`` case-insensitively. Never raises."""
    if not isinstance(source, str) or not source:
        return CompiledPattern(str(source), error=PatternCompileError(str(source), "empty pattern"))
    try:
        return CompiledPattern(source, regex=re.compile(source, re.IGNORECASE))
    except (re.error, RecursionError, OverflowError) as e:
        return CompiledPattern(source, error=PatternCompileError(source, str(e)))


def match_custom_patterns(artifact: PageArtifact, patterns: Iterable[str]) -> List[DetectionFinding]:
    findings = []
    for source in patterns:
        compiled = compile_pattern(source)
        if not compiled.ok:
            log(f"Skipping invalid custom pattern: {compiled.error}", level="warning", pattern=compiled.source)
            continue
        if compiled.regex.search(artifact.html):
            findings.append(DetectionFinding(
                name=f"{CUSTOM_PATTERN_PREFIX}{source}",
                category=CUSTOM_PATTERN_CATEGORY,
                confidence=CUSTOM_PATTERN_CONFIDENCE,
                detection_method=METHOD_CUSTOM_PATTERN,
                evidence=(source,),
            ))
    return findings
