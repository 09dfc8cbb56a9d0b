from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, Optional, Pattern, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SignalType(str, Enum):
    CONTENT = "content"
    FILE_PATH = "filePath"
    HEADER = "header"
    CSS_CLASS = "cssClass"
    COMMENT = "comment"
    INLINE_SCRIPT = "inlineScript"
    COOKIE = "cookie"
    META_TAG = "metaTag"
    ELEMENT = "element"


@dataclass(frozen=True)
class SignalRule:
    """One weighted test within a signature.

    ``pattern`` is the declared source string. ``regex`` is the compiled
    form for the regex-driven types (content, meta tag, css class);
    substring-driven types leave it unset.
    """
    signal_type: SignalType
    pattern: str
    weight: float
    regex: Optional[Pattern] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Signature:
    name: str
    category: str
    rules: Tuple[SignalRule, ...] = ()


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class FeatureFlags(_CamelModel):
    """Deep search options. Every signal category can be toggled on its own."""
    analyze_html_comments: bool = True
    analyze_meta_tags: bool = True
    detect_custom_elements: bool = True
    analyze_file_paths: bool = True
    analyze_css_classes: bool = True
    analyze_inline_scripts: bool = True
    analyze_http_headers: bool = True
    analyze_cookie_patterns: bool = True
    ai_pattern_detection: bool = True
    detect_behavioral_patterns: bool = True

    def disable(self, *names: str) -> "FeatureFlags":
        """Return a copy with the given flags (snake_case or camelCase) turned off."""
        fields = type(self).model_fields
        by_alias = {info.alias: key for key, info in fields.items() if info.alias}
        updates = {}
        for name in names:
            key = name if name in fields else by_alias.get(name)
            if key is None:
                raise ValueError(f"Unknown feature flag: {name}")
            updates[key] = False
        return self.model_copy(update=updates)


class DetectionFinding(_CamelModel):
    name: str
    category: str
    version: Optional[str] = None
    confidence: float = Field(ge=0.0, le=1.0)
    detection_method: str
    evidence: Tuple[str, ...] = ()


SocialCategory = Literal["tracking", "widget", "embed", "sharing", "analytics", "authentication"]
IntegrationMethod = Literal["script", "iframe", "meta", "sdk", "pixel", "api", "css"]


class SocialIntegrationFinding(_CamelModel):
    platform: str
    category: SocialCategory
    integration_method: IntegrationMethod
    confidence: float = Field(ge=0.0, le=1.0)
    evidence: Tuple[str, ...] = ()
    version: Optional[str] = None


class PageMetadata(_CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    response_time: int = 0
    status_code: Optional[int] = None
    headers: Dict[str, str] = {}


class AnalysisResult(_CamelModel):
    """Per-URL outcome of the calling layer (fetch + analyze)."""
    url: str
    status: Literal["completed", "failed"]
    error: Optional[str] = None
    technologies: List[DetectionFinding] = []
    social: List[SocialIntegrationFinding] = []
    metadata: PageMetadata = PageMetadata()

    @property
    def total_platforms(self) -> int:
        return len({f.platform for f in self.social})
