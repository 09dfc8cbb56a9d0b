"""Signal extractors.

One pure function per signal type, all sharing the contract
``(view, rule) -> MatchResult``. The ``ArtifactView`` wraps a
``PageArtifact`` and lazily derives the text surfaces (lower-cased HTML,
comment spans, inline script bodies, meta generator values) that several
extractors need, so each surface is computed at most once per analysis.
"""
import re
from dataclasses import dataclass
from functools import cached_property
from typing import Callable, Dict, List, Optional, Tuple, Union

from techprobe.engine.artifact import PageArtifact
from techprobe.engine.models import SignalRule, SignalType

_COMMENT_RE = re.compile(r"<!--(.*?)-->", re.DOTALL)
_INLINE_SCRIPT_RE = re.compile(r"<script\b([^>]*)>(.*?)</script\s*>", re.DOTALL | re.IGNORECASE)
_SRC_ATTR_RE = re.compile(r"(?:^|\s)src\s*=", re.IGNORECASE)
_META_TAG_RE = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
_ATTR_RE = re.compile(r"""([a-zA-Z_:][-a-zA-Z0-9_:.]*)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""")

META_NAMES = ("generator", "application-name")


@dataclass(frozen=True)
class MatchResult:
    matched: bool
    evidence_text: str = ""
    value: Optional[str] = None


NO_MATCH = MatchResult(False)


class ArtifactView:
    """Lazily derived, read-only text surfaces of one artifact."""

    def __init__(self, artifact: PageArtifact):
        self.artifact = artifact

    @classmethod
    def of(cls, artifact: Union[PageArtifact, "ArtifactView"]) -> "ArtifactView":
        return artifact if isinstance(artifact, ArtifactView) else cls(artifact)

    @cached_property
    def html_lower(self) -> str:
        return self.artifact.html.lower()

    @cached_property
    def resource_urls_lower(self) -> Tuple[str, ...]:
        urls = self.artifact.script_sources + self.artifact.stylesheet_hrefs
        return tuple(u.lower() for u in urls)

    @cached_property
    def comments(self) -> Tuple[str, ...]:
        return tuple(_COMMENT_RE.findall(self.artifact.html))

    @cached_property
    def inline_scripts(self) -> Tuple[str, ...]:
        bodies = []
        for attrs, body in _INLINE_SCRIPT_RE.findall(self.artifact.html):
            if not _SRC_ATTR_RE.search(attrs) and body.strip():
                bodies.append(body)
        return tuple(bodies)

    @cached_property
    def meta_values(self) -> Tuple[Tuple[str, str], ...]:
        """(name, content) pairs of generator / application-name meta tags."""
        pairs = []
        for tag in _META_TAG_RE.findall(self.artifact.html):
            attrs = {}
            for key, dq, sq, bare in _ATTR_RE.findall(tag):
                attrs[key.lower()] = dq or sq or bare
            name = attrs.get("name", "").lower()
            if name in META_NAMES and attrs.get("content"):
                pairs.append((name, attrs["content"]))
        return tuple(pairs)

    @cached_property
    def cookie_names_lower(self) -> Tuple[str, ...]:
        return tuple(sorted(n.lower() for n in self.artifact.cookie_names))


def match_content(view: ArtifactView, rule: SignalRule) -> MatchResult:
    if rule.regex is not None and rule.regex.search(view.artifact.html):
        return MatchResult(True, f"HTML pattern: {rule.pattern}")
    return NO_MATCH


def match_file_path(view: ArtifactView, rule: SignalRule) -> MatchResult:
    needle = rule.pattern.lower()
    if needle in view.html_lower or any(needle in url for url in view.resource_urls_lower):
        return MatchResult(True, f"File path: {rule.pattern}")
    return NO_MATCH


def split_header_pattern(pattern: str) -> Tuple[str, Optional[str]]:
    """``"x-powered-by:php"`` -> ``("x-powered-by", "php")``; a bare name has no value filter."""
    name, sep, expected = pattern.partition(":")
    return name.strip().lower(), (expected.strip().lower() or None) if sep else None


def match_header(view: ArtifactView, rule: SignalRule) -> MatchResult:
    name, expected = split_header_pattern(rule.pattern)
    value = view.artifact.headers.get(name, "")
    if not value.strip():
        return NO_MATCH
    if expected is not None and expected not in value.lower():
        return NO_MATCH
    return MatchResult(True, f"HTTP header: {name} = {value}", value)


def match_css_class(view: ArtifactView, rule: SignalRule) -> MatchResult:
    if rule.regex is not None and rule.regex.search(view.artifact.html):
        return MatchResult(True, f"CSS class: {rule.pattern}")
    return NO_MATCH


def match_comment(view: ArtifactView, rule: SignalRule) -> MatchResult:
    needle = rule.pattern.lower()
    for comment in view.comments:
        if needle in comment.lower():
            return MatchResult(True, f"HTML comment: {rule.pattern}")
    return NO_MATCH


def match_inline_script(view: ArtifactView, rule: SignalRule) -> MatchResult:
    needle = rule.pattern.lower()
    for body in view.inline_scripts:
        if needle in body.lower():
            return MatchResult(True, f"Inline script: {rule.pattern}")
    return NO_MATCH


def match_cookie(view: ArtifactView, rule: SignalRule) -> MatchResult:
    needle = rule.pattern.lower()
    set_cookie = view.artifact.headers.get("set-cookie", "")
    if set_cookie:
        found = needle in set_cookie.lower()
    else:
        found = any(needle in name for name in view.cookie_names_lower)
    if found:
        return MatchResult(True, f"Cookie: {rule.pattern}")
    return NO_MATCH


def match_meta_tag(view: ArtifactView, rule: SignalRule) -> MatchResult:
    if rule.regex is None:
        return NO_MATCH
    for name, content in view.meta_values:
        if rule.regex.search(content):
            return MatchResult(True, f"Meta tag: {name} = {content}", content)
    return NO_MATCH


def match_element(view: ArtifactView, rule: SignalRule) -> MatchResult:
    if rule.pattern.lower() in view.html_lower:
        return MatchResult(True, f"Element: {rule.pattern}")
    return NO_MATCH


Extractor = Callable[[ArtifactView, SignalRule], MatchResult]

EXTRACTORS: Dict[SignalType, Extractor] = {
    SignalType.CONTENT: match_content,
    SignalType.FILE_PATH: match_file_path,
    SignalType.HEADER: match_header,
    SignalType.CSS_CLASS: match_css_class,
    SignalType.COMMENT: match_comment,
    SignalType.INLINE_SCRIPT: match_inline_script,
    SignalType.COOKIE: match_cookie,
    SignalType.META_TAG: match_meta_tag,
    SignalType.ELEMENT: match_element,
}

# Signal type -> FeatureFlags field. Content matching has no switch.
SIGNAL_FLAGS: Dict[SignalType, Optional[str]] = {
    SignalType.CONTENT: None,
    SignalType.FILE_PATH: "analyze_file_paths",
    SignalType.HEADER: "analyze_http_headers",
    SignalType.CSS_CLASS: "analyze_css_classes",
    SignalType.COMMENT: "analyze_html_comments",
    SignalType.INLINE_SCRIPT: "analyze_inline_scripts",
    SignalType.COOKIE: "analyze_cookie_patterns",
    SignalType.META_TAG: "analyze_meta_tags",
    SignalType.ELEMENT: "detect_custom_elements",
}

# Signal types whose matched value may carry a version number.
VERSIONED_SIGNALS = (SignalType.HEADER, SignalType.META_TAG)


def match(artifact: Union[PageArtifact, ArtifactView], rule: SignalRule) -> MatchResult:
    """Run the extractor for ``rule.signal_type`` against ``artifact``."""
    return EXTRACTORS[rule.signal_type](ArtifactView.of(artifact), rule)


def enabled_signal_types(flags) -> List[SignalType]:
    return [
        signal_type for signal_type, flag in SIGNAL_FLAGS.items()
        if flag is None or getattr(flags, flag)
    ]
