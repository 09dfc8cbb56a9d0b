"""Declarative signature catalog and its loader.

Every technology is one uniform record::

    {"name": ..., "category": ..., "rules": {signal_type: [pattern, ...]}}

A pattern entry is either a string (weighted by the signal type's default
weight) or a ``(pattern, weight)`` pair. ``content`` and ``metaTag``
patterns are regular expressions; ``cssClass`` patterns are literal class
fragments; every other type is a literal, case-insensitive substring.
"""
import re
from functools import lru_cache
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from techprobe.core.constants import DEFAULT_SIGNAL_WEIGHTS
from techprobe.core.errors import RegistryError
from techprobe.core.logging import log
from techprobe.engine.models import Signature, SignalRule, SignalType

REGEX_SIGNALS = (SignalType.CONTENT, SignalType.META_TAG)

SIGNATURE_TABLE: List[dict] = [
    # Frontend frameworks
    {
        "name": "React",
        "category": "Frontend Framework",
        "rules": {
            "content": [r"react-dom", r"data-reactroot", r"data-reactid", r"__REACT_DEVTOOLS_GLOBAL_HOOK__"],
            "filePath": ["react.min.js", "react.production.min.js", "react-dom"],
            "header": ["x-react"],
            "element": ['<div id="root">', '<div id="react-root">', "data-reactroot"],
            "cssClass": ["react-"],
            "comment": ["react"],
            "inlineScript": ["React.createElement", "ReactDOM.render", "ReactDOM.createRoot"],
            "cookie": ["react-session"],
        },
    },
    {
        "name": "Vue.js",
        "category": "Frontend Framework",
        "rules": {
            "content": [r"vue(?:\.min)?\.js", r"__vue__", r"data-v-[0-9a-f]{8}"],
            "filePath": ["vue.min.js", "vue.global", "/dist/vue", "/js/vue"],
            "header": ["x-vue"],
            "element": ['<div id="app">', "v-if=", "v-for=", "v-model="],
            "cssClass": ["vue-"],
            "comment": ["vue.js", "evan you"],
            "inlineScript": ["new Vue(", "Vue.component", "Vue.createApp"],
        },
    },
    {
        "name": "Angular",
        "category": "Frontend Framework",
        "rules": {
            "content": [r"ng-version=", r"@angular/", r"angular(?:\.min)?\.js"],
            "filePath": ["angular.min.js", "angular.js", "/angular/"],
            "element": ["<app-root", "ng-app", "ng-controller", "ng-repeat", "*ngif", "[ngfor]"],
            "cssClass": ["ng-scope", "ng-binding"],
            "comment": ["angular"],
            "inlineScript": ["angular.module"],
        },
    },
    {
        "name": "Next.js",
        "category": "Frontend Framework",
        "rules": {
            "content": [r"__NEXT_DATA__", r"/_next/static/"],
            "filePath": ["/_next/static/"],
            "header": ["x-powered-by:next.js", "x-nextjs-cache"],
            "element": ['<script id="__NEXT_DATA__"'],
            "comment": ["next.js"],
        },
    },
    {
        "name": "Svelte",
        "category": "Frontend Framework",
        "rules": {
            "content": [r"\bsvelte-[a-z0-9]{5,}", r"__sveltekit"],
            "filePath": ["/_app/immutable/"],
            "cssClass": ["svelte-"],
            "inlineScript": ["__sveltekit"],
        },
    },
    # CSS frameworks
    {
        "name": "Bootstrap",
        "category": "CSS Framework",
        "rules": {
            "content": [r"bootstrap(?:\.bundle)?(?:\.min)?\.(?:css|js)"],
            "filePath": ["bootstrap.min.css", "bootstrap.css", "bootstrap.min.js", "/bootstrap/"],
            "cssClass": ["container-fluid", "navbar-expand", "btn-primary", "form-control"],
            "comment": ["bootstrap"],
        },
    },
    {
        "name": "Tailwind CSS",
        "category": "CSS Framework",
        "rules": {
            "content": [r"tailwind(?:css)?"],
            "filePath": ["tailwind.css", "cdn.tailwindcss.com"],
            "cssClass": ["space-x-", "space-y-", "divide-y", "bg-gradient-to-"],
            "comment": ["tailwindcss"],
        },
    },
    # JavaScript libraries
    {
        "name": "jQuery",
        "category": "JavaScript Library",
        "rules": {
            "content": [r"jquery"],
            "filePath": ["jquery.min.js", "jquery.js", "/jquery/", "code.jquery.com"],
            "inlineScript": ["$(document)", "jQuery(", "$.ajax"],
            "comment": ["jquery", "john resig"],
        },
    },
    # Backend
    {
        "name": "PHP",
        "category": "Programming Language",
        "rules": {
            "content": [r"\.php(?:\?|\"|'|\b)"],
            "header": ["x-powered-by:php"],
            "cookie": ["PHPSESSID"],
        },
    },
    {
        "name": "Node.js",
        "category": "Backend Runtime",
        "rules": {
            "content": [r"\bnode\.?js\b"],
            "header": ["x-powered-by:node"],
            "comment": ["node.js", "nodejs"],
        },
    },
    {
        "name": "Express",
        "category": "Backend Framework",
        "rules": {
            "header": ["x-powered-by:express"],
            "cookie": ["connect.sid", "express-session"],
        },
    },
    {
        "name": "Django",
        "category": "Backend Framework",
        "rules": {
            "content": [r"csrfmiddlewaretoken", r"\bdjango\b"],
            "header": ["x-django"],
            "cookie": ["csrftoken", "django_language"],
            "comment": ["django"],
        },
    },
    {
        "name": "Laravel",
        "category": "Backend Framework",
        "rules": {
            "content": [r"\blaravel\b"],
            "cookie": ["laravel_session"],
        },
    },
    # Web servers and CDN
    {
        "name": "Nginx",
        "category": "Web Server",
        "rules": {"header": ["server:nginx"]},
    },
    {
        "name": "Apache",
        "category": "Web Server",
        "rules": {"header": ["server:apache"]},
    },
    {
        "name": "Cloudflare",
        "category": "CDN",
        "rules": {
            "header": ["cf-ray", "server:cloudflare"],
            "filePath": ["/cdn-cgi/"],
            "cookie": ["__cf_bm", "__cflb"],
        },
    },
    # CMS and e-commerce
    {
        "name": "WordPress",
        "category": "Content Management System",
        "rules": {
            "content": [r"wp-content", r"wp-includes", r"wordpress"],
            "filePath": ["/wp-content/", "/wp-includes/", "/wp-admin/"],
            "metaTag": [r"wordpress"],
            "element": ["wp-block-"],
            "cssClass": ["wp-block"],
            "comment": ["wordpress"],
            "inlineScript": ["wp-admin", "wpApiSettings"],
            "cookie": ["wordpress_", "wp-settings"],
        },
    },
    {
        "name": "Drupal",
        "category": "Content Management System",
        "rules": {
            "content": [r"drupal-settings-json", r"Drupal\.settings"],
            "filePath": ["/sites/default/files/", "/core/misc/drupal.js"],
            "metaTag": [r"drupal"],
            "header": ["x-drupal-cache", "x-generator:drupal"],
        },
    },
    {
        "name": "Joomla",
        "category": "Content Management System",
        "rules": {
            "content": [r"/media/jui/", r"\bjoomla\b"],
            "filePath": ["/media/system/js/"],
            "metaTag": [r"joomla"],
        },
    },
    {
        "name": "Shopify",
        "category": "E-commerce Platform",
        "rules": {
            "content": [r"cdn\.shopify\.com", r"Shopify\.theme"],
            "filePath": ["cdn.shopify.com"],
            "header": ["x-shopid", "x-shopify-stage"],
            "cookie": ["_shopify_y", "_shopify_s"],
        },
    },
    # Analytics
    {
        "name": "Google Analytics",
        "category": "Analytics",
        "rules": {
            "content": [r"google-analytics\.com", r"googletagmanager\.com"],
            "filePath": ["google-analytics.com", "googletagmanager.com/gtag/js"],
            "inlineScript": ["gtag(", "GoogleAnalyticsObject"],
            "comment": ["google analytics"],
            "cookie": ["_ga", "_gid"],
        },
    },
]


class SignatureRegistry:
    """Read-only catalog of signatures, keyed by unique name."""

    def __init__(self, signatures: Iterable[Signature]):
        self._signatures: Tuple[Signature, ...] = tuple(signatures)
        self._by_name: Dict[str, Signature] = {s.name: s for s in self._signatures}

    def __iter__(self) -> Iterator[Signature]:
        return iter(self._signatures)

    def __len__(self) -> int:
        return len(self._signatures)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Optional[Signature]:
        return self._by_name.get(name)

    def names(self) -> List[str]:
        return [s.name for s in self._signatures]


def css_class_regex(fragment: str) -> re.Pattern:
    """Anchor a class fragment to a ``class="..."`` attribute."""
    return re.compile(r"""class=["'][^"']*""" + re.escape(fragment), re.IGNORECASE)


def _build_rule(name: str, signal_type: SignalType, entry, case_sensitive: bool) -> SignalRule:
    if isinstance(entry, (tuple, list)):
        pattern, weight = entry
    else:
        pattern, weight = entry, DEFAULT_SIGNAL_WEIGHTS[signal_type.value]

    if not isinstance(pattern, str) or not pattern:
        raise RegistryError(f"{name}: empty {signal_type.value} pattern")
    if not isinstance(weight, (int, float)) or not 0 < weight <= 1:
        raise RegistryError(f"{name}: weight for {pattern!r} must be in (0, 1], got {weight!r}")

    regex = None
    try:
        if signal_type in REGEX_SIGNALS:
            regex = re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)
        elif signal_type is SignalType.CSS_CLASS:
            regex = css_class_regex(pattern)
    except re.error as e:
        raise RegistryError(f"{name}: invalid {signal_type.value} regex {pattern!r}: {e}") from e

    return SignalRule(signal_type=signal_type, pattern=pattern, weight=float(weight), regex=regex)


def load_registry(table: Iterable[Mapping] = SIGNATURE_TABLE) -> SignatureRegistry:
    """Validate and compile a declarative table.

    Raises ``RegistryError`` on a duplicate name, an unknown signal type,
    a bad weight, or an uncompilable pattern.
    """
    signatures = []
    seen = set()
    for record in table:
        name = record.get("name")
        category = record.get("category")
        if not name or not category:
            raise RegistryError(f"Signature record missing name or category: {record!r}")
        if name in seen:
            raise RegistryError(f"Duplicate signature name: {name}")
        seen.add(name)

        case_sensitive = bool(record.get("case_sensitive", False))
        rules = []
        for type_name, entries in record.get("rules", {}).items():
            try:
                signal_type = SignalType(type_name)
            except ValueError:
                raise RegistryError(f"{name}: unknown signal type {type_name!r}") from None
            for entry in entries:
                rules.append(_build_rule(name, signal_type, entry, case_sensitive))

        signatures.append(Signature(name=name, category=category, rules=tuple(rules)))

    log(f"Loaded {len(signatures)} signatures", level="debug", signature_count=len(signatures))
    return SignatureRegistry(signatures)


@lru_cache(maxsize=None)
def default_registry() -> SignatureRegistry:
    """Process-wide built-in registry, loaded once."""
    return load_registry(SIGNATURE_TABLE)
