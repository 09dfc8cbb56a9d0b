"""Social platform integration classifier.

Each platform has a flat list of general patterns (any hit means the
platform is present at all) and a breakdown into integration-type groups
that say *how* it is wired in. All matching is lower-case substring
search over one haystack built from every textual surface of the page.
"""
import re
from typing import Dict, Iterable, List, Optional

from techprobe.core.constants import (
    SOCIAL_FALLBACK_MAX_CONFIDENCE,
    SOCIAL_MAX_CONFIDENCE,
    SOCIAL_MIN_CONFIDENCE,
)
from techprobe.engine.artifact import PageArtifact
from techprobe.engine.models import SocialIntegrationFinding

SOCIAL_PLATFORMS: Dict[str, dict] = {
    "Facebook": {
        "patterns": [
            "connect.facebook.net", "fb-root", "facebook-jssdk", "FB.init", "fbq(",
            "facebook.com/tr", "_fbp", "fb:", "og:", "facebook.com/plugins",
            "fb-like", "fb-share-button", "fb-comments", "fb-page",
        ],
        "groups": {
            "pixel": ["fbq(", "facebook.com/tr", "fbevents.js", "_fbp", "_fbc"],
            "sdk": ["connect.facebook.net", "FB.init", "facebook-jssdk"],
            "widget": ["fb-like", "fb-share-button", "fb-page"],
            "embed": ["fb-comments", "fb-post", "fb-video", "facebook.com/plugins"],
            "meta": ['property="og:', 'property="fb:'],
        },
        "versions": [r"sdk\.js[^\"'\s]*[?&#]version=v([\d.]+)"],
    },
    "Google/YouTube": {
        "patterns": [
            "google-analytics.com", "googletagmanager.com", "gtag(", "ga(",
            "youtube.com/embed", "googlesyndication.com", "apis.google.com",
            "gstatic.com", "google.com/recaptcha", "youtube-nocookie.com",
        ],
        "groups": {
            "analytics": ["google-analytics.com", "gtag(", "googletagmanager.com"],
            "embed": ["youtube.com/embed", "youtube-nocookie.com/embed"],
            "sdk": ["apis.google.com", "gstatic.com"],
            "tracking": ["googlesyndication.com", "googleadservices.com"],
            "login": ["accounts.google.com/gsi", "google.com/recaptcha"],
        },
        "versions": [r"gtag/js\?id=[^\"'\s]*?v([\d.]+)", r"analytics\.js[^\"'\s]*?v([\d.]+)"],
    },
    "Twitter/X": {
        "patterns": [
            "platform.twitter.com", "twitter.com/intent", "twitter:", "twttr.",
            "tweet-button", "twitter-timeline", "twitter-share", "syndication.twitter.com",
        ],
        "groups": {
            "widget": ["platform.twitter.com/widgets.js", "twitter-timeline", "tweet-button"],
            "sharing": ["twitter.com/intent", "twitter-share"],
            "meta": ['name="twitter:'],
            "embed": ["syndication.twitter.com", "twitter-tweet"],
        },
        "versions": [r"widgets\.js[^\"'\s]*?v([\d.]+)"],
    },
    "LinkedIn": {
        "patterns": [
            "platform.linkedin.com", "linkedin.com/in/", "snap.licdn.com",
            "_linkedin_partner_id", "linkedin_insight_id", "IN.init", "linkedin-share",
        ],
        "groups": {
            "tracking": ["snap.licdn.com", "_linkedin_partner_id", "linkedin_insight_id"],
            "widget": ["platform.linkedin.com", "IN.init", "linkedin-share"],
        },
    },
    "Instagram": {
        "patterns": [
            "instagram.com/embed", "instagram.com/p/", "cdninstagram.com",
            "ig-embed", "instagram-media", "instgrm.Embeds",
        ],
        "groups": {
            "embed": ["instagram.com/embed", "instagram.com/p/", "ig-embed", "instagram-media"],
            "sdk": ["cdninstagram.com", "instgrm.Embeds"],
        },
    },
    "TikTok": {
        "patterns": [
            "tiktok.com/embed", "analytics.tiktok.com", "ttq.load", "ttq.track",
            "_ttp", "tiktok-embed", "tiktok.com/oembed",
        ],
        "groups": {
            "pixel": ["analytics.tiktok.com", "ttq.load", "ttq.track", "_ttp"],
            "embed": ["tiktok.com/embed", "tiktok-embed", "tiktok.com/oembed"],
        },
    },
    "Pinterest": {
        "patterns": ["pinterest.com/js", "pinimg.com", "pinterest.com/pin", "data-pin-do", "pinterest-tag", "PinUtils"],
        "groups": {
            "widget": ["pinterest.com/js", "data-pin-do", "PinUtils"],
            "sharing": ["pinterest.com/pin"],
            "tracking": ["pinterest-tag", "s.pinimg.com/ct/core.js"],
        },
    },
    "Snapchat": {
        "patterns": ["sc-static.net", "snapchat.com/pixel", "snaptr(", "_scid"],
        "groups": {
            "pixel": ["sc-static.net", "snapchat.com/pixel", "snaptr(", "_scid"],
        },
    },
    "WhatsApp": {
        "patterns": ["wa.me/", "whatsapp.com/send", "whatsapp-share", "api.whatsapp.com"],
        "groups": {
            "sharing": ["wa.me/", "whatsapp.com/send", "whatsapp-share", "api.whatsapp.com"],
        },
    },
    "Reddit": {
        "patterns": ["reddit.com/static", "redd.it", "reddit-embed", "redditmedia.com"],
        "groups": {
            "embed": ["reddit.com/static", "reddit-embed", "redditmedia.com"],
            "sharing": ["redd.it"],
        },
    },
    "Discord": {
        "patterns": ["discord.com/widget", "discord.gg/", "discordapp.com", "discord-widget"],
        "groups": {
            "widget": ["discord.com/widget", "discord-widget"],
        },
    },
    "Telegram": {
        "patterns": ["t.me/", "telegram.me", "telegram-share", "telegram.org/js"],
        "groups": {
            "sharing": ["t.me/", "telegram.me", "telegram-share"],
            "widget": ["telegram.org/js"],
        },
    },
}

CATEGORY_BY_TYPE = {
    "pixel": "tracking",
    "tracking": "tracking",
    "analytics": "analytics",
    "embed": "embed",
    "widget": "widget",
    "sharing": "sharing",
    "sdk": "widget",
    "meta": "sharing",
    "login": "authentication",
}


def build_haystack(artifact: PageArtifact) -> str:
    """Every textual surface of the page, lower-cased and space-joined."""
    parts = [artifact.html]
    parts.extend(artifact.script_sources)
    parts.extend(artifact.stylesheet_hrefs)
    parts.append(" ".join(artifact.headers.values()))
    parts.append(" ".join(sorted(artifact.cookie_names)))
    return " ".join(parts).lower()


def integration_method(integration_type: str, html: str) -> str:
    if integration_type in ("pixel", "tracking"):
        return "pixel"
    if integration_type == "meta":
        return "meta"
    if integration_type == "embed" and "<iframe" in html.lower():
        return "iframe"
    if integration_type == "sdk":
        return "sdk"
    if integration_type == "api":
        return "api"
    return "script"


def integration_confidence(evidence_count: int, found_patterns: int) -> float:
    confidence = round(0.2 * evidence_count + 0.1 * found_patterns, 6)
    return max(SOCIAL_MIN_CONFIDENCE, min(confidence, SOCIAL_MAX_CONFIDENCE))


def _platform_version(haystack: str, patterns: Iterable[str]) -> Optional[str]:
    for pattern in patterns:
        match = re.search(pattern, haystack, re.IGNORECASE)
        if match:
            return match.group(1)
    return None


def classify_platform(platform: str, config: dict, haystack: str, html: str) -> List[SocialIntegrationFinding]:
    general = [p for p in config["patterns"] if p.lower() in haystack]
    if not general:
        return []

    found_patterns = len(general)
    version = _platform_version(haystack, config.get("versions", ()))
    findings = []

    for integration_type, patterns in config["groups"].items():
        evidence = [f"{integration_type}: {p}" for p in patterns if p.lower() in haystack]
        if not evidence:
            continue
        findings.append(SocialIntegrationFinding(
            platform=platform,
            category=CATEGORY_BY_TYPE.get(integration_type, "widget"),
            integration_method=integration_method(integration_type, html),
            confidence=integration_confidence(len(evidence), found_patterns),
            evidence=tuple(evidence),
            version=version,
        ))

    if not findings:
        findings.append(SocialIntegrationFinding(
            platform=platform,
            category="widget",
            integration_method="script",
            confidence=min(round(found_patterns * 0.3, 6), SOCIAL_FALLBACK_MAX_CONFIDENCE),
            evidence=tuple(f"Found pattern: {p}" for p in general[:3]),
        ))

    return findings


def classify_social(artifact: PageArtifact, platforms: Dict[str, dict] = SOCIAL_PLATFORMS) -> List[SocialIntegrationFinding]:
    haystack = build_haystack(artifact)
    findings = []
    for platform, config in platforms.items():
        findings.extend(classify_platform(platform, config, haystack, artifact.html))
    return findings


def total_platforms(findings: Iterable[SocialIntegrationFinding]) -> int:
    return len({f.platform for f in findings})
