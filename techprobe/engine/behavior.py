"""Behavioral patterns inferred from static page text.

The same signals a live behavioral scan would observe (realtime
connections, lazy loading, scroll-driven content, shadow DOM, structured
data) leave fingerprints in markup and inline script. These signatures
share the ``Signature`` shape and scoring of the main catalog and only run
when ``detect_behavioral_patterns`` is enabled.
"""
from functools import lru_cache
from typing import List

from techprobe.engine.signatures import SignatureRegistry, load_registry

BEHAVIOR_CATEGORY = "Behavioral Pattern"

BEHAVIOR_TABLE: List[dict] = [
    {
        "name": "Service Worker",
        "category": BEHAVIOR_CATEGORY,
        "rules": {
            "content": [r"serviceWorker\.register\("],
            "inlineScript": ["navigator.serviceWorker"],
            "filePath": ["/sw.js", "service-worker.js"],
        },
    },
    {
        "name": "WebSocket",
        "category": BEHAVIOR_CATEGORY,
        "rules": {
            "content": [r"new\s+WebSocket\(", r"wss?://"],
            "inlineScript": ["WebSocket(", "socket.io"],
            "filePath": ["socket.io.js", "/socket.io/"],
        },
    },
    {
        "name": "Server-Sent Events",
        "category": BEHAVIOR_CATEGORY,
        "rules": {
            "content": [r"new\s+EventSource\("],
            "inlineScript": ["EventSource("],
        },
    },
    {
        "name": "Lazy Loading",
        "category": BEHAVIOR_CATEGORY,
        "rules": {
            "content": [r"loading=[\"']lazy[\"']", r"\bdata-src="],
            "inlineScript": ["IntersectionObserver"],
            "filePath": ["lazysizes", "lazyload"],
            "cssClass": ["lazyload"],
        },
    },
    {
        "name": "Infinite Scroll",
        "category": BEHAVIOR_CATEGORY,
        "rules": {
            "content": [r"infinite[-_]?scroll"],
            "inlineScript": ["infiniteScroll", "scrollHeight"],
            "filePath": ["infinite-scroll"],
        },
    },
    {
        "name": "Web Components",
        "category": BEHAVIOR_CATEGORY,
        "rules": {
            "inlineScript": ["customElements.define", "attachShadow("],
            "element": ["<template shadowrootmode", "<template shadowroot"],
            "content": [r"customElements\.define\("],
        },
    },
    {
        "name": "Structured Data (JSON-LD)",
        "category": BEHAVIOR_CATEGORY,
        "rules": {
            "content": [r"<script[^>]+application/ld\+json"],
            "inlineScript": ['"@context"'],
        },
    },
]


@lru_cache(maxsize=None)
def behavior_registry() -> SignatureRegistry:
    return load_registry(BEHAVIOR_TABLE)
