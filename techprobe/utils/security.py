import re
from typing import Dict


class SecurityManager:
    """
    Redacts secrets from page samples before they leave the process (LLM prompts, logs).
    """

    PATTERNS: Dict[str, str] = {
        "api_key": r"\b(?:sk|pk|rk)[-_](?:live_|test_)?[a-zA-Z0-9]{20,}",
        "aws_key": r"\bAKIA[0-9A-Z]{16}\b",
        "jwt": r"\beyJ[a-zA-Z0-9_-]{8,}\.[a-zA-Z0-9_-]{8,}\.[a-zA-Z0-9_-]{8,}",
        "auth_token": r"Bearer [a-zA-Z0-9\._-]+",
        "email": r"[\w\.-]+@[\w\.-]+\.\w+",
    }

    # csrf tokens and nonces carried in attributes: keep the attribute, drop the value
    ATTRIBUTE_PATTERN = re.compile(
        r"""((?:name|id)=["'](?:csrf[-_]?token|_token|authenticity_token|csrfmiddlewaretoken)["'][^>]*?"""
        r"""(?:content|value)=["'])([^"']+)(["'])""",
        re.IGNORECASE,
    )

    @classmethod
    def redact_text(cls, text: str) -> str:
        """Redact known sensitive patterns from text."""
        if not text:
            return text

        redacted = cls.ATTRIBUTE_PATTERN.sub(r"\1[REDACTED_TOKEN]\3", text)
        for name, pattern in cls.PATTERNS.items():
            redacted = re.sub(pattern, f"[REDACTED_{name.upper()}]", redacted)
        return redacted

    @classmethod
    def redact_headers(cls, headers: Dict[str, str]) -> Dict[str, str]:
        """Drop credential-bearing header values, redact the rest."""
        sensitive = {"set-cookie", "cookie", "authorization", "proxy-authorization"}
        return {
            k: "[REDACTED]" if k.lower() in sensitive else cls.redact_text(v)
            for k, v in headers.items()
        }
