from typing import List, Sequence

from techprobe.core.constants import MAX_SUGGESTED_PATTERNS, SUGGESTION_SAMPLE_CHARS
from techprobe.core.logging import log
from techprobe.llm.client import LLMClient
from techprobe.llm.prompts import SYSTEM_PROMPT_PATTERNS, USER_PROMPT_PATTERNS
from techprobe.utils.security import SecurityManager


class LLMPatternSuggester:
    """Asks an LLM for extra regex patterns to test as custom patterns.

    Implements the ``PatternSuggester`` protocol expected by ``Fingerprinter``.
    Errors propagate to the caller; the engine decides how to recover.
    """

    def __init__(self, client: LLMClient, max_html_chars: int = SUGGESTION_SAMPLE_CHARS):
        self.client = client
        self.max_html_chars = max_html_chars

    def suggest(self, sample_html: str, detected_names: Sequence[str]) -> List[str]:
        if not self.client.ready:
            return []

        sample = SecurityManager.redact_text((sample_html or "")[:self.max_html_chars])
        user_prompt = USER_PROMPT_PATTERNS.format(
            detected=", ".join(detected_names) or "None",
            sample=sample,
        )
        response_text = self.client.call(SYSTEM_PROMPT_PATTERNS, user_prompt)
        parsed = self.client.parse_json(response_text)

        patterns = []
        for item in parsed.get("patterns") or []:
            if isinstance(item, str) and item.strip() and item.strip() not in patterns:
                patterns.append(item.strip())

        log(f"LLM suggested {len(patterns)} patterns", level="debug", patterns=patterns)
        return patterns[:MAX_SUGGESTED_PATTERNS]
