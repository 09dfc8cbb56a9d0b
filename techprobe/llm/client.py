import json
import re
from typing import Dict, Any, Optional

from techprobe.core.config import ConfigManager
from techprobe.core.constants import DEFAULT_SUGGEST_TIMEOUT
from techprobe.core.logging import log
from techprobe.utils.security import SecurityManager


class LLMClient:
    """
    Unified client for interacting with LLM providers.
    Supports OpenAI-compatible APIs (OpenAI, OpenRouter, Local) and Anthropic.
    Calls are single-shot: no retries, bounded by ``timeout``.
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.config = config if config is not None else ConfigManager.load_config()
        self.provider = provider or self.config.get("provider", "openai")
        self.api_key = api_key or self.config.get("api_key")
        self.model = model or self.config.get("model", "gpt-4o-mini")
        self.timeout = timeout or self.config.get("suggest_timeout", DEFAULT_SUGGEST_TIMEOUT)
        self.usage = {"input_tokens": 0, "output_tokens": 0, "calls": 0}
        self.client = None

        self._setup_client()

    @property
    def ready(self) -> bool:
        return self.client is not None

    def _setup_client(self) -> None:
        if not self.api_key and self.provider != "local":
            log("API key missing for LLM client; AI pattern suggestions disabled.", level="warning")
            return

        try:
            if self.provider == "anthropic":
                import anthropic
                self.client = anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)
                log(f"Initialized Anthropic client with model: {self.model}", level="debug")
                return

            import openai
            base_url = None
            if self.provider == "openrouter":
                base_url = "https://openrouter.ai/api/v1"
            elif self.provider == "local":
                base_url = "http://localhost:11434/v1"  # Default Ollama
                self.api_key = "ollama"

            self.client = openai.OpenAI(
                api_key=self.api_key,
                base_url=base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        except ImportError:
            pkg = "anthropic" if self.provider == "anthropic" else "openai"
            log(f"{pkg} package not installed. Run 'pip install {pkg}'.", level="error")

    def call(self, system_prompt: str, user_prompt: str, json_mode: bool = True) -> str:
        """Execute one LLM call and return the raw text content."""
        if not self.client:
            raise RuntimeError("LLM Client not initialized. Check API Key.")

        clean_user = SecurityManager.redact_text(user_prompt)

        if self.provider == "anthropic":
            response = self.client.messages.create(
                model=self.model,
                system=system_prompt,
                messages=[{"role": "user", "content": clean_user}],
                max_tokens=1024,
                temperature=0.1,
            )
            usage = getattr(response, "usage", None)
            self._track(getattr(usage, "input_tokens", 0), getattr(usage, "output_tokens", 0))
            return "".join(getattr(block, "text", "") for block in response.content)

        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": clean_user},
            ],
            "temperature": 0.1,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = self.client.chat.completions.create(**kwargs)
        usage = getattr(response, "usage", None)
        self._track(getattr(usage, "prompt_tokens", 0), getattr(usage, "completion_tokens", 0))

        content = response.choices[0].message.content
        if not content:
            log("LLM returned empty content.", level="warning")
            return "{}" if json_mode else ""
        return content

    def _track(self, input_tokens: Optional[int], output_tokens: Optional[int]) -> None:
        self.usage["input_tokens"] += input_tokens or 0
        self.usage["output_tokens"] += output_tokens or 0
        self.usage["calls"] += 1

    @staticmethod
    def parse_json(content: str) -> Dict[str, Any]:
        """Clean and parse JSON from an LLM response. Unparseable input yields {}."""
        if not content or not isinstance(content, str):
            return {}

        cleaned = content.strip()

        fence_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", cleaned, re.IGNORECASE)
        if fence_match:
            cleaned = fence_match.group(1).strip()

        # Isolate the outermost object
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start != -1 and end > start:
            try:
                return json.loads(cleaned[start:end + 1])
            except json.JSONDecodeError:
                pass

        try:
            parsed = json.loads(cleaned)
            return parsed if isinstance(parsed, dict) else {}
        except json.JSONDecodeError:
            log(f"Failed to parse JSON from: {content[:100]}...", level="debug")
            return {}
