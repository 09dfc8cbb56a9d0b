import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock

from techprobe.llm.client import LLMClient


def offline_client():
    return LLMClient(config={"provider": "openai", "api_key": ""})


def test_parse_json_basic():
    raw = '{"patterns": ["acme\\\\.js", "beta"]}'
    assert LLMClient.parse_json(raw) == {"patterns": ["acme\\.js", "beta"]}


def test_parse_json_markdown():
    raw_valid = "```json\n{\"patterns\": [\"acme\"]}\n```"
    assert LLMClient.parse_json(raw_valid) == {"patterns": ["acme"]}


def test_parse_json_with_preamble():
    raw = "Here is the data: {\"id\": 123} Hope this helps!"
    assert LLMClient.parse_json(raw) == {"id": 123}


def test_parse_json_corrupt():
    raw = "{\"id\": 123"  # Missing closing brace
    assert LLMClient.parse_json(raw) == {}


def test_parse_json_empty():
    assert LLMClient.parse_json("") == {}
    assert LLMClient.parse_json("   ") == {}
    assert LLMClient.parse_json("[1, 2]") == {}


def test_client_without_key_is_not_ready():
    client = offline_client()
    assert client.ready is False
    with pytest.raises(RuntimeError):
        client.call("system", "user")


def test_call_redacts_and_tracks_usage():
    client = offline_client()
    completions = MagicMock()
    completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content='{"patterns": []}'))],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3),
    )
    client.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))

    assert client.call("system", "contact admin@example.com") == '{"patterns": []}'

    kwargs = completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert "admin@example.com" not in kwargs["messages"][1]["content"]
    assert client.usage == {"input_tokens": 12, "output_tokens": 3, "calls": 1}


def test_empty_content_yields_empty_object():
    client = offline_client()
    completions = MagicMock()
    completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=None))], usage=None,
    )
    client.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    assert client.call("system", "user") == "{}"
