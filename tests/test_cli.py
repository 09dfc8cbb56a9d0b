import json

import pytest
from typer.testing import CliRunner

from techprobe.cli.main import app
from techprobe.core.config import ConfigManager

runner = CliRunner()


@pytest.fixture
def saved_page(tmp_path):
    page = tmp_path / "page.html"
    page.write_text(
        '<html><head><meta name="generator" content="WordPress 6.3">'
        '<title>My Blog</title></head><body>'
        '<script src="https://connect.facebook.net/en_US/sdk.js"></script>'
        '</body></html>'
    )
    headers = tmp_path / "headers.json"
    headers.write_text(json.dumps({"X-Powered-By": "PHP/8.1"}))
    return page, headers


def test_cli_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "TechProbe" in result.output


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "analyze" in result.output
    assert "scan" in result.output


def test_signatures_lists_catalog():
    result = runner.invoke(app, ["signatures"])
    assert result.exit_code == 0
    assert "WordPress" in result.output

    result = runner.invoke(app, ["signatures", "--behavioral"])
    assert result.exit_code == 0
    assert "Service Worker" in result.output


def test_analyze_saved_page(saved_page):
    page, headers = saved_page
    result = runner.invoke(app, ["analyze", str(page), "--headers", str(headers), "--social"])
    assert result.exit_code == 0
    assert "WordPress" in result.output
    assert "PHP" in result.output
    assert "Facebook" in result.output


def test_analyze_json_export(saved_page, tmp_path):
    page, headers = saved_page
    out = tmp_path / "out.json"
    result = runner.invoke(app, [
        "analyze", str(page), "--headers", str(headers), "--url", "https://blog.example",
        "-p", "my blog", "--export", "json", "-o", str(out),
    ])
    assert result.exit_code == 0

    payload = json.loads(out.read_text())
    (entry,) = payload["results"]
    assert entry["url"] == "https://blog.example"
    names = [t["name"] for t in entry["technologies"]]
    assert names[:3] == ["Custom Pattern: my blog", "WordPress", "PHP"]
    assert entry["metadata"]["title"] == "My Blog"


def test_analyze_disable_flag(saved_page, tmp_path):
    page, headers = saved_page
    out = tmp_path / "out.json"
    result = runner.invoke(app, [
        "analyze", str(page), "--headers", str(headers),
        "-d", "analyzeHttpHeaders", "--export", "json", "-o", str(out),
    ])
    assert result.exit_code == 0
    names = [t["name"] for t in json.loads(out.read_text())["results"][0]["technologies"]]
    assert "PHP" not in names


def test_analyze_unknown_flag_fails(saved_page):
    page, _ = saved_page
    result = runner.invoke(app, ["analyze", str(page), "-d", "analyzeEverything"])
    assert result.exit_code == 1


def test_analyze_unknown_export_format_fails(saved_page):
    page, _ = saved_page
    result = runner.invoke(app, ["analyze", str(page), "--export", "xml"])
    assert result.exit_code == 1


def test_scan_rejects_invalid_url():
    result = runner.invoke(app, ["scan", "not-a-url"])
    assert result.exit_code == 1


def test_setup_non_interactive(isolated_config):
    result = runner.invoke(app, [
        "setup", "--provider", "anthropic", "--api-key", "sk-ant-test", "--model", "claude-test",
        "--suggest-timeout", "5",
    ])
    assert result.exit_code == 0

    saved = json.loads(ConfigManager.CONFIG_FILE.read_text())
    assert saved["provider"] == "anthropic"
    assert saved["model"] == "claude-test"
    assert saved["suggest_timeout"] == 5.0
    assert "api_key" not in saved
    assert isolated_config[(ConfigManager.SERVICE_NAME, "anthropic_api_key")] == "sk-ant-test"


def test_setup_rejects_unknown_provider():
    result = runner.invoke(app, ["setup", "--provider", "skynet", "--model", "x"])
    assert result.exit_code == 1


def test_analyze_rejects_non_object_headers(saved_page, tmp_path):
    page, _ = saved_page
    bad_headers = tmp_path / "list.json"
    bad_headers.write_text(json.dumps([["X-Powered-By", "PHP/8.1"]]))
    result = runner.invoke(app, ["analyze", str(page), "--headers", str(bad_headers)])
    assert result.exit_code == 1
