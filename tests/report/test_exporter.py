import csv
import json
from datetime import datetime

import pytest

from techprobe.engine.models import AnalysisResult, DetectionFinding, SocialIntegrationFinding
from techprobe.report.exporter import export_csv, export_json, flatten_results
from techprobe.report.html_generator import ReportGenerator


@pytest.fixture
def results():
    completed = AnalysisResult(
        url="https://blog.example",
        status="completed",
        technologies=[
            DetectionFinding(
                name="WordPress", category="Content Management System", version="6.3",
                confidence=0.7, detection_method="Pattern Matching",
                evidence=("Meta tag: generator = WordPress 6.3",),
            ),
            DetectionFinding(
                name="PHP", category="Programming Language", version="8.1",
                confidence=0.4, detection_method="Pattern Matching",
            ),
        ],
        social=[
            SocialIntegrationFinding(
                platform="Facebook", category="widget", integration_method="sdk",
                confidence=0.4, evidence=("sdk: connect.facebook.net",),
            ),
        ],
    )
    failed = AnalysisResult(url="https://down.example", status="failed", error="Timed out after 45s")
    return [completed, failed]


def test_flatten_results_skips_failed(results):
    rows = flatten_results(results)
    assert len(rows) == 2
    assert rows[0] == {
        "url": "https://blog.example",
        "name": "WordPress",
        "category": "Content Management System",
        "version": "6.3",
        "confidence": 0.7,
        "method": "Pattern Matching",
    }


def test_export_csv(results, tmp_path):
    out = tmp_path / "reports" / "scan.csv"
    assert export_csv(results, out) is True

    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["name"] for r in rows] == ["WordPress", "PHP"]
    assert rows[1]["version"] == "8.1"


def test_export_json_uses_camel_case(results, tmp_path):
    out = tmp_path / "scan.json"
    assert export_json(results, out) is True

    payload = json.loads(out.read_text())
    assert payload["totalUrls"] == 2
    first, second = payload["results"]
    assert first["technologies"][0]["detectionMethod"] == "Pattern Matching"
    assert first["social"][0]["integrationMethod"] == "sdk"
    assert first["totalPlatforms"] == 1
    assert second["status"] == "failed"
    assert second["error"] == "Timed out after 45s"


def test_html_report_renders_and_escapes(results, tmp_path):
    results.append(AnalysisResult(url="https://x.example/<script>", status="completed"))
    generator = ReportGenerator()

    html = generator.render(results, generated_at=datetime(2024, 1, 2, 3, 4, 5))
    assert "Generated 2024-01-02 03:04:05" in html
    assert "WordPress" in html
    assert "70%" in html
    assert "Timed out after 45s" in html
    assert "No technologies detected." in html
    assert "&lt;script&gt;" in html
    assert "<h2>https://x.example/<script>" not in html

    out = generator.generate(results, tmp_path / "report.html")
    assert out.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")
