import asyncio
import traceback
from pathlib import Path
from typing import List, Optional

import typer

from techprobe.core.config import ConfigManager
from techprobe.core.constants import DEFAULT_BATCH_CONCURRENCY, DEFAULT_FETCH_TIMEOUT, DEFAULT_SUGGEST_TIMEOUT
from techprobe.core.logging import log, Logger
from techprobe.engine.artifact import PageArtifact, page_metadata
from techprobe.engine.fingerprinter import Fingerprinter
from techprobe.engine.models import AnalysisResult, FeatureFlags, PageMetadata
from techprobe.recon.batch import BatchAnalyzer
from techprobe.report.exporter import export_csv, export_json
from techprobe.report.html_generator import ReportGenerator
from techprobe.utils.file_io import safe_read_json
from techprobe.utils.security import SecurityManager
from techprobe.utils.ux import UX, console

EXPORT_FORMATS = ("csv", "json", "html")


def build_fingerprinter(use_ai: bool, config: dict) -> Fingerprinter:
    """Fingerprinter with an LLM suggester attached only when requested and configured."""
    suggester = None
    if use_ai:
        from techprobe.llm.client import LLMClient
        from techprobe.llm.suggester import LLMPatternSuggester

        client = LLMClient(config=config)
        if client.ready:
            suggester = LLMPatternSuggester(client)
        else:
            UX.print_warning("AI suggestions requested but no LLM is configured. Run 'techprobe setup'.")
    return Fingerprinter(suggester=suggester, suggest_timeout=config.get("suggest_timeout") or DEFAULT_SUGGEST_TIMEOUT)


def resolve_flags(config: dict, disable: List[str], use_ai: bool) -> FeatureFlags:
    flags = ConfigManager.load_feature_flags(config)
    try:
        flags = flags.disable(*disable)
    except ValueError as e:
        log(str(e), level="error")
        raise typer.Exit(code=1)
    if not use_ai:
        flags = flags.disable("ai_pattern_detection")
    return flags


def write_export(results: List[AnalysisResult], export: Optional[str], output: Optional[Path]) -> None:
    if not export:
        return
    if export not in EXPORT_FORMATS:
        log(f"Unknown export format '{export}'. Choose from: {', '.join(EXPORT_FORMATS)}", level="error")
        raise typer.Exit(code=1)

    output = output or Path(f"techprobe-report.{export}")
    if export == "csv":
        ok = export_csv(results, output)
    elif export == "json":
        ok = export_json(results, output)
    else:
        ok = ReportGenerator().generate(results, output) is not None
    if not ok:
        raise typer.Exit(code=1)
    UX.print_success(f"Exported to {output}")


def show_result(result: AnalysisResult, social: bool) -> None:
    if result.status == "failed":
        UX.print_error(f"{result.url}: {result.error}")
        return
    console.print(UX.technology_table(result.technologies, title=result.url))
    if social:
        if result.social:
            console.print(UX.social_table(result.social))
        console.print(f"[bold]Platforms detected:[/bold] {result.total_platforms}")


def analyze(
    html_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Saved HTML page to analyze"),
    headers_file: Optional[Path] = typer.Option(None, "--headers", exists=True, dir_okay=False, help="JSON file of response headers"),
    url: Optional[str] = typer.Option(None, "--url", help="URL the page was fetched from"),
    pattern: List[str] = typer.Option([], "--pattern", "-p", help="Custom regex pattern (repeatable)"),
    disable: List[str] = typer.Option([], "--disable", "-d", help="Feature flag to turn off, e.g. analyzeCssClasses (repeatable)"),
    ai: bool = typer.Option(False, "--ai", help="Ask the configured LLM for extra patterns"),
    social: bool = typer.Option(False, "--social", help="Show social platform integrations"),
    export: Optional[str] = typer.Option(None, "--export", help="Export format: csv, json or html"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Export destination"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also write master.log and events.json here"),
):
    """
    Fingerprint a saved HTML page.
    """
    Logger.setup_logging(log_dir=log_dir, verbose=verbose)
    config = ConfigManager.load_config()
    flags = resolve_flags(config, disable, ai)
    patterns = ConfigManager.load_custom_patterns(config) + list(pattern)

    html = html_file.read_text(encoding="utf-8", errors="replace")
    headers = safe_read_json(headers_file, default={}) if headers_file else {}
    if not isinstance(headers, dict):
        log(f"Headers file {headers_file} must contain a JSON object of name/value pairs.", level="error")
        raise typer.Exit(code=1)
    artifact = PageArtifact.from_response(html, headers=headers, url=url)

    report = build_fingerprinter(ai, config).analyze(artifact, flags, patterns)
    meta = page_metadata(html)
    result = AnalysisResult(
        url=url or str(html_file),
        status="completed",
        technologies=list(report.technologies),
        social=list(report.social),
        metadata=PageMetadata(
            title=meta["title"], description=meta["description"],
            headers=SecurityManager.redact_headers(dict(artifact.headers)),
        ),
    )

    show_result(result, social)
    if report.suggested_patterns:
        console.print(f"[dim]AI suggested patterns: {', '.join(report.suggested_patterns)}[/dim]")
    write_export([result], export, output)


def scan(
    urls: List[str] = typer.Argument(..., help="One or more URLs to fetch and analyze"),
    pattern: List[str] = typer.Option([], "--pattern", "-p", help="Custom regex pattern (repeatable)"),
    disable: List[str] = typer.Option([], "--disable", "-d", help="Feature flag to turn off (repeatable)"),
    ai: bool = typer.Option(False, "--ai", help="Ask the configured LLM for extra patterns"),
    social: bool = typer.Option(False, "--social", help="Show social platform integrations"),
    concurrency: int = typer.Option(DEFAULT_BATCH_CONCURRENCY, help="Pages analyzed in parallel"),
    timeout: float = typer.Option(DEFAULT_FETCH_TIMEOUT, help="Per-URL fetch+analyze timeout in seconds"),
    headless: bool = typer.Option(True, help="Run browser in headless mode"),
    export: Optional[str] = typer.Option(None, "--export", help="Export format: csv, json or html"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Export destination"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also write master.log and events.json here"),
):
    """
    Fetch live pages in a browser and fingerprint them.
    """
    Logger.setup_logging(log_dir=log_dir, verbose=verbose)
    try:
        urls = [ConfigManager.validate_url(u) for u in urls]
    except ValueError as e:
        log(str(e), level="error")
        raise typer.Exit(code=1)

    config = ConfigManager.load_config()
    flags = resolve_flags(config, disable, ai)
    patterns = ConfigManager.load_custom_patterns(config) + list(pattern)
    fingerprinter = build_fingerprinter(ai, config)

    async def run() -> List[AnalysisResult]:
        from techprobe.recon.fetcher import PageFetcher

        async with PageFetcher(headless=headless) as fetcher:
            batch = BatchAnalyzer(
                fingerprinter, fetcher.fetch,
                concurrency=concurrency, timeout=timeout,
                flags=flags, custom_patterns=patterns,
            )
            return await batch.analyze(urls)

    try:
        with UX.spinner(f"Analyzing {len(urls)} URL(s)..."):
            results = asyncio.run(run())
    except KeyboardInterrupt:
        log("Scan interrupted by user.", level="warning")
        raise typer.Exit(code=0)
    except Exception as e:
        log(f"Scan failed: {e}", level="error")
        log(f"Fatal Traceback: {traceback.format_exc()}", level="debug")
        raise typer.Exit(code=1)

    for result in results:
        show_result(result, social)
    write_export(results, export, output)
