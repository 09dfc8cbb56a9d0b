from pathlib import Path
from typing import Any, Dict, Iterable, List

from techprobe.core.logging import log
from techprobe.engine.models import AnalysisResult
from techprobe.utils.file_io import safe_write_csv, safe_write_json

ROW_FIELDS = ["url", "name", "category", "version", "confidence", "method"]


def flatten_results(results: Iterable[AnalysisResult]) -> List[Dict[str, Any]]:
    """One row per detected technology; failed URLs contribute no rows."""
    rows = []
    for result in results:
        for tech in result.technologies:
            rows.append({
                "url": result.url,
                "name": tech.name,
                "category": tech.category,
                "version": tech.version or "",
                "confidence": round(tech.confidence, 2),
                "method": tech.detection_method,
            })
    return rows


def export_csv(results: Iterable[AnalysisResult], path: Path) -> bool:
    rows = flatten_results(results)
    ok = safe_write_csv(Path(path), rows, ROW_FIELDS)
    if ok:
        log(f"Exported {len(rows)} rows to {path}")
    return ok


def export_json(results: Iterable[AnalysisResult], path: Path) -> bool:
    results = list(results)
    payload = {
        "totalUrls": len(results),
        "results": [r.model_dump(mode="json", by_alias=True) | {"totalPlatforms": r.total_platforms} for r in results],
    }
    ok = safe_write_json(Path(path), payload)
    if ok:
        log(f"Exported {len(results)} results to {path}")
    return ok
