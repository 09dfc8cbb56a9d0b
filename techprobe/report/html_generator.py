from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import jinja2

from techprobe.core.logging import log
from techprobe.engine.models import AnalysisResult


class ReportGenerator:
    """
    Renders analysis results as a standalone HTML report.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(template_dir or Path(__file__).parent / "templates"),
            autoescape=jinja2.select_autoescape(["html", "jinja"]),
        )

    def render(self, results: Iterable[AnalysisResult], generated_at: Optional[datetime] = None) -> str:
        results = list(results)
        stats = {
            "urls": len(results),
            "completed": sum(1 for r in results if r.status == "completed"),
            "failed": sum(1 for r in results if r.status == "failed"),
            "technologies": sum(len(r.technologies) for r in results),
        }
        meta = {"generated_at": (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")}

        template = self.env.get_template("report.html.jinja")
        return template.render(meta=meta, stats=stats, results=results)

    def generate(self, results: Iterable[AnalysisResult], out_path: Path) -> Path:
        """Write report.html-style output to ``out_path``."""
        log("Generating HTML report...")
        html = self.render(results)

        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(html)

        log(f"Report generated at {out_path}")
        return out_path
